import os
import configparser
import pathlib
import hashlib

from . import fbdata
from . import fbmisc
from . import fbparse
from . import fbtempo


def discover_charts(rootfolders, cb_progress=None):
    """Returns a list of tuples (chartfile, inifile, chartfolder, subfolders)
    and a list of encountered errors.

    Recursively searches for charts in the given root folders. Only folders
    holding both a notes.chart and a song.ini are collected; MIDI charts
    (notes.mid) are skipped since only .chart files are parsed.
    """
    # (current search path, original root folder)
    unexplored = [(root, root) for root in rootfolders]

    # Fill out chart files found in a given folder, not necessarily in order
    found_by_dirname = {}
    errors = []
    visited = set()
    while unexplored:
        f, origin = unexplored.pop()

        if os.path.isfile(f):
            dir, base = os.path.split(f)

            if base == "notes.chart":
                i = 0
            elif base == "song.ini":
                i = 1
            else:
                continue

            if dir not in found_by_dirname:
                found_by_dirname[dir] = [
                    None, None,
                    dir, os.path.relpath(pathlib.Path(dir).parent, origin)
                ]
            found_by_dirname[dir][i] = f

            if cb_progress:
                cb_progress(len(found_by_dirname))
        else:
            # Handle a folder - add subfolders to the search
            try:
                subnames = os.listdir(f)
            except OSError as e:
                errors.append(e)
                continue

            for subname in subnames:
                subpath = os.sep.join([f, subname])
                if subpath not in visited:
                    visited.add(subpath)
                    unexplored.append((subpath, origin))

    return (
        [tuple(info) for info in found_by_dirname.values() if all(info)],
        errors
    )


def read_ini_metadata(inifile):
    """Name, artist and charter from a song.ini.

    Raises ChartFileError if the ini has no [Song] section.
    """
    config = configparser.ConfigParser(
        strict=False, allow_no_value=True, interpolation=None
    )
    # utf-8 should work but try to do other encodings if it doesn't
    for codec in ['utf-8', 'utf-8-sig', 'latin-1']:
        try:
            config.read(inifile, encoding=codec)
            break
        except (configparser.MissingSectionHeaderError, UnicodeDecodeError):
            continue

    # Song inis have one section
    if 'Song' in config:
        metadata = config['Song']
    elif 'song' in config:
        metadata = config['song']
    else:
        raise fbmisc.ChartFileError(f"Invalid ini format: {inifile}")

    return fbparse.Metadata(
        name=metadata.get('name', "<unknown name>"),
        artist=metadata.get('artist', "<unknown artist>"),
        charter=metadata.get('charter', "<unknown charter>"),
    )


def chart_hash(chartfile):
    with open(chartfile, 'rb') as f:
        return hashlib.file_digest(f, "md5").hexdigest()


def read_chart_text(chartfile):
    for codec in ['utf-8-sig', 'utf-8', 'latin-1']:
        try:
            with open(chartfile, mode='r', encoding=codec) as charttxt:
                return charttxt.read()
        except UnicodeDecodeError:
            continue


def load_chart(chartfile, inifile=None, config=None):
    """The full process to go from chart file to Song.

    Metadata comes from the song.ini if one is given; otherwise whatever
    the config already holds is used.

    """
    if not str(chartfile).endswith(".chart"):
        raise fbmisc.ChartFileError(f"Unexpected chart filetype: {chartfile}")

    if config is None:
        config = fbparse.ParserConfig()

    if inifile is not None:
        config = fbparse.ParserConfig(
            metadata=read_ini_metadata(inifile),
            permitted_instruments=config.permitted_instruments,
            parse_solos=config.parse_solos,
            hopo_threshold=config.hopo_threshold,
        )

    return fbparse.ChartParser(config).parse(read_chart_text(chartfile))


def json_save(obj):
    """Object --> dict conversion, for json.dump(default=json_save)."""
    if isinstance(obj, fbdata.Song):
        gd = obj.global_data()
        return {
            'fbversion': fbmisc.FRETBAR_VERSION,

            'name': gd.name,
            'artist': gd.artist,
            'charter': gd.charter,
            'resolution': gd.resolution,
            'tempo_map': gd.tempo_map,

            'tracks': {
                f"{d} {i}": obj.track(i, d)
                for i in obj.instruments()
                for d in obj.difficulties(i)
            },
        }

    if isinstance(obj, fbtempo.TempoMap):
        return {
            'bpms': [[bpm.tick, bpm.bpm] for bpm in obj.bpms],
            'time_sigs': [[ts.tick, ts.numerator, ts.denominator] for ts in obj.time_sigs],
        }

    if isinstance(obj, fbdata.NoteTrack):
        notes = obj.notes()
        return {
            'notecount': len(notes),
            'chords': len([n for n in notes if n.is_chord()]),
            'hopos': len([n for n in notes if n.is_hopo()]),
            'taps': len([n for n in notes if n.is_tap()]),

            'sp_phrases': obj.sp_phrases(),
            'solos': obj.solos(fbdata.DrumSettings.default_settings()),
            'drum_fills': obj.drum_fills(),
            'disco_flips': obj.disco_flips(),
        }

    if isinstance(obj, (fbdata.StarPower, fbdata.DrumFill, fbdata.DiscoFlip)):
        return [obj.tick, obj.length]

    if isinstance(obj, fbdata.Solo):
        return [obj.start, obj.end, obj.value]

    raise TypeError(f"Unhandled type: {type(obj)}")
