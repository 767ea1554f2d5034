import logging
from enum import Enum

from . import fbdata
from . import fbmisc
from . import fbsection
from . import fbspan
from . import fbtempo
from . import fbtrack

logger = logging.getLogger(__name__)


class Metadata:
    """Song info resolved by the caller, usually from song.ini.

    Header fields inside the .chart itself are never used for these.
    """
    def __init__(self, name="", artist="", charter=""):
        self.name = name
        self.artist = artist
        self.charter = charter

    def __eq__(self, other):
        return (self.name, self.artist, self.charter) == (other.name, other.artist, other.charter)

    def __repr__(self):
        return f"Metadata({self.name!r}, {self.artist!r}, {self.charter!r})"


class HopoThresholdType(Enum):
    # 65 ticks at 192 resolution, scaled to the chart's resolution
    PROPORTIONAL = 1
    # A fixed number of ticks whatever the resolution
    FIXED = 2


class HopoThreshold:
    def __init__(self, thresholdtype=HopoThresholdType.PROPORTIONAL, ticks=None):
        if thresholdtype == HopoThresholdType.FIXED and (ticks is None or ticks < 0):
            raise ValueError(f"Fixed HOPO threshold needs a tick count, got {ticks}")
        self.thresholdtype = thresholdtype
        self.ticks = ticks

    def __repr__(self):
        if self.is_proportional():
            return "HopoThreshold(proportional)"
        return f"HopoThreshold({self.ticks} ticks)"

    @staticmethod
    def proportional():
        return HopoThreshold()

    @staticmethod
    def fixed(ticks):
        return HopoThreshold(HopoThresholdType.FIXED, ticks)

    def is_proportional(self):
        return self.thresholdtype == HopoThresholdType.PROPORTIONAL


class ParserConfig:
    """Parser settings. Not changed during a parse."""
    def __init__(
        self,
        metadata=None,
        permitted_instruments=None,
        parse_solos=True,
        hopo_threshold=None
    ):
        self.metadata = metadata if metadata is not None else Metadata()
        if permitted_instruments is None:
            permitted_instruments = list(fbdata.Instrument)
        self.permitted_instruments = frozenset(permitted_instruments)
        self.parse_solos = parse_solos
        self.hopo_threshold = hopo_threshold if hopo_threshold is not None else HopoThreshold.proportional()


class ChartParser:
    """Reads .chart text to create a Song object.

    It's a chain: Text --> Sections --> GlobalData --> NoteTracks --> Song.
    Each step only reads what the steps before it produced.

    """
    def __init__(self, config=None):
        self.config = config if config is not None else ParserConfig()

    def parse(self, charttxt):
        """Raises ParseError if there's no note track to build, or if the
        tempo map can't be represented."""
        sections = fbsection.load_sections(charttxt)

        global_data = self.read_global_data(sections)

        tracks = {}
        for name, (instrument, difficulty) in fbdata.track_sections().items():
            if instrument not in self.config.permitted_instruments:
                continue

            section = fbsection.first_with_notes(sections, name)
            if section is None:
                continue

            track = self.build_track(instrument, difficulty, section, global_data)
            if len(track):
                tracks[(instrument, difficulty)] = track
            else:
                logger.debug("[%s] has no valid notes, skipping", name)

        if not tracks:
            raise fbmisc.ParseError("Chart has no note tracks with valid notes.")

        return fbdata.Song(global_data, tracks)

    def read_global_data(self, sections):
        resolution = fbtempo.read_resolution(sections)
        tempo_map = fbtempo.read_tempo_map(sections, resolution)
        metadata = self.config.metadata

        return fbdata.GlobalData(
            resolution, tempo_map,
            name=metadata.name, artist=metadata.artist, charter=metadata.charter
        )

    def build_track(self, instrument, difficulty, section, global_data):
        family = instrument.family()
        max_gap = fbtrack.hopo_threshold_ticks(self.config.hopo_threshold, global_data.resolution)

        notes = fbtrack.build_notes(family, section, max_gap)

        solo_ranges = fbspan.read_solo_ranges(section) if self.config.parse_solos else []

        if family == fbdata.TrackFamily.DRUMS:
            drum_fills = fbspan.read_drum_fills(section)
            disco_flips = fbspan.read_disco_flips(section, difficulty)
        else:
            drum_fills = []
            disco_flips = []

        return fbdata.NoteTrack(
            family, notes, global_data,
            sp_phrases=fbspan.read_sp_phrases(section),
            solo_ranges=solo_ranges,
            drum_fills=drum_fills,
            disco_flips=disco_flips,
        )


def parse(charttxt, config=None):
    return ChartParser(config).parse(charttxt)
