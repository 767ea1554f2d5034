import os
import json
import hashlib
import tempfile
import unittest

import fretbar.fbutil as fbutil
import fretbar.fbparse as fbparse
import fretbar.fbmisc as fbmisc
import fretbar.fbdata as fbdata

from chartstrings import section_string, header_string


CHART = "\n".join([
    header_string({"Resolution": "192", "Name": '"Header Name"'}),
    section_string(
        "ExpertSingle",
        [(0, 0, 0), (65, 1, 0), (300, 2, 0), (300, 3, 0)],
        [(0, 2, 100)],
        [(0, "solo"), (100, "soloend")]
    ),
])

INI = "[Song]\nname = Test Song\nartist = Test Artist\ncharter = Test Charter\n"


class TestChartFiles(unittest.TestCase):
    """Finding and loading charts on disk."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

        self.songdir = os.path.join(self.tmpdir.name, "Some Pack", "Some Song")
        os.makedirs(self.songdir)
        self.chartfile = self._write(os.path.join(self.songdir, "notes.chart"), CHART)
        self.inifile = self._write(os.path.join(self.songdir, "song.ini"), INI)

    def _write(self, path, text):
        with open(path, mode='w', encoding='utf-8') as f:
            f.write(text)
        return path

    def test_charts_are_discovered(self):
        # A folder with only a chart isn't a complete song
        loose = os.path.join(self.tmpdir.name, "Loose")
        os.makedirs(loose)
        self._write(os.path.join(loose, "notes.chart"), CHART)

        charts, errors = fbutil.discover_charts([self.tmpdir.name])

        self.assertEqual(errors, [])
        self.assertEqual(len(charts), 1)
        chartfile, inifile, dirname, subfolders = charts[0]
        self.assertEqual(chartfile, self.chartfile)
        self.assertEqual(inifile, self.inifile)
        self.assertEqual(dirname, self.songdir)
        self.assertEqual(subfolders, "Some Pack")

    def test_midi_charts_are_not_discovered(self):
        middir = os.path.join(self.tmpdir.name, "Midi Song")
        os.makedirs(middir)
        self._write(os.path.join(middir, "notes.mid"), "")
        self._write(os.path.join(middir, "song.ini"), INI)

        charts, _ = fbutil.discover_charts([self.tmpdir.name])

        self.assertEqual([c[0] for c in charts], [self.chartfile])

    def test_ini_metadata(self):
        metadata = fbutil.read_ini_metadata(self.inifile)
        self.assertEqual(metadata, fbparse.Metadata("Test Song", "Test Artist", "Test Charter"))

    def test_ini_metadata_defaults(self):
        inifile = self._write(os.path.join(self.tmpdir.name, "partial.ini"), "[song]\nname = Only Name\n")
        metadata = fbutil.read_ini_metadata(inifile)

        self.assertEqual(metadata.name, "Only Name")
        self.assertEqual(metadata.artist, "<unknown artist>")
        self.assertEqual(metadata.charter, "<unknown charter>")

    def test_ini_without_song_section_is_an_error(self):
        inifile = self._write(os.path.join(self.tmpdir.name, "bad.ini"), "name = No Section\n")
        with self.assertRaises(fbmisc.ChartFileError):
            fbutil.read_ini_metadata(inifile)

    def test_load_chart_uses_ini_metadata(self):
        song = fbutil.load_chart(self.chartfile, self.inifile)
        gd = song.global_data()

        self.assertEqual(gd.name, "Test Song")
        self.assertEqual(gd.artist, "Test Artist")
        self.assertEqual(gd.charter, "Test Charter")

    def test_load_chart_keeps_config(self):
        config = fbparse.ParserConfig(parse_solos=False)
        song = fbutil.load_chart(self.chartfile, self.inifile, config)

        self.assertEqual(song.global_data().name, "Test Song")
        self.assertFalse(song.track(fbdata.Instrument.GUITAR, fbdata.Difficulty.EXPERT).solo_ranges())

    def test_load_chart_rejects_other_filetypes(self):
        with self.assertRaises(fbmisc.ChartFileError):
            fbutil.load_chart(os.path.join(self.songdir, "notes.mid"))

    def test_parse_errors_are_chart_file_errors(self):
        chartfile = self._write(os.path.join(self.tmpdir.name, "empty.chart"), "[Song]\n{\n}\n")
        with self.assertRaises(fbmisc.ChartFileError):
            fbutil.load_chart(chartfile)

    def test_chart_hash(self):
        with open(self.chartfile, 'rb') as f:
            expected = hashlib.md5(f.read()).hexdigest()
        self.assertEqual(fbutil.chart_hash(self.chartfile), expected)

    def test_latin1_charts_are_read(self):
        chartfile = os.path.join(self.tmpdir.name, "latin.chart")
        with open(chartfile, mode='w', encoding='latin-1') as f:
            f.write(header_string({"Name": '"Café"'}) + "\n" + section_string("ExpertSingle", [(0, 0, 0)]))

        song = fbutil.load_chart(chartfile)
        self.assertEqual(len(song.track(fbdata.Instrument.GUITAR, fbdata.Difficulty.EXPERT).notes()), 1)


class TestJsonSave(unittest.TestCase):
    """Song --> json."""

    def test_song_is_saved(self):
        config = fbparse.ParserConfig(metadata=fbparse.Metadata("Test Song", "Test Artist", "Test Charter"))
        song = fbparse.parse(CHART, config)

        data = json.loads(json.dumps(song, default=fbutil.json_save))

        self.assertEqual(data['fbversion'], list(fbmisc.FRETBAR_VERSION))
        self.assertEqual(data['name'], "Test Song")
        self.assertEqual(data['resolution'], 192)
        self.assertEqual(data['tempo_map'], {'bpms': [[0, 120000]], 'time_sigs': [[0, 4, 4]]})

        track = data['tracks']["Expert Guitar"]
        self.assertEqual(track['notecount'], 3)
        self.assertEqual(track['chords'], 1)
        self.assertEqual(track['hopos'], 1)
        self.assertEqual(track['taps'], 0)
        self.assertEqual(track['sp_phrases'], [[0, 100]])
        self.assertEqual(track['solos'], [[0, 100, 200]])
        self.assertEqual(track['drum_fills'], [])

    def test_unknown_types_are_rejected(self):
        with self.assertRaises(TypeError):
            json.dumps(object(), default=fbutil.json_save)
