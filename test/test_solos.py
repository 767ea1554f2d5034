import unittest

import fretbar.fbparse as fbparse
import fretbar.fbdata as fbdata

from chartstrings import section_string


class TestSolos(unittest.TestCase):
    """Solo sections and the bonus they're worth."""

    def _solos(self, notes, events, section="ExpertSingle", instrument=fbdata.Instrument.GUITAR,
               settings=None, config=None):
        song = fbparse.parse(section_string(section, notes, events=events), config)
        track = song.track(instrument, fbdata.Difficulty.EXPERT)
        if settings is None:
            settings = fbdata.DrumSettings.default_settings()
        return track.solos(settings)

    def test_solos_are_read(self):
        solos = self._solos(
            [(100, 0, 0), (300, 0, 0), (400, 0, 0)],
            [(0, "solo"), (200, "soloend"), (300, "solo"), (400, "soloend")]
        )
        self.assertEqual(solos, [fbdata.Solo(0, 200, 100), fbdata.Solo(300, 400, 200)])

    def test_chords_are_not_counted_double(self):
        solos = self._solos([(100, 0, 0), (100, 1, 0)], [(0, "solo"), (200, "soloend")])
        self.assertEqual(solos, [fbdata.Solo(0, 200, 100)])

    def test_empty_solos_are_ignored(self):
        solos = self._solos([(500, 0, 0)], [(0, "solo"), (100, "soloend")])
        self.assertEqual(solos, [])

    def test_repeated_solo_starts_and_ends_dont_matter(self):
        solos = self._solos(
            [(50, 0, 0), (150, 0, 0), (250, 0, 0)],
            [(0, "solo"), (100, "solo"), (200, "soloend"), (300, "soloend")]
        )
        self.assertEqual(solos, [fbdata.Solo(0, 200, 200)])

    def test_solo_markers_are_sorted(self):
        solos = self._solos([(100, 0, 0)], [(200, "soloend"), (0, "solo")])
        self.assertEqual(solos, [fbdata.Solo(0, 200, 100)])

    def test_solos_with_no_soloend_event_are_ignored(self):
        solos = self._solos([(100, 0, 0)], [(0, "solo")])
        self.assertEqual(solos, [])

    def test_solos_are_not_read_when_disabled(self):
        config = fbparse.ParserConfig(parse_solos=False)
        solos = self._solos([(100, 0, 0)], [(0, "solo"), (200, "soloend")], config=config)
        self.assertEqual(solos, [])

    def test_quoted_solo_events(self):
        solos = self._solos([(100, 0, 0)], [(0, '"solo"'), (200, '"soloend"')])
        self.assertEqual(solos, [fbdata.Solo(0, 200, 100)])

    def test_drum_chords_count_each_lane(self):
        solos = self._solos(
            [(100, 1, 0), (100, 2, 0)],
            [(0, "solo"), (200, "soloend")],
            section="ExpertDrums", instrument=fbdata.Instrument.DRUMS
        )
        self.assertEqual(solos, [fbdata.Solo(0, 200, 200)])

    def _drum_kick_solo_value(self, settings):
        solos = self._solos(
            [(100, 0, 0), (100, 32, 0), (100, 1, 0)],
            [(0, "solo"), (200, "soloend")],
            section="ExpertDrums", instrument=fbdata.Instrument.DRUMS,
            settings=settings
        )
        return solos[0].value

    def test_drum_solos_follow_kick_settings(self):
        self.assertEqual(self._drum_kick_solo_value(fbdata.DrumSettings()), 300)
        self.assertEqual(self._drum_kick_solo_value(fbdata.DrumSettings(enable_double_kick=False)), 200)
        self.assertEqual(self._drum_kick_solo_value(fbdata.DrumSettings(disable_kick=True)), 100)

    def test_kick_only_drum_solo_is_dropped_without_kicks(self):
        solos = self._solos(
            [(100, 0, 0), (500, 1, 0)],
            [(0, "solo"), (200, "soloend")],
            section="ExpertDrums", instrument=fbdata.Instrument.DRUMS,
            settings=fbdata.DrumSettings(disable_kick=True)
        )
        self.assertEqual(solos, [])
