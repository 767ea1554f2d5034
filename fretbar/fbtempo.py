import logging
from functools import total_ordering

import mido

from . import fbmisc
from . import fbsection

logger = logging.getLogger(__name__)

DEFAULT_RESOLUTION = 192

# Tempos are kept as the .chart file stores them: BPM * 1000.
DEFAULT_BPM = 120000

# 2**32 doesn't fit the denominator, so exponents stop at 31.
MAX_TS_EXPONENT = 31


class BPM:
    """A tempo change, in millibeats per minute."""
    def __init__(self, tick, bpm):
        self.tick = tick
        self.bpm = bpm

    def __eq__(self, other):
        return (self.tick, self.bpm) == (other.tick, other.bpm)

    def __repr__(self):
        return f"BPM({self.tick}, {self.bpm})"

    def beats_per_minute(self):
        return self.bpm / 1000.0


class TimeSignature:
    def __init__(self, tick, numerator, denominator):
        self.tick = tick
        self.numerator = numerator
        self.denominator = denominator

    def __eq__(self, other):
        return (
            (self.tick, self.numerator, self.denominator)
            == (other.tick, other.numerator, other.denominator)
        )

    def __repr__(self):
        return f"TimeSignature({self.tick}, {self.numerator}/{self.denominator})"

    def ticks_per_measure(self, resolution):
        return resolution * self.numerator * 4 // self.denominator


def _dedupe_by_tick(events):
    """Sorts by tick; when several events share a tick, the last one given wins."""
    by_tick = {}
    for event in events:
        by_tick[event.tick] = event
    return [by_tick[tick] for tick in sorted(by_tick)]


class TempoMap:
    """The song's tempo and meter over time.

    There's always a BPM and a time signature at tick 0, so any tick can be
    converted to seconds, beats, or measures.

    """
    def __init__(self, time_sigs=(), bpms=(), resolution=DEFAULT_RESOLUTION):
        self.resolution = resolution

        time_sigs = _dedupe_by_tick(time_sigs)
        if not time_sigs or time_sigs[0].tick != 0:
            time_sigs.insert(0, TimeSignature(0, 4, 4))

        bpms = _dedupe_by_tick(bpms)
        if not bpms or bpms[0].tick != 0:
            bpms.insert(0, BPM(0, DEFAULT_BPM))

        self._time_sigs = tuple(time_sigs)
        self._bpms = tuple(bpms)

    def __repr__(self):
        return f"TempoMap(resolution={self.resolution}, bpms={list(self._bpms)}, time_sigs={list(self._time_sigs)})"

    @property
    def time_sigs(self):
        return self._time_sigs

    @property
    def bpms(self):
        return self._bpms

    def beats(self, tick):
        return tick / self.resolution

    def seconds(self, tick):
        """Advance through the tempo map to get the time of a tick."""
        seconds = 0.0
        handled_ticks = 0
        tempo = mido.bpm2tempo(self._bpms[0].beats_per_minute())

        for bpm in self._bpms[1:]:
            if bpm.tick >= tick:
                break
            seconds += mido.tick2second(bpm.tick - handled_ticks, self.resolution, tempo)
            handled_ticks = bpm.tick
            tempo = mido.bpm2tempo(bpm.beats_per_minute())

        # Count past the last tempo change
        return seconds + mido.tick2second(tick - handled_ticks, self.resolution, tempo)

    def measures(self, tick):
        """Fractional number of measures before the tick."""
        measures = 0.0
        handled_ticks = 0
        tpm = self._time_sigs[0].ticks_per_measure(self.resolution)

        for ts in self._time_sigs[1:]:
            if ts.tick >= tick:
                break
            measures += (ts.tick - handled_ticks) / tpm
            handled_ticks = ts.tick
            tpm = ts.ticks_per_measure(self.resolution)

        return measures + (tick - handled_ticks) / tpm

    def timecode(self, tick):
        return Timecode(tick, self)


@total_ordering
class Timecode:
    """A point in time in a song, in multiple representations.

    The absolute way to measure time in songs is with ticks, but some contexts
    want to work with measures, beats, or seconds.

    Timecodes are created with a tick value and a tempo map; the rest of the
    values are derived.

    """
    def __init__(self, ticks, tempo_map):
        # Fundamental value
        self.ticks = ticks

        # Derived values
        self.measure_beats_ticks = self._init_mbt(tempo_map)
        self.seconds = tempo_map.seconds(ticks)

    def _init_mbt(self, tempo_map):
        """Iterate over the meter to derive the measure/beat/tick position
        that corresponds to self.ticks.

        After all whole measures are counted, whole beats are counted.
        The remainder after measures and beats stays as ticks.

        """
        resolution = tempo_map.resolution
        measures = 0
        handled_ticks = 0
        current_tpm = tempo_map.time_sigs[0].ticks_per_measure(resolution)

        # Advance through the song in sections marked by each meter change
        for ts in tempo_map.time_sigs[1:]:
            if ts.tick >= self.ticks:
                break

            # A time signature partway into a measure starts a fresh measure
            section_ticks = ts.tick - handled_ticks
            measures += -(-section_ticks // current_tpm)
            handled_ticks = ts.tick
            current_tpm = ts.ticks_per_measure(resolution)

        # Count past the last meter change
        ticks_to_advance = self.ticks - handled_ticks
        measures += ticks_to_advance // current_tpm
        ticks_to_advance %= current_tpm

        # Less than 1 measure remains. Count whole beats
        beats = ticks_to_advance // resolution
        return (measures, beats, ticks_to_advance % resolution)

    def __eq__(self, other):
        return self.ticks == other.ticks

    def __lt__(self, other):
        return self.ticks < other.ticks

    def __hash__(self):
        return self.ticks

    def __repr__(self):
        return str(self.ticks)

    def is_measure_start(self):
        return self.measure_beats_ticks[1] == self.measure_beats_ticks[2] == 0

    def measurestr(self):
        m, b, t = self.measure_beats_ticks
        return f"m{m + 1}.{b + 1}.{t}"


def read_resolution(sections):
    """Resolution from the [Song] header, or the default.

    Only a plain positive integer is accepted; anything else (for example a
    quoted number) leaves the default in place.

    """
    header = fbsection.first_nonempty(sections, "Song")
    if header is None:
        return DEFAULT_RESOLUTION

    value = header.properties().get("Resolution")
    if value is None:
        return DEFAULT_RESOLUTION

    if not value.isdecimal() or int(value) == 0:
        logger.debug("Ignoring bad resolution value %r", value)
        return DEFAULT_RESOLUTION

    return int(value)


def read_tempo_map(sections, resolution):
    """Builds the TempoMap from the [SyncTrack] section.

    Raises ParseError for a time signature whose denominator exponent is too
    large to represent.

    """
    time_sigs = []
    bpms = []

    sync_track = fbsection.first_nonempty(sections, "SyncTrack")
    entries = sync_track.tick_entries() if sync_track is not None else []

    for entry in entries:
        args = entry.int_args()
        match entry.tag, args:
            case "B", [bpm] if bpm > 0:
                bpms.append(BPM(entry.key_tick, bpm))
            case "TS", [numerator] if numerator > 0:
                time_sigs.append(TimeSignature(entry.key_tick, numerator, 4))
            case "TS", [_, exponent] if exponent > MAX_TS_EXPONENT:
                raise fbmisc.ParseError(
                    f"Time signature denominator 2^{exponent} at tick {entry.key_tick} is too large"
                )
            case "TS", [numerator, exponent] if numerator > 0 and exponent >= 0:
                time_sigs.append(TimeSignature(entry.key_tick, numerator, 2**exponent))
            case _:
                logger.debug("Ignoring sync track entry: %r", entry)

    return TempoMap(time_sigs, bpms, resolution)
