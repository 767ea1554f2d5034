import logging
import re

from .fbdata import Difficulty, StarPower, DrumFill, DiscoFlip

logger = logging.getLogger(__name__)

SP_PHRASE_KEY = 2
DRUM_FILL_KEY = 64

# Text events that are used for disco flip. The mix number is the
# difficulty: 0 easy, 1 medium, 2 hard, 3 expert.
R_DISCO_ON = r'\[?mix.{mix}.drums\d?d\]?'
R_DISCO_OFF = r'\[?mix.{mix}.drums\d?(dnoflip)?\]?'


def _special_phrases(section, key, phrasetype):
    phrases = []
    for entry in section.tick_entries():
        if entry.tag != 'S':
            continue
        match entry.int_args():
            case [k, length] if k == key and length >= 0:
                phrases.append(phrasetype(entry.key_tick, length))
    return phrases


def read_sp_phrases(section):
    """Star power phrases: S 2 <length>. Other S lines aren't star power."""
    return _special_phrases(section, SP_PHRASE_KEY, StarPower)


def read_drum_fills(section):
    """Drum fills (activation phrases): S 64 <length>."""
    return _special_phrases(section, DRUM_FILL_KEY, DrumFill)


def pair_markers(markers):
    """Pairs (tick, is_start) markers into (start, end) ranges.

    Markers are sorted by tick first, keeping input order within a tick.
    A start while already open, or an end while closed, does nothing. A
    range still open at the end is dropped.

    """
    ranges = []
    start = None
    for tick, is_start in sorted(markers, key=lambda m: m[0]):
        if is_start:
            if start is None:
                start = tick
        elif start is not None:
            ranges.append((start, tick))
            start = None

    if start is not None:
        logger.debug("Dropping marker at tick %d that never ends", start)

    return ranges


def _text_events(section):
    return [
        (entry.key_tick, entry.text())
        for entry in section.tick_entries()
        if entry.tag == 'E'
    ]


def read_solo_ranges(section):
    markers = []
    for tick, text in _text_events(section):
        match text:
            case "solo":
                markers.append((tick, True))
            case "soloend":
                markers.append((tick, False))
    return pair_markers(markers)


def mix_index(difficulty):
    return difficulty.value - Difficulty.EASY.value


def read_disco_flips(section, difficulty):
    """Disco flips for one difficulty. Mix events for other difficulties
    are ignored."""
    r_on = R_DISCO_ON.format(mix=mix_index(difficulty))
    r_off = R_DISCO_OFF.format(mix=mix_index(difficulty))

    markers = []
    for tick, text in _text_events(section):
        if re.fullmatch(r_on, text):
            markers.append((tick, True))
        elif re.fullmatch(r_off, text):
            markers.append((tick, False))
    return [DiscoFlip(start, end - start) for start, end in pair_markers(markers)]
