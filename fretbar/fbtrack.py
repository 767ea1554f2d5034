import logging
from enum import Enum

from .fbdata import (
    TrackFamily, FiveFretLane, SixFretLane, DrumLane, NoteFlag, Chord, Note
)

logger = logging.getLogger(__name__)

# HOPO distance at the reference resolution; scaled for other resolutions.
HOPO_TICKS_AT_192 = 65


class CodeKind(Enum):
    """What a raw fret code on an N line turns into."""
    LANE = 1
    FORCE = 2
    TAP = 3
    ACCENT = 4
    GHOST = 5
    CYMBAL = 6
    UNKNOWN = 7


class FretCode:
    """A classified fret code. Modifier codes that act on a drum lane carry
    that lane too."""
    def __init__(self, kind, lane=None):
        self.kind = kind
        self.lane = lane

    def __eq__(self, other):
        return (self.kind, self.lane) == (other.kind, other.lane)

    def __repr__(self):
        return f"FretCode({self.kind.name}, {self.lane})"

    def is_modifier(self):
        return self.kind not in [CodeKind.LANE, CodeKind.UNKNOWN]


UNKNOWN_CODE = FretCode(CodeKind.UNKNOWN)

# Drum lanes addressed by the accent (34-37) and ghost (40-43) code ranges
DYNAMIC_LANES = [DrumLane.RED, DrumLane.YELLOW, DrumLane.BLUE, DrumLane.GREEN]

# Drum lanes addressed by the cymbal code range (66-68)
CYMBAL_LANES = [DrumLane.YELLOW, DrumLane.BLUE, DrumLane.GREEN]


def classify_code(family, code):
    """Every fret code an N line can hold, for every family.

    Anything not listed here is UNKNOWN and the note is dropped.
    """
    match family, code:
        case TrackFamily.FIVE_FRET, 0:
            return FretCode(CodeKind.LANE, FiveFretLane.GREEN)
        case TrackFamily.FIVE_FRET, 1:
            return FretCode(CodeKind.LANE, FiveFretLane.RED)
        case TrackFamily.FIVE_FRET, 2:
            return FretCode(CodeKind.LANE, FiveFretLane.YELLOW)
        case TrackFamily.FIVE_FRET, 3:
            return FretCode(CodeKind.LANE, FiveFretLane.BLUE)
        case TrackFamily.FIVE_FRET, 4:
            return FretCode(CodeKind.LANE, FiveFretLane.ORANGE)
        case TrackFamily.FIVE_FRET, 7:
            return FretCode(CodeKind.LANE, FiveFretLane.OPEN)
        case TrackFamily.SIX_FRET, 0:
            return FretCode(CodeKind.LANE, SixFretLane.WHITE_LOW)
        case TrackFamily.SIX_FRET, 1:
            return FretCode(CodeKind.LANE, SixFretLane.WHITE_MID)
        case TrackFamily.SIX_FRET, 2:
            return FretCode(CodeKind.LANE, SixFretLane.WHITE_HIGH)
        case TrackFamily.SIX_FRET, 3:
            return FretCode(CodeKind.LANE, SixFretLane.BLACK_LOW)
        case TrackFamily.SIX_FRET, 4:
            return FretCode(CodeKind.LANE, SixFretLane.BLACK_MID)
        case TrackFamily.SIX_FRET, 8:
            return FretCode(CodeKind.LANE, SixFretLane.BLACK_HIGH)
        case TrackFamily.SIX_FRET, 7:
            return FretCode(CodeKind.LANE, SixFretLane.OPEN)
        case TrackFamily.FIVE_FRET | TrackFamily.SIX_FRET, 5:
            return FretCode(CodeKind.FORCE)
        case TrackFamily.FIVE_FRET | TrackFamily.SIX_FRET, 6:
            return FretCode(CodeKind.TAP)
        case TrackFamily.DRUMS, 0:
            return FretCode(CodeKind.LANE, DrumLane.KICK)
        case TrackFamily.DRUMS, 1:
            return FretCode(CodeKind.LANE, DrumLane.RED)
        case TrackFamily.DRUMS, 2:
            return FretCode(CodeKind.LANE, DrumLane.YELLOW)
        case TrackFamily.DRUMS, 3:
            return FretCode(CodeKind.LANE, DrumLane.BLUE)
        case TrackFamily.DRUMS, 4 | 5:
            # 5 is the fifth-lane pad; see resolve_fifth_lane
            return FretCode(CodeKind.LANE, DrumLane.GREEN)
        case TrackFamily.DRUMS, 32:
            return FretCode(CodeKind.LANE, DrumLane.DOUBLE_KICK)
        case TrackFamily.DRUMS, 34 | 35 | 36 | 37:
            return FretCode(CodeKind.ACCENT, DYNAMIC_LANES[code - 34])
        case TrackFamily.DRUMS, 40 | 41 | 42 | 43:
            return FretCode(CodeKind.GHOST, DYNAMIC_LANES[code - 40])
        case TrackFamily.DRUMS, 66 | 67 | 68:
            return FretCode(CodeKind.CYMBAL, CYMBAL_LANES[code - 66])
        case _:
            return UNKNOWN_CODE


def resolve_fifth_lane(codes):
    """Lanes for the drum codes on one tick.

    Code 5 is green on its own. When 4 and 5 are charted together, 4 keeps
    green and 5 moves to blue so the two don't land on the same lane.

    """
    collides = 4 in codes and 5 in codes
    lanes = {}
    for code in codes:
        if code == 5 and collides:
            lanes[code] = FretCode(CodeKind.LANE, DrumLane.BLUE)
        else:
            lanes[code] = classify_code(TrackFamily.DRUMS, code)
    return lanes


class PendingNote:
    """A chord at a tick that's finished adding lanes but still holds the
    modifiers that will become its flags."""
    def __init__(self, tick, chord):
        self.tick = tick
        self.chord = chord
        self.forced = False
        self.tap = False

    def __repr__(self):
        return f"PendingNote({self.tick}, {self.chord.rowstr()})"


def read_tick(family, tick, entries):
    """Process all the N lines that happened simultaneously on this tick.

    Lanes are added first, then modifiers, so a modifier always finds the
    lane it belongs to no matter which line came first. Returns None if the
    tick ends up without a note.

    """
    notelines = []
    for entry in entries:
        args = entry.int_args()
        if entry.tag != 'N' or args is None or len(args) != 2:
            continue
        code, length = args
        if code < 0 or length < 0:
            logger.debug("Tick %d: dropping note with negative values %r", tick, entry)
            continue
        notelines.append((code, length))

    if family == TrackFamily.DRUMS:
        fretcodes = resolve_fifth_lane({code for code, _ in notelines})
    else:
        fretcodes = {code: classify_code(family, code) for code, _ in notelines}

    chord = Chord()
    pending = PendingNote(tick, chord)

    # Phase 1: notes
    for code, length in notelines:
        fretcode = fretcodes[code]
        if fretcode.kind == CodeKind.LANE:
            chord.add_note(fretcode.lane, length)
        elif fretcode.kind == CodeKind.UNKNOWN:
            logger.debug("Tick %d: dropping unknown %s code %d", tick, family.name, code)

    # Phase 2: note modifiers
    for code, _ in notelines:
        fretcode = fretcodes[code]
        applied = True
        match fretcode.kind:
            case CodeKind.FORCE:
                pending.forced = True
            case CodeKind.TAP:
                pending.tap = True
            case CodeKind.ACCENT:
                applied = chord.apply_accent(fretcode.lane)
            case CodeKind.GHOST:
                applied = chord.apply_ghost(fretcode.lane)
            case CodeKind.CYMBAL:
                applied = chord.apply_cymbal(fretcode.lane)
        if not applied:
            logger.debug("Tick %d: no %s note for code %d", tick, fretcode.lane, code)

    if not chord.count():
        return None
    return pending


def build_chords(family, section):
    """Turns a track section's N lines into pending notes in tick order."""
    pending_notes = []
    for tick, entries in section.by_tick():
        pending = read_tick(family, tick, entries)
        if pending is not None:
            pending_notes.append(pending)
    return pending_notes


def hopo_threshold_ticks(threshold, resolution):
    """The largest gap, in ticks, that still allows an automatic HOPO."""
    if threshold.is_proportional():
        return resolution * HOPO_TICKS_AT_192 // 192
    return threshold.ticks


def is_auto_hopo(pending, previous, max_gap):
    if previous is None:
        return False
    if pending.chord.is_chord() or previous.chord.is_chord():
        return False
    if pending.chord.lanes() == previous.chord.lanes():
        return False
    return pending.tick - previous.tick <= max_gap


def apply_playability(family, pending_notes, max_gap):
    """Works out the flags for every note of a guitar-family track.

    Each note ends up exactly one of strum, HOPO or tap. Forcing flips
    the automatic HOPO state; a tap is never a HOPO, even when forced.

    """
    family_flag = NoteFlag.for_family(family)
    notes = []
    previous = None

    for pending in pending_notes:
        flags = family_flag
        hopo = is_auto_hopo(pending, previous, max_gap)

        if pending.forced:
            hopo = not hopo
            flags |= NoteFlag.FORCE_FLIP

        if pending.tap:
            flags |= NoteFlag.TAP
        elif hopo:
            flags |= NoteFlag.HOPO

        notes.append(Note(pending.tick, pending.chord, flags))
        previous = pending

    return notes


def apply_drum_flags(pending_notes):
    """Drums don't have HOPOs or taps; their modifiers live on the lanes."""
    return [Note(p.tick, p.chord, NoteFlag.DRUMS) for p in pending_notes]


def build_notes(family, section, max_gap):
    pending_notes = build_chords(family, section)
    if family == TrackFamily.DRUMS:
        return apply_drum_flags(pending_notes)
    return apply_playability(family, pending_notes, max_gap)
