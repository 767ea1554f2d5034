from enum import Enum, Flag, auto


class TrackFamily(Enum):
    """Which kind of controller a track is charted for.

    The family decides how fret codes are read and whether HOPOs and taps
    are worked out for the track at all.

    """
    FIVE_FRET = 1
    SIX_FRET = 2
    DRUMS = 3


class Instrument(Enum):
    GUITAR = 1
    GUITAR_COOP = 2
    BASS = 3
    RHYTHM = 4
    KEYS = 5
    GHL_GUITAR = 6
    GHL_BASS = 7
    GHL_RHYTHM = 8
    GHL_GUITAR_COOP = 9
    DRUMS = 10

    def family(self):
        match self:
            case Instrument.DRUMS:
                return TrackFamily.DRUMS
            case (Instrument.GHL_GUITAR | Instrument.GHL_BASS
                  | Instrument.GHL_RHYTHM | Instrument.GHL_GUITAR_COOP):
                return TrackFamily.SIX_FRET
            case _:
                return TrackFamily.FIVE_FRET

    def section_suffix(self):
        """How the instrument is named in .chart section headers."""
        match self:
            case Instrument.GUITAR:
                return "Single"
            case Instrument.GUITAR_COOP:
                return "DoubleGuitar"
            case Instrument.BASS:
                return "DoubleBass"
            case Instrument.RHYTHM:
                return "DoubleRhythm"
            case Instrument.KEYS:
                return "Keyboard"
            case Instrument.GHL_GUITAR:
                return "GHLGuitar"
            case Instrument.GHL_BASS:
                return "GHLBass"
            case Instrument.GHL_RHYTHM:
                return "GHLRhythm"
            case Instrument.GHL_GUITAR_COOP:
                return "GHLCoop"
            case Instrument.DRUMS:
                return "Drums"

    def __str__(self):
        match self:
            case Instrument.GUITAR:
                return "Guitar"
            case Instrument.GUITAR_COOP:
                return "Guitar Co-op"
            case Instrument.BASS:
                return "Bass"
            case Instrument.RHYTHM:
                return "Rhythm"
            case Instrument.KEYS:
                return "Keys"
            case Instrument.GHL_GUITAR:
                return "GHL Guitar"
            case Instrument.GHL_BASS:
                return "GHL Bass"
            case Instrument.GHL_RHYTHM:
                return "GHL Rhythm"
            case Instrument.GHL_GUITAR_COOP:
                return "GHL Guitar Co-op"
            case Instrument.DRUMS:
                return "Drums"


class Difficulty(Enum):
    EASY = 1
    MEDIUM = 2
    HARD = 3
    EXPERT = 4

    def __str__(self):
        return self.name.capitalize()


def section_name(instrument, difficulty):
    return f"{difficulty}{instrument.section_suffix()}"


def track_sections():
    """Every .chart section name that holds a note track, mapped to its
    (instrument, difficulty)."""
    return {
        section_name(i, d): (i, d)
        for i in Instrument
        for d in Difficulty
    }


class FiveFretLane(Enum):
    GREEN = 1
    RED = 2
    YELLOW = 3
    BLUE = 4
    ORANGE = 5
    OPEN = 6

    def __str__(self):
        return self.name.capitalize()


class SixFretLane(Enum):
    WHITE_LOW = 1
    WHITE_MID = 2
    WHITE_HIGH = 3
    BLACK_LOW = 4
    BLACK_MID = 5
    BLACK_HIGH = 6
    OPEN = 7

    def __str__(self):
        return self.name.replace('_', ' ').title()


class DrumLane(Enum):
    """Representation of a drum lane.

    The double kick is its own lane so that it can share a tick with an
    ordinary kick; for everything else it's still a kick.
    Kick notes only have normal notes.
    Red notes don't have cymbals.

    """
    KICK = 1
    DOUBLE_KICK = 2
    RED = 3
    YELLOW = 4
    BLUE = 5
    GREEN = 6

    def is_kick(self):
        return self in [DrumLane.KICK, DrumLane.DOUBLE_KICK]

    def allows_cymbals(self):
        return self in [
            DrumLane.YELLOW,
            DrumLane.BLUE,
            DrumLane.GREEN
        ]

    def allows_dynamics(self):
        return not self.is_kick()

    def __str__(self):
        match self:
            case DrumLane.KICK:
                return "Kick"
            case DrumLane.DOUBLE_KICK:
                return "Kick (2x)"
            case _:
                return self.name.capitalize()


class NoteFlag(Flag):
    """Per-note flags. Every note carries exactly one family tag."""
    NONE = 0
    HOPO = auto()
    FORCE_FLIP = auto()
    TAP = auto()
    FIVE_FRET = auto()
    SIX_FRET = auto()
    DRUMS = auto()

    @staticmethod
    def for_family(family):
        match family:
            case TrackFamily.FIVE_FRET:
                return NoteFlag.FIVE_FRET
            case TrackFamily.SIX_FRET:
                return NoteFlag.SIX_FRET
            case TrackFamily.DRUMS:
                return NoteFlag.DRUMS


class NoteDynamicType(Enum):
    """Representation of a note's dynamic type."""
    NORMAL = 1
    GHOST = 2
    ACCENT = 3


class NoteCymbalType(Enum):
    """Representation of a note's cymbal type.

    Normal = Toms / Snare / Kick, and every guitar note.

    """
    NORMAL = 1
    CYMBAL = 2


class ChordNote:
    """One lane of a chord, with its sustain and any drum modifiers."""

    def __init__(
        self,
        lane,
        length=0,
        dynamictype=NoteDynamicType.NORMAL,
        cymbaltype=NoteCymbalType.NORMAL
    ):
        assert(lane is not None)
        self.lane = lane
        self.length = length
        self.dynamictype = dynamictype
        self.cymbaltype = cymbaltype

    def __hash__(self):
        return hash((self.lane, self.length, self.dynamictype, self.cymbaltype))

    def __eq__(self, other):
        if other is None:
            return False

        for attr in ['lane', 'length', 'dynamictype', 'cymbaltype']:
            if getattr(self, attr) != getattr(other, attr):
                return False

        return True

    def __repr__(self):
        mods = ""
        if self.is_cymbal():
            mods += " Cym"
        match self.dynamictype:
            case NoteDynamicType.GHOST:
                mods += " (Ghost)"
            case NoteDynamicType.ACCENT:
                mods += " (Accent)"
        sustain = f" +{self.length}" if self.length else ""
        return f"{self.lane}{mods}{sustain}"

    def is_accent(self):
        return self.dynamictype == NoteDynamicType.ACCENT

    def is_ghost(self):
        return self.dynamictype == NoteDynamicType.GHOST

    def is_cymbal(self):
        return self.cymbaltype == NoteCymbalType.CYMBAL


class Chord:
    """Representation of a chord which has 1 note (or nothing) for each lane.

    Notes always come back in ascending lane order, regardless of the order
    they were added in.

    """
    def __init__(self):
        self.notemap = {}

    def __hash__(self):
        return hash(tuple(self.notes()))

    def __eq__(self, other):
        return self.notes() == other.notes()

    def __repr__(self):
        return self.rowstr()

    def __getitem__(self, lane):
        return self.notemap.get(lane)

    def __setitem__(self, lane, value):
        self.notemap[lane] = value

    def __contains__(self, lane):
        return lane in self.notemap

    def notes(self):
        return [self.notemap[lane] for lane in self.lanes()]

    def lanes(self):
        return sorted(self.notemap.keys(), key=lambda lane: lane.value)

    def count(self):
        return len(self.notemap)

    def is_chord(self):
        return self.count() > 1

    def rowstr(self):
        return f"[{' - '.join(repr(n) for n in self.notes())}]"

    def add_note(self, lane, length=0):
        """A lane that's already in the chord just takes the new length."""
        note = self[lane]
        if note is None:
            note = ChordNote(lane, length)
            self[lane] = note
        else:
            note.length = length
        return note

    def apply_cymbal(self, lane):
        """Returns False if there's no note on the lane to modify, or the
        lane can't be a cymbal."""
        if lane not in self or not lane.allows_cymbals():
            return False
        self[lane].cymbaltype = NoteCymbalType.CYMBAL
        return True

    def apply_ghost(self, lane):
        if lane not in self or not lane.allows_dynamics():
            return False
        self[lane].dynamictype = NoteDynamicType.GHOST
        return True

    def apply_accent(self, lane):
        if lane not in self or not lane.allows_dynamics():
            return False
        self[lane].dynamictype = NoteDynamicType.ACCENT
        return True


class Note:
    """A chord at a tick, plus the flags that say how it's played."""

    def __init__(self, tick, chord, flags=NoteFlag.NONE):
        self.tick = tick
        self.chord = chord
        self.flags = flags

    def __eq__(self, other):
        return (
            self.tick == other.tick
            and self.chord == other.chord
            and self.flags == other.flags
        )

    def __repr__(self):
        return f"Note({self.tick}, {self.chord.rowstr()}, {self.flags})"

    def lanes(self):
        return self.chord.lanes()

    @property
    def length(self):
        return max(n.length for n in self.chord.notes())

    def is_chord(self):
        return self.chord.is_chord()

    def is_hopo(self):
        return NoteFlag.HOPO in self.flags

    def is_tap(self):
        return NoteFlag.TAP in self.flags

    def is_forced(self):
        return NoteFlag.FORCE_FLIP in self.flags

    def is_strum(self):
        return not (self.is_hopo() or self.is_tap())


class _Phrase:
    """A span of a track given by a start tick and a length."""
    def __init__(self, tick, length):
        self.tick = tick
        self.length = length

    def __eq__(self, other):
        return type(self) is type(other) and (self.tick, self.length) == (other.tick, other.length)

    def __repr__(self):
        return f"{type(self).__name__}({self.tick}, {self.length})"

    @property
    def end(self):
        return self.tick + self.length


class StarPower(_Phrase):
    pass


class DrumFill(_Phrase):
    pass


class DiscoFlip(_Phrase):
    """While a disco flip is active, red and yellow cymbal swap places."""
    pass


class Solo:
    """A scored solo section. Both ends are inclusive."""
    def __init__(self, start, end, value):
        self.start = start
        self.end = end
        self.value = value

    def __eq__(self, other):
        return (self.start, self.end, self.value) == (other.start, other.end, other.value)

    def __repr__(self):
        return f"Solo({self.start}, {self.end}, {self.value})"


class DrumSettings:
    """Player-side drum options that change how a drum chart is counted.

    Only the kick options affect anything parsed here (solo values).
    pro_drums and enable_dynamics are carried for consumers that score
    cymbals and dynamics.

    """
    def __init__(self, enable_double_kick=True, disable_kick=False, pro_drums=True, enable_dynamics=False):
        self.enable_double_kick = enable_double_kick
        self.disable_kick = disable_kick
        self.pro_drums = pro_drums
        self.enable_dynamics = enable_dynamics

    @staticmethod
    def default_settings():
        return DrumSettings()

    def counts_lane(self, lane):
        match lane:
            case DrumLane.KICK:
                return not self.disable_kick
            case DrumLane.DOUBLE_KICK:
                return self.enable_double_kick and not self.disable_kick
            case _:
                return True


class GlobalData:
    """Song-wide data shared by every track."""
    def __init__(self, resolution, tempo_map, name="", artist="", charter=""):
        self._resolution = resolution
        self._tempo_map = tempo_map
        self._name = name
        self._artist = artist
        self._charter = charter

    @property
    def resolution(self):
        return self._resolution

    @property
    def tempo_map(self):
        return self._tempo_map

    @property
    def name(self):
        return self._name

    @property
    def artist(self):
        return self._artist

    @property
    def charter(self):
        return self._charter

    @property
    def is_from_midi(self):
        return False


class NoteTrack:
    """All notes for one instrument and difficulty, plus the track's phrases.

    Solos are stored as (start, end) ranges and only given a value when
    asked for, since drum solos depend on the player's DrumSettings.

    """
    def __init__(
        self, family, notes, global_data,
        sp_phrases=(), solo_ranges=(), drum_fills=(), disco_flips=()
    ):
        self._family = family
        self._notes = tuple(notes)
        self._global_data = global_data
        self._sp_phrases = tuple(sp_phrases)
        self._solo_ranges = tuple(solo_ranges)
        self._drum_fills = tuple(drum_fills)
        self._disco_flips = tuple(disco_flips)

    def __len__(self):
        return len(self._notes)

    def instrument_family(self):
        return self._family

    def global_data(self):
        return self._global_data

    def notes(self):
        return self._notes

    def sp_phrases(self):
        return self._sp_phrases

    def drum_fills(self):
        return self._drum_fills

    def disco_flips(self):
        return self._disco_flips

    def solo_ranges(self):
        return self._solo_ranges

    def solos(self, settings):
        """Solos worth any points. 100 points per note, where a guitar chord
        is one note and a drum chord is one note per counted lane."""
        solos = []
        for start, end in self._solo_ranges:
            notecount = 0
            for note in self._notes:
                if start <= note.tick <= end:
                    notecount += self._solo_notecount(note, settings)
            if notecount:
                solos.append(Solo(start, end, 100 * notecount))
        return solos

    def _solo_notecount(self, note, settings):
        if self._family != TrackFamily.DRUMS:
            return 1
        return len([lane for lane in note.lanes() if settings.counts_lane(lane)])


class Song:
    """The finished chart: global data, and a NoteTrack for each instrument
    and difficulty that had notes."""
    def __init__(self, global_data, tracks):
        self._global_data = global_data
        self._tracks = dict(tracks)

    def global_data(self):
        return self._global_data

    def instruments(self):
        present = {instrument for instrument, _ in self._tracks}
        return [i for i in Instrument if i in present]

    def difficulties(self, instrument):
        return [d for d in Difficulty if (instrument, d) in self._tracks]

    def track(self, instrument, difficulty):
        try:
            return self._tracks[(instrument, difficulty)]
        except KeyError:
            raise KeyError(f"No {difficulty} {instrument} track in song") from None
