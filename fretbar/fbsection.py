import logging
import re

logger = logging.getLogger(__name__)


class ChartEntry:
    """One `key = value` line from inside a section.

    Track and sync data is keyed by tick; header data (the [Song] section) is
    keyed by a property name. The value is split into a tag (N, S, E, B, TS)
    and its arguments, but is otherwise left for the consumer to interpret.

    """
    def __init__(self, keystr, valuestr):
        keystr = keystr.strip()

        self.key_name = None
        self.key_tick = None
        self.value = valuestr.strip()

        try:
            self.key_tick = int(keystr)
        except ValueError:
            self.key_name = keystr

        words = self.value.split()
        self.tag = words[0] if words else None
        self.args = words[1:]

    def __repr__(self):
        return f"{self.key()} = {self.value}"

    def is_tick_data(self):
        return self.key_tick is not None

    def key(self):
        return self.key_tick if self.is_tick_data() else self.key_name

    def int_args(self):
        """The arguments as integers, or None if any of them isn't one."""
        try:
            return [int(a) for a in self.args]
        except ValueError:
            return None

    def text(self):
        """Arguments of an E line, rejoined. Quotes around the text are dropped."""
        return ' '.join(self.args).strip('"')

    @staticmethod
    def from_line(line):
        """Returns None if the line isn't a usable entry."""
        if '=' not in line:
            return None

        lhs, rhs = line.split('=', 1)
        if not lhs.strip():
            return None

        entry = ChartEntry(lhs, rhs)
        if entry.is_tick_data() and entry.key_tick < 0:
            return None

        return entry


class ChartSection:
    """Much like a config, .chart data goes under a section name."""
    def __init__(self, name):
        self.name = name
        self.entries = []

    def __repr__(self):
        return f"[{self.name}] ({len(self.entries)} entries)"

    def __len__(self):
        return len(self.entries)

    def is_empty(self):
        return not self.entries

    def has_notes(self):
        return any(entry.tag == 'N' for entry in self.entries if entry.is_tick_data())

    def properties(self):
        """Header-style entries as a name -> value dict. Earlier entries win."""
        props = {}
        for entry in self.entries:
            if not entry.is_tick_data() and entry.key_name not in props:
                props[entry.key_name] = entry.value
        return props

    def tick_entries(self):
        return [entry for entry in self.entries if entry.is_tick_data()]

    def by_tick(self):
        """Tick data grouped by tick, in ascending tick order.

        Multiple entries on the same tick stack, keeping their input order.
        """
        grouped = {}
        for entry in self.tick_entries():
            grouped.setdefault(entry.key_tick, []).append(entry)

        return sorted(grouped.items())


def load_sections(charttxt):
    """Loads the chart's sections from text form.

    Returns a dict of section name -> list of ChartSection, in the order the
    names first appear. A name that appears more than once keeps every
    occurrence; it's up to whoever reads the section to pick one.

    """
    sections = {}
    wip_section = None
    open_block = False

    def close():
        nonlocal wip_section, open_block
        sections.setdefault(wip_section.name, []).append(wip_section)
        wip_section = None
        open_block = False

    if charttxt.startswith('\ufeff'):
        charttxt = charttxt[1:]

    for lineno, line in enumerate(charttxt.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue

        if header := re.fullmatch(r'\[(.*)\]', line):
            if wip_section is not None and open_block:
                logger.debug("Line %d: section [%s] was never closed", lineno, wip_section.name)
                close()
            wip_section = ChartSection(header.group(1).strip())
            open_block = False
        elif line == "{":
            if wip_section is not None and not open_block:
                open_block = True
            else:
                logger.debug("Line %d: stray '{'", lineno)
        elif line == "}":
            if open_block:
                close()
            else:
                logger.debug("Line %d: stray '}'", lineno)
        elif open_block:
            entry = ChartEntry.from_line(line)
            if entry is None:
                logger.debug("Line %d: skipping malformed line %r", lineno, line)
            else:
                wip_section.entries.append(entry)

    if wip_section is not None and open_block:
        logger.debug("Section [%s] was never closed", wip_section.name)
        close()

    return sections


def first_nonempty(sections, name):
    """The first occurrence of a section that has any entries, or None."""
    for section in sections.get(name, []):
        if not section.is_empty():
            return section
    return None


def first_with_notes(sections, name):
    """The first occurrence of a track section that has any note lines, or
    None. Later occurrences are never looked at."""
    for section in sections.get(name, []):
        if section.has_notes():
            return section
    return None
