import pathlib

"""Semantic version number for fretbar.

Major version update: Incompatible changes to the Song model.
Minor version update: Changes that are expected to affect parsed notes/flags.
Patch version update: Outer layer or other cosmetic changes.

"""
FRETBAR_VERSION = (0,1,0)


"""Static paths"""

ROOTPATH = pathlib.Path(__file__).resolve().parent.parent
OUTPUTPATH = ROOTPATH / "output"


class ChartFileError(Exception):
    """Just a custom error for a chart file that doesn't work."""
    pass


class ParseError(ChartFileError):
    """The chart text can't become a Song at all.

    Only raised when there's nothing playable in the chart, or when the
    tempo map would hold a time signature that can't be represented.
    Everything else that's malformed is dropped while parsing.

    """
    pass
