# json_location.py
# Byte-offset locations into a Source and the located parse error
#
# A Location is a (source, offset) pair. It never keeps its Source alive:
# the back-reference is a weakref, so the caller owns the Source and must
# hold on to it for as long as locations derived from it are formatted.
# A location whose source is gone (or was never given) prints as unknown.

import weakref
from typing import Optional

from json_source import DEFAULT_TAB_SIZE, LineAndColumn, LineAndIndex, Source

UNKNOWN_FILE_NAME = "<unknown>"


class Location:
    """Position of a single byte inside a Source."""

    __slots__ = ("_source_ref", "char_index")

    def __init__(self, source: Optional[Source] = None, char_index: int = 0):
        self._source_ref = weakref.ref(source) if source is not None else None
        self.char_index = char_index

    @property
    def source(self) -> Optional[Source]:
        if self._source_ref is None:
            return None
        return self._source_ref()

    def get_line_and_start_index(self) -> LineAndIndex:
        source = self.source
        if source is None:
            return LineAndIndex()
        return source.get_line_and_start_index(self.char_index)

    def get_line_and_column(self, tab_size: int = DEFAULT_TAB_SIZE) -> LineAndColumn:
        source = self.source
        if source is None:
            return LineAndColumn()
        return source.get_line_and_column(self.char_index, tab_size)

    def append_to_string(self, buffer: str, tab_size: int = DEFAULT_TAB_SIZE) -> str:
        source = self.source
        if source is None or not source.file_name:
            buffer += UNKNOWN_FILE_NAME
        else:
            buffer += source.file_name
        buffer += ":"
        return self.get_line_and_column(tab_size).append_to_string(buffer)

    def to_string(self, tab_size: int = DEFAULT_TAB_SIZE) -> str:
        return self.append_to_string("", tab_size)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Location({self.to_string()!r}, char_index={self.char_index})"

    def __eq__(self, other):
        if not isinstance(other, Location):
            return NotImplemented
        return self.source is other.source and self.char_index == other.char_index

    def __hash__(self):
        return hash((id(self.source), self.char_index))


class ParseError(ValueError):
    """
    Lexical or syntax error pinned to one byte offset.

    The message is rendered once, at construction, as ``file:line:col: msg``
    so it stays correct even if the Source is dropped afterwards. ``msg``,
    ``pos``, ``lineno`` and ``colno`` mirror json.JSONDecodeError.
    """

    def __init__(self, location: Location, message: str, tab_size: int = DEFAULT_TAB_SIZE):
        line, column = location.get_line_and_column(tab_size)
        super().__init__(f"{location.to_string(tab_size)}: {message}")
        self.location = location
        self.msg = message
        self.pos = location.char_index
        self.lineno = line
        self.colno = column

    def __reduce__(self):
        return _rebuild_parse_error, (self.args[0], self.msg, self.pos, self.lineno, self.colno)


def _rebuild_parse_error(rendered: str, msg: str, pos: int, lineno: int, colno: int) -> ParseError:
    """Unpickle a ParseError. The Source does not travel, so the location is unknown."""
    err = ParseError.__new__(ParseError)
    ValueError.__init__(err, rendered)
    err.location = Location(None, pos)
    err.msg = msg
    err.pos = pos
    err.lineno = lineno
    err.colno = colno
    return err
