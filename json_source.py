# json_source.py
# Immutable input buffer with a line-start index for byte offset -> line:column
#
# =============================================================================
#  SOURCE BUFFER
# =============================================================================
#
# A Source owns (or shares) the raw bytes handed to the lexer. The only
# thing computed eagerly is the table of line starts, built in one pass.
# Line and column are resolved on demand, which only happens when a
# diagnostic is being formatted, so the hot scan path never pays for it.
#
# Contents may be bytes, a memoryview, or an mmap. The regex engine reads
# all three through the buffer protocol, so a mapped file is never copied.
# =============================================================================

import bisect
import logging
import mmap
import os
import re
import sys
from typing import List, NamedTuple, Optional, Union

log = logging.getLogger("jsonloc.source")

DEFAULT_TAB_SIZE = 8

_NEWLINE_RE = re.compile(rb"\n")

Contents = Union[bytes, memoryview, mmap.mmap]


# ---------------------------------------------------------------------------
# POSITION RECORDS
# ---------------------------------------------------------------------------
class LineAndIndex(NamedTuple):
    """0-based line number plus the byte offset where that line starts."""
    line: int = 0
    index: int = 0


class LineAndColumn(NamedTuple):
    """
    1-based line and column as editors expect them.

    The default (0, 0) is what an unknown location reports.
    """
    line: int = 0
    column: int = 0

    def append_to_string(self, buffer: str) -> str:
        return f"{buffer}{self.line}:{self.column}"

    def to_string(self) -> str:
        return self.append_to_string("")

    def __str__(self) -> str:
        return self.to_string()


# ---------------------------------------------------------------------------
# SOURCE
# ---------------------------------------------------------------------------
class Source:
    """
    Input text plus a precomputed line-start index.

    ``Source()`` is the null source: it has no contents and is falsy.
    ``Source(name, data)`` takes ownership of ``data`` (bytes, bytearray or
    str, the latter encoded as UTF-8). ``Source.from_buffer`` wraps memory
    owned by someone else, such as an mmap, without copying it.

    The line table skips line 0, which always starts at offset 0.
    """

    def __init__(self, file_name: str = "", contents: Union[bytes, bytearray, str, None] = None):
        self.file_name = file_name
        if contents is None:
            self.contents: Optional[Contents] = None
            self.contents_size = 0
            self.line_start_indexes: List[int] = []
            return
        if isinstance(contents, str):
            contents = contents.encode("utf-8")
        elif isinstance(contents, bytearray):
            contents = bytes(contents)
        elif not isinstance(contents, bytes):
            raise TypeError(f"expected bytes, bytearray or str, got {type(contents).__name__}")
        self._set_contents(contents, len(contents))

    @classmethod
    def from_buffer(cls, file_name: str, buffer, size: Optional[int] = None) -> "Source":
        """
        Wrap an already allocated buffer (mmap, memoryview, bytes...).

        The caller must keep ``buffer`` valid for as long as the source and
        anything derived from it are in use. ``size`` limits the visible
        prefix; it defaults to the whole buffer.
        """
        view = memoryview(buffer).cast("B")
        if size is not None:
            if size < 0 or size > len(view):
                raise ValueError(f"size {size} out of range for buffer of {len(view)} bytes")
            view = view[:size]
        src = cls(file_name)
        src._set_contents(view, len(view))
        return src

    def _set_contents(self, contents: Contents, size: int) -> None:
        self.contents = contents
        self.contents_size = size
        self.line_start_indexes = self.find_line_start_indexes(contents, size)
        log.debug("indexed %s: %d bytes, %d lines",
                  self.file_name or "<unknown>", size, len(self.line_start_indexes) + 1)

    @staticmethod
    def find_line_start_indexes(contents: Contents, contents_size: int) -> List[int]:
        """Offsets immediately following each newline, in one pass."""
        return [m.end() for m in _NEWLINE_RE.finditer(contents, 0, contents_size)]

    def __bool__(self) -> bool:
        return self.contents is not None

    def __repr__(self) -> str:
        return f"Source(file_name={self.file_name!r}, contents_size={self.contents_size})"

    # -----------------------------------------------------------------------
    # POSITION INDEX
    # -----------------------------------------------------------------------
    def get_line_and_start_index(self, char_index: int) -> LineAndIndex:
        """
        Find the 0-based line holding ``char_index`` and where it starts.

        Binary search for the greatest recorded start <= char_index. Offsets
        past the end of the buffer land on the last line.
        """
        pos = bisect.bisect_right(self.line_start_indexes, char_index)
        if pos == 0:
            return LineAndIndex(0, 0)
        return LineAndIndex(pos, self.line_start_indexes[pos - 1])

    def get_line_and_column(self, char_index: int, tab_size: int = DEFAULT_TAB_SIZE) -> LineAndColumn:
        """
        Resolve ``char_index`` to a 1-based (line, column) pair.

        Tabs advance to the next multiple of ``tab_size``. UTF-8 continuation
        bytes do not advance, so every code point counts as one column. This
        is O(line length) and only meant for the error path.
        """
        char_index = max(char_index, 0)
        line, start = self.get_line_and_start_index(char_index)
        end = min(char_index, self.contents_size)
        column = 0
        if self.contents is not None:
            for byte in self.contents[start:end]:
                if byte == 0x09:
                    if tab_size > 0:
                        column = (column // tab_size + 1) * tab_size
                    else:
                        column += 1
                elif byte & 0xC0 != 0x80:
                    column += 1
        column += max(char_index - max(end, start), 0)
        return LineAndColumn(line + 1, column + 1)


# ---------------------------------------------------------------------------
# LOADERS
# ---------------------------------------------------------------------------
def load_file(file_name: str) -> Source:
    """
    Map or read a file into a Source named after ``file_name``.

    Regular non-empty files are memory-mapped; anything mmap refuses (pipes,
    empty files, special files) is read in full instead. Failures surface as
    OSError carrying the path.
    """
    with open(file_name, "rb") as f:
        try:
            size = os.fstat(f.fileno()).st_size
            if size > 0:
                mapped = mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ)
                log.debug("mapped %s (%d bytes)", file_name, size)
                return Source.from_buffer(file_name, mapped)
        except (ValueError, OSError) as exc:
            log.debug("mmap of %s failed (%s), reading instead", file_name, exc)
        data = f.read()
    log.debug("read %s (%d bytes)", file_name, len(data))
    return Source(file_name, data)


def load_stdin() -> Source:
    """Read all of standard input. The resulting source has no file name."""
    stream = getattr(sys.stdin, "buffer", sys.stdin)
    data = stream.read()
    if isinstance(data, str):
        data = data.encode("utf-8")
    log.debug("read stdin (%d bytes)", len(data))
    return Source("", data)
