from typing import Union, Generator, Optional, BinaryIO, Iterable
from pathlib import Path
from importlib import import_module
from importlib.util import find_spec
import lzma
import zlib

from bedunion.core.interval import Position, Segment
from bedunion.io import (BaseReader, BaseWriter, BedGraphError, MalformedRecordError, InvalidCoordinateError,
                         BedGraphIOError)


# Constants ------------------------------------------------------------------------------------------------------------
_HEADER_KEYWORDS = (b'track', b'browser')
# Decompressors raise their own error types on corrupt input
_READ_ERRORS = (OSError, EOFError, zlib.error, lzma.LZMAError)
if find_spec('zstandard') is not None: _READ_ERRORS += (import_module('zstandard').ZstdError,)


# Classes --------------------------------------------------------------------------------------------------------------
class BedGraphLine:
    """
    A single bedGraph record: a chromosome segment plus an optional value payload.

    The payload holds every column after the third, joined by tabs, exactly as it appeared in the
    input. It is ``None`` when the record only had the three coordinate columns.

    Attributes:
        segment: The record coordinates.
        data: The raw value payload, or ``None``.

    Examples:
        >>> line = BedGraphLine.parse(b'chr1 1000 1500 10')
        >>> line.segment, line.data
        (chr1:1000-1500, b'10')
    """
    __slots__ = ('_segment', '_data')

    def __init__(self, segment: Segment, data: Optional[bytes] = None):
        self._segment = segment
        self._data = data

    @property
    def segment(self) -> Segment: return self._segment
    @property
    def data(self) -> Optional[bytes]: return self._data
    @property
    def start_pos(self) -> Position: return self._segment.start_pos
    @property
    def stop_pos(self) -> Position: return self._segment.stop_pos
    def starts_after(self, pos: Position) -> bool: return self._segment.starts_after(pos)
    def ends_before(self, pos: Position) -> bool: return self._segment.ends_before(pos)
    def __repr__(self): return f"BedGraphLine({self._segment!r}, {self._data!r})"
    def __hash__(self): return hash((self._segment, self._data))

    def __eq__(self, other):
        if not isinstance(other, BedGraphLine): return NotImplemented
        return self._segment == other._segment and self._data == other._data

    def __bytes__(self):
        if self._data is None: return bytes(self._segment)
        return bytes(self._segment) + b'\t' + self._data

    @classmethod
    def parse(cls, raw: Union[bytes, str]) -> 'BedGraphLine':
        """
        Parses one whitespace-delimited record.

        Args:
            raw: The record text, with or without its trailing newline.

        Returns:
            A new BedGraphLine.

        Raises:
            MalformedRecordError: If fewer than three columns are present.
            InvalidCoordinateError: If the start or stop column is not a non-negative integer.
        """
        if isinstance(raw, str): raw = raw.encode()
        cols = raw.split()
        if len(cols) < 3:
            raise MalformedRecordError(f"Invalid number of columns [{len(cols)}] in line:\n"
                                       f"{raw.decode(errors='replace').rstrip()}")
        start, stop = _parse_coordinate(cols[1], 'start'), _parse_coordinate(cols[2], 'stop')
        data = b'\t'.join(cols[3:]) if len(cols) > 3 else None
        return cls(Segment(cols[0], start, stop), data)


class BedGraphReader(BaseReader):
    """
    Lazy, pull-based reader of bedGraph records.

    At most one record is held in memory at a time. The file is closed as soon as it is exhausted.
    Blank lines and ``#``/``track``/``browser`` header lines are skipped.

    Examples:
        >>> with BedGraphReader("scores.bg") as reader:
        ...     for line in reader:
        ...         print(line.segment, line.data)
    """
    __slots__ = ('lineno',)

    def __init__(self, file: Union[str, Path, BinaryIO]):
        super().__init__(file)
        self.lineno: int = 0

    def __iter__(self) -> Generator[BedGraphLine, None, None]:
        while (line := self.read_line()) is not None: yield line

    def __next__(self) -> BedGraphLine:
        if (line := self.read_line()) is None: raise StopIteration
        return line

    def read_line(self) -> Optional[BedGraphLine]:
        """
        Reads the next record.

        Returns:
            The next BedGraphLine, or ``None`` once the input is exhausted.

        Raises:
            BedGraphIOError: If the underlying stream fails.
            MalformedRecordError: If the record has too few columns.
            InvalidCoordinateError: If the record coordinates are not valid integers.
        """
        while self._handle is not None:
            try: raw = self._handle.readline()
            except _READ_ERRORS as e:
                raise BedGraphIOError(f"{self.name}: read failed after line {self.lineno}: {e}") from e
            if not raw:
                self.close()
                return None
            self.lineno += 1
            if not (fields := raw.split()) or fields[0].startswith(b'#') or fields[0] in _HEADER_KEYWORDS: continue
            try: return BedGraphLine.parse(raw)
            except BedGraphError as e: raise type(e)(f"{self.name}, line {self.lineno}: {e}") from e
        return None


class BedGraphWriter(BaseWriter):
    """
    Writer for bedGraph-like records.

    Anything that converts to ``bytes`` (``BedGraphLine``, ``UnionRecord``) is written as one line.

    Examples:
        >>> with BedGraphWriter("union.bg", header=[b'a', b'b']) as w:
        ...     w.write_all(union)
    """
    __slots__ = ('_header',)

    def __init__(self, file: Union[str, Path, BinaryIO] = '-', header: Iterable[Union[bytes, str]] = None):
        super().__init__(file)
        self._header = None if header is None else [i.encode() if isinstance(i, str) else i for i in header]

    def write_header(self):
        if self._header is not None:
            self._handle.write(b'\t'.join([b'chrom', b'start', b'end', *self._header]) + b'\n')

    def write_one(self, item):
        self._handle.write(bytes(item) + b'\n')


# Functions ------------------------------------------------------------------------------------------------------------
def _parse_coordinate(col: bytes, name: str) -> int:
    if not col.isdigit():
        raise InvalidCoordinateError(f"Invalid {name} coordinate '{col.decode(errors='replace')}', "
                                     f"expected a non-negative integer")
    return int(col)


def truncate_after(line: BedGraphLine, split_pt: Position) -> Optional[BedGraphLine]:
    """
    Truncates a line so that it starts at a split point.

    Args:
        line: The line to truncate.
        split_pt: The position to truncate at.

    Returns:
        A new line starting at ``split_pt.index`` if the split point falls before the end of the
        line, otherwise ``None``.
    """
    if line.stop_pos > split_pt: return BedGraphLine(line.segment.with_start(split_pt.index), line.data)
    return None
