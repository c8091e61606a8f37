"""Chromosome coordinates and half-open chromosome segments."""
from typing import Union


# Classes --------------------------------------------------------------------------------------------------------------
class Position:
    """
    Immutable chromosome coordinate. Safe for hashing and use in sets/dicts.

    Positions order by chromosome name first, then by offset. Chromosome names are compared as
    raw bytes, so ``b'chr15' < b'chr4'``; this is not the biological chromosome order.

    Attributes:
        chrom: The chromosome name.
        index: The 0-based offset on the chromosome.

    Examples:
        >>> Position(b'chr1', 5000) < Position(b'chr15', 100)
        True
    """
    __slots__ = ('_chrom', '_index')

    def __init__(self, chrom: Union[bytes, str], index: int):
        self._chrom: bytes = chrom.encode('ascii') if isinstance(chrom, str) else chrom
        self._index: int = int(index)

    @property
    def chrom(self) -> bytes: return self._chrom
    @property
    def index(self) -> int: return self._index
    def __hash__(self): return hash((self._chrom, self._index))
    def __repr__(self): return f"{self._chrom.decode('ascii', 'replace')}:{self._index}"
    def __iter__(self): return iter((self._chrom, self._index))
    def _key(self): return self._chrom, self._index

    def __eq__(self, other):
        if not isinstance(other, Position): return NotImplemented
        return self._chrom == other._chrom and self._index == other._index

    def __lt__(self, other: 'Position') -> bool: return self._key() < other._key()
    def __le__(self, other: 'Position') -> bool: return self._key() <= other._key()
    def __gt__(self, other: 'Position') -> bool: return self._key() > other._key()
    def __ge__(self, other: 'Position') -> bool: return self._key() >= other._key()


class Segment:
    """
    Immutable half-open interval ``[start, stop)`` on a named chromosome.

    ``stop > start`` is expected but not enforced.

    Attributes:
        chrom: The chromosome name.
        start: The start position (0-based, inclusive).
        stop: The stop position (0-based, exclusive).
    """
    __slots__ = ('_chrom', '_start', '_stop')

    def __init__(self, chrom: Union[bytes, str], start: int, stop: int):
        self._chrom: bytes = chrom.encode('ascii') if isinstance(chrom, str) else chrom
        self._start: int = int(start)
        self._stop: int = int(stop)

    @property
    def chrom(self) -> bytes: return self._chrom
    @property
    def start(self) -> int: return self._start
    @property
    def stop(self) -> int: return self._stop
    @property
    def start_pos(self) -> Position: return Position(self._chrom, self._start)
    @property
    def stop_pos(self) -> Position: return Position(self._chrom, self._stop)
    def __hash__(self): return hash((self._chrom, self._start, self._stop))
    def __repr__(self): return f"{self._chrom.decode('ascii', 'replace')}:{self._start}-{self._stop}"
    def __len__(self): return max(0, self._stop - self._start)
    def __iter__(self): return iter((self._chrom, self._start, self._stop))
    def __bytes__(self): return b'\t'.join((self._chrom, b'%d' % self._start, b'%d' % self._stop))

    def __eq__(self, other):
        if not isinstance(other, Segment): return NotImplemented
        return (self._chrom == other._chrom and
                self._start == other._start and
                self._stop == other._stop)

    def starts_after(self, pos: Position) -> bool:
        """
        Tests whether the segment starts strictly after a position.

        Args:
            pos: The position to test against.

        Returns:
            True if the start position is greater than ``pos``.
        """
        return self.start_pos > pos

    def ends_before(self, pos: Position) -> bool:
        """
        Tests whether the segment ends at or before a position.

        As the stop is exclusive, a segment with ``stop == pos.index`` has ended at ``pos``.

        Args:
            pos: The position to test against.

        Returns:
            True if the stop position is less than or equal to ``pos``.
        """
        return self.stop_pos <= pos

    def with_start(self, start: int) -> 'Segment':
        """Returns a copy of this segment with a new start."""
        return Segment(self._chrom, start, self._stop)
