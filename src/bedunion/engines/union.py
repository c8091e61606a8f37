"""
N-way sweep-line union of sorted bedGraph streams.

Breakpoints are the union of every interval start and stop across the inputs. Between two consecutive
breakpoints the set of active intervals is constant, so one record per breakpoint describes the
merged signal.
"""
from enum import IntEnum, auto
from typing import Iterable, Optional, Union
from logging import getLogger

from bedunion.core.interval import Position, Segment
from bedunion.io.bedgraph import BedGraphReader, BedGraphLine


# Constants ------------------------------------------------------------------------------------------------------------
_LOG = getLogger(__name__)
DEFAULT_FILLER = b'0'


# Classes --------------------------------------------------------------------------------------------------------------
class SlotState(IntEnum):
    """State of one input relative to the sweep cursor."""
    OUT = auto()  # the next line has not been reached yet
    IN = auto()  # the cursor is inside the line
    DONE = auto()  # the input is exhausted


class Slot:
    """
    Per-input bookkeeping: a state and the line it refers to (``None`` once done).
    """
    __slots__ = ('_state', '_line')
    _DONE: 'Slot'

    def __init__(self, state: SlotState, line: Optional[BedGraphLine] = None):
        if (line is None) != (state == SlotState.DONE):
            raise ValueError(f"Invalid line for a {state.name} slot: {line!r}")
        self._state = state
        self._line = line

    @property
    def state(self) -> SlotState: return self._state
    @property
    def line(self) -> Optional[BedGraphLine]: return self._line
    def __repr__(self): return f"{self._state.name}({self._line!r})" if self._line else self._state.name

    @classmethod
    def done(cls) -> 'Slot': return cls._DONE

    @classmethod
    def classify(cls, line: Optional[BedGraphLine], pos: Position) -> 'Slot':
        """Places a freshly read line relative to the cursor."""
        if line is None: return cls._DONE
        return cls(SlotState.OUT if line.starts_after(pos) else SlotState.IN, line)

    def transition(self) -> Optional[Position]:
        """The next position at which this slot changes state, ``None`` once done."""
        if self._state == SlotState.IN: return self._line.stop_pos
        if self._state == SlotState.OUT: return self._line.start_pos
        return None

    def advance(self, pos: Position, reader: BedGraphReader) -> 'Slot':
        """
        Moves the slot to a new cursor position, pulling at most one line from its reader.

        Args:
            pos: The new cursor position.
            reader: The reader owned by this slot.

        Returns:
            The slot for the new position (``self`` when nothing changed).
        """
        if self._state == SlotState.DONE: return self
        if self._state == SlotState.OUT:
            return self if self._line.starts_after(pos) else Slot(SlotState.IN, self._line)
        if not self._line.ends_before(pos): return self
        return Slot.classify(reader.read_line(), pos)


Slot._DONE = Slot(SlotState.DONE)


class UnionRecord:
    """
    One region of the merged output.

    Attributes:
        segment: The region, ending at the breakpoint that produced it.
        values: One value per input, in input order.
        empty: Whether no input was active over the region.
    """
    __slots__ = ('segment', 'values', 'empty')

    def __init__(self, segment: Segment, values: list[bytes], empty: bool = False):
        self.segment = segment
        self.values = values
        self.empty = empty

    def __repr__(self): return f"UnionRecord({self.segment!r}, {self.values!r}{', empty' if self.empty else ''})"
    def __bytes__(self): return b'\t'.join([bytes(self.segment), *self.values])

    def __eq__(self, other):
        if not isinstance(other, UnionRecord): return NotImplemented
        return self.segment == other.segment and self.values == other.values and self.empty == other.empty


class BedGraphUnion:
    """
    Merges sorted, non-overlapping bedGraph streams into one breakpoint-aligned stream.

    Each input is read lazily, one line at a time. Every emitted record covers the region from the
    previous breakpoint to the current one and carries the value of each input over that region,
    or the filler for inputs without an interval there. Regions where no input is active are only
    emitted when ``report_empty`` is set.

    Inputs must be sorted by chromosome then start, with chromosomes in byte-lexicographic order
    (``sort -k1,1 -k2,2n``). This is not checked.

    Examples:
        >>> readers = [BedGraphReader(f) for f in ('1.bg', '2.bg', '3.bg')]
        >>> with BedGraphUnion(readers) as union:
        ...     for record in union:
        ...         print(bytes(record))
    """
    __slots__ = ('_readers', '_slots', '_cursor', '_filler', 'report_empty', '_all_done')

    def __init__(self, readers: Iterable[BedGraphReader], filler: Union[bytes, str] = DEFAULT_FILLER,
                 report_empty: bool = False):
        """
        Primes one slot per reader.

        Args:
            readers: Opened readers, one per input, in output column order.
            filler: Value reported for inputs with no interval over a region.
            report_empty: Whether to emit regions where no input is active.
        """
        self._readers: list[BedGraphReader] = list(readers)
        self._filler: bytes = filler.encode() if isinstance(filler, str) else filler
        self.report_empty = report_empty
        self._slots: list[Slot] = [Slot(SlotState.OUT, line) if (line := r.read_line()) is not None
                                   else Slot.done()
                                   for r in self._readers]
        starts = [s.line.start_pos for s in self._slots if s.state == SlotState.OUT]
        self._cursor: Optional[Position] = min(starts) if starts else None
        self._all_done = self._cursor is None
        _LOG.debug('Primed %d inputs, starting at %s', len(self._readers), self._cursor)

    def __len__(self): return len(self._readers)
    def __iter__(self): return self
    def __enter__(self): return self
    def __exit__(self, exc_type, exc_val, exc_tb): self.close()

    @property
    def cursor(self) -> Optional[Position]: return self._cursor
    @property
    def filler(self) -> bytes: return self._filler
    @property
    def slots(self) -> tuple[Slot, ...]: return tuple(self._slots)

    def next_transition(self) -> Optional[Position]:
        """
        Finds the next position at which any input changes state.

        Returns:
            The nearest start of an upcoming line or stop of an active line, or ``None`` if every
            input is exhausted.
        """
        return min(filter(None, (s.transition() for s in self._slots)), default=None)

    def advance_to(self, pos: Position):
        """
        Moves every slot to a new cursor position in lock-step.

        Args:
            pos: The new cursor position; must not precede the current one.
        """
        self._slots = [slot.advance(pos, reader) for slot, reader in zip(self._slots, self._readers)]
        self._cursor = pos

    def values(self) -> list[bytes]:
        """The value of each input over the region ending at the next breakpoint."""
        filler = self._filler
        return [(s.line.data or filler) if s.state == SlotState.IN else filler for s in self._slots]

    def __next__(self) -> UnionRecord:
        while not self._all_done:
            breakpoint_ = self.next_transition()
            if breakpoint_ is None:
                self._all_done = True
                break
            empty = all(s.state != SlotState.IN for s in self._slots)
            values = self.values()
            start = self._cursor.index if self._cursor.chrom == breakpoint_.chrom else 0
            self.advance_to(breakpoint_)
            if start >= breakpoint_.index or (empty and not self.report_empty): continue
            return UnionRecord(Segment(breakpoint_.chrom, start, breakpoint_.index), values, empty)
        raise StopIteration

    def close(self):
        """Closes every reader."""
        self._all_done = True
        for reader in self._readers: reader.close()
