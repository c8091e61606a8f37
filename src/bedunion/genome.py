from typing import Union, BinaryIO, Iterable, Generator, Optional
from pathlib import Path
from warnings import warn

import numpy as np

from bedunion import RESOURCES, BedunionWarning
from bedunion.core.interval import Segment
from bedunion.io.open import Xopen
from bedunion.io.bedgraph import BedGraphLine
from bedunion.engines.union import UnionRecord, DEFAULT_FILLER


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class GenomeError(Exception): pass
class GenomeWarning(BedunionWarning): pass


# Classes --------------------------------------------------------------------------------------------------------------
class GenomeSizes:
    """
    Chromosome sizes, as read from a two-column ``chrom<TAB>size`` genome file.

    Chromosomes keep the order of the file. Extra columns, blank lines and ``#`` comments are ignored.

    Examples:
        >>> genome = GenomeSizes.from_file("hg19.genome")
        >>> genome[b'chr1']
        249250621
    """
    __slots__ = ('_sizes',)
    _CHUNK_SIZE = 65536

    def __init__(self, sizes: dict[bytes, int] = None):
        self._sizes: dict[bytes, int] = {}
        for chrom, size in (sizes or {}).items():
            self._sizes[chrom.encode('ascii') if isinstance(chrom, str) else chrom] = int(size)

    def __len__(self): return len(self._sizes)
    def __iter__(self): return iter(self._sizes)
    def __contains__(self, chrom: bytes): return chrom in self._sizes
    def __getitem__(self, chrom: bytes) -> int: return self._sizes[chrom]
    def get(self, chrom: bytes, default: int = None) -> Optional[int]: return self._sizes.get(chrom, default)
    def items(self): return self._sizes.items()
    @property
    def total(self) -> int: return sum(self._sizes.values())

    @classmethod
    def from_file(cls, file: Union[str, Path, BinaryIO]) -> 'GenomeSizes':
        """
        Loads a genome file.

        Args:
            file: Path to the genome file, or an open binary file.

        Returns:
            A new GenomeSizes.

        Raises:
            GenomeError: If a line is malformed or a chromosome is listed twice.
        """
        self = cls()
        opener = Xopen(file, mode='rb')
        try: handle = opener.__enter__()
        except (OSError, ModuleNotFoundError) as e: raise GenomeError(f"Could not open genome file '{opener.name}': {e}") from e
        try:
            for lineno, line in enumerate(iter(handle.readline, b''), 1):
                parts = line.split()
                if not parts or parts[0].startswith(b'#'): continue
                if len(parts) < 2 or not parts[1].isdigit():
                    raise GenomeError(f"{opener.name}, line {lineno}: expected '<chrom> <size>', "
                                      f"got '{line.decode(errors='replace').rstrip()}'")
                if parts[0] in self._sizes:
                    raise GenomeError(f"{opener.name}, line {lineno}: duplicate chromosome "
                                      f"'{parts[0].decode(errors='replace')}'")
                self._sizes[parts[0]] = int(parts[1])
        finally:
            opener.__exit__(None, None, None)
        return self

    def pad_empty(self, records: Iterable[UnionRecord], n_values: int,
                  filler: bytes = DEFAULT_FILLER) -> Generator[UnionRecord, None, None]:
        """
        Adds the empty regions a union cannot see on its own.

        The union reports gaps between intervals, but not the region before the first interval or the
        regions after the last interval of each chromosome. Those are filled in here from the
        chromosome sizes.

        Args:
            records: Union records, sorted and with empty regions already reported.
            n_values: The number of value columns per record.
            filler: The filler value.

        Yields:
            The input records, with leading and trailing empty records inserted. Without any records, every
            chromosome in the genome is yielded as a single empty record.
        """
        fill = [filler] * n_values
        chrom, stop, checked = None, 0, set()
        for record in records:
            segment = record.segment
            if segment.chrom != chrom:
                if chrom is not None: yield from self._trailing(chrom, stop, fill)
                elif segment.start > 0: yield UnionRecord(Segment(segment.chrom, 0, segment.start), list(fill), True)
                chrom = segment.chrom
            if chrom not in checked:
                checked.add(chrom)
                if chrom not in self._sizes:
                    warn(f"Chromosome '{chrom.decode(errors='replace')}' is not in the genome file, "
                         f"its trailing empty region is not reported", GenomeWarning)
            if (size := self._sizes.get(chrom)) is not None and segment.stop > size:
                warn(f"Region {segment!r} extends past the end of the chromosome ({size})", GenomeWarning)
            stop = segment.stop
            yield record
        if chrom is not None: yield from self._trailing(chrom, stop, fill)
        else:
            for chrom, size in self._sizes.items():
                if size > 0: yield UnionRecord(Segment(chrom, 0, size), list(fill), True)

    def _trailing(self, chrom: bytes, stop: int, fill: list[bytes]) -> Generator[UnionRecord, None, None]:
        if (size := self._sizes.get(chrom)) is not None and stop < size:
            yield UnionRecord(Segment(chrom, stop, size), list(fill), True)

    def random(self, rng: np.random.Generator = None, n: int = 1_000_000,
               length: int = 100) -> Generator[BedGraphLine, None, None]:
        """
        Generates random BED6 intervals of a fixed length.

        Chromosomes are drawn with probability proportional to their size, and each interval lies
        entirely within its chromosome. The name column is the 1-based interval number, the score
        column is the length.

        Args:
            rng: Random number generator.
            n: Number of intervals.
            length: Length of every interval.

        Yields:
            Unsorted BedGraphLine objects whose payload holds the name, score and strand columns.

        Raises:
            GenomeError: If no chromosome can hold an interval of this length.
        """
        if rng is None: rng = RESOURCES.rng
        if length < 1: raise GenomeError(f"Interval length must be positive, got {length}")
        chroms = [c for c, s in self._sizes.items() if s >= length]
        if not chroms: raise GenomeError(f"No chromosome is long enough for intervals of length {length}")
        sizes = np.array([self._sizes[c] for c in chroms], dtype=np.int64)
        weights = sizes / sizes.sum()
        strands = (b'+', b'-')
        score = b'%d' % length
        for offset in range(0, n, self._CHUNK_SIZE):
            k = min(self._CHUNK_SIZE, n - offset)
            idx = rng.choice(len(chroms), size=k, p=weights)
            starts = rng.integers(0, sizes[idx] - length + 1)
            signs = rng.integers(0, 2, size=k)
            for i in range(k):
                start = int(starts[i])
                yield BedGraphLine(Segment(chroms[idx[i]], start, start + length),
                                   b'\t'.join((b'%d' % (offset + i + 1), score, strands[signs[i]])))
