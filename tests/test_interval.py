import pytest
from bedunion.core.interval import Position, Segment


class TestPosition:
    def test_sort(self):
        positions = [Position(b'chr4', 1000), Position(b'chr1', 5000), Position(b'chr15', 100), Position(b'chr1', 3000)]
        assert sorted(positions) == [Position(b'chr1', 3000), Position(b'chr1', 5000),
                                     Position(b'chr15', 100), Position(b'chr4', 1000)]

    def test_min_max(self):
        positions = [Position(b'chr4', 1000), Position(b'chr1', 5000), Position(b'chr15', 100), Position(b'chr1', 3000)]
        assert min(positions) == Position(b'chr1', 3000)
        # Lexicographic, so chr4 sorts after chr15
        assert max(positions) == Position(b'chr4', 1000)

    def test_chrom_compared_first(self):
        assert Position(b'chr1', 10_000_000) < Position(b'chr2', 0)

    def test_str_chrom(self):
        assert Position('chr1', 10) == Position(b'chr1', 10)

    def test_hashable(self):
        assert len({Position(b'chr1', 1), Position(b'chr1', 1), Position(b'chr1', 2)}) == 2

    def test_not_equal_to_tuple(self):
        assert Position(b'chr1', 1) != (b'chr1', 1)


class TestSegment:
    def test_start_stop(self):
        seg = Segment(b'chr3', 100, 250)
        assert seg.start_pos == Position(b'chr3', 100)
        assert seg.stop_pos == Position(b'chr3', 250)
        assert len(seg) == 150

    def test_bytes(self):
        assert bytes(Segment(b'chr3', 100, 250)) == b'chr3\t100\t250'

    @pytest.mark.parametrize('index, expected', [(99, True), (100, False), (101, False)])
    def test_starts_after(self, index, expected):
        assert Segment(b'chr1', 100, 200).starts_after(Position(b'chr1', index)) is expected

    @pytest.mark.parametrize('index, expected', [(199, False), (200, True), (201, True)])
    def test_ends_before(self, index, expected):
        # Half-open: a segment stopping at 200 has ended at 200
        assert Segment(b'chr1', 100, 200).ends_before(Position(b'chr1', index)) is expected

    def test_other_chromosomes(self):
        seg = Segment(b'chr2', 100, 200)
        assert seg.ends_before(Position(b'chr3', 0))
        assert not seg.starts_after(Position(b'chr3', 0))
        assert seg.starts_after(Position(b'chr1', 1_000_000))

    def test_with_start(self):
        assert Segment(b'chr1', 100, 200).with_start(150) == Segment(b'chr1', 150, 200)
