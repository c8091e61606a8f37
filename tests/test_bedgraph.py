import gzip
import io
import lzma
from pathlib import Path

import pytest
from bedunion.core.interval import Position, Segment
from bedunion.io import (BedGraphError, FileOpenError, MalformedRecordError, InvalidCoordinateError,
                         BedGraphIOError)
from bedunion.io.bedgraph import BedGraphLine, BedGraphReader, BedGraphWriter, truncate_after
from bedunion.io.open import Xopen

DATA = Path(__file__).parent / 'data' / 'unionbedg'


def corrupted(data: bytes, at: int, replacement: bytes) -> bytes:
    """Overwrites compressed bytes after the magic number, leaving the format detectable."""
    return data[:at] + replacement + data[at + len(replacement):]


class FlakyStream(io.BytesIO):
    """Serves its lines, then fails instead of reporting the end of the stream."""
    def readline(self, size=-1):
        if not (line := super().readline(size)): raise OSError('connection reset')
        return line


class TestBedGraphLine:
    def test_parse(self):
        line = BedGraphLine.parse(b'chr1\t1000\t1500\t10\n')
        assert line.segment == Segment(b'chr1', 1000, 1500)
        assert line.data == b'10'

    def test_parse_runs_of_whitespace(self):
        line = BedGraphLine.parse(b'chr1   1000 \t 1500  a   b\n')
        assert line.segment == Segment(b'chr1', 1000, 1500)
        assert line.data == b'a\tb'

    def test_parse_no_data(self):
        assert BedGraphLine.parse(b'chr1 0 10').data is None

    def test_parse_str(self):
        assert BedGraphLine.parse('chr1 0 10 3.5') == BedGraphLine(Segment(b'chr1', 0, 10), b'3.5')

    def test_too_few_columns(self):
        with pytest.raises(MalformedRecordError, match=r"\[2\].*\nchr1 100"):
            BedGraphLine.parse(b'chr1 100\n')

    @pytest.mark.parametrize('raw', [b'chr1 abc 10 1', b'chr1 0 1.5 1', b'chr1 -5 10 1', b'chr1 0 1_0 1'])
    def test_invalid_coordinates(self, raw):
        with pytest.raises(InvalidCoordinateError, match='non-negative integer'):
            BedGraphLine.parse(raw)

    def test_invalid_coordinate_is_value_error(self):
        with pytest.raises(ValueError):
            BedGraphLine.parse(b'chr1 x 10')

    def test_bytes(self):
        assert bytes(BedGraphLine.parse(b'chr1 0 10 a b')) == b'chr1\t0\t10\ta\tb'
        assert bytes(BedGraphLine.parse(b'chr1 0 10')) == b'chr1\t0\t10'


class TestTruncate:
    def test_split_inside(self):
        line = BedGraphLine.parse(b'chr1 900 1600 37')
        assert truncate_after(line, Position(b'chr1', 950)) == BedGraphLine.parse(b'chr1 950 1600 37')

    def test_split_at_end(self):
        assert truncate_after(BedGraphLine.parse(b'chr1 900 1600 37'), Position(b'chr1', 1600)) is None

    def test_split_after_end(self):
        assert truncate_after(BedGraphLine.parse(b'chr1 900 1600 37'), Position(b'chr1', 2000)) is None


class TestBedGraphReader:
    def test_line_count(self):
        with BedGraphReader(DATA / '1+2+3.bg') as reader:
            assert sum(1 for _ in reader) == 9
            assert reader.lineno == 9

    def test_next(self):
        reader = BedGraphReader(DATA / '1.bg')
        line = next(reader)
        assert line.segment == Segment(b'chr1', 1000, 1500)
        assert line.data == b'10'
        line = next(reader)
        assert line.segment == Segment(b'chr1', 2000, 2100)
        assert line.data == b'20'
        assert reader.read_line() is None
        with pytest.raises(StopIteration):
            next(reader)

    def test_closed_when_exhausted(self):
        reader = BedGraphReader(str(DATA / '1.bg'))
        assert not reader.closed
        list(reader)
        assert reader.closed

    def test_starts_after(self):
        pos = Position(b'chr1', 1980)
        assert [i.starts_after(pos) for i in BedGraphReader(DATA / '1+2+3.bg')] == [
            False, False, False, False, False, True, True, True, True]
        pos = Position(b'chr2', 4000)
        assert [i.starts_after(pos) for i in BedGraphReader(DATA / 'long.bg')] == [
            False, False, False, False, True, True, True, True]

    def test_ends_before(self):
        pos = Position(b'chr1', 1980)
        assert [i.ends_before(pos) for i in BedGraphReader(DATA / '1+2+3.bg')] == [
            True, True, True, True, False, False, False, False, False]
        pos = Position(b'chr2', 4000)
        assert [i.ends_before(pos) for i in BedGraphReader(DATA / 'long.bg')] == [
            True, True, True, True, False, False, False, False]

    def test_min_of_first_lines(self):
        readers = [BedGraphReader(DATA / f) for f in ('1.bg', '2.bg', '3.bg')]
        lines = [next(r) for r in readers]
        assert min(i.start_pos for i in lines) == Position(b'chr1', 900)
        assert min(i.stop_pos for i in lines) == Position(b'chr1', 1500)
        for r in readers: r.close()

    def test_skips_headers(self):
        stream = io.BytesIO(b'track type=bedGraph\n# comment\n\nchr1\t0\t10\t1\nbrowser position chr1\n')
        lines = list(BedGraphReader(stream))
        assert lines == [BedGraphLine(Segment(b'chr1', 0, 10), b'1')]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileOpenError, match='missing.bg'):
            BedGraphReader(tmp_path / 'missing.bg')

    def test_file_open_error_is_os_error(self, tmp_path):
        with pytest.raises(OSError):
            BedGraphReader(tmp_path / 'missing.bg')

    def test_error_reports_line_number(self):
        reader = BedGraphReader(io.BytesIO(b'chr1\t0\t10\t1\nchr1\t10\tten\t2\n'))
        assert next(reader).data == b'1'
        with pytest.raises(InvalidCoordinateError, match='line 2'):
            next(reader)

    def test_malformed_propagates(self):
        with pytest.raises(MalformedRecordError, match='line 1'):
            list(BedGraphReader(io.BytesIO(b'chr1\t0\n')))

    def test_read_failure_is_not_end_of_input(self):
        reader = BedGraphReader(FlakyStream(b'chr1\t0\t10\t1\n'))
        assert next(reader).data == b'1'
        with pytest.raises(BedGraphIOError, match='connection reset'):
            reader.read_line()

    def test_gzip(self, tmp_path):
        path = tmp_path / '1.bg.gz'
        path.write_bytes(gzip.compress((DATA / '1.bg').read_bytes()))
        assert list(BedGraphReader(path)) == list(BedGraphReader(DATA / '1.bg'))

    def test_truncated_gzip(self, tmp_path):
        path = tmp_path / 'truncated.bg.gz'
        path.write_bytes(gzip.compress((DATA / '1+2+3.bg').read_bytes())[:-8])
        with pytest.raises(BedGraphIOError):
            list(BedGraphReader(path))

    def test_corrupt_gzip(self, tmp_path):
        path = tmp_path / 'corrupt.bg.gz'
        path.write_bytes(corrupted(gzip.compress((DATA / 'long.bg').read_bytes() * 50), 10, b'\x07'))
        with pytest.raises(BedGraphIOError, match='read failed'):
            list(BedGraphReader(path))

    def test_corrupt_xz(self, tmp_path):
        path = tmp_path / 'corrupt.bg.xz'
        path.write_bytes(corrupted(lzma.compress((DATA / 'long.bg').read_bytes() * 50), 6, b'\xff\xff'))
        with pytest.raises(BedGraphIOError, match='read failed'):
            list(BedGraphReader(path))

    def test_missing_compression_module(self, tmp_path, monkeypatch):
        path = tmp_path / 'input.bg.zst'
        path.write_bytes(b'\x28\xb5\x2f\xfd' + b'\x00' * 16)
        monkeypatch.setattr(Xopen, '_OPEN_FUNCS', {})
        def unavailable(name): raise ImportError(f"No module named '{name}'")
        monkeypatch.setattr('bedunion.io.open.import_module', unavailable)
        with pytest.raises(FileOpenError, match='zstandard'):
            BedGraphReader(path)

    def test_chromosome_named_like_header(self):
        stream = io.BytesIO(b'track\tname=x\ntrackA\t0\t10\t1\nbrowserX\t5\t6\t2\n')
        assert [line.segment.chrom for line in BedGraphReader(stream)] == [b'trackA', b'browserX']

    def test_errors_share_base(self):
        for error in (FileOpenError, MalformedRecordError, InvalidCoordinateError, BedGraphIOError):
            assert issubclass(error, BedGraphError)


class TestBedGraphWriter:
    def test_write(self, tmp_path):
        path = tmp_path / 'out.bg'
        with BedGraphWriter(path) as writer:
            assert writer.write_all(BedGraphReader(DATA / '1.bg')) == 2
        assert path.read_bytes() == (DATA / '1.bg').read_bytes()

    def test_header(self, tmp_path):
        path = tmp_path / 'out.bg'
        with BedGraphWriter(path, header=['a', b'b']) as writer:
            writer.write(BedGraphLine.parse(b'chr1 0 10 1 2'))
        assert path.read_bytes() == b'chrom\tstart\tend\ta\tb\nchr1\t0\t10\t1\t2\n'

    def test_gzip_output(self, tmp_path):
        path = tmp_path / 'out.bg.gz'
        with BedGraphWriter(path) as writer:
            writer.write([BedGraphLine.parse(b'chr1 0 10 1')])
        assert gzip.decompress(path.read_bytes()) == b'chr1\t0\t10\t1\n'
