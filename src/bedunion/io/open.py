from io import IOBase
from typing import Union, BinaryIO, Optional
from pathlib import Path
import sys
from importlib import import_module


# Classes --------------------------------------------------------------------------------------------------------------
class PeekableHandle:
    """
    A wrapper around a BinaryIO stream that allows peeking at the beginning of the
    content without consuming it. Used by Xopen to sniff compression on pipes.
    """
    __slots__ = ('_stream', '_peek_buffer', '_buffer_pos', '_buffer_len')

    def __init__(self, stream: BinaryIO, max_peek: int = 4096):
        """
        Initializes the PeekableHandle.

        Args:
            stream: The underlying binary stream.
            max_peek: Maximum number of bytes to buffer for peeking.
        """
        self._stream = stream
        self._peek_buffer = stream.read(max_peek)
        self._buffer_pos = 0
        self._buffer_len = len(self._peek_buffer)

    def peek(self, size: int = -1) -> bytes:
        """Returns content from the buffer without advancing the stream position."""
        if size == -1 or size > self._buffer_len: return self._peek_buffer
        return self._peek_buffer[:size]

    def read(self, size: int = -1) -> bytes:
        """
        Reads from the stream, consuming the buffer first if available.

        Args:
            size: Number of bytes to read. If -1, reads until EOF.

        Returns:
            The bytes read.
        """
        if self._buffer_pos >= self._buffer_len: return self._stream.read(size)
        if size == -1:
            chunk = self._peek_buffer[self._buffer_pos:]
            self._buffer_pos = self._buffer_len
            return chunk + self._stream.read()
        available = self._buffer_len - self._buffer_pos
        if size <= available:
            chunk = self._peek_buffer[self._buffer_pos: self._buffer_pos + size]
            self._buffer_pos += size
            return chunk
        chunk = self._peek_buffer[self._buffer_pos:]
        self._buffer_pos = self._buffer_len
        return chunk + self._stream.read(size - available)

    def readline(self) -> bytes:
        """Reads one line, stitching the end of the buffer to the stream if needed."""
        if self._buffer_pos >= self._buffer_len: return self._stream.readline()
        nl_pos = self._peek_buffer.find(b'\n', self._buffer_pos)
        if nl_pos == -1:
            chunk = self._peek_buffer[self._buffer_pos:]
            self._buffer_pos = self._buffer_len
            return chunk + self._stream.readline()
        chunk = self._peek_buffer[self._buffer_pos:nl_pos + 1]
        self._buffer_pos = nl_pos + 1
        return chunk

    def readable(self) -> bool: return True

    def close(self):
        """Closes the underlying stream if possible."""
        if hasattr(self._stream, 'close'): self._stream.close()


class Xopen:
    """
    Handles the Physical Layer: Compression and File System.

    Paths ending in a compression extension are compressed on write; on read the compression is
    sniffed from the magic bytes. ``'-'`` maps to stdin/stdout.

    Examples:
        >>> with Xopen("scores.bg.gz", "rb") as f:
        ...     first = f.readline()
    """
    _MAGIC = {
        b'\x1f\x8b': 'gzip',
        b'\x42\x5a\x68': 'bz2',
        b'\xfd7zXZ\x00': 'lzma',
        b'\x28\xb5\x2f\xfd': 'zstandard'
    }
    _EXT_TO_PKG = {'gz': 'gzip', 'bgz': 'gzip', 'bz2': 'bz2', 'xz': 'lzma', 'zst': 'zstandard'}
    _MIN_N_BYTES = max(len(i) for i in _MAGIC.keys())
    _OPEN_FUNCS = {}

    def __init__(self, file: Union[str, Path, BinaryIO], mode: str = 'rb'):
        """
        Initializes the Xopen context manager.

        Args:
            file: File path (str or Path) or an existing file object.
            mode: File opening mode (e.g., 'rb', 'wb').
        """
        self.file = file
        self.mode = mode
        self._handle: Optional[BinaryIO] = None
        self._raw: Optional[BinaryIO] = None
        self._close_on_exit = False

    def __enter__(self) -> BinaryIO:
        self._handle = self._open()
        return self._handle

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Closes the file handle if it was opened by this instance."""
        if self._close_on_exit and self._handle:
            self._handle.close()
            self._handle = None
        # Decompressors do not close the file object they wrap
        if self._raw is not None:
            self._raw.close()
            self._raw = None

    @property
    def name(self) -> str:
        """A printable name for the underlying file."""
        if isinstance(self.file, IOBase): return str(getattr(self.file, 'name', '<stream>'))
        return str(self.file)

    def _get_opener(self, pkg_name: str):
        """
        Retrieves the open function for a compression package, importing it if necessary.

        Raises:
            ModuleNotFoundError: If the module cannot be imported.
        """
        if pkg_name not in self._OPEN_FUNCS:
            try: self._OPEN_FUNCS[pkg_name] = import_module(pkg_name).open
            except ImportError: raise ModuleNotFoundError(f"Compression module '{pkg_name}' not installed.")
        return self._OPEN_FUNCS[pkg_name]

    def _open(self) -> BinaryIO:
        # 1. Resolve Raw Stream
        should_close = False
        if isinstance(self.file, IOBase): raw_stream = self.file
        elif str(self.file) in {'-', 'stdin'} and 'r' in self.mode: raw_stream = sys.stdin.buffer
        elif str(self.file) in {'-', 'stdout'} and 'w' in self.mode: raw_stream = sys.stdout.buffer
        else:
            path = Path(self.file).expanduser()
            # Write mode: Extension based
            if 'w' in self.mode or 'a' in self.mode:
                self._close_on_exit = True
                ext = path.suffix.lower().lstrip('.')
                if pkg := self._EXT_TO_PKG.get(ext): return self._get_opener(pkg)(path, mode=self.mode)
                return open(path, mode=self.mode)
            raw_stream = open(path, mode='rb')
            self._raw = raw_stream
            should_close = True

        # 2. Handle Write Mode (Stream/Stdout)
        if 'w' in self.mode or 'a' in self.mode: return raw_stream

        # 3. Handle Read Mode: Sniff Compression
        try:
            if raw_stream.seekable():
                start = raw_stream.read(self._MIN_N_BYTES)
                raw_stream.seek(0)
                for magic, pkg in self._MAGIC.items():
                    if start.startswith(magic):
                        self._close_on_exit = True
                        return self._get_opener(pkg)(raw_stream, mode='rb')
                if should_close: self._close_on_exit = True
                return raw_stream
        except (AttributeError, ValueError, OSError): pass

        # Non-Seekable (stdin, pipes) -> Use PeekableHandle
        peekable = PeekableHandle(raw_stream)
        start = peekable.peek(self._MIN_N_BYTES)
        for magic, pkg in self._MAGIC.items():
            if start.startswith(magic):
                self._close_on_exit = True
                return self._get_opener(pkg)(peekable, mode='rb')
        if should_close: self._close_on_exit = True
        return peekable
