"""
Module for reading and writing bedGraph-like interval files.
"""
from abc import ABC, abstractmethod
from types import GeneratorType
from typing import Union, BinaryIO, Generator, Iterable
from pathlib import Path

from bedunion.io.open import Xopen


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class BedGraphError(Exception):
    """Base class for bedGraph reading errors."""

class FileOpenError(BedGraphError, OSError):
    """Raised when an input file cannot be opened."""

class MalformedRecordError(BedGraphError):
    """Raised when a record has fewer than the three required columns."""

class InvalidCoordinateError(BedGraphError, ValueError):
    """Raised when a start or stop column is not a non-negative integer."""

class BedGraphIOError(BedGraphError, IOError):
    """Raised when the underlying stream fails while reading, as opposed to reaching its end."""


# Classes --------------------------------------------------------------------------------------------------------------
class BaseReader(ABC):
    """Abstract base class for line-oriented interval file readers."""
    __slots__ = ('_opener', '_handle')
    def __init__(self, file: Union[str, Path, BinaryIO]):
        """
        Opens the reader.

        Args:
            file: File path, ``'-'`` for stdin, or an open binary file object.

        Raises:
            FileOpenError: If the file cannot be opened, or its compression module is not installed.
        """
        self._opener = Xopen(file, mode='rb')
        try: self._handle = self._opener.__enter__()
        except (OSError, ModuleNotFoundError) as e: raise FileOpenError(f"Could not open '{self._opener.name}': {e}") from e

    @property
    def name(self) -> str: return self._opener.name
    @property
    def closed(self) -> bool: return self._handle is None
    @abstractmethod
    def __iter__(self) -> Generator: ...
    def __enter__(self): return self
    def __exit__(self, exc_type, exc_val, exc_tb): self.close()

    def close(self):
        """Closes the reader, releasing the file handle."""
        if self._handle is not None:
            self._handle = None
            self._opener.__exit__(None, None, None)


class BaseWriter(ABC):
    """
    Abstract base class for interval file writers.

    Examples:
        >>> with BedGraphWriter("union.bg") as w:
        ...     w.write(*records)
    """
    __slots__ = ('_opener', '_handle')
    def __init__(self, file: Union[str, Path, BinaryIO] = '-'):
        self._opener = Xopen(file, mode='wb')
        self._handle = None

    def __enter__(self):
        """Opens the file and writes the header."""
        self._handle = self._opener.__enter__()
        self.write_header()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Flushes and closes the file."""
        if self._handle is not None: self._handle.flush()
        self._opener.__exit__(exc_type, exc_val, exc_tb)
        self._handle = None

    def write(self, *items) -> int:
        """
        Writes multiple items, unpacking lists and generators.

        Returns:
            The number of items written.
        """
        n = 0
        for item in items:
            if isinstance(item, (list, tuple, GeneratorType)):
                n += self.write_all(item)
            else:
                self.write_one(item)
                n += 1
        return n

    def write_all(self, items: Iterable) -> int:
        """Writes every item of an iterable, returning how many were written."""
        n = 0
        for item in items:
            self.write_one(item)
            n += 1
        return n

    @abstractmethod
    def write_one(self, item):
        """
        Writes a single item.

        Args:
            item: The item to write.
        """
        pass

    def write_header(self):
        """Writes the file header if applicable."""
        pass
