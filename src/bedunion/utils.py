"""
Module containing the command-line configuration classes.
"""
from argparse import Namespace
from dataclasses import dataclass, field, fields
from typing import Optional


# Classes --------------------------------------------------------------------------------------------------------------
@dataclass
class Config:
    """
    Config parent class that can conveniently set attributes from CLI args
    """

    @classmethod
    def from_args(cls, args: Namespace):
        """
        Sets attributes of the class from a Namespace object (e.g. from argparse)

        Parameters
        ----------
        args : :class:`argparse.Namespace`
            :class:`argparse.Namespace` object containing attributes to set

        Returns
        -------
        cls
            Class instance with attributes set from args

        """
        return cls(**{f.name: getattr(args, f.name) for f in fields(cls) if hasattr(args, f.name)})


@dataclass
class UnionConfig(Config):
    """Options of the ``unionbedg`` subcommand."""
    input: list[str] = field(default_factory=list)
    filler: str = '0'
    empty: bool = False
    genome: Optional[str] = None
    header: bool = False
    names: Optional[list[str]] = None
    output: str = '-'

    @property
    def column_names(self) -> Optional[list[str]]:
        """Header names for the value columns, or ``None`` if no header is wanted."""
        if self.names: return self.names
        if self.header: return list(self.input)
        return None


@dataclass
class RandomConfig(Config):
    """Options of the ``random`` subcommand."""
    genome: str = ''
    length: int = 100
    number: int = 1_000_000
    seed: Optional[int] = None
    output: str = '-'
