"""
Top-level module, including shared resource management.
"""
from functools import cached_property
from importlib.metadata import version as load_version, PackageNotFoundError
from pathlib import Path

from numpy.random import default_rng


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class BedunionWarning(Warning): pass


# Classes --------------------------------------------------------------------------------------------------------------
class Resources:
    """
    Manages global resources like the package version and the random number generator.

    Attributes:
        package (str): The package name.
    """
    def __init__(self) -> None:
        self.package = Path(__file__).parent.name

    @cached_property
    def version(self) -> str:
        """Returns the installed version of the package."""
        try: return load_version(self.package)
        except PackageNotFoundError: return 'unknown'

    @cached_property
    def rng(self):
        """Returns a default numpy random number generator."""
        return default_rng()


# Constants ------------------------------------------------------------------------------------------------------------
RESOURCES = Resources()
__version__ = RESOURCES.version
