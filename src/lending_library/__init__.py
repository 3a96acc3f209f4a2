"""
Lending Library - book inventory and lending with consistent copy counts.

The core is ``LendingLibrary``, which validates requests and applies the
catalog and circulation rules over a ``LibraryRepository``.
"""

from .errors import ErrorCode, LibraryError
from .library import LendingLibrary, make_lending_library
from .validation import validate

__version__ = "0.1.0"

__all__ = [
    "ErrorCode",
    "LendingLibrary",
    "LibraryError",
    "make_lending_library",
    "validate",
]
