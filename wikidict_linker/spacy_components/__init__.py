"""
spaCy components for the Wikidict linker.

Import this module to register the ``wikidict_linker`` factory with spaCy.
"""

from . import linker

__all__ = [
    "linker",
]
