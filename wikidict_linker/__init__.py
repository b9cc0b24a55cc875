"""
Wikidict entity linker.

Links entity mentions found by upstream spaCy components to Wikipedia
pages through a precomputed surface-form dictionary, and normalizes
dates, ordinals and plain numbers to literal identifiers.
"""

__all__ = [
    "PipelineConfig",
    "LinkingPipeline",
    "WikiDictionary",
    "resolve",
]

__version__ = "0.1.0"

# Import spacy_components to register factories with spaCy
from wikidict_linker import spacy_components  # noqa: F401

from .config import PipelineConfig  # noqa: E402
from .knowledge_bases import WikiDictionary  # noqa: E402
from .pipeline import LinkingPipeline  # noqa: E402
from .resolver import resolve  # noqa: E402
