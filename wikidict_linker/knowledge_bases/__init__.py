"""Surface-form dictionaries."""

from .base import SurfaceFormDictionary  # noqa: F401
from .wikidict import DictionaryFormatError, WikiDictionary  # noqa: F401
