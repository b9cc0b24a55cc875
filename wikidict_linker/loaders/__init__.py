"""Document loaders."""

from .text import TextLoader, JSONLLoader  # noqa: F401
from .annotated import AnnotatedJSONLLoader  # noqa: F401
