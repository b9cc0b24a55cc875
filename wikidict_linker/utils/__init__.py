from .extensions import ensure_linked_id_extensions, ensure_mention_extensions

__all__ = [
    "ensure_linked_id_extensions",
    "ensure_mention_extensions",
]
