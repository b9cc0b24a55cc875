"""
spaCy extension management utilities.

Upstream attributes the linker reads from mention spans:
- ``span._.original_text``: untokenized text of the mention, if different from ``span.text``
- ``span._.timex_value``: normalized timex value for DATE/TIME/SET mentions
- ``span._.numeric_value``: numeric value for ORDINAL mentions

Attributes the linker writes:
- ``token._.linked_id`` / ``span._.linked_id``: canonical link, or None
- ``doc._.linking_failures``: indices of sentences that could not be linked
"""

from spacy.tokens import Doc, Span, Token


def ensure_mention_extensions() -> None:
    """Ensure the upstream mention attributes are registered on Span."""
    for name in ("original_text", "timex_value", "numeric_value"):
        if not Span.has_extension(name):
            Span.set_extension(name, default=None)


def ensure_linked_id_extensions() -> None:
    """Ensure the linker output attributes are registered."""
    if not Token.has_extension("linked_id"):
        Token.set_extension("linked_id", default=None)
    if not Span.has_extension("linked_id"):
        Span.set_extension("linked_id", default=None)
    if not Doc.has_extension("linking_failures"):
        Doc.set_extension("linking_failures", default=None)
