"""
Link decision for a single mention.

A mention is linked to one of:
- its normalized timex value (dates, times, sets)
- its numeric value (ordinals)
- its own surface form (plain numbers)
- the Wikidict entry for its surface form (any other typed mention)

The rules are tried in that order and the first one that applies decides,
even when it decides to leave the mention unlinked.
"""

import re
from enum import Enum
from numbers import Real
from typing import Optional

from wikidict_linker.knowledge_bases.base import SurfaceFormDictionary
from wikidict_linker.types import NO_TYPE, Mention

NUMBER_PATTERN = re.compile(r"[0-9.]+")

TEMPORAL_TYPES = frozenset({"DATE", "TIME", "SET"})
ORDINAL_TYPE = "ORDINAL"

# Open-ended timex values with no single point to link to
UNLINKABLE_TIMEX_VALUES = frozenset(
    {"PRESENT", "PRESENT_REF", "PAST", "PAST_REF", "FUTURE", "FUTURE_REF"}
)

TIME_SEPARATOR = "T"


class MalformedMentionError(ValueError):
    """A mention carries attributes of the wrong shape."""


class MentionKind(str, Enum):
    TEMPORAL = "temporal"
    ORDINAL = "ordinal"
    NUMBER = "number"
    DICTIONARY = "dictionary"
    UNLINKED = "unlinked"


def normalize_timex(timex: str) -> str:
    """Reduce a timex value to the form it has in the knowledge base.

    Date-times keep only their date part: ``2016-01-01T00:00`` -> ``2016-01-01``.
    """
    if TIME_SEPARATOR in timex and timex != "PRESENT":
        return timex[: timex.index(TIME_SEPARATOR)]
    return timex


def format_number(value: Real) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _type_is(entity_type: Optional[str], *names: str) -> bool:
    return entity_type is not None and entity_type.upper() in names


def _validate(mention: Mention) -> None:
    if not isinstance(mention.surface_form, str):
        raise MalformedMentionError(f"Mention has no surface form: {mention!r}")
    if mention.entity_type is not None and not isinstance(mention.entity_type, str):
        raise MalformedMentionError(f"Entity type must be a string: {mention!r}")
    if mention.temporal_value is not None and not isinstance(mention.temporal_value, str):
        raise MalformedMentionError(f"Timex value must be a string: {mention!r}")
    if mention.numeric_value is not None and (
        isinstance(mention.numeric_value, bool) or not isinstance(mention.numeric_value, Real)
    ):
        raise MalformedMentionError(f"Numeric value must be a number: {mention!r}")


def classify(mention: Mention, dictionary: SurfaceFormDictionary) -> MentionKind:
    """Decide which linking rule applies to ``mention``.

    Raises:
        MalformedMentionError: If the mention attributes have the wrong type.
    """
    _validate(mention)
    entity_type = mention.entity_type

    if _type_is(entity_type, *TEMPORAL_TYPES) and mention.temporal_value is not None:
        return MentionKind.TEMPORAL
    if _type_is(entity_type, ORDINAL_TYPE) and mention.numeric_value is not None:
        return MentionKind.ORDINAL
    if NUMBER_PATTERN.fullmatch(mention.surface_form):
        return MentionKind.NUMBER
    if entity_type and entity_type != NO_TYPE and mention.surface_form in dictionary:
        return MentionKind.DICTIONARY
    return MentionKind.UNLINKED


def resolve(mention: Mention, dictionary: SurfaceFormDictionary) -> Optional[str]:
    """Return the canonical link for ``mention``, or None to leave it unlinked."""
    kind = classify(mention, dictionary)

    if kind is MentionKind.TEMPORAL:
        if mention.temporal_value in UNLINKABLE_TIMEX_VALUES:
            return None
        return normalize_timex(mention.temporal_value)
    if kind is MentionKind.ORDINAL:
        return format_number(mention.numeric_value)
    if kind is MentionKind.NUMBER:
        return mention.surface_form
    if kind is MentionKind.DICTIONARY:
        return dictionary.lookup(mention.surface_form)
    return None
