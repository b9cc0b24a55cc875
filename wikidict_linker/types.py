from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any, Dict, List, Optional, Union

# Value written on every token of a processed sentence before mention links
NO_LINK = "O"

# Entity type marking "outside any entity"
NO_TYPE = "O"


@dataclass
class MentionRecord:
    """Pre-detected mention over token offsets [start, end)."""

    start: int
    end: int
    label: Optional[str] = None
    timex_value: Optional[str] = None
    numeric_value: Optional[Union[int, float]] = None
    original_text: Optional[str] = None


@dataclass
class Document:
    """Single document item.

    Plain-text documents only carry ``text``. Pre-annotated documents also
    carry the upstream tokenization, sentence boundaries and mentions.
    """

    id: Optional[str]
    text: str
    meta: Dict[str, Any] = field(default_factory=dict)
    words: Optional[List[str]] = None
    spaces: Optional[List[bool]] = None
    sent_starts: Optional[List[bool]] = None
    mentions: List[MentionRecord] = field(default_factory=list)

    @property
    def is_annotated(self) -> bool:
        return self.words is not None


@dataclass(frozen=True)
class Mention:
    """Attributes of one mention that linking decisions are based on."""

    surface_form: Optional[str]
    entity_type: Optional[str] = None
    temporal_value: Optional[str] = None
    numeric_value: Optional[Real] = None


class SentenceState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class SentenceResult:
    """Outcome of processing one sentence."""

    index: int
    state: SentenceState = SentenceState.PENDING
    error: Optional[BaseException] = None
    elapsed: float = 0.0

    @property
    def timed_out(self) -> bool:
        return isinstance(self.error, TimeoutError)


@dataclass
class LinkingReport:
    """Per-sentence outcomes for one document, in sentence order."""

    sentences: List[SentenceResult] = field(default_factory=list)

    @property
    def failed(self) -> List[int]:
        return [r.index for r in self.sentences if r.state is SentenceState.FAILED]

    @property
    def completed(self) -> List[int]:
        return [r.index for r in self.sentences if r.state is SentenceState.COMPLETED]

    @property
    def ok(self) -> bool:
        return not self.failed
