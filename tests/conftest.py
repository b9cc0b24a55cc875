"""Shared fixtures for Wikidict linker tests."""

import json
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Sequence

import pytest
import spacy
from spacy.tokens import Doc, Span

from wikidict_linker import spacy_components  # noqa: F401  Register factories
from wikidict_linker.knowledge_bases import WikiDictionary
from wikidict_linker.utils import ensure_linked_id_extensions, ensure_mention_extensions


# ---------------------------------------------------------------------------
# Dictionary fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def wikidict_rows() -> List[str]:
    """Sample <surface form, link, score> rows."""
    return [
        "Barack Obama\tBarack_Obama\t0.9",
        "Obama\tBarack_Obama\t0.6",
        "Honolulu\tHonolulu\t0.8",
        "Hawaii\tHawaii\t0.95",
        "Columbia University\tColumbia_University\t0.7",
        "Harvard\tHarvard_University\t0.3",
        "United States\tUnited_States\t0.99",
    ]


@pytest.fixture
def temp_wikidict(tmp_path: Path, wikidict_rows: List[str]) -> str:
    """Temporary Wikidict TSV file."""
    path = tmp_path / "wikidict.tsv"
    path.write_text("\n".join(wikidict_rows) + "\n", encoding="utf-8")
    return str(path)


@pytest.fixture
def dictionary(wikidict_rows: List[str]) -> WikiDictionary:
    """In-memory dictionary with every sample row."""
    return WikiDictionary.from_rows(wikidict_rows)


# ---------------------------------------------------------------------------
# spaCy fixtures
# ---------------------------------------------------------------------------


MentionSpec = Dict[str, object]


@pytest.fixture
def make_doc() -> Callable[..., Doc]:
    """
    Build a Doc from sentences of words plus mentions over document token offsets.

    Each mention is a dict with ``start``, ``end`` and optionally ``label``,
    ``timex_value``, ``numeric_value`` and ``original_text``. Mentions go to ``doc.ents``
    unless ``spans_key`` is given, which unlabeled mentions need.
    """
    ensure_mention_extensions()
    ensure_linked_id_extensions()
    vocab = spacy.blank("en").vocab

    def _make_doc(
        sentences: Sequence[Sequence[str]],
        mentions: Sequence[MentionSpec] = (),
        spans_key: Optional[str] = None,
    ) -> Doc:
        words = [w for sentence in sentences for w in sentence]
        sent_starts = [i == 0 for sentence in sentences for i in range(len(sentence))]
        doc = Doc(vocab, words=words, sent_starts=sent_starts)
        spans = []
        for m in mentions:
            span = Span(doc, m["start"], m["end"], label=m.get("label") or "")
            span._.timex_value = m.get("timex_value")
            span._.numeric_value = m.get("numeric_value")
            span._.original_text = m.get("original_text")
            spans.append(span)
        if spans_key is not None:
            doc.spans[spans_key] = spans
        else:
            doc.ents = spans
        return doc

    return _make_doc


@pytest.fixture
def nlp(dictionary: WikiDictionary) -> spacy.language.Language:
    """Blank pipeline with an initialized linker."""
    nlp = spacy.blank("en")
    linker = nlp.add_pipe("wikidict_linker")
    linker.initialize(dictionary)
    return nlp


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def annotated_documents() -> List[Dict]:
    """Pre-annotated documents in the annotated JSONL format."""
    return [
        {
            "id": "doc-001",
            "sentences": [
                ["Barack", "Obama", "was", "born", "in", "Honolulu", "."],
                ["He", "was", "the", "44th", "president", "."],
            ],
            "mentions": [
                {"start": 0, "end": 2, "label": "PERSON"},
                {"start": 5, "end": 6, "label": "LOCATION"},
                {"start": 10, "end": 11, "label": "ORDINAL", "numeric_value": 44},
            ],
        },
        {
            "id": "doc-002",
            "sentences": [
                ["On", "January", "1", ",", "2016", "it", "rained", "."],
            ],
            "mentions": [
                {"start": 1, "end": 5, "label": "DATE", "timex_value": "2016-01-01T00:00"},
            ],
        },
    ]


@pytest.fixture
def temp_annotated_file(tmp_path: Path, annotated_documents: List[Dict]) -> str:
    path = tmp_path / "docs.jsonl"
    with path.open("w", encoding="utf-8") as f:
        for item in annotated_documents:
            f.write(json.dumps(item) + "\n")
    return str(path)


@pytest.fixture
def minimal_config_dict(temp_wikidict: str) -> Dict:
    """Minimal config dict for pipeline testing."""
    return {
        "loader": {"name": "annotated"},
        "dictionary": {"name": "wikidict", "params": {"path": temp_wikidict}},
        "threads": 1,
    }


@pytest.fixture
def temp_config_file(tmp_path: Path, minimal_config_dict: Dict) -> Iterator[str]:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(minimal_config_dict), encoding="utf-8")
    yield str(path)
