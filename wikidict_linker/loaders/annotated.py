"""
Loader for documents that upstream tools have already annotated.

Each JSONL line describes one document::

    {
      "id": "doc-1",
      "sentences": [["Obama", "visited", "Paris", "."], ["He", "left", "."]],
      "mentions": [
        {"start": 0, "end": 1, "label": "PERSON"},
        {"start": 2, "end": 3, "label": "LOCATION"}
      ]
    }

Instead of ``sentences`` a document may give flat ``words`` plus optional
``sent_starts``. ``spaces`` (whether each word is followed by a space)
defaults to a space after every word. Mention offsets are token offsets into
the whole document, end exclusive, and may carry ``timex_value``,
``numeric_value`` and ``original_text``.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from wikidict_linker.registry import loaders
from wikidict_linker.types import Document, MentionRecord


def _mention_record(item: Dict[str, Any]) -> MentionRecord:
    return MentionRecord(
        start=int(item["start"]),
        end=int(item["end"]),
        label=item.get("label"),
        timex_value=item.get("timex_value"),
        numeric_value=item.get("numeric_value"),
        original_text=item.get("original_text"),
    )


def document_from_dict(data: Dict[str, Any], default_id: Optional[str] = None) -> Document:
    """Build an annotated Document from its JSON form.

    Raises:
        ValueError: If the tokens, sentence starts or mention offsets are inconsistent.
    """
    sent_starts: Optional[List[bool]]
    if "sentences" in data:
        words = [word for sentence in data["sentences"] for word in sentence]
        sent_starts = [i == 0 for sentence in data["sentences"] for i in range(len(sentence))]
    elif "words" in data:
        words = list(data["words"])
        sent_starts = data.get("sent_starts")
    else:
        raise ValueError("annotated document needs either 'sentences' or 'words'")

    spaces = data.get("spaces") or [True] * len(words)
    if len(spaces) != len(words):
        raise ValueError(f"got {len(spaces)} spaces for {len(words)} words")
    if sent_starts is not None and len(sent_starts) != len(words):
        raise ValueError(f"got {len(sent_starts)} sentence starts for {len(words)} words")

    mentions = [_mention_record(item) for item in data.get("mentions", [])]
    for mention in mentions:
        if not 0 <= mention.start < mention.end <= len(words):
            raise ValueError(
                f"mention [{mention.start}, {mention.end}) is outside the {len(words)} words"
            )
        if sent_starts is not None and any(sent_starts[mention.start + 1 : mention.end]):
            raise ValueError(
                f"mention [{mention.start}, {mention.end}) crosses a sentence boundary"
            )

    text = "".join(word + (" " if space else "") for word, space in zip(words, spaces))
    return Document(
        id=data.get("id") or default_id,
        text=text,
        meta={k: v for k, v in data.items() if k not in {"id", "sentences", "words", "spaces", "sent_starts", "mentions"}},
        words=words,
        spaces=list(spaces),
        sent_starts=list(sent_starts) if sent_starts is not None else None,
        mentions=mentions,
    )


@loaders.register("annotated")
class AnnotatedJSONLLoader:
    """Loads pre-tokenized documents with sentence boundaries and mentions."""

    def load(self, path: str) -> Iterator[Document]:
        with Path(path).open(encoding="utf-8") as f:
            for i, line in enumerate(f):
                if not line.strip():
                    continue
                try:
                    doc = document_from_dict(json.loads(line), default_id=f"{Path(path).stem}-{i}")
                except (KeyError, TypeError, ValueError) as exc:
                    raise ValueError(f"{path}:{i + 1}: invalid annotated document: {exc}") from exc
                doc.meta["source"] = path
                yield doc
