import json
from pathlib import Path
from typing import Iterator

from wikidict_linker.registry import loaders
from wikidict_linker.types import Document


@loaders.register("text")
class TextLoader:
    """Loads a plain text file as one document."""

    def load(self, path: str) -> Iterator[Document]:
        text = Path(path).read_text(encoding="utf-8")
        yield Document(id=Path(path).stem, text=text, meta={"source": path})


@loaders.register("jsonl")
class JSONLLoader:
    """Loads JSONL where each line has a `text` field."""

    def __init__(self, text_field: str = "text") -> None:
        self.text_field = text_field

    def load(self, path: str) -> Iterator[Document]:
        with Path(path).open(encoding="utf-8") as f:
            for i, line in enumerate(f):
                if not line.strip():
                    continue
                data = json.loads(line)
                doc_id = data.get("id") or f"{Path(path).stem}-{i}"
                yield Document(
                    id=doc_id,
                    text=data.get(self.text_field, ""),
                    meta={"source": path},
                )
