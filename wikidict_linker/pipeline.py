import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import spacy
from spacy.language import Language
from spacy.tokens import Doc, Span

# Ensure component registration by importing modules with registry decorators.
from wikidict_linker import knowledge_bases as _kb_pkg  # noqa: F401
from wikidict_linker import loaders as _loaders_pkg  # noqa: F401
from wikidict_linker import spacy_components  # noqa: F401

from .config import PipelineConfig
from .knowledge_bases.base import SurfaceFormDictionary
from .loaders.base import DocumentLoader
from .registry import knowledge_bases, loaders
from .types import Document

logger = logging.getLogger(__name__)

# Span group that pre-annotated mentions are stored in
MENTIONS_KEY = "mentions"


class LinkingPipeline:
    """
    Builds the spaCy pipeline around the Wikidict linker and runs it over files.

    The dictionary is loaded once here and shared by every document. Plain
    text documents go through the whole spaCy pipeline (which must provide
    sentences and entities, e.g. a trained model); pre-annotated documents
    are turned into a Doc directly and only the linker runs on them.
    """

    def __init__(
        self,
        config: PipelineConfig,
        dictionary: Optional[SurfaceFormDictionary] = None,
    ) -> None:
        self.config = config

        loader_factory = loaders.get(config.loader.name)
        self.loader: DocumentLoader = loader_factory(**config.loader.params)

        if dictionary is None:
            dictionary = knowledge_bases.create(config.dictionary.name, **config.dictionary.params)
        self.dictionary = dictionary

        self.nlp = self._build_nlp(config)
        self.linker = self.nlp.add_pipe(
            "wikidict_linker",
            config={
                "threads": config.threads,
                "max_time": config.max_time,
                "spans_key": config.spans_key or MENTIONS_KEY,
            },
        )
        self.linker.initialize(self.dictionary)
        logger.info(f"Linking pipeline ready: {self.nlp.pipe_names}")

    @staticmethod
    def _build_nlp(config: PipelineConfig) -> Language:
        if config.model:
            logger.info(f"Loading spaCy model: {config.model}")
            return spacy.load(config.model)
        return spacy.blank(config.lang)

    def make_doc(self, document: Document) -> Doc:
        """Turn a pre-annotated Document into a spaCy Doc with its mentions."""
        doc = Doc(
            self.nlp.vocab,
            words=document.words,
            spaces=document.spaces,
            sent_starts=document.sent_starts,
        )
        spans = []
        for record in document.mentions:
            span = Span(doc, record.start, record.end, label=record.label or "")
            span._.timex_value = record.timex_value
            span._.numeric_value = record.numeric_value
            span._.original_text = record.original_text
            spans.append(span)
        doc.spans[self.linker.spans_key] = spans
        return doc

    def annotate(self, document: Document) -> Doc:
        if document.is_annotated:
            return self.linker(self.make_doc(document))
        return self.nlp(document.text)

    def process_document(self, document: Document) -> Dict:
        doc = self.annotate(document)
        mentions = self.linker.mentions(doc)
        return {
            "id": document.id,
            "text": doc.text,
            "tokens": [
                {"text": token.text, "linked_id": token._.linked_id}
                for token in doc
            ],
            "mentions": [
                {
                    "text": span.text,
                    "start": span.start,
                    "end": span.end,
                    "label": span.label_ or None,
                    "linked_id": span._.linked_id,
                }
                for span in mentions
            ],
            "failed_sentences": doc._.linking_failures or [],
            "meta": document.meta,
        }

    def run(self, paths: Iterable[str], output_path: Optional[str] = None) -> List[Dict]:
        results: List[Dict] = []
        writer = None
        if output_path:
            writer = Path(output_path).open("w", encoding="utf-8")

        try:
            for path in paths:
                for document in self.loader.load(path):
                    result = self.process_document(document)
                    if writer:
                        writer.write(json.dumps(result) + "\n")
                    results.append(result)
        finally:
            if writer:
                writer.close()

        return results
