"""
spaCy entity linking component backed by the Wikidict.

Links every mention span (``doc.ents`` or a span group) to a canonical
identifier and writes it to ``span._.linked_id`` and to ``token._.linked_id``
of every token in the mention. Tokens of a processed sentence that are not
part of a linked mention are marked with NO_LINK.
"""

import bisect
import logging
from typing import List, Optional, Tuple

from spacy.language import Language
from spacy.tokens import Doc, Span

from wikidict_linker.driver import Commit, Deadline, SentenceDriver
from wikidict_linker.knowledge_bases.base import SurfaceFormDictionary
from wikidict_linker.resolver import MalformedMentionError, resolve
from wikidict_linker.types import NO_LINK, LinkingReport, Mention
from wikidict_linker.utils import ensure_linked_id_extensions, ensure_mention_extensions

logger = logging.getLogger(__name__)

# Annotations that must exist before the linker runs
REQUIRES = frozenset({"text", "tokens", "sentences", "original_text", "mentions"})
# Annotations the linker provides
SATISFIES = frozenset({"linked_id"})

SentenceUnit = Tuple[Span, List[Span]]


def mention_from_span(span: Span) -> Mention:
    """Read the linking-relevant attributes of a mention span."""
    original_text = span._.original_text
    return Mention(
        surface_form=original_text if original_text is not None else span.text,
        entity_type=span.label_ or None,
        temporal_value=span._.timex_value,
        numeric_value=span._.numeric_value,
    )


@Language.factory(
    "wikidict_linker",
    default_config={
        "threads": 1,
        "max_time": None,
        "spans_key": None,
    },
    requires=["doc.sents", "doc.ents"],
    assigns=["token._.linked_id", "span._.linked_id", "doc._.linking_failures"],
)
def create_wikidict_linker_component(
    nlp: Language,
    name: str,
    threads: int,
    max_time: Optional[float],
    spans_key: Optional[str],
):
    """Factory for the Wikidict linker component."""
    return WikidictLinkerComponent(
        nlp=nlp,
        threads=threads,
        max_time=max_time,
        spans_key=spans_key,
    )


class WikidictLinkerComponent:
    """
    Dictionary-based entity linker for spaCy.

    Sentences are linked independently, up to ``threads`` at a time. A
    sentence that fails (bad mention attributes, or running over
    ``max_time`` seconds) is left untouched and its index is recorded in
    ``doc._.linking_failures``; the other sentences are still linked.

    The dictionary is shared read-only by all worker threads and has to be
    handed over with ``initialize(dictionary)`` before the first document.
    """

    def __init__(
        self,
        nlp: Language,
        threads: int = 1,
        max_time: Optional[float] = None,
        spans_key: Optional[str] = None,
    ):
        self.nlp = nlp
        self.spans_key = spans_key
        self.driver = SentenceDriver(threads=threads, max_time=max_time)
        self.dictionary: Optional[SurfaceFormDictionary] = None

        ensure_mention_extensions()
        ensure_linked_id_extensions()

    def initialize(self, dictionary: SurfaceFormDictionary):
        """Initialize the component with a surface-form dictionary."""
        self.dictionary = dictionary
        logger.info(
            f"Wikidict linker initialized: {len(dictionary):,} links, "
            f"{self.driver.threads} thread(s)"
        )

    def mentions(self, doc: Doc) -> List[Span]:
        # Span group when the doc has one, otherwise the NER entities
        if self.spans_key is not None and self.spans_key in doc.spans:
            return list(doc.spans[self.spans_key])
        return list(doc.ents)

    def _sentence_units(self, doc: Doc) -> List[SentenceUnit]:
        """Pair each sentence with the mentions starting inside it."""
        if doc.has_annotation("SENT_START"):
            sentences = list(doc.sents)
        else:
            sentences = [doc[:]]

        starts = [sent.start for sent in sentences]
        units: List[SentenceUnit] = [(sent, []) for sent in sentences]
        for span in self.mentions(doc):
            index = bisect.bisect_right(starts, span.start) - 1
            units[index][1].append(span)
        return units

    def _link_sentence(self, unit: SentenceUnit, deadline: Deadline) -> Commit:
        sentence, mentions = unit
        links = []
        for span in mentions:
            deadline.check()
            # A sentence only writes to its own tokens
            if span.end > sentence.end:
                raise MalformedMentionError(
                    f"Mention {span.text!r} [{span.start}, {span.end}) crosses the sentence end at {sentence.end}"
                )
            links.append((span, resolve(mention_from_span(span), self.dictionary)))

        def commit() -> None:
            for token in sentence:
                token._.linked_id = NO_LINK
            for span, link in links:
                span._.linked_id = link
                if link is not None:
                    for token in span:
                        token._.linked_id = link

        return commit

    def process(self, doc: Doc) -> LinkingReport:
        """Link all mentions in ``doc`` and report the outcome per sentence."""
        if self.dictionary is None:
            raise RuntimeError(
                "Wikidict linker not initialized - call initialize(dictionary) first"
            )
        if len(doc) == 0:
            return LinkingReport()

        results = self.driver.run(
            self._sentence_units(doc),
            self._link_sentence,
            describe=lambda unit: unit[0].text,
        )
        return LinkingReport(sentences=results)

    def __call__(self, doc: Doc) -> Doc:
        report = self.process(doc)
        doc._.linking_failures = report.failed
        if report.failed:
            logger.warning(
                f"{len(report.failed)} of {len(report.sentences)} sentences failed to link"
            )
        else:
            logger.debug(f"Linked {len(report.sentences)} sentences")
        return doc
