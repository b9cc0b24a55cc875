"""Unit tests for data types."""

import pytest

from wikidict_linker.types import (
    Document,
    LinkingReport,
    Mention,
    MentionRecord,
    SentenceResult,
    SentenceState,
)


class TestDocument:
    def test_plain_document(self):
        doc = Document(id="doc-1", text="Hello world")
        assert doc.meta == {}
        assert doc.mentions == []
        assert not doc.is_annotated

    def test_annotated_document(self):
        doc = Document(
            id="doc-2",
            text="Obama spoke ",
            words=["Obama", "spoke"],
            mentions=[MentionRecord(start=0, end=1, label="PERSON")],
        )
        assert doc.is_annotated
        assert doc.mentions[0].timex_value is None


class TestMention:
    def test_defaults(self):
        mention = Mention(surface_form="Obama")
        assert mention.entity_type is None
        assert mention.temporal_value is None
        assert mention.numeric_value is None

    def test_frozen(self):
        mention = Mention(surface_form="Obama")
        with pytest.raises(AttributeError):
            mention.surface_form = "Biden"


class TestLinkingReport:
    def test_empty_report_is_ok(self):
        report = LinkingReport()
        assert report.ok
        assert report.failed == []

    def test_failed_and_completed(self):
        report = LinkingReport(sentences=[
            SentenceResult(index=0, state=SentenceState.COMPLETED),
            SentenceResult(index=1, state=SentenceState.FAILED, error=KeyError("x")),
            SentenceResult(index=2, state=SentenceState.COMPLETED),
        ])
        assert not report.ok
        assert report.failed == [1]
        assert report.completed == [0, 2]

    def test_timed_out(self):
        assert SentenceResult(index=0, state=SentenceState.FAILED, error=TimeoutError()).timed_out
        assert not SentenceResult(index=0, state=SentenceState.FAILED, error=KeyError()).timed_out

    def test_new_result_is_pending(self):
        assert SentenceResult(index=3).state is SentenceState.PENDING
