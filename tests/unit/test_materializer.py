"""Unit tests for BlockMaterializer."""

import pytest

from prompt_composer.models.block import (
    FileSetBlock,
    InlineOrigin,
    LiteralSegmentBlock,
    ReferenceOrigin,
    SavedResponseBlock,
    UserTextBlock,
)
from prompt_composer.template.materializer import BlockMaterializer


@pytest.fixture
def materializer(id_factory):
    return BlockMaterializer(id_factory=id_factory)


class TestGroupShape:
    """Tests for lead, locks and group ids."""

    def test_plain_text_is_single_lead(self, materializer):
        blocks = materializer.materialize("Just a plain prompt.")

        assert len(blocks) == 1
        block = blocks[0]
        assert isinstance(block, LiteralSegmentBlock)
        assert block.content == "Just a plain prompt."
        assert block.label == "Template Segment"
        assert block.is_group_lead
        assert not block.locked
        assert block.group_id is not None

    def test_one_lead_rest_locked(self, materializer):
        blocks = materializer.materialize("a{{TEXT_BLOCK}}b{{FILE_BLOCK}}c")

        assert len(blocks) == 5
        assert [b.is_group_lead for b in blocks] == [True, False, False, False, False]
        assert [b.locked for b in blocks] == [False, True, True, True, True]
        assert len({b.group_id for b in blocks}) == 1

    def test_ids_are_unique(self, materializer):
        blocks = materializer.materialize("a{{TEXT_BLOCK}}b{{FILE_BLOCK}}c")

        assert len({b.id for b in blocks}) == len(blocks)

    def test_placeholder_can_lead(self, materializer):
        """Test the first block leads whatever its kind."""
        blocks = materializer.materialize("{{TEXT_BLOCK=hello}}{{FILE_BLOCK}}")

        assert isinstance(blocks[0], UserTextBlock)
        assert blocks[0].is_group_lead
        assert not blocks[0].locked
        assert blocks[1].locked

    def test_explicit_group_and_lead_ids(self, materializer):
        blocks = materializer.materialize(
            "x{{TEXT_BLOCK}}", group_id="group-7", lead_block_id="lead-7"
        )

        assert blocks[0].id == "lead-7"
        assert blocks[1].id != "lead-7"
        assert {b.group_id for b in blocks} == {"group-7"}

    def test_empty_text(self, materializer):
        """Test empty input still produces a lead."""
        blocks = materializer.materialize("")

        assert len(blocks) == 1
        assert blocks[0].label == "Empty Template"
        assert blocks[0].content == ""
        assert blocks[0].is_group_lead

    def test_empty_literal_runs_are_skipped(self, materializer):
        blocks = materializer.materialize("{{TEXT_BLOCK=a}}{{TEXT_BLOCK=b}}")

        assert [b.kind for b in blocks] == ["user_text", "user_text"]


class TestPlaceholderKinds:
    """Tests for each reserved placeholder."""

    def test_intro_example(self, materializer):
        blocks = materializer.materialize("Intro text {{TEXT_BLOCK=Say hi}} more text")

        assert [type(b) for b in blocks] == [LiteralSegmentBlock, UserTextBlock, LiteralSegmentBlock]
        assert blocks[0].content == "Intro text "
        assert blocks[1].content == "Say hi"
        assert blocks[1].label == "User Text Block"
        assert blocks[2].content == " more text"
        assert blocks[0].is_group_lead

    def test_text_block_without_value(self, materializer):
        block = materializer.materialize("{{TEXT_BLOCK}}")[0]

        assert isinstance(block, UserTextBlock)
        assert block.content == ""

    def test_file_block(self, materializer):
        block = materializer.materialize("{{FILE_BLOCK}}")[0]

        assert isinstance(block, FileSetBlock)
        assert block.files == ()
        assert block.include_directory_map
        assert block.label == "File Block"

    def test_template_block(self, materializer):
        block = materializer.materialize("{{TEMPLATE_BLOCK=inner text}}")[0]

        assert isinstance(block, LiteralSegmentBlock)
        assert block.content == "inner text"
        assert block.origin == InlineOrigin()
        assert block.label == "Nested Template Block"

    def test_prompt_response(self, materializer, warnings):
        block = materializer.materialize(
            "{{PROMPT_RESPONSE= notes.txt }}", on_warning=warnings.append
        )[0]

        assert isinstance(block, SavedResponseBlock)
        assert block.source_file == "notes.txt"
        assert block.content == ""
        assert block.label == "Prompt Response: notes.txt"
        assert warnings == []

    @pytest.mark.parametrize("text", [
        "{{PROMPT_RESPONSE}}",
        "{{PROMPT_RESPONSE=   }}",
        "{{PROMPT_RESPONSE=line one\nline two}}",
        "{{PROMPT_RESPONSE=" + "x" * 101 + "}}",
    ])
    def test_malformed_response_filename_uses_default(self, materializer, warnings, text):
        block = materializer.materialize(text, on_warning=warnings.append)[0]

        assert block.source_file == "prompt_response.txt"
        assert [w.kind for w in warnings] == ["malformed_response_filename"]

    def test_configured_default_response_filename(self, id_factory):
        materializer = BlockMaterializer(id_factory=id_factory, default_response_filename="out.md")

        block = materializer.materialize("{{PROMPT_RESPONSE}}")[0]

        assert block.source_file == "out.md"


class TestUnknownPlaceholders:
    """Tests for names that are neither reserved nor expanded."""

    def test_unknown_placeholder_kept_verbatim(self, materializer, warnings):
        blocks = materializer.materialize("{{FOO_BAR=1}}", on_warning=warnings.append)

        assert len(blocks) == 1
        assert blocks[0].content == "{{FOO_BAR=1}}"
        assert blocks[0].label == "Unknown Template Placeholder"
        assert blocks[0].origin is None
        assert [w.kind for w in warnings] == ["unrecognized_placeholder"]

    def test_already_reported_name_not_warned_again(self, materializer, warnings):
        blocks = materializer.materialize(
            "{{FOO_BAR}}", on_warning=warnings.append, reported=frozenset({"FOO_BAR"})
        )

        assert blocks[0].content == "{{FOO_BAR}}"
        assert warnings == []

    def test_reference_markers_when_not_expanding(self, materializer, warnings):
        blocks = materializer.materialize(
            "Hi {{GREETING=x}}", on_warning=warnings.append, expand_references=False
        )

        marker = blocks[1]
        assert isinstance(marker, LiteralSegmentBlock)
        assert marker.content == "{{GREETING=x}}"
        assert marker.origin == ReferenceOrigin(name="GREETING", value="x")
        assert marker.label == "Inline Template: GREETING"
        assert warnings == []


class TestIsValidFilename:
    """Tests for is_valid_filename()."""

    def test_limits(self):
        materializer = BlockMaterializer(max_filename_length=10)

        assert materializer.is_valid_filename("a.txt")
        assert materializer.is_valid_filename("x" * 10)
        assert not materializer.is_valid_filename("x" * 11)
        assert not materializer.is_valid_filename("")
        assert not materializer.is_valid_filename("a\nb")
