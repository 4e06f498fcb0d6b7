"""Unit tests for RawEditSession."""

import asyncio

import pytest

from prompt_composer.composer.document import Document
from prompt_composer.composer.raw_edit import RawEditSession
from prompt_composer.composer.engine import TemplateEngine
from prompt_composer.services.exceptions import NotGroupLeadError, RawEditStateError


async def make_document(engine, text="a{{TEXT_BLOCK=b}}c"):
    blocks = await engine.materialize(text)
    return Document(blocks), blocks[0].id


class TestBegin:
    """Tests for entering raw-edit mode."""

    @pytest.mark.asyncio
    async def test_begin_reconstructs_and_flags_lead(self, engine):
        document, lead_id = await make_document(engine)

        session = RawEditSession.begin(engine, document, lead_id)

        assert session.state == "raw_editing"
        assert session.original_text == "a{{TEXT_BLOCK=b}}c"
        assert document.get(lead_id).editing_raw
        assert [b.id for b in document.visible_blocks()] == [lead_id]

    @pytest.mark.asyncio
    async def test_begin_on_member_rejected(self, engine):
        document, _ = await make_document(engine)

        with pytest.raises(NotGroupLeadError):
            RawEditSession.begin(engine, document, document.blocks[1].id)

    @pytest.mark.asyncio
    async def test_begin_twice_rejected(self, engine):
        document, lead_id = await make_document(engine)
        RawEditSession.begin(engine, document, lead_id)

        with pytest.raises(RawEditStateError):
            RawEditSession.begin(engine, document, lead_id)


class TestConfirm:
    """Tests for applying a raw edit."""

    @pytest.mark.asyncio
    async def test_confirm_replaces_group(self, engine):
        document, lead_id = await make_document(engine)
        session = RawEditSession.begin(engine, document, lead_id)

        applied = await session.confirm("x{{FILE_BLOCK}}y")

        assert applied
        assert session.state == "closed"
        assert [b.kind for b in document.blocks] == ["literal_segment", "file_set", "literal_segment"]
        assert document.blocks[0].id == lead_id
        assert not document.blocks[0].editing_raw

    @pytest.mark.asyncio
    async def test_confirm_unchanged_keeps_blocks(self, engine):
        document, lead_id = await make_document(engine)
        siblings = document.blocks[1:]
        session = RawEditSession.begin(engine, document, lead_id)

        await session.confirm(session.original_text)

        assert document.blocks[1:] == siblings
        assert all(a is b for a, b in zip(document.blocks[1:], siblings))
        assert not document.get(lead_id).editing_raw

    @pytest.mark.asyncio
    async def test_confirm_after_close_rejected(self, engine):
        document, lead_id = await make_document(engine)
        session = RawEditSession.begin(engine, document, lead_id)
        await session.confirm("z")

        with pytest.raises(RawEditStateError):
            await session.confirm("again")


class TestCancel:
    """Tests for abandoning a raw edit."""

    @pytest.mark.asyncio
    async def test_cancel_clears_flag_only(self, engine):
        document, lead_id = await make_document(engine)
        siblings = document.blocks[1:]
        session = RawEditSession.begin(engine, document, lead_id)

        session.cancel()

        assert session.state == "closed"
        assert not document.get(lead_id).editing_raw
        assert all(a is b for a, b in zip(document.blocks[1:], siblings))

    @pytest.mark.asyncio
    async def test_cancel_twice_rejected(self, engine):
        document, lead_id = await make_document(engine)
        session = RawEditSession.begin(engine, document, lead_id)
        session.cancel()

        with pytest.raises(RawEditStateError):
            session.cancel()

    @pytest.mark.asyncio
    async def test_cancel_during_confirm_discards_result(self, make_source, id_factory):
        """Test blocks parsed after a cancel never reach the document."""
        source = make_source(project={"SLOW": "slow body"})
        started = asyncio.Event()
        release = asyncio.Event()
        original_read = source.read_named_template

        async def slow_read(name, scope):
            started.set()
            await release.wait()
            return await original_read(name, scope)

        source.read_named_template = slow_read
        engine = TemplateEngine(source, id_factory=id_factory)
        document, lead_id = await make_document(engine, "a{{TEXT_BLOCK=b}}c")
        before = document.blocks[1:]
        session = RawEditSession.begin(engine, document, lead_id)

        task = asyncio.create_task(session.confirm("{{SLOW}}"))
        await started.wait()
        session.cancel()
        release.set()
        applied = await task

        assert not applied
        assert session.state == "closed"
        assert document.blocks[1:] == before
        assert document.get(lead_id).content == "a"
        assert not document.get(lead_id).editing_raw
