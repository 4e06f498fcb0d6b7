"""Template engine: the entry point the document/UI layer talks to.

Wires the resolver, materializer and reconstructor together and owns the
group replacement transaction.
"""

from typing import Callable, Optional, Sequence

from prompt_composer.composer.document import Document
from prompt_composer.models.block import (
    Block,
    FileSetBlock,
    LiteralSegmentBlock,
    SavedResponseBlock,
    UserTextBlock,
)
from prompt_composer.models.config import Config
from prompt_composer.models.warnings import WarningCallback
from prompt_composer.services.exceptions import BlockNotFoundError
from prompt_composer.template.cache import TemplateCache
from prompt_composer.template.materializer import BlockMaterializer
from prompt_composer.template.reconstructor import reconstruct
from prompt_composer.template.resolver import TemplateResolver
from prompt_composer.template.scanner import contains_placeholder
from prompt_composer.template.source import SCOPES, TemplateSource, WriteError, WriteResult
from prompt_composer.utils.ids import IdFactory
from prompt_composer.utils.logging import get_logger

logger = get_logger(__name__)


def _file_section(path: str, language: str, content: str) -> str:
    return f"<file_contents>\nFile: {path}\n```{language}\n{content}\n```\n</file_contents>"


class TemplateEngine:
    """
    Materialize templates into block groups and replace groups after raw edits.

    Example:
        >>> engine = TemplateEngine(PromptComposerStore([project_dir]))
        >>> blocks = await engine.materialize("Intro {{TEXT_BLOCK=Say hi}} more")
        >>> engine.reconstruct(blocks[0].group_id, blocks)
        'Intro {{TEXT_BLOCK=Say hi}} more'
    """

    def __init__(
        self,
        source: TemplateSource,
        config: Optional[Config] = None,
        cache: Optional[TemplateCache] = None,
        id_factory: Optional[IdFactory] = None,
    ):
        self.config = config or Config()
        self.source = source
        self.cache = cache if cache is not None else TemplateCache()
        self.resolver = TemplateResolver(
            source,
            cache=self.cache,
            max_depth=self.config.templates.max_depth,
            extensions=self.config.templates.extensions,
        )
        self.materializer = BlockMaterializer(
            id_factory=id_factory,
            default_response_filename=self.config.saved_response.default_filename,
            max_filename_length=self.config.saved_response.max_filename_length,
        )

    async def materialize(
        self,
        text: str,
        group_id: Optional[str] = None,
        lead_id: Optional[str] = None,
        on_warning: WarningCallback = None,
        expand_references: bool = True,
    ) -> list[Block]:
        """
        Flatten ``text`` and turn it into a new block group.

        Args:
            text: Raw template text
            group_id: Group id to reuse (generated when None)
            lead_id: Id to force onto the lead block
            on_warning: Optional callback for recoverable problems
            expand_references: When False, references are kept as markers
                instead of being inlined

        Returns:
            The group's blocks, lead first
        """
        reported: frozenset[str] = frozenset()
        if expand_references:
            flattened = await self.resolver.flatten(text, on_warning=on_warning)
            text = flattened.text
            reported = flattened.reported

        blocks = self.materializer.materialize(
            text,
            group_id=group_id,
            lead_block_id=lead_id,
            on_warning=on_warning,
            reported=reported,
            expand_references=expand_references,
        )
        return [await self._load_saved_response(block) for block in blocks]

    def reconstruct(self, group_id: str, blocks: Sequence[Block]) -> str:
        """Placeholder text for a group, members in document order."""
        return reconstruct(group_id, blocks)

    async def replace_group(
        self,
        document: Document,
        lead_id: str,
        group_id: str,
        new_text: str,
        old_text: str,
        on_warning: WarningCallback = None,
        should_apply: Optional[Callable[[], bool]] = None,
    ) -> bool:
        """
        Swap a group for the materialization of ``new_text``.

        Unchanged text only closes raw-edit mode on the lead. Otherwise the
        new blocks keep ``group_id`` and ``lead_id`` and replace the old
        range in a single document update.

        Args:
            should_apply: Checked after parsing; returning False discards the
                parsed blocks (the caller abandoned the edit meanwhile)

        Returns:
            False if the parsed result was discarded, True otherwise
        """
        if new_text == old_text:
            if document.find(lead_id) is not None:
                document.set_editing_raw(lead_id, False)
            logger.info("group_replace_skipped", group_id=group_id)
            return True

        blocks = await self.materialize(
            new_text, group_id=group_id, lead_id=lead_id, on_warning=on_warning
        )
        if should_apply is not None and not should_apply():
            logger.info("group_replace_discarded", group_id=group_id)
            return False

        document.splice_group(group_id, blocks)
        logger.info("group_replaced", group_id=group_id, block_count=len(blocks))
        return True

    async def save_saved_response(
        self, document: Document, block_id: str, content: str
    ) -> WriteResult:
        """
        Update a saved response's content and persist it.

        The in-memory block takes the new content first; a failed write is
        returned as a WriteError and leaves the block otherwise untouched.
        """
        block = document.get(block_id)
        if not isinstance(block, SavedResponseBlock):
            raise BlockNotFoundError(block_id)

        document.update_block(block.model_copy(update={"content": content}))
        try:
            result = await self.source.write_companion_file(block.source_file, content)
        except OSError as e:
            result = WriteError(error=f"Failed to write file {block.source_file}: {e}")

        if result is not True:
            logger.error("saved_response_write_failed", file=block.source_file, error=result.error)
        return result

    async def compose_prompt(self, blocks: Sequence[Block]) -> str:
        """
        Concatenate blocks into the final prompt text.

        File sets contribute their directory map (when included) and one
        ``<file_contents>`` section per file. References still present in
        block text are resolved. Leading and trailing whitespace is stripped.
        """
        parts = []
        for block in blocks:
            if isinstance(block, (LiteralSegmentBlock, UserTextBlock, SavedResponseBlock)):
                parts.append(block.content)
            elif isinstance(block, FileSetBlock):
                if block.include_directory_map and block.directory_map:
                    parts.append(block.directory_map)
                for entry in block.files:
                    parts.append(_file_section(entry.path, entry.language, entry.content))

        # Each part is resolved alone so no placeholder spans two blocks
        resolved = []
        for part in parts:
            if contains_placeholder(part):
                part = (await self.resolver.flatten(part)).text
            resolved.append(part)
        return "".join(resolved).strip()

    async def _load_saved_response(self, block: Block) -> Block:
        if not isinstance(block, SavedResponseBlock):
            return block
        for scope in SCOPES:
            try:
                content = await self.source.read_companion_file(block.source_file, scope)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("saved_response_load_failed", file=block.source_file, scope=scope, error=str(e))
                continue
            if content is not None:
                logger.debug("saved_response_loaded", file=block.source_file, scope=scope)
                return block.model_copy(update={"content": content})
        return block
