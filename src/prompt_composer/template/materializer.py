"""Block materializer.

Turns flattened template text into one group of typed blocks:

- every literal run becomes a LiteralSegmentBlock
- reserved placeholders become their block kind (see ``_HANDLERS``)
- anything else is kept verbatim as a literal so it stays visible

The first block emitted is the group lead (unlocked); the rest are locked.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from prompt_composer.models.block import (
    Block,
    FileSetBlock,
    InlineOrigin,
    LiteralSegmentBlock,
    ReferenceOrigin,
    SavedResponseBlock,
    UserTextBlock,
)
from prompt_composer.models.warnings import TemplateWarning, WarningCallback
from prompt_composer.template.kinds import PlaceholderKind, classify
from prompt_composer.template.scanner import PlaceholderToken, scan
from prompt_composer.utils.ids import IdFactory, generate_random_uuid
from prompt_composer.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_RESPONSE_FILENAME = "prompt_response.txt"
MAX_FILENAME_LENGTH = 100


@dataclass
class _Run:
    """State for one materialize call."""

    group_id: str
    new_id: IdFactory
    on_warning: WarningCallback
    reported: frozenset[str]
    blocks: list[Block] = field(default_factory=list)
    warnings: list[TemplateWarning] = field(default_factory=list)

    def warn(self, warning: TemplateWarning) -> None:
        self.warnings.append(warning)
        logger.warning("template_" + warning.kind, placeholder=warning.placeholder)
        if self.on_warning is not None:
            self.on_warning(warning)


class BlockMaterializer:
    """
    Build a block group from flattened template text.

    Example:
        >>> blocks = BlockMaterializer().materialize("Intro {{TEXT_BLOCK=Say hi}} end")
        >>> [b.kind for b in blocks]
        ['literal_segment', 'user_text', 'literal_segment']
        >>> blocks[0].is_group_lead, blocks[1].locked
        (True, True)
    """

    def __init__(
        self,
        id_factory: Optional[IdFactory] = None,
        default_response_filename: str = DEFAULT_RESPONSE_FILENAME,
        max_filename_length: int = MAX_FILENAME_LENGTH,
    ):
        self.id_factory = id_factory or generate_random_uuid
        self.default_response_filename = default_response_filename
        self.max_filename_length = max_filename_length

    def materialize(
        self,
        text: str,
        group_id: Optional[str] = None,
        lead_block_id: Optional[str] = None,
        on_warning: WarningCallback = None,
        reported: frozenset[str] = frozenset(),
        expand_references: bool = True,
    ) -> list[Block]:
        """
        Convert text into a list of blocks sharing one group id.

        Args:
            text: Flattened template text
            group_id: Group id to use (generated when None)
            lead_block_id: Id forced onto the lead block, so a replaced group
                keeps its lead identity
            on_warning: Optional callback receiving each TemplateWarning
            reported: Placeholder names already warned about upstream; no
                second "unrecognized placeholder" warning is raised for them
            expand_references: When False, reference placeholders become
                reference markers instead of verbatim literals

        Returns:
            Non-empty list of blocks, first one the unlocked group lead
        """
        run = _Run(
            group_id=group_id or self.id_factory(),
            new_id=self.id_factory,
            on_warning=on_warning,
            reported=reported,
        )
        result = scan(text)

        for token in result.tokens:
            self._emit_literal(run, token.literal_before)
            kind = classify(token.name)
            if kind is None:
                run.blocks.append(self._reference(run, token, expand_references))
            else:
                run.blocks.append(_HANDLERS[kind](self, run, token))
        self._emit_literal(run, result.trailing)

        if not run.blocks:
            run.blocks.append(
                LiteralSegmentBlock(
                    id=run.new_id(),
                    label="Empty Template",
                    content="",
                    group_id=run.group_id,
                )
            )

        blocks = _assign_lead(run.blocks, lead_block_id)
        logger.info(
            "template_materialized",
            group_id=run.group_id,
            block_count=len(blocks),
            warnings=len(run.warnings),
        )
        return blocks

    def _emit_literal(self, run: _Run, text: str) -> None:
        if text:
            run.blocks.append(
                LiteralSegmentBlock(
                    id=run.new_id(),
                    label="Template Segment",
                    content=text,
                    group_id=run.group_id,
                )
            )

    def _reference(self, run: _Run, token: PlaceholderToken, expand_references: bool) -> Block:
        if not expand_references:
            return LiteralSegmentBlock(
                id=run.new_id(),
                label=f"Inline Template: {token.name}",
                content=token.raw,
                origin=ReferenceOrigin(name=token.name, value=token.value),
                group_id=run.group_id,
            )
        if token.name not in run.reported:
            run.warn(
                TemplateWarning(
                    kind="unrecognized_placeholder",
                    placeholder=token.name,
                    message=f"Unrecognized placeholder {token.raw}; kept as literal text",
                )
            )
        return LiteralSegmentBlock(
            id=run.new_id(),
            label="Unknown Template Placeholder",
            content=token.raw,
            group_id=run.group_id,
        )

    def _text_block(self, run: _Run, token: PlaceholderToken) -> Block:
        return UserTextBlock(
            id=run.new_id(),
            label="User Text Block",
            content=token.value or "",
            group_id=run.group_id,
        )

    def _file_block(self, run: _Run, token: PlaceholderToken) -> Block:
        return FileSetBlock(
            id=run.new_id(),
            label="File Block",
            files=(),
            include_directory_map=True,
            group_id=run.group_id,
        )

    def _template_block(self, run: _Run, token: PlaceholderToken) -> Block:
        return LiteralSegmentBlock(
            id=run.new_id(),
            label="Nested Template Block",
            content=token.value or "",
            origin=InlineOrigin(),
            group_id=run.group_id,
        )

    def _prompt_response(self, run: _Run, token: PlaceholderToken) -> Block:
        filename = (token.value or "").strip()
        if not self.is_valid_filename(filename):
            run.warn(
                TemplateWarning(
                    kind="malformed_response_filename",
                    placeholder=token.name,
                    message=(
                        f"PROMPT_RESPONSE value is not a usable filename; "
                        f"using {self.default_response_filename!r}"
                    ),
                )
            )
            filename = self.default_response_filename
        return SavedResponseBlock(
            id=run.new_id(),
            label=f"Prompt Response: {filename}",
            source_file=filename,
            group_id=run.group_id,
        )

    def is_valid_filename(self, value: str) -> bool:
        """Reject blank values and values that look like pasted content."""
        return bool(value) and "\n" not in value and len(value) <= self.max_filename_length


_HANDLERS: dict[PlaceholderKind, Callable[[BlockMaterializer, _Run, PlaceholderToken], Block]] = {
    PlaceholderKind.TEXT_BLOCK: BlockMaterializer._text_block,
    PlaceholderKind.FILE_BLOCK: BlockMaterializer._file_block,
    PlaceholderKind.TEMPLATE_BLOCK: BlockMaterializer._template_block,
    PlaceholderKind.PROMPT_RESPONSE: BlockMaterializer._prompt_response,
}

_missing_handlers = set(PlaceholderKind) - set(_HANDLERS)
if _missing_handlers:
    raise RuntimeError(f"No block handler for placeholder kinds: {_missing_handlers}")


def _assign_lead(blocks: list[Block], lead_block_id: Optional[str]) -> list[Block]:
    """Make the first block the unlocked lead and lock the rest."""
    lead_update = {"is_group_lead": True, "locked": False}
    if lead_block_id:
        lead_update["id"] = lead_block_id
    assigned = [blocks[0].model_copy(update=lead_update)]
    for block in blocks[1:]:
        assigned.append(block.model_copy(update={"is_group_lead": False, "locked": True}))
    return assigned
