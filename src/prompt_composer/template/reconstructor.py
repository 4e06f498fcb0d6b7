"""Raw-edit reconstructor.

Rebuilds placeholder text from a block group so the whole group can be
edited as a single document. The inverse of materialization, with one
loss: a named reference marker comes back as the placeholder it was read
from (``{{NAME}}`` or ``{{NAME=value}}``), whatever its block content holds.
"""

from typing import Sequence

from prompt_composer.composer.groups import group_members
from prompt_composer.models.block import (
    Block,
    FileSetBlock,
    LiteralSegmentBlock,
    SavedResponseBlock,
    UserTextBlock,
)
from prompt_composer.template.kinds import PlaceholderKind
from prompt_composer.utils.logging import get_logger

logger = get_logger(__name__)


def _placeholder(name: str, value: str = "") -> str:
    if value:
        return f"{{{{{name}={value}}}}}"
    return f"{{{{{name}}}}}"


def block_to_raw(block: Block) -> str:
    """Render one block as template source text.

    Args:
        block: Any block variant

    Returns:
        Literal text or the placeholder that would recreate the block
    """
    if isinstance(block, LiteralSegmentBlock):
        if block.origin is None:
            return block.content
        if block.origin.kind == "reference":
            if block.origin.value is not None:
                return f"{{{{{block.origin.name}={block.origin.value}}}}}"
            return _placeholder(block.origin.name)
        return _placeholder(PlaceholderKind.TEMPLATE_BLOCK.value, block.content)
    if isinstance(block, UserTextBlock):
        if "}" in block.content:
            logger.warning("raw_reconstruct_brace_in_value", block_id=block.id)
        return _placeholder(PlaceholderKind.TEXT_BLOCK.value, block.content)
    if isinstance(block, FileSetBlock):
        return _placeholder(PlaceholderKind.FILE_BLOCK.value)
    if isinstance(block, SavedResponseBlock):
        return _placeholder(PlaceholderKind.PROMPT_RESPONSE.value, block.source_file)
    raise TypeError(f"Unsupported block type: {type(block).__name__}")


def reconstruct(group_id: str, blocks: Sequence[Block]) -> str:
    """
    Rebuild the raw template text for one group.

    Members are taken in document order. Blocks of other groups and
    ungrouped blocks are ignored.

    Args:
        group_id: Group to reconstruct
        blocks: The whole document's blocks, in order

    Returns:
        Placeholder text; empty string if the group has no members

    Example:
        >>> reconstruct(group_id, materializer.materialize("a{{TEXT_BLOCK=b}}c"))
        'a{{TEXT_BLOCK=b}}c'
    """
    members = group_members(blocks, group_id)
    raw = "".join(block_to_raw(block) for block in members)
    logger.debug("raw_reconstructed", group_id=group_id, members=len(members), length=len(raw))
    return raw
