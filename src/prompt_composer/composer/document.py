"""Document: the ordered block list of one prompt composition.

Single writer. Every mutation builds a complete new tuple, checks the group
rules, swaps it in with one assignment and then notifies subscribers once,
so observers never see a half-applied change (a group removed but its
replacement not yet inserted).
"""

from typing import Callable, Iterable, Optional, Sequence

from prompt_composer.composer.groups import (
    Direction,
    find_group_range,
    move_range,
    validate_groups,
    visible_blocks,
)
from prompt_composer.models.block import Block, SavedResponseBlock
from prompt_composer.services.exceptions import (
    BlockLockedError,
    BlockNotFoundError,
    NotGroupLeadError,
)
from prompt_composer.utils.logging import get_logger

logger = get_logger(__name__)

Listener = Callable[[tuple[Block, ...]], None]


class Document:
    """
    Ordered, observable block container.

    Example:
        >>> doc = Document()
        >>> doc.add_blocks(await engine.materialize("Hello {{TEXT_BLOCK}}"))
        >>> unsubscribe = doc.subscribe(lambda blocks: print(len(blocks)))
        >>> doc.move(doc.blocks[0].id, "down")
    """

    def __init__(self, blocks: Iterable[Block] = ()):
        self._blocks: tuple[Block, ...] = tuple(blocks)
        validate_groups(self._blocks)
        self._listeners: list[Listener] = []

    @property
    def blocks(self) -> tuple[Block, ...]:
        return self._blocks

    def __len__(self) -> int:
        return len(self._blocks)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback run after each committed mutation.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def index_of(self, block_id: str) -> int:
        for i, block in enumerate(self._blocks):
            if block.id == block_id:
                return i
        raise BlockNotFoundError(block_id)

    def get(self, block_id: str) -> Block:
        return self._blocks[self.index_of(block_id)]

    def find(self, block_id: str) -> Optional[Block]:
        for block in self._blocks:
            if block.id == block_id:
                return block
        return None

    def visible_blocks(self) -> list[Block]:
        """Blocks minus siblings hidden by a raw-editing lead."""
        return visible_blocks(self._blocks)

    def add_blocks(self, blocks: Sequence[Block]) -> None:
        """Append blocks (typically one freshly materialized group)."""
        self._commit(self._blocks + tuple(blocks), "blocks_added", count=len(blocks))

    def update_block(self, block: Block) -> None:
        """Replace the block with the same id, keeping its position."""
        index = self.index_of(block.id)
        items = list(self._blocks)
        items[index] = block
        self._commit(tuple(items), "block_updated", block_id=block.id)

    def remove(self, block_id: str) -> None:
        """
        Delete a block, or its whole group when it is a group lead.

        Raises:
            NotGroupLeadError: If the block is a non-lead group member
            BlockLockedError: If the block is ungrouped and locked
        """
        index = self.index_of(block_id)
        start, end = self._unit_range(index, "delete")
        self._commit(
            self._blocks[:start] + self._blocks[end + 1:],
            "blocks_removed",
            block_id=block_id,
            count=end - start + 1,
        )

    def move(self, block_id: str, direction: Direction) -> None:
        """
        Move a block, or its whole group when it is a group lead, one unit.

        Raises:
            NotGroupLeadError: If the block is a non-lead group member
            BlockLockedError: If the block is ungrouped and locked
        """
        index = self.index_of(block_id)
        start, end = self._unit_range(index, "reorder")
        moved = move_range(self._blocks, start, end, direction)
        self._commit(tuple(moved), "blocks_moved", block_id=block_id, direction=direction)

    def set_editing_raw(self, lead_id: str, editing: bool) -> None:
        """
        Open or close raw-edit mode on a group lead.

        Raises:
            NotGroupLeadError: If the block is not a group lead
        """
        block = self.get(lead_id)
        if not block.is_group_lead:
            raise NotGroupLeadError(lead_id, "edit the group as raw text")
        if block.editing_raw == editing:
            return
        self.update_block(block.model_copy(update={"editing_raw": editing}))

    def toggle_lock(self, block_id: str) -> None:
        """
        Flip the lock of an ungrouped block.

        Grouped blocks get their locks from the group (lead unlocked, others
        locked) and cannot be toggled.
        """
        block = self.get(block_id)
        if block.group_id is not None:
            raise NotGroupLeadError(block_id, "change locks inside a group")
        self.update_block(block.model_copy(update={"locked": not block.locked}))

    def toggle_content_lock(self, block_id: str) -> None:
        """Flip a saved response's own edit lock."""
        block = self.get(block_id)
        if not isinstance(block, SavedResponseBlock):
            raise TypeError(f"Block {block_id} is not a saved response")
        self.update_block(block.model_copy(update={"content_locked": not block.content_locked}))

    def splice_group(self, group_id: str, new_blocks: Sequence[Block]) -> None:
        """
        Replace a group's whole range with new blocks in one update.

        When no block carries ``group_id`` the new blocks are appended.
        """
        indices = [i for i, block in enumerate(self._blocks) if block.group_id == group_id]
        if not indices:
            logger.warning("group_not_found_appending", group_id=group_id)
            self._commit(self._blocks + tuple(new_blocks), "group_spliced", group_id=group_id)
            return

        start, end = min(indices), max(indices)
        self._commit(
            self._blocks[:start] + tuple(new_blocks) + self._blocks[end + 1:],
            "group_spliced",
            group_id=group_id,
            removed=end - start + 1,
            inserted=len(new_blocks),
        )

    def _unit_range(self, index: int, operation: str) -> tuple[int, int]:
        block = self._blocks[index]
        if block.group_id is not None:
            if not block.is_group_lead:
                raise NotGroupLeadError(block.id, operation)
            return find_group_range(self._blocks, index)
        if block.locked:
            raise BlockLockedError(block.id, operation)
        return index, index

    def _commit(self, blocks: tuple[Block, ...], event: str, **context) -> None:
        validate_groups(blocks)
        self._blocks = blocks
        logger.debug(event, total=len(blocks), **context)
        for listener in list(self._listeners):
            listener(blocks)
