"""Group rules over ordered block sequences.

At rest every group occupies one contiguous index range and has exactly one
lead. The helpers here are pure: they take a sequence and return new lists
or indices, leaving mutation to the Document.
"""

from collections import defaultdict
from typing import Literal, Optional, Sequence

from prompt_composer.models.block import Block
from prompt_composer.services.exceptions import GroupInvariantError

Direction = Literal["up", "down"]


def find_group_range(blocks: Sequence[Block], index: int) -> tuple[int, int]:
    """
    Return the index range of the unit containing ``blocks[index]``.

    Args:
        blocks: Document blocks
        index: Index of any member

    Returns:
        (start, end) inclusive; (index, index) for an ungrouped block
    """
    group_id = blocks[index].group_id
    if group_id is None:
        return index, index
    indices = [i for i, block in enumerate(blocks) if block.group_id == group_id]
    return min(indices), max(indices)


def group_members(blocks: Sequence[Block], group_id: str) -> list[Block]:
    """Members of a group in document order."""
    return [block for block in blocks if block.group_id == group_id]


def find_lead(blocks: Sequence[Block], group_id: str) -> Optional[Block]:
    """The lead of a group, or None if the group has none."""
    for block in blocks:
        if block.group_id == group_id and block.is_group_lead:
            return block
    return None


def move_range(
    blocks: Sequence[Block], start: int, end: int, direction: Direction
) -> list[Block]:
    """
    Move the contiguous chunk [start, end] one unit up or down.

    A unit is a single ungrouped block or a whole neighbouring group, so a
    chunk never lands inside another group.

    Args:
        blocks: Document blocks
        start: First index of the chunk
        end: Last index of the chunk (inclusive)
        direction: "up" or "down"

    Returns:
        New list; an unchanged copy when the chunk is already at that edge
    """
    items = list(blocks)
    chunk = items[start:end + 1]

    if direction == "up":
        if start == 0:
            return items
        neighbour_start, _ = find_group_range(items, start - 1)
        return items[:neighbour_start] + chunk + items[neighbour_start:start] + items[end + 1:]

    if end == len(items) - 1:
        return items
    _, neighbour_end = find_group_range(items, end + 1)
    return items[:start] + items[end + 1:neighbour_end + 1] + chunk + items[neighbour_end + 1:]


def visible_blocks(blocks: Sequence[Block]) -> list[Block]:
    """
    Blocks to traverse or render.

    Non-lead members of a group whose lead is in raw-edit mode are hidden;
    they stay in the document unchanged.
    """
    raw_groups = {
        block.group_id
        for block in blocks
        if block.is_group_lead and block.editing_raw and block.group_id is not None
    }
    return [
        block
        for block in blocks
        if block.group_id not in raw_groups or block.is_group_lead
    ]


def validate_groups(blocks: Sequence[Block]) -> None:
    """
    Check the at-rest group rules.

    Raises:
        GroupInvariantError: If a group is split, has no lead or several
            leads, or a non-lead block is flagged as raw editing
    """
    indices: dict[str, list[int]] = defaultdict(list)
    leads: dict[str, int] = defaultdict(int)

    for i, block in enumerate(blocks):
        if block.editing_raw and not block.is_group_lead:
            raise GroupInvariantError(
                block.group_id or "<none>", f"non-lead block {block.id} is raw editing"
            )
        if block.group_id is None:
            continue
        indices[block.group_id].append(i)
        if block.is_group_lead:
            leads[block.group_id] += 1

    for group_id, positions in indices.items():
        if positions[-1] - positions[0] + 1 != len(positions):
            raise GroupInvariantError(group_id, "members are not contiguous")
        if leads[group_id] != 1:
            raise GroupInvariantError(group_id, f"expected one lead, found {leads[group_id]}")
