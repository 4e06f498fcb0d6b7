"""Block models for a prompt composition.

A composition is an ordered list of typed blocks. Blocks produced by one
template expansion share a ``group_id``; exactly one of them is the group
lead, the only member through which the group may be moved, deleted or
opened for raw editing.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class InlineOrigin(BaseModel):
    """Marker came from an inline ``{{TEMPLATE_BLOCK=...}}`` body."""

    kind: Literal["inline"] = "inline"

    model_config = {"frozen": True}


class ReferenceOrigin(BaseModel):
    """Marker stands for a named template reference such as ``{{GREETING}}``."""

    kind: Literal["reference"] = "reference"
    name: str = Field(..., description="Referenced template name")
    value: Optional[str] = Field(default=None, description="Value written after '=', if any")

    model_config = {"frozen": True}


SegmentOrigin = Annotated[
    Union[InlineOrigin, ReferenceOrigin], Field(discriminator="kind")
]


class BaseBlock(BaseModel):
    """Fields shared by every block variant."""

    id: str = Field(..., description="Unique block identifier, immutable")

    label: str = Field(default="", description="Display name (not load-bearing)")

    locked: bool = Field(
        default=False,
        description="Whether the block may not be removed/reordered on its own"
    )

    group_id: Optional[str] = Field(
        default=None,
        description="Shared by all blocks created by one template expansion"
    )

    is_group_lead: bool = Field(
        default=False,
        description="True for the single block that controls its group"
    )

    editing_raw: bool = Field(
        default=False,
        description="True only on a lead whose group is open for raw editing"
    )

    model_config = {"frozen": True}


class LiteralSegmentBlock(BaseBlock):
    """Plain template text, or a placeholder kept verbatim.

    ``origin`` is None for ordinary text runs. Nested-template markers carry
    an explicit origin so raw reconstruction can re-emit them faithfully.
    """

    kind: Literal["literal_segment"] = "literal_segment"
    content: str = ""
    origin: Optional[SegmentOrigin] = None


class UserTextBlock(BaseBlock):
    """Freeform text the end user edits in place."""

    kind: Literal["user_text"] = "user_text"
    content: str = ""


class FileEntry(BaseModel):
    """One file captured in a file set."""

    path: str
    content: str
    language: str = ""

    model_config = {"frozen": True}


class FileSetBlock(BaseBlock):
    """Snapshot of selected project files plus an optional directory map."""

    kind: Literal["file_set"] = "file_set"
    files: tuple[FileEntry, ...] = ()
    directory_map: Optional[str] = None
    include_directory_map: bool = True


class SavedResponseBlock(BaseBlock):
    """Content mirrored to and from a companion file.

    ``content_locked`` is the block's own edit lock. It is independent of
    ``locked``, which only concerns group membership.
    """

    kind: Literal["saved_response"] = "saved_response"
    source_file: str
    content: str = ""
    content_locked: bool = False


Block = Annotated[
    Union[LiteralSegmentBlock, UserTextBlock, FileSetBlock, SavedResponseBlock],
    Field(discriminator="kind"),
]

block_adapter: TypeAdapter = TypeAdapter(Block)
block_list_adapter: TypeAdapter = TypeAdapter(list[Block])
