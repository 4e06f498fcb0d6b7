"""Contracts for the file-backed collaborators of the template engine."""

from typing import Literal, Optional, Protocol, Union

from pydantic import BaseModel, Field

Scope = Literal["project", "global"]

SCOPES: tuple[Scope, ...] = ("project", "global")


class WriteError(BaseModel):
    """A companion file could not be written."""

    error: str = Field(..., description="Human-readable failure reason")

    model_config = {"frozen": True}


WriteResult = Union[Literal[True], WriteError]


class TemplateSource(Protocol):
    """Where template files and companion files come from.

    Implementations return None for anything absent and never raise for a
    missing file.
    """

    async def read_named_template(self, name: str, scope: Scope) -> Optional[str]:
        """Return the content of template ``name`` in ``scope``, or None."""
        ...

    async def read_companion_file(self, relative_path: str, scope: Scope) -> Optional[str]:
        """Return a saved response's persisted content, or None."""
        ...

    async def write_companion_file(self, relative_path: str, content: str) -> WriteResult:
        """Persist a saved response; True on success, WriteError otherwise."""
        ...
