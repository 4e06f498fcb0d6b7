"""Recoverable conditions reported while expanding templates."""

from typing import Callable, Literal, Optional

from pydantic import BaseModel, Field

WarningKind = Literal[
    "unresolved_reference",
    "cyclic_reference",
    "max_depth_exceeded",
    "unrecognized_placeholder",
    "malformed_response_filename",
]


class TemplateWarning(BaseModel):
    """A problem that did not stop materialization."""

    kind: WarningKind = Field(..., description="Which recoverable condition occurred")

    placeholder: str = Field(
        ...,
        description="Placeholder name the warning is about"
    )

    message: str = Field(..., description="Human-readable explanation")

    model_config = {"frozen": True}


WarningCallback = Optional[Callable[[TemplateWarning], None]]
