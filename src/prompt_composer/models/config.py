"""Configuration models for prompt-composer."""

from pydantic import BaseModel, Field, field_validator


class TemplateConfig(BaseModel):
    """Where templates are looked up and how deep expansion may go."""

    project_dirs: list[str] = Field(
        default_factory=list,
        description="Project directories searched first, in order"
    )

    global_dir: str = Field(
        default="~",
        description="Directory holding the user's global template folder"
    )

    folder_name: str = Field(
        default=".prompt-composer",
        description="Name of the template folder inside each directory"
    )

    extensions: list[str] = Field(
        default_factory=lambda: [".txt", ".md"],
        description="Extensions tried when a reference has none"
    )

    max_depth: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum nesting depth for template references"
    )

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        """Every extension must start with a dot."""
        for ext in v:
            if not ext.startswith("."):
                raise ValueError(f"Extension must start with '.': {ext}")
        return v

    model_config = {"frozen": True}


class SavedResponseConfig(BaseModel):
    """Rules for ``{{PROMPT_RESPONSE=...}}`` companion files."""

    default_filename: str = Field(
        default="prompt_response.txt",
        description="Used when the placeholder value is not a usable filename"
    )

    max_filename_length: int = Field(
        default=100,
        ge=1,
        description="Longer values are treated as pasted content, not a filename"
    )

    model_config = {"frozen": True}


class Config(BaseModel):
    """Root configuration for prompt-composer."""

    templates: TemplateConfig = Field(
        default_factory=TemplateConfig,
        description="Template lookup settings"
    )
    saved_response: SavedResponseConfig = Field(
        default_factory=SavedResponseConfig,
        description="Saved response settings"
    )

    model_config = {"frozen": True}
