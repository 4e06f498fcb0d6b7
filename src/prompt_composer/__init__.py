"""prompt-composer - build LLM prompts from reusable placeholder templates.

Example:
    >>> from prompt_composer import Document, PromptComposerStore, TemplateEngine
    >>> engine = TemplateEngine(PromptComposerStore([project_dir]))
    >>> doc = Document()
    >>> doc.add_blocks(await engine.materialize("Intro {{TEXT_BLOCK=Say hi}} more"))
"""

from prompt_composer.composer.document import Document
from prompt_composer.composer.engine import TemplateEngine
from prompt_composer.composer.raw_edit import RawEditSession
from prompt_composer.models.block import (
    Block,
    FileEntry,
    FileSetBlock,
    InlineOrigin,
    LiteralSegmentBlock,
    ReferenceOrigin,
    SavedResponseBlock,
    UserTextBlock,
)
from prompt_composer.models.warnings import TemplateWarning
from prompt_composer.services.template_store import PromptComposerStore
from prompt_composer.template.source import TemplateSource, WriteError

__version__ = "0.1.0"

__all__ = [
    "Block",
    "Document",
    "FileEntry",
    "FileSetBlock",
    "InlineOrigin",
    "LiteralSegmentBlock",
    "PromptComposerStore",
    "RawEditSession",
    "ReferenceOrigin",
    "SavedResponseBlock",
    "TemplateEngine",
    "TemplateSource",
    "TemplateWarning",
    "UserTextBlock",
    "WriteError",
]
