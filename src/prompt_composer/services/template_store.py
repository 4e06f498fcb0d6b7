"""Filesystem-backed template source.

Templates and companion files live in a ``.prompt-composer`` folder inside
each open project directory, with the user's home directory as the global
fallback::

    <project>/.prompt-composer/GREETING.txt
    <project>/.prompt-composer/template/GREETING.txt
    ~/.prompt-composer/GREETING.txt
"""

import asyncio
from pathlib import Path
from typing import Optional, Sequence

from prompt_composer.models.config import TemplateConfig
from prompt_composer.services.file_operations import atomic_write
from prompt_composer.template.source import Scope, WriteError, WriteResult
from prompt_composer.utils.logging import get_logger

logger = get_logger(__name__)

TEMPLATE_SUBDIR = "template"
MAX_NAME_LENGTH = 100


class PromptComposerStore:
    """
    Read templates and companion files from ``.prompt-composer`` folders.

    Reads and writes run in the default executor so the event loop is never
    blocked on disk access.

    Example:
        >>> store = PromptComposerStore([Path("~/code/app").expanduser()])
        >>> await store.read_named_template("GREETING.txt", "project")
        'Hello {{TEXT_BLOCK}}'
    """

    def __init__(
        self,
        project_dirs: Sequence[Path] = (),
        global_dir: Optional[Path] = None,
        folder_name: str = ".prompt-composer",
    ):
        self.project_dirs = [Path(d) for d in project_dirs]
        self.global_dir = Path(global_dir) if global_dir is not None else Path.home()
        self.folder_name = folder_name

    @classmethod
    def from_config(cls, config: TemplateConfig) -> "PromptComposerStore":
        return cls(
            project_dirs=[Path(d).expanduser() for d in config.project_dirs],
            global_dir=Path(config.global_dir).expanduser(),
            folder_name=config.folder_name,
        )

    def folders(self, scope: Scope) -> list[Path]:
        """Template folders for a scope, in search order."""
        if scope == "project":
            return [d / self.folder_name for d in self.project_dirs]
        return [self.global_dir / self.folder_name]

    async def read_named_template(self, name: str, scope: Scope) -> Optional[str]:
        for folder in self.folders(scope):
            for base in (folder, folder / TEMPLATE_SUBDIR):
                content = await self._read(base, name)
                if content is not None:
                    logger.debug("template_found", name=name, scope=scope, folder=str(base))
                    return content
        return None

    async def read_companion_file(self, relative_path: str, scope: Scope) -> Optional[str]:
        for folder in self.folders(scope):
            content = await self._read(folder, relative_path)
            if content is not None:
                return content
        return None

    async def write_companion_file(self, relative_path: str, content: str) -> WriteResult:
        """
        Write a companion file into the first project folder.

        Falls back to the global folder when no project directory is open.

        Returns:
            True on success, WriteError describing the failure otherwise
        """
        folders = self.folders("project") or self.folders("global")
        target = _safe_path(folders[0], relative_path)
        if target is None:
            return WriteError(error=f"Invalid companion filename: {relative_path!r}")

        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, atomic_write, target, content)
        except OSError as e:
            logger.error("companion_write_failed", path=str(target), error=str(e))
            return WriteError(error=f"Failed to write file {relative_path}: {e}")

        logger.info("companion_written", path=str(target), size=len(content))
        return True

    async def _read(self, folder: Path, name: str) -> Optional[str]:
        path = _safe_path(folder, name)
        if path is None:
            logger.warning("template_name_rejected", name=name[:40])
            return None
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, _read_text, path)


def _safe_path(folder: Path, name: str) -> Optional[Path]:
    """
    Join ``name`` onto ``folder`` if it is a plausible relative filename.

    Rejects names that look like pasted content (newlines, overlong) and
    names that would escape the folder.
    """
    if not name or "\n" in name or len(name) > MAX_NAME_LENGTH:
        return None
    candidate = Path(name)
    if candidate.is_absolute() or ".." in candidate.parts:
        return None
    return folder / candidate


def _read_text(path: Path) -> Optional[str]:
    if not path.is_file():
        return None
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        logger.warning("file_not_utf8", path=str(path), error=str(e))
        return None
