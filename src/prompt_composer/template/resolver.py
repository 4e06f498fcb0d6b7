"""Nested template resolver ("flattener").

Replaces reference placeholders (any name that is not a reserved kind) with
the referenced template's content, itself flattened. Reserved placeholders
pass through untouched for the materializer.

The walk is depth-first over an explicit stack of frames. Each frame carries
the chain of template names being expanded above it, which makes the cycle
check and the depth limit plain lookups on that chain.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Sequence

from prompt_composer.models.warnings import TemplateWarning, WarningCallback, WarningKind
from prompt_composer.template.cache import TemplateCache
from prompt_composer.template.kinds import is_reference
from prompt_composer.template.scanner import PlaceholderToken, scan
from prompt_composer.template.source import SCOPES, TemplateSource
from prompt_composer.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_DEPTH = 10
DEFAULT_EXTENSIONS = (".txt", ".md")


@dataclass
class FlattenResult:
    """Outcome of one flatten call.

    Attributes:
        text: Flattened text
        warnings: Recoverable problems, in the order they were found
        reported: Placeholder names a warning was already raised for
        expanded: Template names that were inlined, in expansion order
    """

    text: str
    warnings: list[TemplateWarning] = field(default_factory=list)
    reported: frozenset[str] = frozenset()
    expanded: list[str] = field(default_factory=list)


@dataclass
class _Frame:
    tokens: list[PlaceholderToken]
    trailing: str
    ancestry: tuple[str, ...]
    parts: list[str] = field(default_factory=list)
    position: int = 0

    @classmethod
    def for_text(cls, text: str, ancestry: tuple[str, ...]) -> "_Frame":
        result = scan(text)
        return cls(tokens=result.tokens, trailing=result.trailing, ancestry=ancestry)


class TemplateResolver:
    """
    Expand ``{{NAME}}`` references using a TemplateSource.

    Lookup order for a name is the project scope then the global scope. A
    name without an extension is also tried with each configured extension
    (``NAME.txt``, ``NAME.md``) within a scope before moving on.

    Example:
        >>> resolver = TemplateResolver(source)
        >>> result = await resolver.flatten("Intro {{GREETING}}")
        >>> result.text
        'Intro Hello {{TEXT_BLOCK}}'
    """

    def __init__(
        self,
        source: TemplateSource,
        cache: Optional[TemplateCache] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    ):
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        self.source = source
        self.cache = cache if cache is not None else TemplateCache()
        self.max_depth = max_depth
        self.extensions = tuple(extensions)

    async def flatten(self, text: str, on_warning: WarningCallback = None) -> FlattenResult:
        """
        Inline every resolvable reference placeholder in ``text``.

        Unresolvable, cyclic and too-deep references stay in the output as
        written and are reported once per name through ``on_warning``.

        Args:
            text: Raw template text
            on_warning: Optional callback receiving each TemplateWarning

        Returns:
            FlattenResult with the flattened text and collected warnings
        """
        warnings: list[TemplateWarning] = []
        seen: set[tuple[str, str]] = set()
        expanded: list[str] = []

        def warn(kind: WarningKind, name: str, message: str) -> None:
            if (kind, name) in seen:
                return
            seen.add((kind, name))
            warning = TemplateWarning(kind=kind, placeholder=name, message=message)
            warnings.append(warning)
            logger.warning("template_" + kind, placeholder=name)
            if on_warning is not None:
                on_warning(warning)

        root = _Frame.for_text(text, ())
        stack = [root]

        while stack:
            frame = stack[-1]

            if frame.position >= len(frame.tokens):
                frame.parts.append(frame.trailing)
                stack.pop()
                if stack:
                    stack[-1].parts.append("".join(frame.parts))
                continue

            token = frame.tokens[frame.position]
            frame.position += 1
            frame.parts.append(token.literal_before)

            name = token.name
            if not is_reference(name):
                frame.parts.append(token.raw)
                continue

            if name in frame.ancestry:
                chain = " -> ".join(frame.ancestry + (name,))
                warn(
                    "cyclic_reference",
                    name,
                    f"Template {name!r} references itself ({chain}); left unexpanded",
                )
                frame.parts.append(token.raw)
                continue

            if len(frame.ancestry) >= self.max_depth:
                warn(
                    "max_depth_exceeded",
                    name,
                    f"Template {name!r} is nested deeper than {self.max_depth} levels; left unexpanded",
                )
                frame.parts.append(token.raw)
                continue

            content = await self.lookup(name)
            if content is None:
                warn(
                    "unresolved_reference",
                    name,
                    f"No template named {name!r} in the project or global template folders",
                )
                frame.parts.append(token.raw)
                continue

            expanded.append(name)
            stack.append(_Frame.for_text(content, frame.ancestry + (name,)))

        logger.debug(
            "template_flattened",
            expanded=len(expanded),
            warnings=len(warnings),
        )
        return FlattenResult(
            text="".join(root.parts),
            warnings=warnings,
            reported=frozenset(name for _, name in seen),
            expanded=expanded,
        )

    async def lookup(self, name: str) -> Optional[str]:
        """
        Find a template by name, project scope first.

        Args:
            name: Reference name, with or without extension

        Returns:
            Template content, or None if no candidate file exists
        """
        for scope in SCOPES:
            for candidate in self._candidates(name):
                content = await self._read(scope, candidate)
                if content is not None:
                    return content
        return None

    def _candidates(self, name: str) -> list[str]:
        if os.path.splitext(name)[1]:
            return [name]
        return [name] + [name + ext for ext in self.extensions]

    async def _read(self, scope: str, name: str) -> Optional[str]:
        cached = self.cache.get(scope, name)
        if cached is not None:
            logger.debug("template_cache_hit", scope=scope, name=name)
            return cached
        if self.cache.is_missing(scope, name):
            return None

        try:
            content = await self.source.read_named_template(name, scope)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("template_read_failed", scope=scope, name=name, error=str(e))
            content = None

        if content is None:
            self.cache.mark_missing(scope, name)
        else:
            self.cache.put(scope, name, content)
        return content
