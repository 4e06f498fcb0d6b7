"""Placeholder scanner for template text.

Splits text into literal runs and ``{{NAME}}`` / ``{{NAME=VALUE}}`` tokens.
Scanning is a single left-to-right pass; tokens never overlap or nest. The
first ``}`` inside a value ends the value, so ``{{A={{B}}}}`` scans as the
token ``{{A={{B}}`` followed by the literal ``}}``.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

PLACEHOLDER_PATTERN = re.compile(r"\{\{([A-Za-z0-9_\-]+)(?:=([^}]*))?\}\}")


@dataclass(frozen=True)
class PlaceholderToken:
    """A single placeholder and the literal text preceding it.

    Attributes:
        literal_before: Text between the previous token (or start) and this one
        name: Placeholder name, e.g. "TEXT_BLOCK"
        value: Text after "=", or None when the placeholder has no "="
        start: Offset of the opening "{{" in the scanned text
        end: Offset just past the closing "}}"
    """

    literal_before: str
    name: str
    value: Optional[str]
    start: int
    end: int

    @property
    def raw(self) -> str:
        """Placeholder exactly as written in the source."""
        if self.value is None:
            return f"{{{{{self.name}}}}}"
        return f"{{{{{self.name}={self.value}}}}}"


@dataclass(frozen=True)
class ScanResult:
    """Ordered tokens plus the literal text after the last one."""

    tokens: list[PlaceholderToken] = field(default_factory=list)
    trailing: str = ""


def scan(text: str) -> ScanResult:
    """Tokenize text into placeholders and literal runs.

    Args:
        text: Template text

    Returns:
        ScanResult whose literals and raw tokens concatenate back to ``text``

    Examples:
        >>> result = scan("Hi {{TEXT_BLOCK=you}}!")
        >>> result.tokens[0].name, result.tokens[0].value, result.trailing
        ('TEXT_BLOCK', 'you', '!')
    """
    tokens = []
    cursor = 0

    for match in PLACEHOLDER_PATTERN.finditer(text):
        tokens.append(
            PlaceholderToken(
                literal_before=text[cursor:match.start()],
                name=match.group(1),
                value=match.group(2),
                start=match.start(),
                end=match.end(),
            )
        )
        cursor = match.end()

    return ScanResult(tokens=tokens, trailing=text[cursor:])


def contains_placeholder(text: str) -> bool:
    """Check whether text holds at least one placeholder."""
    return PLACEHOLDER_PATTERN.search(text) is not None
