"""Reserved placeholder kinds.

Any placeholder whose name is not listed here is a reference to another
template file.
"""

from enum import Enum
from typing import Optional


class PlaceholderKind(Enum):
    """Placeholder names with built-in block semantics."""

    TEXT_BLOCK = "TEXT_BLOCK"
    FILE_BLOCK = "FILE_BLOCK"
    TEMPLATE_BLOCK = "TEMPLATE_BLOCK"
    PROMPT_RESPONSE = "PROMPT_RESPONSE"


RESERVED_NAMES = frozenset(kind.value for kind in PlaceholderKind)


def classify(name: str) -> Optional[PlaceholderKind]:
    """Map a placeholder name to its reserved kind.

    Args:
        name: Placeholder name as scanned

    Returns:
        The reserved kind, or None when the name is a template reference
    """
    try:
        return PlaceholderKind(name)
    except ValueError:
        return None


def is_reference(name: str) -> bool:
    """True when the placeholder names another template."""
    return name not in RESERVED_NAMES
