"""Explicit template content cache.

The cache is owned by whoever builds the resolver and handed to it; nothing
is cached at module level. Call ``invalidate()`` when project directories
change or template files are edited.
"""

from typing import Dict, Optional, Set, Tuple

from prompt_composer.utils.logging import get_logger

logger = get_logger(__name__)

CacheKey = Tuple[str, str]


class TemplateCache:
    """
    Remember template lookups by (scope, name).

    Stores both hits (the file content) and misses, so a template that is
    referenced many times is read at most once per scope.

    Example:
        >>> cache = TemplateCache()
        >>> cache.put("project", "GREETING", "Hello")
        >>> cache.get("project", "GREETING")
        'Hello'
        >>> cache.invalidate("GREETING")
    """

    def __init__(self) -> None:
        self._content: Dict[CacheKey, str] = {}
        self._missing: Set[CacheKey] = set()

    def get(self, scope: str, name: str) -> Optional[str]:
        return self._content.get((scope, name))

    def put(self, scope: str, name: str, content: str) -> None:
        key = (scope, name)
        self._content[key] = content
        self._missing.discard(key)

    def mark_missing(self, scope: str, name: str) -> None:
        key = (scope, name)
        self._missing.add(key)
        self._content.pop(key, None)

    def is_missing(self, scope: str, name: str) -> bool:
        return (scope, name) in self._missing

    def invalidate(self, name: Optional[str] = None) -> None:
        """
        Drop cached entries.

        Args:
            name: Only forget this template name (all scopes); None clears everything
        """
        if name is None:
            self._content.clear()
            self._missing.clear()
        else:
            self._content = {k: v for k, v in self._content.items() if k[1] != name}
            self._missing = {k for k in self._missing if k[1] != name}
        logger.debug("template_cache_invalidated", name=name)

    def __len__(self) -> int:
        return len(self._content) + len(self._missing)
