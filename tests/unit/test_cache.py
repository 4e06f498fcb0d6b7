"""Unit tests for TemplateCache."""

from prompt_composer.template.cache import TemplateCache


class TestTemplateCache:
    """Tests for cached hits, misses and invalidation."""

    def test_put_and_get(self):
        cache = TemplateCache()
        cache.put("project", "GREETING", "Hello")

        assert cache.get("project", "GREETING") == "Hello"
        assert cache.get("global", "GREETING") is None

    def test_empty_content_is_a_hit(self):
        """Test an empty template is cached as content, not as a miss."""
        cache = TemplateCache()
        cache.put("project", "EMPTY", "")

        assert cache.get("project", "EMPTY") == ""
        assert not cache.is_missing("project", "EMPTY")

    def test_mark_missing_replaces_content(self):
        cache = TemplateCache()
        cache.put("project", "GREETING", "Hello")
        cache.mark_missing("project", "GREETING")

        assert cache.is_missing("project", "GREETING")
        assert cache.get("project", "GREETING") is None

    def test_put_clears_missing(self):
        cache = TemplateCache()
        cache.mark_missing("global", "GREETING")
        cache.put("global", "GREETING", "Hi")

        assert not cache.is_missing("global", "GREETING")

    def test_invalidate_one_name_all_scopes(self):
        """Test invalidate(name) forgets that name only."""
        cache = TemplateCache()
        cache.put("project", "A", "a")
        cache.mark_missing("global", "A")
        cache.put("project", "B", "b")

        cache.invalidate("A")

        assert cache.get("project", "A") is None
        assert not cache.is_missing("global", "A")
        assert cache.get("project", "B") == "b"
        assert len(cache) == 1

    def test_invalidate_all(self):
        cache = TemplateCache()
        cache.put("project", "A", "a")
        cache.mark_missing("global", "B")

        cache.invalidate()

        assert len(cache) == 0
