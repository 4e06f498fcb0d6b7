"""Shared test fixtures for all test modules."""

import logging
from typing import Optional

import pytest
import structlog

from prompt_composer.composer.engine import TemplateEngine
from prompt_composer.template.source import WriteError, WriteResult
from prompt_composer.utils.ids import sequential_id_factory


@pytest.fixture(autouse=True, scope="session")
def quiet_structlog():
    """Keep structlog's default stdout printer out of test output."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


class InMemoryTemplateSource:
    """
    TemplateSource backed by dictionaries.

    Records every lookup so tests can assert on search order and caching.
    """

    def __init__(
        self,
        project: Optional[dict[str, str]] = None,
        global_: Optional[dict[str, str]] = None,
        companions: Optional[dict[str, str]] = None,
        global_companions: Optional[dict[str, str]] = None,
    ):
        self.templates = {"project": dict(project or {}), "global": dict(global_ or {})}
        self.companions = {"project": dict(companions or {}), "global": dict(global_companions or {})}
        self.lookups: list[tuple[str, str]] = []
        self.writes: list[tuple[str, str]] = []
        self.fail_writes = False

    async def read_named_template(self, name, scope):
        self.lookups.append((scope, name))
        return self.templates[scope].get(name)

    async def read_companion_file(self, relative_path, scope):
        return self.companions[scope].get(relative_path)

    async def write_companion_file(self, relative_path, content) -> WriteResult:
        if self.fail_writes:
            return WriteError(error=f"Failed to write file {relative_path}: disk full")
        self.writes.append((relative_path, content))
        self.companions["project"][relative_path] = content
        return True


@pytest.fixture
def make_source():
    """Factory for in-memory template sources with given templates."""
    return InMemoryTemplateSource


@pytest.fixture
def source():
    """Empty in-memory template source."""
    return InMemoryTemplateSource()


@pytest.fixture
def id_factory():
    """Readable, predictable block ids: block-1, block-2, ..."""
    return sequential_id_factory("block")


@pytest.fixture
def engine(source, id_factory):
    """Engine over the in-memory source."""
    return TemplateEngine(source, id_factory=id_factory)


@pytest.fixture
def warnings():
    """List collecting warnings; pass ``warnings.append`` as on_warning."""
    return []
