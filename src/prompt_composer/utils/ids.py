"""Identifier generation for blocks and groups."""

import itertools
import uuid
from typing import Callable

IdFactory = Callable[[], str]


def generate_random_uuid() -> str:
    """
    Generate random UUID v4.

    Default id factory for new blocks and groups.

    Returns:
        UUID string in standard format

    Example:
        >>> generate_random_uuid()
        "f47ac10b-58cc-4372-a567-0e02b2c3d479"
    """
    return str(uuid.uuid4())


def sequential_id_factory(prefix: str = "id") -> IdFactory:
    """
    Build an id factory producing "prefix-1", "prefix-2", ...

    Useful where stable, readable ids matter more than global uniqueness
    (CLI output, tests).

    Args:
        prefix: String placed before the counter

    Returns:
        Zero-argument callable returning the next id
    """
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"
