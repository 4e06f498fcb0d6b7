"""Custom exceptions for prompt-composer.

Only programmer errors raise. Recoverable template problems are reported as
``TemplateWarning`` values and persistence failures as ``WriteError`` values.
"""


class PromptComposerError(Exception):
    """Base class for prompt-composer errors."""


class BlockNotFoundError(PromptComposerError):
    """Raised when an operation names a block id the document doesn't hold.

    Attributes:
        block_id: The id that was looked up
    """

    def __init__(self, block_id: str):
        self.block_id = block_id
        super().__init__(f"Block not found: {block_id}")


class NotGroupLeadError(PromptComposerError):
    """Raised when a group-level operation is attempted through a non-lead block."""

    def __init__(self, block_id: str, operation: str):
        self.block_id = block_id
        self.operation = operation
        super().__init__(f"Only the group lead may {operation}: {block_id}")


class BlockLockedError(PromptComposerError):
    """Raised when a locked block is moved or removed on its own."""

    def __init__(self, block_id: str, operation: str):
        self.block_id = block_id
        self.operation = operation
        super().__init__(f"Block is locked and cannot {operation}: {block_id}")


class GroupInvariantError(PromptComposerError):
    """Raised when a block sequence violates the group rules.

    Attributes:
        group_id: Offending group
        reason: Which rule was broken
    """

    def __init__(self, group_id: str, reason: str):
        self.group_id = group_id
        self.reason = reason
        super().__init__(f"Group {group_id}: {reason}")


class RawEditStateError(PromptComposerError):
    """Raised when a raw-edit session is used in the wrong state."""
