"""Raw-edit session for a template group.

States::

    normal --begin--> raw_editing --confirm--> closed (group replaced)
                                  --cancel---> closed (flag cleared only)

The reconstructor runs exactly once, on entry. If the session is cancelled
while ``confirm`` is still parsing, the parsed blocks are discarded.
"""

from typing import Literal, Optional

from prompt_composer.composer.document import Document
from prompt_composer.composer.engine import TemplateEngine
from prompt_composer.models.warnings import WarningCallback
from prompt_composer.services.exceptions import NotGroupLeadError, RawEditStateError
from prompt_composer.utils.logging import get_logger

logger = get_logger(__name__)

SessionState = Literal["normal", "raw_editing", "closed"]


class RawEditSession:
    """Edit one block group as a single placeholder document."""

    def __init__(self, engine: TemplateEngine, document: Document, lead_id: str, group_id: str):
        self.engine = engine
        self.document = document
        self.lead_id = lead_id
        self.group_id = group_id
        self.original_text: Optional[str] = None
        self.state: SessionState = "normal"

    @classmethod
    def begin(cls, engine: TemplateEngine, document: Document, lead_id: str) -> "RawEditSession":
        """
        Enter raw-edit mode on a group lead.

        Raises:
            BlockNotFoundError: If ``lead_id`` is not in the document
            NotGroupLeadError: If the block is not a group lead
            RawEditStateError: If the group is already being raw edited
        """
        lead = document.get(lead_id)
        if not lead.is_group_lead or lead.group_id is None:
            raise NotGroupLeadError(lead_id, "edit the group as raw text")
        if lead.editing_raw:
            raise RawEditStateError(f"Group {lead.group_id} is already in raw-edit mode")

        session = cls(engine, document, lead_id, lead.group_id)
        session.original_text = engine.reconstruct(lead.group_id, document.blocks)
        document.set_editing_raw(lead_id, True)
        session.state = "raw_editing"
        logger.info("raw_edit_started", group_id=lead.group_id, length=len(session.original_text))
        return session

    async def confirm(self, new_text: str, on_warning: WarningCallback = None) -> bool:
        """
        Apply the edited text through the group replacement transaction.

        Returns:
            True if the document was updated, False if the session was
            cancelled before parsing finished
        """
        self._require_open()
        applied = await self.engine.replace_group(
            self.document,
            self.lead_id,
            self.group_id,
            new_text,
            self.original_text,
            on_warning=on_warning,
            should_apply=lambda: self.state == "raw_editing",
        )
        if not applied:
            return False
        self.state = "closed"
        logger.info("raw_edit_confirmed", group_id=self.group_id)
        return True

    def cancel(self) -> None:
        """Leave raw-edit mode without changing any block but the lead's flag."""
        self._require_open()
        self.state = "closed"
        if self.document.find(self.lead_id) is not None:
            self.document.set_editing_raw(self.lead_id, False)
        logger.info("raw_edit_cancelled", group_id=self.group_id)

    def _require_open(self) -> None:
        if self.state != "raw_editing":
            raise RawEditStateError(f"Raw-edit session for group {self.group_id} is {self.state}")
