import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from models.forms import FormState

logger = logging.getLogger(__name__)


def new_form_id() -> str:
    return uuid.uuid4().hex


class SubmissionRegistry:
    def __init__(self):
        self._in_flight: Dict[str, FormState] = {}

    def __contains__(self, form_id: str) -> bool:
        return form_id in self._in_flight

    def __len__(self) -> int:
        return len(self._in_flight)

    @asynccontextmanager
    async def claim(self, form_id: Optional[str]) -> AsyncIterator[FormState]:
        """Yield the form state already in Submitting; forgotten when the block exits"""
        form_id = form_id or new_form_id()
        state = self._in_flight.get(form_id) or FormState()
        state.begin()
        self._in_flight[form_id] = state
        try:
            yield state
        finally:
            self._in_flight.pop(form_id, None)
            logger.debug("Form %s finished as %s", form_id, state.status.value)
