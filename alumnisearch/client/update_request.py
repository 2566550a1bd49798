from __future__ import annotations

import logging
from typing import Any, Mapping

from alumnisearch.client.lifecycle import RequestLifecycleManager
from alumnisearch.core.models import AlumniRecord
from alumnisearch.core.outcomes import HttpError, SubmissionError
from alumnisearch.utils.text import normalize_base_url

logger = logging.getLogger(__name__)


class UpdateRequestClient:
    """Posts correction requests for a directory record."""

    path = "api/update-request"

    def __init__(self, manager: RequestLifecycleManager, base_url: str) -> None:
        self.manager = manager
        self.base_url = normalize_base_url(base_url)

    async def submit(self, record: AlumniRecord, new_data: Mapping[str, Any]) -> None:
        if not record.roll_number:
            raise SubmissionError("Record has no roll number")
        body = {
            "rollNumber": record.roll_number,
            "oldData": record.raw,
            "newData": dict(new_data),
        }
        outcome = await self.manager.execute("POST", self.base_url + self.path, json=body, expect_json=False)
        if outcome.ok:
            logger.info("update_request_submitted", extra={"extra_fields": {"roll_number": record.roll_number}})
            return
        logger.warning(
            "update_request_failed",
            extra={"extra_fields": {"roll_number": record.roll_number, "outcome": repr(outcome)}},
        )
        status = outcome.status if isinstance(outcome, HttpError) else None
        raise SubmissionError("Failed to submit update request", status=status)
