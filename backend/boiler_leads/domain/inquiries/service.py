import logging
from dataclasses import replace
from typing import Any, Protocol

from boiler_leads.domain.errors import PersistenceError, SubmissionValidationError
from boiler_leads.domain.inquiries.schemas import (
    USER_AGENT_MAX_LENGTH,
    InquiryResponse,
    RequestMetadata,
    VisitRecord,
    validate_inquiry,
    validate_visit,
)
from boiler_leads.domain.inquiries.store import InquiryStore
from boiler_leads.infra.metrics import Metrics
from boiler_leads.infra.webhook import FORM_SUBMISSION

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def dispatch(self, kind: str, data: dict[str, Any]) -> object: ...


class SubmissionService:
    """Validate, persist, then notify.

    Validation and persistence errors propagate to the caller. The webhook is
    only reached after a successful insert, and its outcome never reaches the
    caller: ``dispatch`` schedules the delivery and returns immediately.
    """

    def __init__(
        self,
        store: InquiryStore,
        notifier: Notifier,
        *,
        metrics: Metrics | None = None,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.metrics = metrics

    async def submit_inquiry(self, raw_payload: Any) -> InquiryResponse:
        try:
            validated = validate_inquiry(raw_payload)
        except SubmissionValidationError as exc:
            logger.info(
                "inquiry_rejected",
                extra={"extra": {"fields": [error["field"] for error in exc.errors or []]}},
            )
            self._record("inquiry", "invalid")
            raise

        try:
            inquiry = await self.store.create_inquiry(validated)
        except PersistenceError:
            self._record("inquiry", "persistence_error")
            raise

        created = InquiryResponse.model_validate(inquiry)
        logger.info(
            "inquiry_created",
            extra={"extra": {"inquiry_id": created.id, "source": created.source, "ref": created.ref}},
        )
        self._record("inquiry", "created")
        self._notify(FORM_SUBMISSION, created.model_dump(mode="json", by_alias=True))
        return created

    async def submit_visit(self, raw_payload: Any, request_metadata: RequestMetadata) -> VisitRecord:
        payload = dict(raw_payload) if isinstance(raw_payload, dict) else raw_payload
        if isinstance(payload, dict):
            metadata = _bounded_metadata(request_metadata)
            for key in ("userAgent", "user_agent", "ip"):
                payload.pop(key, None)
            payload["userAgent"] = metadata.user_agent
            payload["ip"] = metadata.ip

        try:
            validated = validate_visit(payload)
        except SubmissionValidationError:
            self._record("visit", "invalid")
            raise

        try:
            visit = await self.store.create_visit(validated)
        except PersistenceError:
            self._record("visit", "persistence_error")
            raise

        self._record("visit", "created")
        logger.debug("visit_recorded", extra={"extra": {"visit_id": visit.id, "page": visit.page}})
        return VisitRecord.model_validate(visit)

    def _notify(self, kind: str, data: dict[str, Any]) -> None:
        try:
            self.notifier.dispatch(kind, data)
        except Exception:  # noqa: BLE001
            logger.warning("webhook_dispatch_failed", extra={"extra": {"kind": kind}})

    def _record(self, kind: str, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.record_submission(kind, outcome)


def _bounded_metadata(metadata: RequestMetadata) -> RequestMetadata:
    user_agent = metadata.user_agent
    if user_agent and len(user_agent) > USER_AGENT_MAX_LENGTH:
        user_agent = user_agent[:USER_AGENT_MAX_LENGTH]
    return replace(metadata, user_agent=user_agent)
