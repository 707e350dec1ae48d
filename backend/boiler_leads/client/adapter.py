import logging
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx

from boiler_leads.client.tracking import TrackingParams
from boiler_leads.domain.errors import SubmissionValidationError
from boiler_leads.domain.inquiries.schemas import DEFAULT_SELECTED_MODEL, validate_inquiry

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again or call us on 0800 048 5737."

FormStatus = Literal["idle", "submitting", "submitted", "error"]


@dataclass
class FormState:
    name: str = ""
    phone: str = ""
    postcode: str = ""
    email: str = ""
    selected_model: str = DEFAULT_SELECTED_MODEL
    message: str = ""
    status: FormStatus = "idle"
    error_message: str | None = None
    field_errors: dict[str, str] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "phone": self.phone,
            "postcode": self.postcode,
            "email": self.email,
            "selectedModel": self.selected_model,
            "message": self.message,
        }

    def clear(self) -> None:
        self.name = ""
        self.phone = ""
        self.postcode = ""
        self.email = ""
        self.selected_model = DEFAULT_SELECTED_MODEL
        self.message = ""


class LeadFormClient:
    """HTTP adapter between a lead form and the submission API.

    ``submit`` never raises for server or network failures; the outcome is
    reflected on the ``FormState`` so the caller only has to render it.
    """

    def __init__(
        self,
        base_url: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
        inquiry_path: str = "/api/inquiries",
        visit_path: str = "/api/visits",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.transport = transport
        self.timeout = timeout
        self.inquiry_path = inquiry_path
        self.visit_path = visit_path
        self._tracked_pages: set[str] = set()

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def submit(self, form: FormState, tracking: TrackingParams | None = None) -> dict[str, Any] | None:
        payload = form.to_payload()
        if tracking is not None:
            payload.update(tracking.as_payload())

        try:
            validate_inquiry(payload)
        except SubmissionValidationError as exc:
            form.field_errors = {error["field"]: error["message"] for error in exc.errors or []}
            form.status = "idle"
            return None

        form.field_errors = {}
        form.error_message = None
        form.status = "submitting"
        try:
            async with self._client() as client:
                response = await client.post(self.inquiry_path, json=payload)
            response.raise_for_status()
            created = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("lead_submit_failed", extra={"extra": {"error_type": type(exc).__name__}})
            form.status = "error"
            form.error_message = GENERIC_ERROR_MESSAGE
            return None

        form.status = "submitted"
        form.clear()
        return created

    async def track_visit(self, page: str, tracking: TrackingParams | None = None) -> bool:
        if page in self._tracked_pages:
            return False
        self._tracked_pages.add(page)

        payload: dict[str, Any] = {"page": page}
        if tracking is not None:
            payload["ref"] = tracking.ref
            payload["epc"] = tracking.epc
        try:
            async with self._client() as client:
                response = await client.post(self.visit_path, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.debug("visit_tracking_failed", extra={"extra": {"page": page, "error_type": type(exc).__name__}})
            return False
        return True
