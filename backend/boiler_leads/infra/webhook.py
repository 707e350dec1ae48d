import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict
from urllib.parse import urlparse

import httpx

from boiler_leads.infra.metrics import Metrics

logger = logging.getLogger(__name__)

FORM_SUBMISSION = "form_submission"


def _target_host(url: str) -> str | None:
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


class WebhookNotifier:
    """Best-effort notifier for a single externally configured endpoint.

    Deliveries are attempted at most once, never retried and never raise;
    failures are logged and counted. Without a URL every call is a no-op.
    """

    def __init__(
        self,
        url: str | None,
        *,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
        metrics: Metrics | None = None,
    ) -> None:
        self.url = url or None
        self.timeout_seconds = timeout_seconds
        self.transport = transport
        self.metrics = metrics
        self._pending: set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return self.url is not None

    def dispatch(self, kind: str, data: Dict[str, Any]) -> asyncio.Task | None:
        if not self.enabled:
            return None
        task = asyncio.get_running_loop().create_task(self.notify(kind, data))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def notify(self, kind: str, data: Dict[str, Any]) -> bool:
        if not self.enabled:
            return False
        payload = {
            "kind": kind,
            "data": data,
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        }
        host = _target_host(self.url)
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
                response = await client.post(self.url, json=payload)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "webhook_delivery_error",
                extra={"extra": {"kind": kind, "host": host, "error_type": type(exc).__name__}},
            )
            self._record("error")
            return False
        if 200 <= response.status_code < 300:
            logger.info(
                "webhook_delivered",
                extra={"extra": {"kind": kind, "host": host, "status_code": response.status_code}},
            )
            self._record("success")
            return True
        logger.warning(
            "webhook_delivery_non_2xx",
            extra={"extra": {"kind": kind, "host": host, "status_code": response.status_code}},
        )
        self._record(f"status_{response.status_code // 100}xx")
        return False

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self, timeout: float | None = None) -> None:
        if not self._pending:
            return
        tasks = list(self._pending)
        _done, not_done = await asyncio.wait(tasks, timeout=timeout)
        if not_done:
            logger.warning("webhook_drain_timeout", extra={"extra": {"pending": len(not_done)}})
            for task in not_done:
                task.cancel()
            await asyncio.gather(*not_done, return_exceptions=True)

    def _record(self, result: str) -> None:
        if self.metrics is not None:
            self.metrics.record_webhook_delivery(result)
