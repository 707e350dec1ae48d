from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from boiler_leads.infra.metrics import Metrics, configure_metrics
from boiler_leads.infra.webhook import WebhookNotifier


@dataclass
class AppServices:
    """Typed container for runtime services stored on `app.state.services`."""

    metrics: Metrics
    webhook_notifier: WebhookNotifier


def build_app_services(app_settings, *, metrics: Metrics | None = None) -> AppServices:
    metrics_client = metrics or configure_metrics(app_settings.metrics_enabled)
    return AppServices(
        metrics=metrics_client,
        webhook_notifier=WebhookNotifier(
            app_settings.webhook_url,
            timeout_seconds=app_settings.webhook_timeout_seconds,
            metrics=metrics_client,
        ),
    )


def resolve_services(container_like: Any) -> AppServices | None:
    if isinstance(container_like, AppServices):
        return container_like
    if container_like is None:
        return None
    state = getattr(container_like, "state", container_like)
    return getattr(state, "services", None)
