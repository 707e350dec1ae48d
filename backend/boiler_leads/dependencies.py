from fastapi import Request

from boiler_leads.domain.inquiries.service import SubmissionService
from boiler_leads.domain.inquiries.store import InquiryStore, SqlAlchemyInquiryStore
from boiler_leads.infra.db import resolve_session_factory
from boiler_leads.infra.webhook import WebhookNotifier
from boiler_leads.services import resolve_services
from boiler_leads.settings import settings


def get_app_settings(request: Request):  # noqa: ANN201
    return getattr(request.app.state, "app_settings", None) or settings


def get_inquiry_store(request: Request) -> InquiryStore:
    store = getattr(request.app.state, "inquiry_store", None)
    if store is None:
        store = SqlAlchemyInquiryStore(resolve_session_factory(request))
    return store


def get_webhook_notifier(request: Request) -> WebhookNotifier:
    notifier = getattr(request.app.state, "webhook_notifier", None)
    if notifier is None:
        services = resolve_services(request.app)
        notifier = services.webhook_notifier if services else WebhookNotifier(None)
        request.app.state.webhook_notifier = notifier
    return notifier


def get_submission_service(request: Request) -> SubmissionService:
    return SubmissionService(
        get_inquiry_store(request),
        get_webhook_notifier(request),
        metrics=getattr(request.app.state, "metrics", None),
    )
