from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

_DISABLED_BODY = b"metrics_disabled 1\n"
_TEXT_CONTENT_TYPE = "text/plain; version=0.0.4"


class Metrics:
    """Prometheus counters for lead submissions, webhook deliveries and HTTP traffic.

    A disabled instance accepts every call and records nothing, so callers never
    branch on configuration.
    """

    def __init__(self, enabled: bool = False) -> None:
        self.reset(enabled)

    def reset(self, enabled: bool) -> None:
        self.enabled = enabled
        self.registry = CollectorRegistry(auto_describe=True)
        self.submissions = Counter(
            "submissions_total",
            "Inquiry and visit submissions by kind and outcome.",
            ["kind", "outcome"],
            registry=self.registry,
        )
        self.webhook_deliveries = Counter(
            "webhook_deliveries_total",
            "Webhook delivery attempts by result.",
            ["result"],
            registry=self.registry,
        )
        self.http_requests = Counter(
            "http_requests_total",
            "HTTP requests by method, route and status class.",
            ["method", "route", "status_class"],
            registry=self.registry,
        )
        self.http_latency = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration by route.",
            ["method", "route"],
            buckets=(0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5),
            registry=self.registry,
        )

    def record_submission(self, kind: str, outcome: str) -> None:
        if self.enabled:
            self.submissions.labels(kind=kind, outcome=outcome).inc()

    def record_webhook_delivery(self, result: str) -> None:
        if self.enabled:
            self.webhook_deliveries.labels(result=result).inc()

    def observe_http_request(self, method: str, route: str, status_code: int, duration_seconds: float) -> None:
        if not self.enabled:
            return
        self.http_requests.labels(method=method, route=route, status_class=f"{status_code // 100}xx").inc()
        self.http_latency.labels(method=method, route=route).observe(max(0.0, duration_seconds))

    def render(self) -> tuple[bytes, str]:
        if not self.enabled:
            return _DISABLED_BODY, _TEXT_CONTENT_TYPE
        return generate_latest(self.registry), CONTENT_TYPE_LATEST


metrics = Metrics(enabled=False)


def configure_metrics(enabled: bool) -> Metrics:
    metrics.reset(enabled)
    return metrics
