import secrets

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from boiler_leads.dependencies import get_app_settings

router = APIRouter()


def _presented_token(request: Request) -> str | None:
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return request.query_params.get("token")


def _authorize_scrape(request: Request, app_settings) -> None:  # noqa: ANN001
    # Lead counts are business data; outside dev the scraper must present the token.
    if app_settings.app_env != "prod":
        return
    expected = app_settings.metrics_token
    if not expected:
        raise HTTPException(status_code=500, detail="Metrics token misconfigured")
    presented = _presented_token(request)
    if presented is None or not secrets.compare_digest(presented, expected):
        raise HTTPException(status_code=401, detail="Unauthorized", headers={"WWW-Authenticate": "Bearer"})


@router.get("/metrics", include_in_schema=False)
async def scrape_metrics(request: Request, app_settings=Depends(get_app_settings)) -> Response:
    metrics_client = getattr(request.app.state, "metrics", None)
    if metrics_client is None or not metrics_client.enabled:
        raise HTTPException(status_code=404, detail="Metrics disabled")
    _authorize_scrape(request, app_settings)
    payload, content_type = metrics_client.render()
    return Response(content=payload, media_type=content_type)
