from dataclasses import asdict, dataclass
from typing import Mapping
from urllib.parse import parse_qs, urlsplit


@dataclass(frozen=True)
class TrackingParams:
    ref: str | None = None
    epc: str | None = None
    source: str | None = None

    def as_payload(self) -> dict[str, str]:
        return {key: value for key, value in asdict(self).items() if value}


def _first(query: Mapping[str, list[str]], key: str) -> str | None:
    values = query.get(key) or []
    for value in values:
        value = value.strip()
        if value:
            return value
    return None


def tracking_params_from_query(query: str) -> TrackingParams:
    """Read ``ref``, ``epc`` and ``source`` from a query string.

    ``source`` falls back to ``utm_source`` when the landing link was built by
    an ad platform rather than by hand.
    """
    parsed = parse_qs(query.lstrip("?"), keep_blank_values=False)
    return TrackingParams(
        ref=_first(parsed, "ref"),
        epc=_first(parsed, "epc"),
        source=_first(parsed, "source") or _first(parsed, "utm_source"),
    )


def tracking_params_from_url(url: str) -> TrackingParams:
    return tracking_params_from_query(urlsplit(url).query)
