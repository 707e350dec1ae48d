from ipaddress import ip_address

from fastapi import Request

_MAX_HEADER_LEN = 2048
_MAX_FORWARDED_HOPS = 20


def get_tcp_peer_ip(request: Request) -> str | None:
    if request.client and request.client.host:
        return request.client.host
    return None


def get_client_ip(request: Request, *, trust_proxy_headers: bool) -> str | None:
    """Resolve the visitor IP address for tracking.

    With ``trust_proxy_headers`` the left-most valid ``X-Forwarded-For`` entry
    wins (the site runs behind a single ingress that appends to the header);
    otherwise, or when the header is missing or malformed, the TCP peer is used.
    """
    if trust_proxy_headers:
        xff = request.headers.get("x-forwarded-for")
        if xff and len(xff) <= _MAX_HEADER_LEN:
            extracted = _extract_xff(xff)
            if extracted:
                return extracted
    return get_tcp_peer_ip(request)


def _extract_xff(header: str) -> str | None:
    """Parse ``X-Forwarded-For`` header; return left-most valid IP."""
    ips = [ip.strip() for ip in header.split(",")]
    if not ips or len(ips) > _MAX_FORWARDED_HOPS:
        return None
    try:
        ip_address(ips[0])
        return ips[0]
    except ValueError:
        return None
