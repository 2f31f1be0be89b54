"""Small helpers the auth callbacks lean on: ids, timestamps and client IPs."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from starlette.requests import Request

# Checked in order; the first one present wins.
CLIENT_IP_HEADERS = ("cf-connecting-ip", "x-real-ip", "x-forwarded-for")
DEFAULT_CLIENT_IP = "127.0.0.1"


def get_uuid() -> str:
    """Generate a random UUID string for a new user."""
    return str(uuid.uuid4())


def get_iso_timestr() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def get_client_ip(request: Request | None) -> str:
    """Resolve the client IP for a request.

    Proxy headers take precedence over the socket peer address. For
    X-Forwarded-For only the first (client-most) hop is used.

    Returns an empty string when there is no request to inspect.
    """
    if request is None:
        return ""

    for header in CLIENT_IP_HEADERS:
        value = request.headers.get(header)
        if value:
            return value.split(",")[0].strip()

    if request.client and request.client.host:
        return request.client.host

    return DEFAULT_CLIENT_IP
