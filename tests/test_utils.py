"""Tests for the id, time and client IP helpers."""

import uuid
from datetime import datetime

from starlette.requests import Request

from signon.utils import get_client_ip, get_iso_timestr, get_uuid


def make_request(headers=None, client=None) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestIds:
    def test_uuid(self):
        value = get_uuid()
        assert uuid.UUID(value).version == 4
        assert get_uuid() != value

    def test_iso_timestr_is_utc(self):
        parsed = datetime.fromisoformat(get_iso_timestr())
        assert parsed.utcoffset().total_seconds() == 0


class TestClientIp:
    """Tests for resolving the client IP."""

    def test_no_request(self):
        assert get_client_ip(None) == ""

    def test_cloudflare_header_wins(self):
        request = make_request(
            {
                "CF-Connecting-IP": "198.51.100.1",
                "X-Real-IP": "198.51.100.2",
                "X-Forwarded-For": "198.51.100.3",
            }
        )
        assert get_client_ip(request) == "198.51.100.1"

    def test_real_ip(self):
        request = make_request({"X-Real-IP": "198.51.100.2"}, client=("10.0.0.1", 443))
        assert get_client_ip(request) == "198.51.100.2"

    def test_forwarded_for_first_hop(self):
        request = make_request({"X-Forwarded-For": "203.0.113.5, 10.0.0.2, 10.0.0.1"})
        assert get_client_ip(request) == "203.0.113.5"

    def test_peer_address(self):
        assert get_client_ip(make_request(client=("203.0.113.9", 5000))) == "203.0.113.9"

    def test_fallback(self):
        assert get_client_ip(make_request()) == "127.0.0.1"
