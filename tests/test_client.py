"""
Tests for the RTI Service Client
================================
Uses httpx.MockTransport in place of the RTI service.
"""

from urllib.parse import parse_qs

import httpx
import pytest

VERDICT = {
    "version": 1,
    "isInvalid": True,
    "threatTypeCode": 10,
    "requestId": "req-123",
    "setCookie": "_cheq_rti=abc; Path=/",
}


def make_policy(**overrides):
    from rti_core.config import Policy
    from rti_core.models import Mode

    values = dict(mode=Mode.BLOCKING, api_key="bar", tag_hash="foo", block_redirect_codes=[10])
    values.update(overrides)
    return Policy(**values)


def make_body():
    from rti_core.body import build_request_body
    from rti_core.models import EventType, RTIRequest

    request = RTIRequest(
        event_type=EventType.PAGE_LOAD,
        url="https://shop.test/",
        ip="203.0.113.9",
        method="GET",
        headers={"host": "shop.test", "user-agent": "Mozilla/5.0"},
    )
    return build_request_body(request, make_policy(), clock=lambda: 1700000000000)


def make_service(handler, calls=None):
    from rti_core.http import RTIService

    def recording_handler(request):
        if calls is not None:
            calls.append(request)
        return handler(request)

    return RTIService(
        endpoint="https://rti.test/v1/realtime-interception",
        timeout_ms=1000,
        transport=httpx.MockTransport(recording_handler),
    )


class TestRTIService:
    """Tests for RTIService.call_rti."""

    @pytest.mark.asyncio
    async def test_posts_form_body_and_parses_verdict(self):
        """Should post the serialized body and return the parsed verdict."""
        calls = []
        service = make_service(lambda request: httpx.Response(200, json=VERDICT), calls)

        verdict = await service.call_rti(make_body(), make_policy())
        await service.aclose()

        assert verdict.is_invalid is True
        assert verdict.threat_type_code == 10
        assert verdict.request_id == "req-123"

        sent = calls[0]
        form = parse_qs(sent.content.decode())
        assert sent.method == "POST"
        assert str(sent.url) == "https://rti.test/v1/realtime-interception"
        assert form["ApiKey"] == ["bar"]
        assert form["Host"] == ["shop.test"]
        assert form["RequestTime"] == ["1700000000000"]
        assert "CheqCookie" not in form  # Absent fields are not sent
        assert "Referer" not in form

    @pytest.mark.asyncio
    async def test_uses_policy_timeout(self):
        """Should apply the policy timeout in milliseconds."""
        calls = []
        service = make_service(lambda request: httpx.Response(200, json=VERDICT), calls)

        await service.call_rti(make_body(), make_policy(timeout=250))
        await service.call_rti(make_body(), make_policy())
        await service.aclose()

        assert calls[0].extensions["timeout"]["read"] == 0.25
        assert calls[1].extensions["timeout"]["read"] == 1.0

    @pytest.mark.asyncio
    async def test_timeout_is_not_retried(self):
        """Should raise RTITimeoutError after a single attempt."""
        from rti_core.http import RTITimeoutError

        calls = []

        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        service = make_service(handler, calls)

        with pytest.raises(RTITimeoutError):
            await service.call_rti(make_body(), make_policy())

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_connect_error_is_retried(self):
        """Should retry connection failures once, then raise."""
        from rti_core.http import RTIUnavailableError

        calls = []

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = make_service(handler, calls)

        with pytest.raises(RTIUnavailableError):
            await service.call_rti(make_body(), make_policy())

        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_recovers_after_server_error(self):
        """Should succeed when the retry gets a good response."""
        calls = []

        def handler(request):
            if len(calls) == 1:
                return httpx.Response(503, text="unavailable")
            return httpx.Response(200, json=VERDICT)

        service = make_service(handler, calls)

        verdict = await service.call_rti(make_body(), make_policy())

        assert verdict.request_id == "req-123"
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self):
        """Should map 4xx to RTIResponseError without retrying."""
        from rti_core.http import RTIResponseError

        calls = []
        service = make_service(lambda request: httpx.Response(401, text="bad key"), calls)

        with pytest.raises(RTIResponseError) as exc_info:
            await service.call_rti(make_body(), make_policy())

        assert exc_info.value.status_code == 401
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_malformed_verdict(self):
        """Should raise RTIResponseError for a payload missing required fields."""
        from rti_core.http import RTIResponseError, RTIServiceError

        service = make_service(lambda request: httpx.Response(200, json={"version": 1}))

        with pytest.raises(RTIResponseError) as exc_info:
            await service.call_rti(make_body(), make_policy())

        assert isinstance(exc_info.value, RTIServiceError)
