"""
RTI Request Body
================
Builds the key/value payload sent to the RTI service for one request.

The field names are the wire contract with the service (see RTIParams).
The body is deterministic for identical inputs except RequestTime,
which comes from an injectable clock.
"""

import time
from typing import Callable, Dict, Optional, Union

from rti_core.config.policy import Policy
from rti_core.config.settings import DEFAULT_RESOURCE_TYPE
from rti_core.headers import get_cheq_cookie, get_header_by_name
from rti_core.models import RTIParams, RTIRequest

BodyValue = Union[str, int, None]
RTIBody = Dict[str, BodyValue]

# Header passthrough fields: wire name -> canonical header name
PASSTHROUGH_HEADERS = (
    (RTIParams.USER_AGENT, "User-Agent"),
    (RTIParams.X_FORWARDED_FOR, "X-Forwarded-For"),
    (RTIParams.REFERER, "Referer"),
    (RTIParams.ACCEPT, "Accept"),
    (RTIParams.ACCEPT_ENCODING, "Accept-Encoding"),
    (RTIParams.ACCEPT_LANGUAGE, "Accept-Language"),
    (RTIParams.ACCEPT_CHARSET, "Accept-Charset"),
    (RTIParams.ORIGIN, "Origin"),
    (RTIParams.X_REQUESTED_WITH, "X-Requested-With"),
    (RTIParams.CONNECTION, "Connection"),
    (RTIParams.PRAGMA, "Pragma"),
    (RTIParams.CACHE_CONTROL, "Cache-Control"),
    (RTIParams.TRUE_CLIENT_IP, "True-Client-IP"),
    (RTIParams.X_REAL_IP, "X-Real-IP"),
    (RTIParams.REMOTE_ADDRESS, "Remote-Addr"),
    (RTIParams.FORWARDED, "Forwarded"),
)


def current_time_ms() -> int:
    """Wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def _client_ip(request: RTIRequest, policy: Policy) -> str:
    if policy.trusted_ip_header:
        return get_header_by_name(request.headers, policy.trusted_ip_header, request.ip)
    return request.ip


def _host(request: RTIRequest, policy: Policy) -> Optional[str]:
    host = get_header_by_name(request.headers, "Host")
    if policy.host_header:
        return get_header_by_name(request.headers, policy.host_header, host)
    return host


def build_request_body(
    request: RTIRequest,
    policy: Policy,
    clock: Callable[[], int] = current_time_ms,
) -> RTIBody:
    """
    Build the RTI request body.

    Args:
        request: Normalized inbound request
        policy: Operator policy (credentials, IP and host header options)
        clock: Returns the current time in milliseconds

    Returns:
        Mapping of wire field name to value. Missing headers map to None;
        JA3 and Channel are omitted entirely when absent.
    """
    headers = request.headers
    event_type = getattr(request.event_type, "value", request.event_type)

    body: RTIBody = {
        RTIParams.EVENT_TYPE.value: event_type,
        RTIParams.API_KEY.value: policy.api_key,
        RTIParams.TAG_HASH.value: policy.tag_hash,
        RTIParams.RESOURCE_TYPE.value: (
            request.resource_type if request.resource_type is not None
            else DEFAULT_RESOURCE_TYPE
        ),
        RTIParams.CHEQ_COOKIE.value: get_cheq_cookie(get_header_by_name(headers, "cookie")),
        RTIParams.METHOD.value: request.method,
        RTIParams.CLIENT_IP.value: _client_ip(request, policy),
        RTIParams.REQUEST_URL.value: request.url,
        RTIParams.REQUEST_TIME.value: clock(),
        RTIParams.HEADER_NAMES.value: ",".join(headers.keys()),
        RTIParams.HOST.value: _host(request, policy),
    }

    for param, header_name in PASSTHROUGH_HEADERS:
        body[param.value] = get_header_by_name(headers, header_name)

    # Content-Type is sent as an empty string, never omitted
    body[RTIParams.CONTENT_TYPE.value] = get_header_by_name(headers, "Content-Type", "")

    if request.ja3:
        body[RTIParams.JA3.value] = request.ja3
    if request.channel:
        body[RTIParams.CHANNEL.value] = request.channel

    return body


def serialize_body(body: RTIBody) -> Dict[str, str]:
    """Drop absent (None) fields and stringify the rest for form encoding."""
    return {key: str(value) for key, value in body.items() if value is not None}
