"""
Header Functions
================
Case-tolerant header lookup and RTI cookie extraction.

Inbound header maps keep either lowercase keys or title-cased keys
depending on the server runtime, so lookups try both forms.
"""

from typing import Mapping, Optional

from rti_core.models import RTIParams


def capitalize(value: str = "", splitter: str = " ") -> str:
    """Upper-case the first character of each segment, leaving the rest as is."""
    return splitter.join(
        segment[:1].upper() + segment[1:] for segment in value.split(splitter)
    )


def get_header_by_name(
    headers: Mapping[str, str],
    name: str = "",
    default: Optional[str] = None,
) -> Optional[str]:
    """
    Get a header value by name, ignoring case convention.

    Tries the lowercased name, then the title-cased name
    (e.g. "x-real-ip" then "X-Real-IP"). Empty values count as missing.

    Args:
        headers: Header map with lowercase or title-cased keys
        name: Canonical header name
        default: Returned when neither form has a value

    Returns:
        Header value or default
    """
    return (
        headers.get(name.lower())
        or headers.get(capitalize(name, "-"))
        or default
    )


def get_cheq_cookie(cookie: Optional[str]) -> Optional[str]:
    """
    Extract the RTI cookie value from a Cookie header.

    Returns None when there is no cookie header or no RTI cookie in it.
    """
    if not cookie:
        return None

    marker = RTIParams.CHEQ_COOKIE_NAME.value
    for segment in cookie.split(";"):
        segment = segment.strip()
        position = segment.find(marker)
        if position != -1:
            # Skip the marker and the "=" that follows it
            return segment[position + len(marker) + 1:]
    return None
