"""
RTI Configuration
=================
Configuration constants and environment variables.
"""

import json
import os
from typing import List, Mapping, Optional, Tuple

from rti_core.config.policy import DEFAULT_HOST_HEADER, Policy

# Configuration from environment
RTI_ENDPOINT = os.getenv(
    "RTI_ENDPOINT", "https://rti-global.cheqzone.com/v1/realtime-interception"
)
RTI_DEFAULT_TIMEOUT_MS = int(os.getenv("RTI_DEFAULT_TIMEOUT_MS", "1000"))
SERVICE_NAME = os.getenv("SERVICE_NAME", "rti-core")
DEFAULT_RESOURCE_TYPE = "text/html"


def _parse_codes(raw: Optional[str]) -> Tuple[int, ...]:
    if not raw:
        return ()
    return tuple(int(code) for code in raw.split(",") if code.strip())


def _parse_patterns(raw: Optional[str]) -> List[str]:
    """JSON list of patterns, or a comma-separated list for simple setups."""
    if not raw:
        return []
    try:
        patterns = json.loads(raw)
    except ValueError:
        patterns = None
    if isinstance(patterns, list):
        return [str(p) for p in patterns]
    if isinstance(patterns, str):
        return [patterns]
    return [p.strip() for p in raw.split(",") if p.strip()]


def policy_from_env(environ: Optional[Mapping[str, str]] = None) -> Policy:
    """
    Build a Policy from RTI_* environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Policy (not yet validated)
    """
    env = os.environ if environ is None else environ

    challenge_raw = env.get("RTI_CHALLENGE_CODES")
    host_header = env.get("RTI_HOST_HEADER")
    timeout_raw = env.get("RTI_TIMEOUT_MS")
    routes_raw = env.get("RTI_ROUTE_TO_EVENT_TYPE")

    return Policy.from_dict({
        "mode": env.get("RTI_MODE", "monitoring"),
        "api_key": env.get("RTI_API_KEY", ""),
        "tag_hash": env.get("RTI_TAG_HASH", ""),
        "block_redirect_codes": _parse_codes(env.get("RTI_BLOCK_REDIRECT_CODES")),
        "challenge_codes": _parse_codes(challenge_raw) if challenge_raw else None,
        "redirect_location": env.get("RTI_REDIRECT_LOCATION") or None,
        "ignore_paths": _parse_patterns(env.get("RTI_IGNORE_PATHS")),
        "route_to_event_type": json.loads(routes_raw) if routes_raw else [],
        "trusted_ip_header": (
            env.get("RTI_TRUSTED_IP_HEADER") or env.get("RTI_IP_HEADER") or None
        ),
        # Unset keeps the override header, empty selects the bare Host variant
        "host_header": DEFAULT_HOST_HEADER if host_header is None else (host_header or None),
        "timeout": int(timeout_raw) if timeout_raw else None,
    })
