"""
Policy Validation
=================
Checks an operator policy for internal consistency before it is used.

Validation functions report problems as strings and never raise;
the host decides whether to refuse startup. ensure_valid() is the
raising helper for hosts that want fail-fast behavior.
"""

import json
import re
from typing import List

import structlog

from rti_core.config.policy import Policy

logger = structlog.get_logger(__name__)


class ConfigurationError(Exception):
    """Raised by ensure_valid() when a policy has validation errors."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("Invalid RTI policy: " + "; ".join(self.errors))


def validate_config(policy: Policy) -> List[str]:
    """
    Validate that block/redirect and challenge codes do not overlap.

    Args:
        policy: Policy to check

    Returns:
        List of errors, empty when valid
    """
    errors: List[str] = []
    if policy.block_redirect_codes and policy.challenge_codes is not None:
        challenge = set(policy.challenge_codes)
        duplicates = [c for c in policy.block_redirect_codes if c in challenge]
        if duplicates:
            errors.append(
                "block_redirect_codes and challenge_codes must be unique for each list, "
                f"duplicates found: {json.dumps(duplicates, separators=(',', ':'))}"
            )
    return errors


def _pattern_error(pattern: str) -> str:
    try:
        re.compile(pattern)
    except re.error as e:
        return str(e)
    return ""


def validate_policy(policy: Policy) -> List[str]:
    """
    Run every policy check: code overlap plus structural checks.

    Args:
        policy: Policy to check

    Returns:
        List of errors, empty when valid
    """
    errors = validate_config(policy)

    if not policy.api_key:
        errors.append("api_key is required")
    if not policy.tag_hash:
        errors.append("tag_hash is required")

    for pattern in policy.ignore_paths:
        problem = _pattern_error(pattern)
        if problem:
            errors.append(f"ignore_paths pattern {pattern!r} is invalid: {problem}")

    for index, route in enumerate(policy.route_to_event_type):
        for name, pattern in (("path", route.path), ("method", route.method)):
            problem = _pattern_error(pattern)
            if problem:
                errors.append(
                    f"route_to_event_type[{index}].{name} pattern {pattern!r} is invalid: {problem}"
                )

    if policy.timeout is not None and policy.timeout <= 0:
        errors.append(f"timeout must be a positive number of milliseconds, got {policy.timeout}")

    if policy.redirect_location is not None and not policy.redirect_location.strip():
        errors.append("redirect_location must not be empty when set")

    return errors


def ensure_valid(policy: Policy) -> Policy:
    """
    Validate a policy and raise ConfigurationError on any error.

    Returns:
        The same policy, for chaining at startup
    """
    errors = validate_policy(policy)
    if errors:
        logger.error("rti_policy_invalid", errors=errors)
        raise ConfigurationError(errors)
    return policy
