"""
RTI Decision Engine
===================
Maps a policy and an RTI verdict to an enforcement action.

Components:
- should_ignore: Path exemptions in blocking mode
- get_event_type: Route-to-event-type mapping
- get_action: Verdict to Action state machine
- RTICore: The three operations bound to one policy

All functions are stateless and safe to call concurrently.
"""

import re
from functools import lru_cache
from typing import Optional, Pattern

import structlog

from rti_core.config.policy import Policy
from rti_core.models import Action, EventType, Mode, RTIResponse

logger = structlog.get_logger(__name__)


@lru_cache(maxsize=512)
def _compile(pattern: str) -> Optional[Pattern[str]]:
    """Compile a policy pattern once; invalid patterns never match."""
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.warning("rti_invalid_pattern", pattern=pattern, error=str(e))
        return None


def _search(pattern: str, value: str) -> bool:
    compiled = _compile(pattern)
    return compiled is not None and compiled.search(value) is not None


def should_ignore(path: str, policy: Policy) -> bool:
    """
    Check if a path is exempt from enforcement.

    Only blocking mode honors ignore_paths; monitoring still observes
    every path.
    """
    if policy.mode == Mode.BLOCKING and policy.ignore_paths:
        return any(_search(pattern, path) for pattern in policy.ignore_paths)
    return False


def get_event_type(path: str, method: str, policy: Policy) -> EventType:
    """Event type of the first matching route rule, else PAGE_LOAD."""
    for route in policy.route_to_event_type:
        if _search(route.path, path) and _search(route.method, method):
            return route.event_type
    return EventType.PAGE_LOAD


def get_action(verdict: RTIResponse, policy: Policy) -> Action:
    """
    Compute the enforcement action for a verdict.

    Block/redirect codes are checked before challenge codes, so a code
    in both lists resolves to block or redirect. Codes in neither list
    are allowed.
    """
    if policy.mode != Mode.BLOCKING or not verdict.is_invalid:
        return Action.ALLOW

    code = verdict.threat_type_code
    if code in policy.block_redirect_codes:
        return Action.REDIRECT if policy.redirect_location else Action.BLOCK
    if policy.challenge_codes is not None and code in policy.challenge_codes:
        return Action.CHALLENGE
    return Action.ALLOW


class RTICore:
    """Decision engine bound to a single policy."""

    def __init__(self, policy: Policy):
        self.policy = policy

    def should_ignore(self, path: str) -> bool:
        return should_ignore(path, self.policy)

    def get_event_type(self, path: str, method: str) -> EventType:
        return get_event_type(path, method, self.policy)

    def get_action(self, verdict: RTIResponse) -> Action:
        return get_action(verdict, self.policy)
