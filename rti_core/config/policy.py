"""
RTI Policy
==========
Operator configuration, immutable once constructed.
"""

from typing import Any, Dict, Iterable, Mapping, Optional, Tuple
from dataclasses import dataclass

from rti_core.models import EventType, Mode

DEFAULT_HOST_HEADER = "x-cheq-rti-host"

# camelCase configuration key -> Policy field
_KEY_ALIASES: Dict[str, str] = {
    "apiKey": "api_key",
    "tagHash": "tag_hash",
    "blockRedirectCodes": "block_redirect_codes",
    "challengeCodes": "challenge_codes",
    "redirectLocation": "redirect_location",
    "ignorePaths": "ignore_paths",
    "routeToEventType": "route_to_event_type",
    "trustedIPHeader": "trusted_ip_header",
    "ipHeader": "trusted_ip_header",
    "hostHeader": "host_header",
}


@dataclass(frozen=True)
class RouteToEventType:
    """Maps a path/method pattern pair to an event type."""
    path: str                # Path pattern (regex search)
    method: str              # Method pattern (regex search)
    event_type: EventType

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RouteToEventType":
        event_type = data.get("event_type", data.get("eventType"))
        return cls(
            path=data["path"],
            method=data["method"],
            event_type=EventType(event_type),
        )


_MODE_ORDINALS: Dict[int, Mode] = {0: Mode.MONITORING, 1: Mode.BLOCKING}


def coerce_mode(value: Any) -> Mode:
    """Accept a Mode, its name or value, or the 0/1 ordinal."""
    if isinstance(value, Mode):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        if value not in _MODE_ORDINALS:
            raise ValueError(f"unknown mode {value!r}")
        return _MODE_ORDINALS[value]
    text = str(value).strip()
    try:
        return Mode(text.lower())
    except ValueError:
        raise ValueError(f"unknown mode {value!r}") from None


@dataclass(frozen=True)
class Policy:
    """
    Operator policy for RTI enforcement.

    Loaded once at startup and shared read-only by every request.
    Lists are stored as tuples so the policy stays hashable and immutable.
    """
    mode: Mode
    api_key: str
    tag_hash: str
    block_redirect_codes: Tuple[int, ...] = ()
    challenge_codes: Optional[Tuple[int, ...]] = None
    redirect_location: Optional[str] = None
    ignore_paths: Tuple[str, ...] = ()
    route_to_event_type: Tuple[RouteToEventType, ...] = ()
    trusted_ip_header: Optional[str] = None
    host_header: Optional[str] = DEFAULT_HOST_HEADER  # None = bare Host header
    timeout: Optional[int] = None                     # Milliseconds

    def __post_init__(self):
        object.__setattr__(self, "mode", coerce_mode(self.mode))
        object.__setattr__(self, "block_redirect_codes", tuple(self.block_redirect_codes or ()))
        if self.challenge_codes is not None:
            object.__setattr__(self, "challenge_codes", tuple(self.challenge_codes))
        object.__setattr__(self, "ignore_paths", tuple(self.ignore_paths or ()))
        object.__setattr__(
            self,
            "route_to_event_type",
            tuple(_coerce_routes(self.route_to_event_type or ())),
        )

    @property
    def is_blocking(self) -> bool:
        return self.mode == Mode.BLOCKING

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Policy":
        """
        Build a Policy from a configuration mapping.

        Accepts snake_case field names and the camelCase keys,
        including both spellings of the trusted IP header option.
        Unknown keys are ignored.
        """
        fields = cls.__dataclass_fields__
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = _KEY_ALIASES.get(key, key)
            if name in fields:
                kwargs[name] = value
        return cls(**kwargs)


def _coerce_routes(routes: Iterable[Any]) -> Iterable[RouteToEventType]:
    for route in routes:
        if isinstance(route, RouteToEventType):
            yield route
        else:
            yield RouteToEventType.from_dict(route)
