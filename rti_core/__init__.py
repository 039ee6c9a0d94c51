"""
RTI Core Library
================
Real-time interception decision layer for web request pipelines.
"""

__version__ = "0.1.0"

# Models
from rti_core.models import (
    Action,
    EventType,
    Mode,
    RTIParams,
    RTIRequest,
    RTIResponse,
    ThreatType,
)

# Config
from rti_core.config import (
    ConfigurationError,
    Policy,
    RouteToEventType,
    ensure_valid,
    policy_from_env,
    validate_config,
    validate_policy,
)

# Headers
from rti_core.headers import (
    capitalize,
    get_cheq_cookie,
    get_header_by_name,
)

# Request Body
from rti_core.body import (
    build_request_body,
    current_time_ms,
    serialize_body,
)

# Decision Engine
from rti_core.engine import (
    RTICore,
    get_action,
    get_event_type,
    should_ignore,
)

# Service Client
from rti_core.http import (
    RTIService,
    RTIServiceError,
    RTIUnavailableError,
    RTITimeoutError,
    RTIResponseError,
)

# Logging
from rti_core.rti_logger import (
    RTILogger,
    setup_logging,
)

# Middleware
from rti_core.middleware import RTIMiddleware

__all__ = [
    # Models
    "Action",
    "EventType",
    "Mode",
    "RTIParams",
    "RTIRequest",
    "RTIResponse",
    "ThreatType",
    # Config
    "ConfigurationError",
    "Policy",
    "RouteToEventType",
    "ensure_valid",
    "policy_from_env",
    "validate_config",
    "validate_policy",
    # Headers
    "capitalize",
    "get_cheq_cookie",
    "get_header_by_name",
    # Request Body
    "build_request_body",
    "current_time_ms",
    "serialize_body",
    # Decision Engine
    "RTICore",
    "get_action",
    "get_event_type",
    "should_ignore",
    # Service Client
    "RTIService",
    "RTIServiceError",
    "RTIUnavailableError",
    "RTITimeoutError",
    "RTIResponseError",
    # Logging
    "RTILogger",
    "setup_logging",
    # Middleware
    "RTIMiddleware",
]
