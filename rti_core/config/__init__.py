"""
RTI Configuration Module
========================
Operator policy, environment loading and validation.
"""

from .policy import (
    DEFAULT_HOST_HEADER,
    Policy,
    RouteToEventType,
    coerce_mode,
)
from .settings import (
    RTI_ENDPOINT,
    RTI_DEFAULT_TIMEOUT_MS,
    SERVICE_NAME,
    DEFAULT_RESOURCE_TYPE,
    policy_from_env,
)
from .validation import (
    ConfigurationError,
    validate_config,
    validate_policy,
    ensure_valid,
)

__all__ = [
    # Policy
    "DEFAULT_HOST_HEADER",
    "Policy",
    "RouteToEventType",
    "coerce_mode",
    # Settings
    "RTI_ENDPOINT",
    "RTI_DEFAULT_TIMEOUT_MS",
    "SERVICE_NAME",
    "DEFAULT_RESOURCE_TYPE",
    "policy_from_env",
    # Validation
    "ConfigurationError",
    "validate_config",
    "validate_policy",
    "ensure_valid",
]
