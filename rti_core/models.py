"""
RTI Models
==========
Data models and enums shared by the body builder, decision engine and
service client.
"""

from typing import Dict, Optional
from dataclasses import dataclass, field
from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field


class Mode(str, Enum):
    """Enforcement mode."""
    MONITORING = "monitoring"  # Send to RTI, never act
    BLOCKING = "blocking"      # Send to RTI and act on the verdict


class Action(str, Enum):
    """Enforcement action computed for a request."""
    ALLOW = "allow"
    CHALLENGE = "challenge"
    BLOCK = "block"
    REDIRECT = "redirect"


class EventType(str, Enum):
    """RTI event types."""
    PAGE_LOAD = "page_load"
    ADD_PAYMENT = "add_payment"
    ADD_TO_CART = "add_to_cart"
    ADD_TO_WISHLIST = "add_to_wishlist"
    REGISTRATION = "registration"
    PURCHASE = "purchase"
    SEARCH = "search"
    START_TRAIL = "start_trail"
    SUBSCRIBE = "subscribe"
    FORM_SUBMISSION = "form_submission"
    CUSTOM = "custom"
    TOKEN_VALIDATION = "token_validation"


class RTIParams(str, Enum):
    """Wire field names of the RTI request body."""
    API_KEY = "ApiKey"
    TAG_HASH = "TagHash"
    EVENT_TYPE = "EventType"
    CLIENT_IP = "ClientIP"
    REQUEST_URL = "RequestURL"
    RESOURCE_TYPE = "ResourceType"
    METHOD = "Method"
    HOST = "Host"
    USER_AGENT = "UserAgent"
    ACCEPT = "Accept"
    ACCEPT_LANGUAGE = "AcceptLanguage"
    ACCEPT_ENCODING = "AcceptEncoding"
    ACCEPT_CHARSET = "AcceptCharset"
    HEADER_NAMES = "HeaderNames"
    CHEQ_COOKIE = "CheqCookie"
    CHEQ_COOKIE_NAME = "_cheq_rti"  # Cookie marker, not a body field
    REQUEST_TIME = "RequestTime"
    X_FORWARDED_FOR = "XForwardedFor"
    REFERER = "Referer"
    ORIGIN = "Origin"
    X_REQUESTED_WITH = "XRequestedWith"
    CONNECTION = "Connection"
    PRAGMA = "Pragma"
    CACHE_CONTROL = "CacheControl"
    CONTENT_TYPE = "ContentType"
    TRUE_CLIENT_IP = "TrueClientIP"
    X_REAL_IP = "XRealIP"
    REMOTE_ADDRESS = "RemoteAddr"
    FORWARDED = "Forwarded"
    JA3 = "JA3"
    CHANNEL = "Channel"


class ThreatType(IntEnum):
    """Threat type codes returned by the RTI service."""
    VALID = 0
    SCRAPERS = 2               # Invalid Bot Activity
    AUTOMATION_TOOLS = 3       # Invalid Bot Activity
    FREQUENCY_CAPPING = 4      # Invalid Suspicious Activity
    ABNORMAL_RATE_LIMIT = 5    # Invalid Suspicious Activity
    EXCESSIVE_RATE_LIMIT = 6   # Invalid Malicious Activity
    DISABLED_JAVASCRIPT = 7    # Invalid Malicious Activity
    BEHAVIORAL_ANOMALIES = 8   # Invalid Malicious Activity
    CLICK_FARM = 9             # Invalid Malicious Activity
    MALICIOUS_BOTS = 10        # Invalid Bot Activity
    FALSE_REPRESENTATION = 11  # Invalid Malicious Activity
    DATA_CENTERS = 13          # Invalid Suspicious Activity
    VPN = 14                   # Invalid Suspicious Activity
    PROXY = 15                 # Invalid Suspicious Activity
    DISABLED_COOKIES = 16      # Invalid Malicious Activity
    CLICK_HIJACKING = 17       # Invalid Malicious Activity
    NETWORK_ANOMALIES = 18     # Invalid Malicious Activity
    GOOD_BOT = 19              # Known Bots
    CRAWLERS = 20              # Undeclared Bots
    GEO_EXCLUSIONS = 21        # Invalid Suspicious Activity


@dataclass
class RTIRequest:
    """Normalized inbound request, one per HTTP request."""
    event_type: EventType
    url: str
    ip: str
    method: str
    headers: Dict[str, str] = field(default_factory=dict)
    ja3: Optional[str] = None
    channel: Optional[str] = None        # Used with EventType.CUSTOM
    resource_type: Optional[str] = None  # Response Content-Type override


class RTIResponse(BaseModel):
    """Verdict returned by the RTI service."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    version: Optional[int] = None
    is_invalid: bool = Field(alias="isInvalid")
    threat_type_code: int = Field(alias="threatTypeCode")
    request_id: str = Field(default="", alias="requestId")
    set_cookie: str = Field(default="", alias="setCookie")
