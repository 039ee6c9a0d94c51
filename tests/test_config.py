"""
Tests for Policy Loading
========================
Policy construction from dicts and environment variables.
"""

import json

import pytest


class TestPolicy:
    """Tests for the Policy dataclass."""

    def test_lists_become_tuples(self):
        """Should normalize list fields to tuples."""
        from rti_core.config import Policy
        from rti_core.models import Mode

        policy = Policy(
            mode=Mode.BLOCKING,
            api_key="k",
            tag_hash="t",
            block_redirect_codes=[1, 2],
            challenge_codes=[3],
            ignore_paths=[r"\.css$"],
        )

        assert policy.block_redirect_codes == (1, 2)
        assert policy.challenge_codes == (3,)
        assert policy.ignore_paths == (r"\.css$",)
        assert policy.is_blocking is True

    def test_is_immutable(self):
        """Should reject attribute assignment."""
        import dataclasses
        from rti_core.config import Policy
        from rti_core.models import Mode

        policy = Policy(mode=Mode.MONITORING, api_key="k", tag_hash="t")

        with pytest.raises(dataclasses.FrozenInstanceError):
            policy.mode = Mode.BLOCKING

    def test_defaults(self):
        """Should default to the override host header and no challenge codes."""
        from rti_core.config import Policy, DEFAULT_HOST_HEADER

        policy = Policy(mode="monitoring", api_key="k", tag_hash="t")

        assert policy.challenge_codes is None
        assert policy.host_header == DEFAULT_HOST_HEADER
        assert policy.route_to_event_type == ()
        assert policy.timeout is None

    def test_mode_coercion(self):
        """Should accept names, values and the 0/1 ordinal."""
        from rti_core.config import coerce_mode
        from rti_core.models import Mode

        assert coerce_mode("BLOCKING") == Mode.BLOCKING
        assert coerce_mode("monitoring") == Mode.MONITORING
        assert coerce_mode(0) == Mode.MONITORING
        assert coerce_mode(1) == Mode.BLOCKING
        assert coerce_mode(Mode.BLOCKING) is Mode.BLOCKING

    def test_unknown_mode_rejected(self):
        """Should raise ValueError for ordinals other than 0/1 and unknown names."""
        from rti_core.config import Policy, coerce_mode

        for value in (-1, 2, "enforce"):
            with pytest.raises(ValueError, match="unknown mode"):
                coerce_mode(value)

        with pytest.raises(ValueError, match="unknown mode -1"):
            Policy.from_dict({"mode": -1, "apiKey": "k", "tagHash": "t"})

    def test_from_dict_camel_case(self):
        """Should accept the camelCase configuration keys."""
        from rti_core.config import Policy
        from rti_core.models import EventType, Mode

        policy = Policy.from_dict({
            "mode": 1,
            "apiKey": "bar",
            "tagHash": "foo",
            "blockRedirectCodes": [2, 3],
            "challengeCodes": [5],
            "redirectLocation": "/blocked",
            "ignorePaths": ["/images", r"\.js$"],
            "routeToEventType": [
                {"path": "/api/cart", "method": "POST|PUT", "event_type": "add_to_cart"},
            ],
            "trustedIPHeader": "X-Client-IP",
            "timeout": 300,
        })

        assert policy.mode == Mode.BLOCKING
        assert policy.api_key == "bar"
        assert policy.block_redirect_codes == (2, 3)
        assert policy.redirect_location == "/blocked"
        assert policy.route_to_event_type[0].event_type == EventType.ADD_TO_CART
        assert policy.trusted_ip_header == "X-Client-IP"
        assert policy.timeout == 300

    def test_from_dict_ip_header_alias(self):
        """Should accept ipHeader as the trusted IP header option."""
        from rti_core.config import Policy

        policy = Policy.from_dict({
            "mode": "monitoring", "api_key": "k", "tag_hash": "t", "ipHeader": "CF-Connecting-IP",
        })

        assert policy.trusted_ip_header == "CF-Connecting-IP"

    def test_from_dict_ignores_unknown_keys(self):
        """Should skip keys that are not policy fields."""
        from rti_core.config import Policy

        policy = Policy.from_dict({"mode": 0, "api_key": "k", "tag_hash": "t", "extra": True})

        assert policy.api_key == "k"


class TestPolicyFromEnv:
    """Tests for environment-based policy loading."""

    def test_full_environment(self):
        """Should read every RTI_* variable."""
        from rti_core.config import policy_from_env
        from rti_core.models import EventType, Mode

        policy = policy_from_env({
            "RTI_MODE": "blocking",
            "RTI_API_KEY": "key",
            "RTI_TAG_HASH": "hash",
            "RTI_BLOCK_REDIRECT_CODES": "2, 3,10",
            "RTI_CHALLENGE_CODES": "5",
            "RTI_REDIRECT_LOCATION": "/blocked",
            "RTI_IGNORE_PATHS": json.dumps([r"\.css$", "/health"]),
            "RTI_ROUTE_TO_EVENT_TYPE": json.dumps([
                {"path": "/api/payment$", "method": "POST", "event_type": "add_payment"},
            ]),
            "RTI_TRUSTED_IP_HEADER": "X-Client-IP",
            "RTI_TIMEOUT_MS": "250",
        })

        assert policy.mode == Mode.BLOCKING
        assert policy.block_redirect_codes == (2, 3, 10)
        assert policy.challenge_codes == (5,)
        assert policy.ignore_paths == (r"\.css$", "/health")
        assert policy.route_to_event_type[0].event_type == EventType.ADD_PAYMENT
        assert policy.trusted_ip_header == "X-Client-IP"
        assert policy.timeout == 250

    def test_minimal_environment(self):
        """Should fall back to monitoring with no optional settings."""
        from rti_core.config import policy_from_env, DEFAULT_HOST_HEADER
        from rti_core.models import Mode

        policy = policy_from_env({"RTI_API_KEY": "key", "RTI_TAG_HASH": "hash"})

        assert policy.mode == Mode.MONITORING
        assert policy.block_redirect_codes == ()
        assert policy.challenge_codes is None
        assert policy.redirect_location is None
        assert policy.host_header == DEFAULT_HOST_HEADER

    def test_comma_separated_ignore_paths(self):
        """Should accept a plain comma-separated ignore list."""
        from rti_core.config import policy_from_env

        policy = policy_from_env({"RTI_IGNORE_PATHS": "/images, /static"})

        assert policy.ignore_paths == ("/images", "/static")

    def test_json_scalar_ignore_paths(self):
        """Should treat a JSON scalar as a plain pattern list."""
        from rti_core.config import policy_from_env

        assert policy_from_env({"RTI_IGNORE_PATHS": "404"}).ignore_paths == ("404",)
        assert policy_from_env({"RTI_IGNORE_PATHS": "true"}).ignore_paths == ("true",)
        assert policy_from_env({"RTI_IGNORE_PATHS": "404,/health"}).ignore_paths == ("404", "/health")

    def test_ip_header_alias_and_bare_host(self):
        """Should accept RTI_IP_HEADER and disable the host override."""
        from rti_core.config import policy_from_env

        policy = policy_from_env({"RTI_IP_HEADER": "X-Real-IP", "RTI_HOST_HEADER": ""})

        assert policy.trusted_ip_header == "X-Real-IP"
        assert policy.host_header is None
