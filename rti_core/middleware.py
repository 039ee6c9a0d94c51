"""
RTI Middleware
==============
Starlette middleware that runs each request through the RTI service and
enforces the resulting action.

Usage:
    from rti_core import Policy, Mode, RTIMiddleware

    app.add_middleware(
        RTIMiddleware,
        policy=Policy(
            mode=Mode.BLOCKING,
            api_key=settings.RTI_API_KEY,
            tag_hash=settings.RTI_TAG_HASH,
            block_redirect_codes=(2, 3, 6, 7, 10, 11, 16, 18),
            challenge_codes=(4, 5, 13, 14, 15),
        ),
        challenge=render_captcha,
    )

    # A service passed in is owned by the host: await service.aclose()
    # from the app lifespan on shutdown
    service = RTIService()
    app.add_middleware(RTIMiddleware, policy=policy, service=service)
"""

from typing import Any, Awaitable, Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response

from rti_core.body import build_request_body
from rti_core.config.policy import Policy
from rti_core.config.validation import ConfigurationError, validate_policy
from rti_core.engine import RTICore
from rti_core.http.client import RTIService
from rti_core.http.exceptions import RTIServiceError
from rti_core.models import Action, RTIRequest, RTIResponse
from rti_core.rti_logger import RTILogger, request_id_var

ChallengeHandler = Callable[[Request, RTIResponse], Awaitable[Response]]


class RTIMiddleware(BaseHTTPMiddleware):
    """
    Middleware that asks the RTI service about every request.

    Ignored paths (blocking mode only) skip the RTI call entirely.
    Service failures fail open: the request is allowed and the error logged.

    A service passed in by the host is closed by the host. When the
    middleware creates its own RTIService, aclose() releases it.
    """

    def __init__(
        self,
        app,
        policy: Policy,
        service: Any = None,
        rti_logger: Optional[RTILogger] = None,
        challenge: Optional[ChallengeHandler] = None,
        ja3_header: Optional[str] = None,
        channel: Optional[str] = None,
        fail_on_invalid_config: bool = True,
    ):
        super().__init__(app)
        self.rti_logger = rti_logger or RTILogger()

        errors = validate_policy(policy)
        if errors:
            if fail_on_invalid_config:
                raise ConfigurationError(errors)
            for error in errors:
                self.rti_logger.error(error, action="config")

        self.policy = policy
        self.core = RTICore(policy)
        self._owns_service = service is None
        self.service = service if service is not None else RTIService()
        self.challenge = challenge
        self.ja3_header = ja3_header
        self.channel = channel

    async def aclose(self) -> None:
        """Close the RTIService created by this middleware, if any."""
        if self._owns_service:
            await self.service.aclose()

    def _build_rti_request(self, request: Request) -> RTIRequest:
        """Adapt a Starlette request to an RTIRequest."""
        headers = dict(request.headers.items())
        ja3 = request.headers.get(self.ja3_header) if self.ja3_header else None
        return RTIRequest(
            event_type=self.core.get_event_type(request.url.path, request.method),
            url=str(request.url),
            ip=request.client.host if request.client else "",
            method=request.method,
            headers=headers,
            ja3=ja3,
            channel=self.channel,
        )

    async def dispatch(self, request: Request, call_next):
        """Process request and enforce the RTI action."""
        path = request.url.path

        if self.core.should_ignore(path):
            return await call_next(request)

        rti_request = self._build_rti_request(request)
        body = build_request_body(rti_request, self.policy)

        try:
            verdict = await self.service.call_rti(body, self.policy)
        except RTIServiceError as e:
            self.rti_logger.error(
                f"RTI request failed: {e}",
                action=Action.ALLOW.value,
                path=path,
            )
            return await call_next(request)

        action = self.core.get_action(verdict)
        token = request_id_var.set(verdict.request_id)
        try:
            self.rti_logger.audit(
                "RTI decision",
                action=action.value,
                path=path,
                method=request.method,
                event_type=rti_request.event_type.value,
                threat_type_code=verdict.threat_type_code,
            )

            response = await self._execute(action, request, verdict, call_next)
        finally:
            request_id_var.reset(token)

        if verdict.set_cookie:
            response.headers.append("set-cookie", verdict.set_cookie)
        return response

    async def _execute(
        self,
        action: Action,
        request: Request,
        verdict: RTIResponse,
        call_next,
    ) -> Response:
        if action == Action.BLOCK:
            return self._blocked_response(verdict)
        if action == Action.REDIRECT:
            return RedirectResponse(self.policy.redirect_location, status_code=302)
        if action == Action.CHALLENGE:
            if self.challenge is not None:
                return await self.challenge(request, verdict)
            self.rti_logger.warn(
                "Challenge requested but no challenge handler configured",
                action=Action.ALLOW.value,
                path=request.url.path,
            )
        return await call_next(request)

    def _blocked_response(self, verdict: RTIResponse) -> JSONResponse:
        """Return response for a blocked request."""
        return JSONResponse(
            status_code=403,
            content={
                "error": "access_denied",
                "message": "Request blocked.",
                "code": "RTI_BLOCKED",
                "request_id": verdict.request_id,
            }
        )
