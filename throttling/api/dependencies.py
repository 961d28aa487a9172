"""FastAPI integration for the check engine.

Usage:
    app = FastAPI()
    install_throttle(app, ThrottleContext.from_settings())

    @app.post("/login", dependencies=[Depends(throttle_dependency("login"))])
    def login(): ...

Allowed requests expose the check result (True or a graded value) as
``request.state.throttle_value``. Denied requests get HTTP 429.
"""

from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI, HTTPException, Request, status

from throttling.core.config import settings
from throttling.core.errors import ConfigurationError
from throttling.core.exception_handlers import setup_exception_handlers
from throttling.services.throttle import ThrottleContext

logger = logging.getLogger(__name__)


def install_throttle(app: FastAPI, context: ThrottleContext) -> None:
    """Attach a throttle context and its error handlers to the app."""
    app.state.throttle_context = context
    setup_exception_handlers(app)


def get_throttle_context(request: Request) -> ThrottleContext:
    """Return the context installed on the application.

    Raises:
        ConfigurationError: If install_throttle was never called.
    """
    context = getattr(request.app.state, "throttle_context", None)
    if context is None:
        raise ConfigurationError(
            code="throttle_not_installed",
            message="No ThrottleContext installed on the application",
        )
    return context


def _identity_for(request: Request, check_type: str) -> str | None:
    """Extract the identity value for a check type from the request."""
    if check_type == "ip":
        return request.client.host if request.client else None
    if check_type == "user_id":
        return request.headers.get(settings.throttle.identity_header)
    return request.headers.get(f"X-{check_type.replace('_', '-')}")


def throttle_dependency(policy: str, *, check_type: str = "ip") -> Callable[[Request], None]:
    """Build a dependency enforcing ``policy`` on the caller's identity.

    Args:
        policy: Policy name from the limits mapping.
        check_type: ``ip``, ``user_id``, or any other kind read from an
            ``X-<Kind>`` header.

    Returns:
        A synchronous dependency; FastAPI runs it in its threadpool so
        blocking counter stores don't stall the event loop.
    """

    def enforce_throttle(request: Request) -> None:
        context = get_throttle_context(request)
        result = context.for_policy(policy).check(check_type, _identity_for(request, check_type))

        if result is False:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded. Try again later.",
            )
        request.state.throttle_value = result

    return enforce_throttle
