from __future__ import annotations

from functools import wraps
from typing import Callable

from flask import g, request

from ..auth.policy import Requirement, check
from ..auth.principal import Principal
from ..auth.tokens import TokenService
from ..core.exceptions import AuthenticationError


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Authentication required")
    return token.strip()


def make_guard(tokens: TokenService) -> Callable[..., Callable]:
    """Build a decorator factory bound to ``tokens``.

    ``guard()`` only requires a valid token, ``guard(Requirement.SUPER_ADMIN_ONLY)``
    also checks the role before the view runs.
    """

    def guard(requirement: Requirement = Requirement.ANY):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                principal = tokens.verify(_bearer_token())
                check(principal, requirement)
                g.principal = principal
                return view(*args, **kwargs)

            return wrapper

        return decorator

    return guard


def current_principal() -> Principal:
    principal = getattr(g, "principal", None)
    if principal is None:
        raise AuthenticationError("Authentication required")
    return principal
