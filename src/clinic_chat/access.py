from __future__ import annotations
from dataclasses import dataclass

from .errors import ChatError, ForbiddenOriginError, MethodNotAllowedError

PREFLIGHT_METHOD = "OPTIONS"
SUBMIT_METHOD = "POST"


@dataclass
class AccessDecision:
    allow: bool
    is_preflight: bool = False
    error: ChatError | None = None


class AccessGate:
    """Origin allow-list and method rules for the chat endpoint."""

    def __init__(self, allowed_origins: list[str]):
        self.allowed_origins = frozenset(allowed_origins)

    def is_allowed_origin(self, origin: str | None) -> bool:
        return bool(origin) and origin in self.allowed_origins

    def authorize(self, method: str, origin: str | None) -> AccessDecision:
        method = method.upper()
        if method == PREFLIGHT_METHOD:
            return AccessDecision(allow=True, is_preflight=True)
        if not self.is_allowed_origin(origin):
            return AccessDecision(allow=False, error=ForbiddenOriginError("Forbidden origin"))
        if method != SUBMIT_METHOD:
            return AccessDecision(allow=False, error=MethodNotAllowedError("Method not allowed"))
        return AccessDecision(allow=True)

    def cors_headers(self, origin: str | None) -> dict[str, str]:
        headers = {
            "Vary": "Origin",
            "Access-Control-Allow-Methods": f"{SUBMIT_METHOD}, {PREFLIGHT_METHOD}",
            "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Requested-With",
        }
        if self.is_allowed_origin(origin):
            headers["Access-Control-Allow-Origin"] = origin
        return headers
