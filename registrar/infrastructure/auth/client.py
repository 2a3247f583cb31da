"""Client identifier used to throttle login attempts."""
import os

from fastapi import Request

TRUST_X_FORWARDED_FOR = os.environ.get("TRUST_X_FORWARDED_FOR", "false").strip().lower() in (
    "1", "true", "yes", "on",
)


def client_identifier(request: Request, trust_xff: bool | None = None) -> str:
    """Best-effort client IP.

    X-Forwarded-For is honoured only when TRUST_X_FORWARDED_FOR is set
    (deployments behind a load balancer that overwrites the header).
    """
    if trust_xff is None:
        trust_xff = TRUST_X_FORWARDED_FOR
    if trust_xff:
        xff = request.headers.get("X-Forwarded-For", "")
        first = xff.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
