"""Rate limiting (slowapi)"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request
from starlette.responses import JSONResponse


def get_client_ip(request: Request) -> str:
    """Client IP, honouring the first X-Forwarded-For hop behind the proxy"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_client_ip,
    default_limits=["120/minute"],
    storage_uri="memory://",
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Too many requests. Please wait a moment and try again.",
            "retry_after": exc.detail,
        },
    )


LOGIN_RATE_LIMIT = "5/minute"
REGISTER_RATE_LIMIT = "5/hour"
REPORT_RATE_LIMIT = "10/hour"       # store abuse reports
PROMOTION_RATE_LIMIT = "30/minute"  # feature / hot-deal creation
