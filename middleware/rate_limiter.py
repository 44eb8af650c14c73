from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from jose import JWTError
from core.config import settings
from utils.deps import decode_access_token


def get_user_id(request: Request):
    """Rate limit per authenticated user, falling back to the client address."""
    header = request.headers.get("Authorization")
    if header and header.startswith("Bearer "):
        try:
            user_id = decode_access_token(header[len("Bearer "):]).get("id")
            if user_id:
                return f"user:{user_id}"
        except JWTError:
            pass

    return get_remote_address(request)


limiter = Limiter(
    key_func=get_user_id,
    default_limits=[settings.DEFAULT_RATE_LIMIT],
    enabled=settings.ENV != "testing"
)
