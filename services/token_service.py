from datetime import datetime, timezone, timedelta
from jose import jwt
from core.config import settings


class TokenService:
    """
    Issues access tokens understood by utils.deps.get_current_user.

    Authentication itself (login, refresh) lives in the identity service;
    this is used by internal tooling and tests.
    """

    @staticmethod
    def create_access_token(email: str, user_id: int, role: str, expires_delta: timedelta = None):
        """
        Creates a JWT access token.

        Args:
            email: User's email
            user_id: User's ID
            role: User's role (see core.permissions)
            expires_delta: Token lifetime (default: ACCESS_TOKEN_EXPIRE_MINUTES)

        Returns:
            JWT access token string
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

        payload = {
            "sub": email,
            "id": user_id,
            "role": role,
            "type": "access",
            "exp": datetime.now(timezone.utc) + expires_delta
        }

        return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
