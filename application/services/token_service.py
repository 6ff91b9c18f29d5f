"""
令牌服务 - 签发与校验访问令牌（HS256）
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
import uuid

import jwt

from core.config import settings
from core.exceptions import TokenExpiredException


class TokenService:
    """访问令牌的签发与校验。凭据校验/登录不在本服务范围内。"""

    def create_access_token(self, user_id: str, *, expires_delta: Optional[timedelta] = None) -> str:
        """创建访问令牌"""
        expire = datetime.now(timezone.utc) + (
            expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        )
        to_encode = {
            "sub": str(user_id),
            "exp": expire,
            "type": "access",
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    async def verify_access_token(self, token: str) -> Optional[str]:
        """Verify an access JWT and return the user id.

        - Expired token: raise TokenExpiredException
        - Invalid token or wrong type: return None
        """
        try:
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM],
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredException()
        except jwt.InvalidTokenError:
            return None

        if payload.get("type") != "access":
            return None

        user_id = payload.get("sub")
        if not user_id:
            return None
        return str(user_id)
