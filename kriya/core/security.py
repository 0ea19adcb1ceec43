"""
安全模块

认证由外部身份服务完成，本服务只校验其签发的 JWT，
并以 `sub` 作为店主 ID（owner_id）
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi.security import HTTPBearer
from jose import JWTError, jwt

from kriya.core.config import settings

bearer_scheme = HTTPBearer(auto_error=False)


def decode_token(token: str) -> Optional[dict[str, Any]]:
    """解码令牌，失败返回 None"""
    options = {"verify_aud": settings.AUTH_JWT_AUDIENCE is not None}
    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
            options=options,
        )
    except JWTError:
        return None


def create_access_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[dict[str, Any]] = None,
) -> str:
    """
    签发访问令牌

    生产环境由外部身份服务签发；本函数用于脚本与测试
    """
    now = datetime.now(timezone.utc)
    to_encode: dict[str, Any] = {
        "sub": subject,
        "iat": now,
        "exp": now + (expires_delta or timedelta(minutes=15)),
    }
    if settings.AUTH_JWT_AUDIENCE:
        to_encode["aud"] = settings.AUTH_JWT_AUDIENCE
    if extra_claims:
        to_encode.update(extra_claims)

    return jwt.encode(to_encode, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)
