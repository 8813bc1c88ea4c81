"""CORS 허용 목록 기반 헤더 계산

preflight와 조회(GET)는 헤더만 계산하고 차단하지 않는다.
상태를 바꾸는 POST만 require_allowed_origin으로 차단.
"""

import logging
from collections.abc import Sequence

from src.constants import Cors
from src.errors import OriginNotAllowedError

logger = logging.getLogger(__name__)


def is_allowed_origin(origin: str | None, allowed: Sequence[str]) -> bool:
    return bool(origin) and origin in allowed


def cors_headers(origin: str | None, allowed: Sequence[str]) -> dict[str, str]:
    allow_origin = origin if origin and is_allowed_origin(origin, allowed) else "null"
    return {
        "access-control-allow-origin": allow_origin,
        "access-control-allow-methods": Cors.ALLOW_METHODS,
        "access-control-allow-headers": Cors.ALLOW_HEADERS,
        "access-control-max-age": str(Cors.MAX_AGE),
        "vary": "Origin",
    }


def require_allowed_origin(origin: str | None, allowed: Sequence[str]) -> str:
    """
    Raises:
        OriginNotAllowedError: Origin 헤더가 없거나 허용 목록에 없을 때
    """
    if not origin or not is_allowed_origin(origin, allowed):
        logger.info(f"허용되지 않은 Origin의 요청 거부: {origin!r}")
        raise OriginNotAllowedError("Origin not allowed")
    return origin
