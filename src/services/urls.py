from urllib.parse import quote

from fastapi import Request

from src.config import Settings


def request_origin(req: Request) -> str:
    """프록시 헤더(X-Forwarded-*)를 고려한 요청 origin"""
    proto = req.headers.get("x-forwarded-proto") or req.url.scheme
    host = req.headers.get("x-forwarded-host") or req.headers.get("host") or req.url.netloc
    return f"{proto.split(',')[0].strip()}://{host.split(',')[0].strip()}"


def build_image_url(key: str, settings: Settings, origin: str | None = None) -> str:
    """storage key → 이미지 조회 URL

    기본은 같은 origin 기준 상대 경로.
    ABSOLUTE_URLS=true면 PUBLIC_ORIGIN(없으면 요청 origin)을 붙인다.
    """
    path = f"{settings.api_prefix.rstrip('/')}/images/{quote(key)}"
    if not settings.absolute_urls:
        return path

    base = (settings.public_origin or origin or "").rstrip("/")
    return f"{base}{path}"
