"""Scrape API 라우트

POST는 허용된 Origin에서만 받는다. GET은 CORS 헤더만 붙이고 차단하지 않음.
"""

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.config import get_settings
from src.errors import InvalidInputError
from src.services import scrape as scrape_service
from src.services.cors import cors_headers, require_allowed_origin
from src.services.origin import normalize_origin
from src.services.urls import request_origin

router = APIRouter(prefix="/scrape", tags=["scrape"])


@router.options("")
async def preflight_scrape(req: Request) -> Response:
    """CORS preflight (허용 여부와 관계없이 헤더 응답)"""
    headers = cors_headers(req.headers.get("origin"), get_settings().allowed_origins)
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=headers)


@router.get("")
async def scrape_by_query(req: Request, domain: str | None = None) -> Response:
    """쿼리 파라미터로 scrape 요청 (domain 외 파라미터는 worker로 전달)"""
    if not domain:
        raise InvalidInputError("domain 파라미터가 필요합니다")

    return await _handle(normalize_origin(domain), req)


@router.post("")
async def scrape_by_body(req: Request) -> Response:
    """JSON body {domain}으로 scrape 요청"""
    require_allowed_origin(req.headers.get("origin"), get_settings().allowed_origins)

    # body 파싱 실패는 422가 아니라 domain 누락(400)으로 처리
    try:
        request = scrape_service.ScrapeRequest.model_validate(await req.json())
    except (ValueError, ValidationError):
        request = scrape_service.ScrapeRequest()

    if not request.domain:
        raise InvalidInputError("domain이 필요합니다")

    return await _handle(normalize_origin(request.domain), req)


async def _handle(origin: str, req: Request) -> Response:
    settings = get_settings()
    headers = cors_headers(req.headers.get("origin"), settings.allowed_origins)

    result = await scrape_service.run_scrape(
        origin,
        req.query_params,
        settings=settings,
        request_origin=request_origin(req),
    )

    if isinstance(result, scrape_service.UpstreamPassthrough):
        return Response(
            content=result.body,
            status_code=result.status_code,
            media_type=result.content_type,
            headers=headers,
        )

    return JSONResponse(
        content=result.model_dump(mode="json", by_alias=True, exclude_none=True),
        headers=headers,
    )
