from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from src.config import get_settings
from src.constants import CacheControl
from src.services.cors import cors_headers
from src.services.health import check_health

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health(req: Request) -> JSONResponse:
    settings = get_settings()
    report = await check_health(settings)

    headers = cors_headers(req.headers.get("origin"), settings.allowed_origins)
    headers["cache-control"] = CacheControl.NO_STORE
    return JSONResponse(
        content=report.model_dump(mode="json", by_alias=True, exclude_none=True),
        headers=headers,
    )
