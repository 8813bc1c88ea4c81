from fastapi import APIRouter, Request, Response

from src.config import get_settings
from src.constants import CacheControl
from src.errors import ObjectNotFoundError
from src.infra.storage import get_storage
from src.services.cors import cors_headers

router = APIRouter(prefix="/images", tags=["images"])


@router.get("/{key:path}")
async def read_image(key: str, req: Request) -> Response:
    """저장된 이미지 조회. key는 재사용되지 않으므로 immutable 캐시."""
    stored = await get_storage().get(key)
    if stored is None:
        raise ObjectNotFoundError(f"Not found: {key}")

    headers = cors_headers(req.headers.get("origin"), get_settings().allowed_origins)
    headers["cache-control"] = CacheControl.IMMUTABLE
    return Response(content=stored.body, media_type=stored.content_type, headers=headers)
