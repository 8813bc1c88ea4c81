"""Health 진단: 설정 존재 여부 + storage 쓰기/읽기 왕복

실패는 예외로 올리지 않고 결과 필드로 보고한다.
"""

import logging
import uuid
from datetime import UTC, datetime

from src.config import Settings
from src.constants import StorageKey
from src.infra.storage import get_storage
from src.schemas.base import BaseSchema

logger = logging.getLogger(__name__)

CHECK_BODY = b"ok"


class HealthReport(BaseSchema):
    ok: bool = True
    time: str
    api_prefix: str
    worker_url_set: bool
    token_set: bool
    allowed_origins: int
    storage_available: bool = False
    storage_write_read: bool = False
    storage_error: str | None = None


async def check_health(settings: Settings) -> HealthReport:
    report = HealthReport(
        time=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        api_prefix=settings.api_prefix,
        worker_url_set=bool(settings.worker_url),
        token_set=bool(settings.worker_token),
        allowed_origins=len(settings.allowed_origins),
    )

    try:
        storage = get_storage()
        report.storage_available = True

        key = f"{StorageKey.HEALTH}/{uuid.uuid4()}.txt"
        await storage.put(key, CHECK_BODY, "text/plain")
        stored = await storage.get(key)
        report.storage_write_read = stored is not None and stored.body == CHECK_BODY
    except Exception as e:
        logger.warning(f"storage 점검 실패: {e}")
        report.storage_error = str(e)

    return report
