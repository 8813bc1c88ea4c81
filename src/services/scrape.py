"""Scrape 서비스: worker 호출 → 섹션 이미지 저장 → URL 응답

비즈니스 로직만 담당. CORS / 요청 파싱은 route에서 처리.
"""

import json
import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from src.config import Settings
from src.errors import UpstreamError
from src.infra.storage import get_storage
from src.schemas.base import BaseSchema
from src.schemas.section import SectionOut
from src.services.persist import SectionPersister, persist_sections
from src.services.urls import build_image_url
from src.services.worker import effective_cap, forward_params, get_worker_client, is_truthy

logger = logging.getLogger(__name__)


class ScrapeRequest(BaseSchema):
    """POST /scrape 요청"""

    domain: str | None = None


class ScrapeResponse(BaseSchema):
    """Scrape 응답"""

    job_id: str
    origin: str
    sections: list[SectionOut]
    meta: dict[str, Any] = {}


@dataclass(frozen=True)
class UpstreamPassthrough:
    """worker 응답을 가공 없이 그대로 돌려줄 때 (오류 응답, raw 모드)"""

    status_code: int
    body: bytes
    content_type: str


def _generate_job_id() -> str:
    return str(uuid.uuid4())


def _parse_payload(content: bytes) -> tuple[list[Any], dict[str, Any]]:
    """
    Raises:
        UpstreamError: JSON이 아니거나 sections가 배열이 아닐 때
    """
    try:
        payload = json.loads(content)
    except ValueError as e:
        raise UpstreamError("worker 응답 파싱 실패") from e

    if not isinstance(payload, dict):
        raise UpstreamError("worker 응답 형식 오류: 객체가 아닙니다")

    sections = payload.get("sections") or []
    if not isinstance(sections, list):
        raise UpstreamError("worker 응답 형식 오류: sections가 배열이 아닙니다")

    meta = payload.get("meta")
    return sections, meta if isinstance(meta, dict) else {}


async def run_scrape(
    origin: str,
    query: Mapping[str, str],
    settings: Settings,
    request_origin: str | None = None,
) -> ScrapeResponse | UpstreamPassthrough:
    """정규화된 origin으로 worker를 호출하고 결과 이미지를 저장

    Args:
        origin: normalize_origin 결과
        query: 호출자 쿼리 파라미터 (domain 포함 가능, worker로 전달 시 제외)
        settings: 앱 설정
        request_origin: 절대 URL 모드에서 PUBLIC_ORIGIN이 없을 때 쓸 요청 origin

    Raises:
        UpstreamError: worker 호출/응답 파싱 실패
        StorageUnavailableError: storage 미설정
    """
    cap = effective_cap(query.get("max"), settings.default_sections, settings.max_sections)
    response = await get_worker_client().fetch(origin, forward_params(query), cap)
    content_type = response.headers.get("content-type", "application/json")

    if not response.is_success or is_truthy(query.get("raw")):
        return UpstreamPassthrough(
            status_code=response.status_code,
            body=response.content,
            content_type=content_type,
        )

    sections, meta = _parse_payload(response.content)
    storage = get_storage()

    job_id = _generate_job_id()
    persister = SectionPersister(
        storage=storage,
        job_id=job_id,
        url_for=lambda key: build_image_url(key, settings, request_origin),
        include_b64=is_truthy(query.get("b64")),
    )
    results = await persist_sections(
        sections, persister, cap=cap, concurrency=settings.upload_concurrency
    )
    logger.info(f"job {job_id}: {origin} 섹션 {len(results)}개 저장")

    return ScrapeResponse(job_id=job_id, origin=origin, sections=results, meta=meta)
