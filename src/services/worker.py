"""Sectionization worker 클라이언트

worker는 외부 서비스 (블랙박스). 이 모듈은 요청 조립과 호출만 담당하고
힌트 파라미터(sizing, tiling 등)의 의미는 해석하지 않는다.

사용법:
    from src.services.worker import get_worker_client

    client = get_worker_client()
    response = await client.fetch(origin, forward_params(query), cap)
"""

import logging
from collections.abc import Collection, Iterable, Mapping

import httpx

from src.config import get_settings
from src.constants import Limits
from src.errors import UpstreamError

logger = logging.getLogger(__name__)

DOMAIN_PARAM = "domain"
TRUTHY_VALUES = {"1", "true", "yes", "on"}
RESERVED_PARAMS = ("url", "max")  # gateway가 항상 직접 채우는 키


def forward_params(
    query: Mapping[str, str], exclude: Collection[str] = (DOMAIN_PARAM,)
) -> list[tuple[str, str]]:
    """호출자 쿼리 파라미터 복사 (exclude 키 제외, 나머지는 그대로 전달)

    QueryParams처럼 multi_items()가 있으면 반복 키(?tag=a&tag=b)도 순서대로 유지한다.
    """
    items = getattr(query, "multi_items", query.items)()
    return [(key, value) for key, value in items if key not in exclude]


def effective_cap(requested: str | None, default: int, hard_cap: int) -> int:
    """worker에 보내고 저장할 섹션 수 상한

    요청값(없거나 숫자가 아니면 default)을 허용 범위로 clamp한 뒤
    hard_cap과 비교해 작은 값을 쓴다.
    """
    try:
        value = int(requested) if requested is not None else default
    except ValueError:
        value = default

    value = max(Limits.MIN_SECTIONS, min(value, Limits.MAX_SECTIONS))
    return max(Limits.MIN_SECTIONS, min(value, hard_cap))


def is_truthy(value: str | None) -> bool:
    return value is not None and value.strip().lower() in TRUTHY_VALUES


class WorkerClient:
    """Bearer 토큰으로 worker를 호출하는 httpx 클라이언트

    Note: transport는 테스트에서 httpx.MockTransport 주입용.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: int = 120,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.token = token
        self.timeout = timeout
        self._transport = transport

    async def fetch(
        self, origin: str, params: Iterable[tuple[str, str]], cap: int
    ) -> httpx.Response:
        """GET <base_url>?url=<origin>&<params>&max=<cap>

        성공/실패 여부와 관계없이 worker 응답을 그대로 반환한다.

        Raises:
            UpstreamError: worker URL 미설정, 타임아웃, 네트워크 오류 시
        """
        if not self.base_url:
            raise UpstreamError("worker URL이 설정되지 않았습니다 (WORKER_URL)")

        query = [("url", origin)]
        query.extend((key, value) for key, value in params if key not in RESERVED_PARAMS)
        query.append(("max", str(cap)))

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(
                    self.base_url,
                    params=query,
                    headers={"Authorization": f"Bearer {self.token}"},
                )
        except httpx.TimeoutException as e:
            logger.error(f"worker 타임아웃: {origin}")
            raise UpstreamError("worker 응답 시간 초과") from e
        except httpx.HTTPError as e:
            logger.error(f"worker 호출 실패: {origin} - {e}")
            raise UpstreamError(f"worker 호출 실패: {e}") from e

        if not response.is_success:
            logger.warning(f"worker 오류 응답: {response.status_code} ({origin})")
        return response


_client: WorkerClient | None = None


def get_worker_client() -> WorkerClient:
    """설정 기반 worker 클라이언트 반환"""
    global _client
    if _client is None:
        settings = get_settings()
        _client = WorkerClient(
            base_url=settings.worker_url,
            token=settings.worker_token,
            timeout=settings.worker_timeout,
        )
    return _client


def set_worker_client(client: WorkerClient | None) -> None:
    """worker 클라이언트 설정 (테스트용)"""
    global _client
    _client = client
