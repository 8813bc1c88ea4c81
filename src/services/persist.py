"""섹션 이미지 저장

worker 응답의 inline base64 이미지를 storage에 저장하고 URL로 치환한다.

동시성: 공유 cursor + 고정 크기 worker 풀. 각 worker가 다음 index를 가져가 끝까지 처리한 뒤
다음 index를 가져간다. 동시에 처리 중인 섹션은 최대 concurrency개이고,
결과는 입력과 같은 index에 기록되므로 완료 순서와 관계없이 순서가 유지된다.

개별 타일/섹션 디코딩 실패는 해당 항목에서 복구하고 배치 전체를 실패시키지 않는다.
"""

import asyncio
import base64
import binascii
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, cast

from src.constants import (
    DEFAULT_IMAGE_TYPE,
    IMAGE_EXTENSIONS,
    MAGIC_BYTES,
    Limits,
    StorageKey,
)
from src.errors import DecodeError
from src.infra.storage import StorageBackend
from src.schemas.section import SectionOut

logger = logging.getLogger(__name__)

UrlBuilder = Callable[[str], str]


@dataclass(frozen=True)
class DecodedImage:
    data: bytes
    content_type: str
    b64: str  # data URL prefix를 제외한 원본 base64

    @property
    def extension(self) -> str:
        return IMAGE_EXTENSIONS.get(self.content_type, "jpg")


def detect_image_type(data: bytes) -> str:
    for magic, mime in MAGIC_BYTES.items():
        if data.startswith(magic):
            return mime
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return DEFAULT_IMAGE_TYPE


def decode_inline_image(value: object) -> DecodedImage:
    """data URL("data:image/png;base64,...") 또는 base64 문자열 → bytes

    Raises:
        DecodeError: 값이 없거나 base64가 올바르지 않을 때
    """
    if not isinstance(value, str) or not value.strip():
        raise DecodeError("이미지 데이터가 없습니다")

    header, sep, payload = value.partition(",")
    mime = ""
    if not sep:
        payload = value
    elif header.startswith("data:"):
        mime = header[len("data:") :].split(";")[0].strip().lower()

    payload = "".join(payload.split())
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError("base64 디코딩 실패") from e

    if not data:
        raise DecodeError("빈 이미지 데이터")

    content_type = mime if mime in IMAGE_EXTENSIONS else detect_image_type(data)
    return DecodedImage(data=data, content_type=content_type, b64=payload)


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def sanitize_metadata(raw: Mapping[str, Any]) -> dict[str, Any]:
    """화이트리스트 필드만 복사 (id, role, label, bbox, confidence)"""
    meta: dict[str, Any] = {}

    section_id = raw.get("id")
    if isinstance(section_id, str) or _is_number(section_id):
        meta["id"] = str(section_id)

    for field in ("role", "label"):
        if isinstance(raw.get(field), str):
            meta[field] = raw[field]

    bbox = raw.get("bbox")
    if isinstance(bbox, list | tuple) and len(bbox) >= 4 and all(_is_number(v) for v in bbox[:4]):
        meta["bbox"] = [float(v) for v in bbox[:4]]

    if _is_number(raw.get("confidence")):
        meta["confidence"] = float(raw["confidence"])

    return meta


class SectionPersister:
    """한 job의 섹션 이미지를 jobs/<job_id>/ 아래에 저장"""

    def __init__(
        self,
        storage: StorageBackend,
        job_id: str,
        url_for: UrlBuilder,
        include_b64: bool = False,
    ) -> None:
        self.storage = storage
        self.job_id = job_id
        self.url_for = url_for
        self.include_b64 = include_b64

    @property
    def prefix(self) -> str:
        return f"{StorageKey.JOBS}/{self.job_id}"

    async def persist(self, index: int, raw: object) -> SectionOut:
        section = cast(Mapping[str, Any], raw) if isinstance(raw, Mapping) else {}
        meta = sanitize_metadata(section)

        images = section.get("images")
        if isinstance(images, list) and images:
            return await self._persist_tiles(index, images, section, meta)
        if "image" in section:
            return await self._persist_single(index, section, meta)
        return SectionOut(**meta)

    async def _persist_single(
        self, index: int, section: Mapping[str, Any], meta: dict[str, Any]
    ) -> SectionOut:
        try:
            decoded = decode_inline_image(section.get("image"))
        except DecodeError as e:
            logger.warning(f"섹션 이미지 디코딩 실패, 메타데이터만 반환: section {index} - {e}")
            return SectionOut(**meta)

        key = f"{self.prefix}/section_{index}.{decoded.extension}"
        await self.storage.put(key, decoded.data, decoded.content_type)

        image_b64 = None
        if self.include_b64:
            declared = section.get("image_b64")
            image_b64 = declared if isinstance(declared, str) and declared else decoded.b64

        return SectionOut(**meta, image=self.url_for(key), image_b64=image_b64)

    async def _persist_tiles(
        self, index: int, tiles: list[Any], section: Mapping[str, Any], meta: dict[str, Any]
    ) -> SectionOut:
        declared = section.get("images_b64")
        declared_b64 = declared if isinstance(declared, list) else []

        urls: list[str] = []
        tiles_b64: list[str] = []
        for position, tile in enumerate(tiles):
            try:
                decoded = decode_inline_image(tile)
            except DecodeError as e:
                logger.warning(f"타일 디코딩 실패, 건너뜀: section {index} tile {position} - {e}")
                continue

            tile_name = f"tile_{position:0{Limits.TILE_INDEX_WIDTH}d}"
            key = f"{self.prefix}/section_{index}/{tile_name}.{decoded.extension}"
            await self.storage.put(key, decoded.data, decoded.content_type)
            urls.append(self.url_for(key))

            if self.include_b64:
                b64 = declared_b64[position] if position < len(declared_b64) else None
                tiles_b64.append(b64 if isinstance(b64, str) and b64 else decoded.b64)

        return SectionOut(
            **meta,
            images=urls,
            images_b64=tiles_b64 if self.include_b64 else None,
        )


async def persist_sections(
    sections: Sequence[object],
    persister: SectionPersister,
    cap: int,
    concurrency: int,
) -> list[SectionOut]:
    """sections[:cap]을 최대 concurrency개씩 동시에 저장

    Returns:
        list[SectionOut]: 입력 순서와 같은 순서의 결과 (길이 min(len, cap))

    Raises:
        Exception: storage 저장 실패 시 첫 번째 예외 (진행 중인 나머지 저장은 취소)
    """
    items = list(sections[:cap])
    results: list[SectionOut | None] = [None] * len(items)
    cursor = 0

    async def worker() -> None:
        nonlocal cursor
        while cursor < len(items):
            index = cursor
            cursor += 1
            results[index] = await persister.persist(index, items[index])

    worker_count = min(max(concurrency, 1), len(items))
    try:
        # 한 worker가 실패하면 나머지 worker는 취소됨
        async with asyncio.TaskGroup() as tg:
            for _ in range(worker_count):
                tg.create_task(worker())
    except ExceptionGroup as eg:
        raise eg.exceptions[0] from None
    return cast(list[SectionOut], results)
