import asyncio
import json
from pathlib import Path

from src.errors import InvalidInputError
from src.infra.storage.base import StoredObject

OBJECTS_DIR = "objects"
META_DIR = "meta"  # content-type 등 메타데이터 (key별 json)


def validate_key(key: str) -> str:
    """계층형 key 검증 (Path Traversal 방지)

    Raises:
        InvalidInputError: 빈 key, 절대 경로, "..", 역슬래시 포함 시
    """
    if "\\" in key or any(part in ("", ".", "..") for part in key.split("/")):
        raise InvalidInputError(f"올바르지 않은 key: {key!r}")
    return key


class LocalStorage:
    """로컬 파일 시스템 오브젝트 저장소 구현체. S3Storage로 교체 가능."""

    def __init__(self, base_dir: Path):
        self.base_dir = base_dir

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        validate_key(key)
        await asyncio.to_thread(self._write, key, data, content_type)

    async def get(self, key: str) -> StoredObject | None:
        validate_key(key)
        return await asyncio.to_thread(self._read, key)

    def _object_path(self, key: str) -> Path:
        return self.base_dir / OBJECTS_DIR / key

    def _meta_path(self, key: str) -> Path:
        return self.base_dir / META_DIR / f"{key}.json"

    def _write(self, key: str, data: bytes, content_type: str) -> None:
        object_path = self._object_path(key)
        meta_path = self._meta_path(key)
        object_path.parent.mkdir(parents=True, exist_ok=True)
        meta_path.parent.mkdir(parents=True, exist_ok=True)

        object_path.write_bytes(data)
        meta_path.write_text(json.dumps({"content_type": content_type}))

    def _read(self, key: str) -> StoredObject | None:
        object_path = self._object_path(key)
        if not object_path.is_file():
            return None

        content_type = "application/octet-stream"
        meta_path = self._meta_path(key)
        if meta_path.is_file():
            content_type = json.loads(meta_path.read_text()).get("content_type", content_type)

        return StoredObject(body=object_path.read_bytes(), content_type=content_type)
