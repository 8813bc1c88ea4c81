from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class StoredObject:
    body: bytes
    content_type: str


class StorageBackend(Protocol):
    """오브젝트 저장소 인터페이스. LocalStorage, S3Storage 등 구현체로 교체 가능.

    key는 "jobs/<jobId>/section_0.jpg" 형태의 계층형 문자열.
    한 번 쓴 key는 덮어쓰지 않는다 (job id가 요청마다 새로 생성되므로).
    """

    async def put(self, key: str, data: bytes, content_type: str) -> None: ...
    async def get(self, key: str) -> StoredObject | None: ...
