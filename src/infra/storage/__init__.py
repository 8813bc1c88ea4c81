from pathlib import Path

from src.config import get_settings
from src.errors import StorageUnavailableError

from .base import StorageBackend, StoredObject
from .local import LocalStorage, validate_key

__all__ = [
    "StorageBackend",
    "StoredObject",
    "LocalStorage",
    "get_storage",
    "set_storage",
    "validate_key",
]


def _find_project_root() -> Path:
    """pyproject.toml 위치를 프로젝트 루트로 탐색"""
    current = Path(__file__).resolve().parent
    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    raise RuntimeError("프로젝트 루트를 찾을 수 없음")


class _StorageHolder:
    instance: StorageBackend | None = None


def get_storage() -> StorageBackend:
    """설정에 따라 storage 백엔드 반환

    Raises:
        StorageUnavailableError: STORAGE_DIR이 비어 있을 때
    """
    if _StorageHolder.instance is None:
        storage_dir = get_settings().storage_dir
        if not storage_dir:
            raise StorageUnavailableError("Object storage가 설정되지 않았습니다 (STORAGE_DIR)")

        base_dir = Path(storage_dir)
        if not base_dir.is_absolute():
            base_dir = _find_project_root() / base_dir
        _StorageHolder.instance = LocalStorage(base_dir=base_dir)
    return _StorageHolder.instance


def set_storage(storage: StorageBackend | None) -> None:
    """storage 백엔드 설정 (테스트용)"""
    _StorageHolder.instance = storage
