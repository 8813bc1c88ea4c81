import base64
import tempfile
from collections.abc import Generator
from io import BytesIO
from pathlib import Path
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from src.config import Settings, get_settings
from src.infra.storage import set_storage
from src.infra.storage.local import LocalStorage
from src.main import app
from src.services.worker import WorkerClient, set_worker_client

ALLOWED_ORIGIN = "https://app.test"
WORKER_URL = "https://worker.test/sections"
WORKER_TOKEN = "test-token"

MIME_TYPES = {"JPEG": "image/jpeg", "PNG": "image/png", "WEBP": "image/webp"}


def make_test_image(width: int = 64, height: int = 48, fmt: str = "JPEG") -> bytes:
    """테스트용 실제 이미지 바이트 생성"""
    img = Image.new("RGB", (width, height), color="red")
    buf = BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def make_data_url(fmt: str = "JPEG", width: int = 64, height: int = 48) -> str:
    """이미지 → "data:image/...;base64,..." 문자열"""
    b64 = base64.b64encode(make_test_image(width, height, fmt)).decode()
    return f"data:{MIME_TYPES[fmt]};base64,{b64}"


class FakeWorker:
    """httpx.MockTransport용 worker 대역

    사용법:
        fake_worker.payload = {"sections": [...]}
        fake_worker.status_code = 502
        fake_worker.content = b"not json"  # payload 대신 원시 body
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.payload: dict[str, Any] = {"sections": []}
        self.content: bytes | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(
                self.status_code,
                content=self.content,
                headers={"content-type": "application/json"},
            )
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def temp_upload_dir() -> Generator[Path, None, None]:
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def local_storage(temp_upload_dir: Path) -> LocalStorage:
    return LocalStorage(base_dir=temp_upload_dir)


@pytest.fixture
def settings(
    monkeypatch: pytest.MonkeyPatch, temp_upload_dir: Path
) -> Generator[Settings, None, None]:
    monkeypatch.setenv("WORKER_URL", WORKER_URL)
    monkeypatch.setenv("WORKER_TOKEN", WORKER_TOKEN)
    monkeypatch.setenv("ALLOWED_ORIGINS", ALLOWED_ORIGIN)
    monkeypatch.setenv("STORAGE_DIR", str(temp_upload_dir))
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def fake_worker(settings: Settings) -> Generator[FakeWorker, None, None]:
    worker = FakeWorker()
    set_worker_client(
        WorkerClient(
            base_url=settings.worker_url,
            token=settings.worker_token,
            transport=httpx.MockTransport(worker.handler),
        )
    )
    yield worker
    set_worker_client(None)


@pytest.fixture
def client(
    settings: Settings, local_storage: LocalStorage, fake_worker: FakeWorker
) -> Generator[TestClient, None, None]:
    set_storage(local_storage)
    yield TestClient(app)
    set_storage(None)
