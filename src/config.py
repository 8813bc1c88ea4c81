import json
from functools import lru_cache
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # App
    api_prefix: str = "/api"

    # Worker (sectionization)
    worker_url: str = ""
    worker_token: str = ""
    worker_timeout: int = 120

    # CORS
    allowed_origins: Annotated[list[str], NoDecode] = ["http://localhost:3000"]

    # Sections
    default_sections: int = 8
    max_sections: int = 24
    upload_concurrency: int = 4

    # Image URL
    absolute_urls: bool = False
    public_origin: str = ""  # 비어 있으면 요청 헤더에서 추출

    # Storage
    storage_dir: str = "uploads"  # 비어 있으면 storage 미설정으로 간주

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        """콤마 구분 문자열 또는 JSON 배열 모두 허용"""
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                return json.loads(stripped)
            return [s.strip() for s in stripped.split(",") if s.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
