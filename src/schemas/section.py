"""섹션 스키마

worker가 돌려주는 섹션은 dict 그대로 다루고, 응답에는 화이트리스트 필드만 담은
SectionOut을 쓴다. bbox는 [x, y, width, height] 4개 값.
"""

from src.schemas.base import BaseSchema


class SectionOut(BaseSchema):
    id: str | None = None
    role: str | None = None
    label: str | None = None
    bbox: list[float] | None = None
    confidence: float | None = None
    image: str | None = None  # 저장된 이미지 URL
    images: list[str] | None = None  # 타일 이미지 URL (순서 유지)
    image_b64: str | None = None
    images_b64: list[str] | None = None
