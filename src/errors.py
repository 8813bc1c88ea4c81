"""요청 단위 에러 정의

code로 구체적인 원인 구분:
- INVALID_INPUT: domain 누락 / 형식 오류 (400)
- ORIGIN_NOT_ALLOWED: 허용되지 않은 Origin의 POST (403)
- UPSTREAM_FAILURE: worker 호출 실패 / 응답 파싱 실패 (502)
- STORAGE_UNAVAILABLE: storage 미설정 (500)
- NOT_FOUND: 저장된 이미지 없음 (404)
- DECODE_FAILURE: 섹션 이미지 디코딩 실패 (섹션 내부에서 복구, 응답까지 전파되지 않음)
"""


class ScrapeError(Exception):
    STATUS_MAP: dict[str, int] = {
        "INVALID_INPUT": 400,
        "ORIGIN_NOT_ALLOWED": 403,
        "UPSTREAM_FAILURE": 502,
        "NOT_FOUND": 404,
        "STORAGE_UNAVAILABLE": 500,
    }

    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"[{self.code}] {message}")

    @property
    def status_code(self) -> int:
        return self.STATUS_MAP.get(self.code, 500)


class InvalidInputError(ScrapeError):
    code = "INVALID_INPUT"


class OriginNotAllowedError(ScrapeError):
    code = "ORIGIN_NOT_ALLOWED"


class UpstreamError(ScrapeError):
    code = "UPSTREAM_FAILURE"


class ObjectNotFoundError(ScrapeError):
    code = "NOT_FOUND"


class StorageUnavailableError(ScrapeError):
    code = "STORAGE_UNAVAILABLE"


class DecodeError(ScrapeError):
    code = "DECODE_FAILURE"
