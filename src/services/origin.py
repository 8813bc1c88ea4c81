"""사용자 입력(도메인 또는 URL)을 http(s) origin으로 정규화"""

import re
from urllib.parse import urlsplit

from src.errors import InvalidInputError

SCHEME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
HOST_PORT_PATTERN = re.compile(r"^[^/:?#@]+:\d+(?:[/?#]|$)")  # "localhost:8080/app"
HOST_PATTERN = re.compile(r"^[a-z0-9_.-]+$")
ALLOWED_SCHEMES = {"http": 80, "https": 443}


def normalize_origin(value: str) -> str:
    """도메인/URL 문자열 → "scheme://host[:port]"

    scheme이 없으면 https://를 붙인다 ("host:port"는 scheme 없음으로 간주). 기본 포트는 생략.

    Raises:
        InvalidInputError: 파싱 실패, http/https 이외의 scheme, host 누락 시
    """
    candidate = value.strip()
    if not candidate:
        raise InvalidInputError("domain이 비어 있습니다")

    if HOST_PORT_PATTERN.match(candidate) or not SCHEME_PATTERN.match(candidate):
        candidate = f"https://{candidate}"

    try:
        parts = urlsplit(candidate)
        hostname = parts.hostname
        port = parts.port
    except ValueError as e:
        raise InvalidInputError(f"올바르지 않은 domain: {value}") from e

    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        raise InvalidInputError(f"지원하지 않는 scheme: {scheme}")
    if not hostname:
        raise InvalidInputError(f"올바르지 않은 domain: {value}")
    if parts.username is not None or parts.password is not None:
        raise InvalidInputError(f"사용자 정보가 포함된 domain은 허용하지 않습니다: {value}")

    host = _to_ascii_host(hostname, value)
    if port is not None and port != ALLOWED_SCHEMES[scheme]:
        return f"{scheme}://{host}:{port}"
    return f"{scheme}://{host}"


def _to_ascii_host(hostname: str, original: str) -> str:
    # IPv6 리터럴은 urlsplit이 대괄호를 제거해서 돌려줌
    if ":" in hostname:
        return f"[{hostname}]"

    try:
        host = hostname.encode("idna").decode("ascii").lower()
    except UnicodeError as e:
        raise InvalidInputError(f"올바르지 않은 domain: {original}") from e

    if not HOST_PATTERN.match(host):
        raise InvalidInputError(f"올바르지 않은 domain: {original}")
    return host
