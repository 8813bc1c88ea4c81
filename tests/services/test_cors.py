import pytest

from src.errors import OriginNotAllowedError
from src.services.cors import cors_headers, is_allowed_origin, require_allowed_origin

ALLOWED = ["https://app.test", "http://localhost:3000"]


class TestCorsHeaders:
    def test_allowed_origin_is_echoed(self) -> None:
        headers = cors_headers("https://app.test", ALLOWED)

        assert headers["access-control-allow-origin"] == "https://app.test"

    def test_unlisted_origin_gets_null(self) -> None:
        headers = cors_headers("https://evil.test", ALLOWED)

        assert headers["access-control-allow-origin"] == "null"

    def test_missing_origin_gets_null(self) -> None:
        headers = cors_headers(None, ALLOWED)

        assert headers["access-control-allow-origin"] == "null"

    def test_always_includes_full_header_set(self) -> None:
        headers = cors_headers(None, ALLOWED)

        assert headers["access-control-allow-methods"] == "POST, GET, OPTIONS"
        assert headers["access-control-allow-headers"] == "content-type"
        assert headers["access-control-max-age"] == "86400"
        assert headers["vary"] == "Origin"

    def test_exact_match_only(self) -> None:
        assert not is_allowed_origin("https://app.test/", ALLOWED)
        assert not is_allowed_origin("https://APP.test", ALLOWED)
        assert not is_allowed_origin("", ALLOWED)


class TestRequireAllowedOrigin:
    def test_allowed(self) -> None:
        assert require_allowed_origin("http://localhost:3000", ALLOWED) == "http://localhost:3000"

    @pytest.mark.parametrize("origin", [None, "", "https://evil.test"])
    def test_rejected(self, origin: str | None) -> None:
        with pytest.raises(OriginNotAllowedError) as exc_info:
            require_allowed_origin(origin, ALLOWED)

        assert exc_info.value.status_code == 403
