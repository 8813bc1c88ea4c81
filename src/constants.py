class Limits:
    MIN_SECTIONS = 1
    MAX_SECTIONS = 50  # 호출자가 요청할 수 있는 max 상한
    TILE_INDEX_WIDTH = 3  # tile_000, tile_001 ...


class StorageKey:
    JOBS = "jobs"
    HEALTH = "health"


class CacheControl:
    IMMUTABLE = "public, max-age=31536000, immutable"
    NO_STORE = "no-store"


class Cors:
    ALLOW_METHODS = "POST, GET, OPTIONS"
    ALLOW_HEADERS = "content-type"
    MAX_AGE = 86400  # preflight 캐시 1일


IMAGE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}

MAGIC_BYTES = {
    b"\xff\xd8\xff": "image/jpeg",
    b"\x89PNG": "image/png",
    b"GIF8": "image/gif",
}

DEFAULT_IMAGE_TYPE = "image/jpeg"
