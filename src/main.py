import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.config import get_settings
from src.errors import ScrapeError
from src.routes.health import router as health_router
from src.routes.images import router as images_router
from src.routes.scrape import router as scrape_router
from src.services.cors import cors_headers

logger = logging.getLogger(__name__)

app = FastAPI()

# CORS는 CORSMiddleware 대신 route에서 직접 처리 (허용되지 않은 POST는 403)
settings = get_settings()
app.include_router(scrape_router, prefix=settings.api_prefix)
app.include_router(images_router, prefix=settings.api_prefix)
app.include_router(health_router, prefix=settings.api_prefix)


def _error_response(req: Request, status_code: int, content: dict[str, str]) -> JSONResponse:
    headers = cors_headers(req.headers.get("origin"), get_settings().allowed_origins)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


@app.exception_handler(ScrapeError)
async def scrape_error_handler(req: Request, exc: ScrapeError) -> JSONResponse:
    return _error_response(req, exc.status_code, {"error": exc.message, "code": exc.code})


@app.exception_handler(Exception)
async def internal_error_handler(req: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"처리되지 않은 예외: {req.method} {req.url.path}")
    return _error_response(req, 500, {"error": str(exc), "code": "INTERNAL_ERROR"})
