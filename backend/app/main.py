import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from routes.chat import router as chat_router
from routes.clips import router as clips_router
from routes.publish import router as publish_router
from routes.uploads import router as uploads_router
from routes.videos import router as videos_router
from services.errors import AppError, TransportError, VendorError
from services.settings import get_cors_origins

# Load .env from backend dir (one level above this package)
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Clip Studio API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in (uploads_router, videos_router, clips_router, chat_router, publish_router):
    app.include_router(router, prefix="/api")


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render the shared error taxonomy as {error, details}; internals stay in the logs."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log("[app] %s %s -> %d %s: %s", request.method, request.url.path, exc.status_code, type(exc).__name__, exc.message)
    if isinstance(exc, (VendorError, TransportError)) or exc.status_code >= 500:
        content = {"error": exc.summary, "details": exc.message}
    else:
        content = {"error": exc.message, "details": exc.details}
    return JSONResponse(status_code=exc.status_code, content=content)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))
