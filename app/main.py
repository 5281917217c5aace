import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.exceptions import BaseCustomException, create_error_response
from app.api.v1.api import api_router
from app.infrastructure.record_store import HttpRecordStoreClient

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.record_store = HttpRecordStoreClient(
        base_url=settings.RECORD_STORE_URL,
        project_id=settings.RECORD_STORE_PROJECT_ID,
        public_key=settings.RECORD_STORE_PUBLIC_KEY,
        timeout=settings.RECORD_STORE_TIMEOUT,
    )
    logger.info(f"Record store client ready for {settings.RECORD_STORE_URL}")
    yield
    await app.state.record_store.aclose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Set all CORS enabled origins
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(BaseCustomException)
async def custom_exception_handler(request: Request, exc: BaseCustomException):
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc, request_id=request.headers.get("X-Request-ID")),
    )


app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/health")
def health_check():
    return {"status": "ok"}
