"""
Main FastAPI application entry point.
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from quiz_api.core.config import settings
from quiz_api.core.database import init_db
from quiz_api.core.errors import QuizAPIError, StoreError
from quiz_api.core.logging_config import configure_logging
from quiz_api.api.status import router as status_router
from quiz_api.api.sessions import router as sessions_router
from quiz_api.api.users import router as users_router
from quiz_api.api.subjects import router as subjects_router
from quiz_api.api.questions import router as questions_router
from quiz_api.api.options import router as options_router

configure_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s %s", settings.APP_NAME, settings.APP_VERSION)
    init_db()
    yield
    logger.info("Shutdown complete")

app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=settings.CORS_ORIGINS, allow_credentials=True, allow_methods=["*"], allow_headers=["*"])

@app.exception_handler(QuizAPIError)
async def quiz_api_error_handler(request: Request, exc: QuizAPIError):
    """Render domain errors in the common error envelope."""
    if isinstance(exc, StoreError):
        logger.error("Store failure on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"message": exc.detail, "type": "http_error", "status_code": exc.status_code}},
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [{"field": ".".join(str(p) for p in err["loc"][1:]) or str(err["loc"][0]), "message": err["msg"]}
               for err in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": {"message": "Validation error", "type": "validation_error",
                           "status_code": status.HTTP_422_UNPROCESSABLE_ENTITY, "details": details}},
    )

@app.get("/health", tags=["health"])
def health(): return {"status": "ok", "version": settings.APP_VERSION}

app.include_router(status_router, prefix=f"{settings.API_V1_PREFIX}/status", tags=["status"])
app.include_router(sessions_router, prefix=f"{settings.API_V1_PREFIX}/sessions", tags=["sessions"])
app.include_router(users_router, prefix=f"{settings.API_V1_PREFIX}/users", tags=["users"])
app.include_router(subjects_router, prefix=f"{settings.API_V1_PREFIX}/subjects", tags=["subjects"])
app.include_router(questions_router, prefix=f"{settings.API_V1_PREFIX}/questions", tags=["questions"])
app.include_router(options_router, prefix=f"{settings.API_V1_PREFIX}/questions", tags=["options"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("quiz_api.main:app", host="0.0.0.0", port=8000, log_level=settings.LOG_LEVEL.lower())
