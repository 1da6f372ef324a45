# userhub/main.py
from dotenv import load_dotenv

# .env 로딩은 settings 임포트 전에
load_dotenv()

import logging  # noqa: E402

from fastapi import FastAPI, HTTPException, Request  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from sqlmodel import text  # noqa: E402
from starlette.exceptions import HTTPException as StarletteHTTPException  # noqa: E402

from userhub.core.config import settings  # noqa: E402
from userhub.core.errors import InternalError, api_error_response, error_body  # noqa: E402
from userhub.core.logging_config import setup_logging  # noqa: E402
from userhub.db.session import get_engine  # noqa: E402
from userhub.routers import auth, user  # noqa: E402

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="userhub",
    version=settings.app_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code >= 500:
        logger.error("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.detail)
    return api_error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=error_body(400, "Invalid request", errors))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return api_error_response(InternalError())


# 라우터 등록
app.include_router(auth.auth_router)
app.include_router(user.user_router)


@app.get("/health")
def health_app():
    return {"ok": True}


@app.get("/health/db")
def health_db():
    # Migration is a deployment concern. Runtime only verifies DB connectivity.
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"ok": True}
    except Exception:
        raise HTTPException(status_code=500, detail="Database connection failed")
