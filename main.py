# backend/main.py
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clinic_api import auth as auth_router
from clinic_api import general as general_router
from clinic_api import patients as patients_router
from clinic_api import records as records_router
from clinic_api.config import Settings, load_settings
from clinic_api.credentials import ensure_default_staff
from clinic_api.database import Database
from clinic_api.errors import ClinicError, Internal

from dotenv import load_dotenv
load_dotenv()

logger = logging.getLogger("clinic_api")


async def clinic_error_handler(request: Request, exc: ClinicError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = "Endpoint not found."
    else:
        message = exc.detail
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=getattr(exc, "headers", None))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    detail = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Malformed request body.", "detail": detail})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = Internal()
    return JSONResponse(status_code=error.status_code, content=error.to_body())


def configure_logging(level: str = "INFO") -> None:
    # no-op when the root logger already has handlers (uvicorn, pytest)
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API. Raises ConfigError when JWT_SECRET is missing."""
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    database = Database(settings.database_url, timeout=settings.db_timeout)
    database.init_schema()
    with database.session() as db:
        ensure_default_staff(db, settings)

    if not settings.auth_required:
        logger.warning(
            "AUTH_REQUIRED is off: patient, record and general routes accept requests without a token"
        )

    app = FastAPI(title="Clinic Records API")
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ClinicError, clinic_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth_router.router)
    app.include_router(patients_router.router)
    app.include_router(records_router.router)
    app.include_router(general_router.router)

    @app.get("/")
    def root():
        return {"message": "Welcome to the Clinic Records API."}

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


if __name__ == "__main__":
    import uvicorn

    settings = load_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
