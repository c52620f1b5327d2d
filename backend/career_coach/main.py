import logging

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models  # noqa: F401  registers tables on Base
from .ai.errors import AIConfigurationError, CallError
from .config import Settings, get_settings
from .db import Base, engine, get_db
from .services.errors import NotFoundError, ServiceError, UnauthorizedError

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="AI Career Coach Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Base.metadata.create_all(bind=engine)


@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError):
    return JSONResponse(status_code=401, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(AIConfigurationError)
async def ai_config_handler(request: Request, exc: AIConfigurationError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(CallError)
async def call_error_handler(request: Request, exc: CallError):
    logger.error(f"{request.method} {request.url.path} AI call failed: {exc!r}")
    return JSONResponse(status_code=502, content={"detail": str(exc), "kind": exc.kind.value})


@app.get("/health")
def health():
    return {"ok": True}


@app.get("/status")
def status(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    """Which integrations are configured, and whether the database answers."""
    env = {
        "OPENAI_API_KEY": bool(settings.openai_api_key),
        "GEMINI_API_KEY": bool(settings.gemini_api_key),
        "DATABASE_URL": bool(settings.database_url),
        "DEV_USER_ID": bool(settings.dev_user_id),
    }
    db_status = {"ok": False, "message": None}
    try:
        db.execute(text("SELECT 1"))
        db_status["ok"] = True
    except SQLAlchemyError as e:
        db_status["message"] = str(e)
    return {"env": env, "db": db_status, "fallback_on": sorted(k.value for k in settings.fallback_on)}


from .api.routes_user import router as user_router
from .api.routes_resume import router as resume_router
from .api.routes_cover_letters import router as cover_letters_router
from .api.routes_interview import router as interview_router
app.include_router(user_router)
app.include_router(resume_router)
app.include_router(cover_letters_router)
app.include_router(interview_router)
