# hive_api/main.py
import sys
import asyncio

# Event loop compatível no Windows (safe em outros SOs também)
if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from contextlib import asynccontextmanager
from datetime import timedelta
import json
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hive_api.core.config import settings
from hive_api.core.errors import DomainError, ValidationError, errors_from_pydantic
from hive_api.core.sessions import SessionStore
from hive_api.api.v1.router import api_router
from hive_api.storage.factory import build_storage
from hive_api.storage.seed import seed_catalog, seed_demo_data

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _normalize_origins(value) -> list[str]:
    """Aceita lista, JSON string ou CSV e devolve lista de origens."""
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return [str(o).strip() for o in value if str(o).strip()]
    if isinstance(value, str):
        # tenta JSON primeiro
        try:
            as_json = json.loads(value)
        except ValueError:
            as_json = None
        if isinstance(as_json, (list, tuple)):
            return [str(o).strip() for o in as_json if str(o).strip()]
        # fallback: CSV
        return [o.strip() for o in value.split(",") if o.strip()]
    return [str(value).strip()]


def _session_ttl():
    hours = settings.SESSION_TTL_HOURS
    return timedelta(hours=hours) if hours > 0 else None


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.check()
    storage = await build_storage(settings)
    await seed_catalog(storage)
    if settings.SEED_DEMO_DATA:
        await seed_demo_data(storage)
    app.state.storage = storage
    app.state.sessions = SessionStore(ttl=_session_ttl())
    yield
    await storage.close()


# --- App ---
app = FastAPI(title="Hive API", lifespan=lifespan)

# --- CORS (colocado ANTES dos routers) ---
origins = _normalize_origins(getattr(settings, "CORS_ORIGINS", None))

if not origins:
    origins = [
        "http://localhost:5000",
        "http://localhost:5173",
    ]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],        # Authorization, Content-Type etc.
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    err = ValidationError("Dados inválidos", errors_from_pydantic(exc.errors()))
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Erro inesperado em %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "kind": "InternalError", "message": "Erro interno do servidor"},
    )


# Healthcheck simples
@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


app.include_router(api_router, prefix=settings.API_PREFIX)
