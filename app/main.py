import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.errors import error_detail
from app.api.router import api_router
from app.core.config import settings
from app.core.downstream import create_http_client
from app.core.logs import log_section, setup_logging

logger = logging.getLogger(__name__)


# Open the shared downstream client on startup, close it (and the log) on shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    log_file = setup_logging(settings.LOG_DIR, settings.LOG_ENABLED)

    log_section(logger, "SERVIDOR PROXY INICIADO")
    logger.info("Log de esta sesión: %s", log_file or "deshabilitado")
    logger.info("Proxy: http://%s:%d", settings.PROXY_HOST, settings.PROXY_PORT)
    logger.info("Oracle destino: %s", settings.oracle_base_url)
    logger.info("INSERTs: %s", settings.insert_url)
    logger.info("Procedures: %s", settings.procedure_url)
    logger.info("Esquema: %s", settings.ORACLE_SCHEMA)

    app.state.http_client = create_http_client()
    logger.info("Servidor listo para recibir peticiones...")

    yield

    await app.state.http_client.aclose()
    log_section(logger, "SERVIDOR PROXY DETENIDO")


app = FastAPI(title="Oracle GAN Proxy", lifespan=lifespan)


# Unexpected errors become a 500 here, inside CORSMiddleware
@app.middleware("http")
async def handle_requests(request: Request, call_next):
    logger.info("REQUEST: %s %s", request.method, request.url.path)
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception("Error general en %s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_detail("Error interno", str(exc) or "Error desconocido"),
        )


# Added last so it wraps every other middleware
if settings.CORS_ENABLED:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )


@app.exception_handler(StarletteHTTPException)
async def routing_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        logger.warning("Ruta no encontrada: %s", request.url.path)
        return PlainTextResponse("Ruta no encontrada", status_code=exc.status_code)
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        logger.warning("Método no permitido: %s", request.method)
        return PlainTextResponse(
            "Método no permitido - Use POST", status_code=exc.status_code
        )
    # Our own errors carry the full {error, message, timestamp, ...} body
    if isinstance(exc.detail, dict):
        return JSONResponse(
            exc.detail, status_code=exc.status_code, headers=exc.headers
        )
    return await http_exception_handler(request, exc)


# Include the master router containing all our endpoints
app.include_router(api_router)
