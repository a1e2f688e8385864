import time
from datetime import datetime, timezone

from fastapi import APIRouter

from app.core import schemas
from app.core.logs import get_log_file

router = APIRouter(tags=["Health"])

VERSION = "1.0.0"
STARTED_AT = time.monotonic()

ENDPOINTS = [
    "GET /health, /ping - Verificar estado del servidor",
    "POST /api/oracle/convert - Convertir datos JSON a SQL Oracle (INSERTs)",
    "POST /api/oracle/procedure - Ejecutar procedimientos almacenados Oracle",
]


@router.get("/health", response_model=schemas.HealthResponse)
@router.get("/ping", response_model=schemas.HealthResponse)
async def health_check():
    return schemas.HealthResponse(
        message="Servidor proxy funcionando correctamente",
        timestamp=datetime.now(timezone.utc),
        server_info=schemas.ServerInfo(
            version=VERSION,
            uptime=round(time.monotonic() - STARTED_AT, 3),
            log_file=get_log_file() or "Log no disponible",
        ),
        endpoints=ENDPOINTS,
    )
