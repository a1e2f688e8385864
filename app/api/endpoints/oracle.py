import json
import logging
from typing import Annotated, Any, List, Tuple

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from app.api.errors import error_detail
from app.core import schemas
from app.core.config import settings
from app.core.downstream import get_executor
from app.core.logs import truncate
from app.core.oracle.builder import InsertGenerationError, build_inserts
from app.core.oracle.executor import BatchExecutor, DownstreamUnavailable
from app.core.oracle.validation import (
    ValidationError,
    validate_insert_batch,
    validate_procedure_batch,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/oracle", tags=["Oracle"])

executor_dep = Annotated[BatchExecutor, Depends(get_executor)]


def reject_constant(name: str):
    # NaN, Infinity and -Infinity are not JSON
    raise ValueError(f"Valor no permitido en JSON: {name}")


async def read_json(request: Request, example: List[dict]) -> Tuple[bytes, Any]:
    """Read the raw body and parse it, answering 400 with an example on bad JSON."""
    body = await request.body()
    text = body.decode("utf-8", errors="replace")
    logger.info("Body recibido | preview=%s | length=%d", truncate(text, 200), len(text))

    try:
        return body, json.loads(body, parse_constant=reject_constant)
    except ValueError as error:
        logger.error("Error parseando JSON: %s", error)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail(
                "JSON inválido",
                "El cuerpo de la petición debe ser un JSON válido",
                receivedBody=truncate(text, 200),
                example=example,
            ),
        )


# Records -> INSERTs -> Oracle API, one statement at a time
@router.post("/convert", response_model=schemas.ProcessingSummary)
async def convert_inserts(request: Request, executor: executor_dep):
    _, data = await read_json(request, schemas.INSERT_EXAMPLE)

    try:
        records = validate_insert_batch(data)
        logger.info("Generando INSERTs para %d registros", len(records))
        inserts = build_inserts(records, schema=settings.ORACLE_SCHEMA)
    except (ValidationError, InsertGenerationError) as error:
        logger.error("Validación de INSERTs falló: %s", error)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail(
                "Datos inválidos", str(error), example=schemas.INSERT_EXAMPLE
            ),
        )

    summary = await executor.execute(inserts)
    logger.info(
        "Petición procesada exitosamente | total=%d successful=%d failed=%d",
        summary.total,
        summary.successful,
        summary.failed,
    )
    return summary


# Procedure calls are validated, then proxied with the original body
@router.post("/procedure")
async def execute_procedure(request: Request, executor: executor_dep):
    body, data = await read_json(request, schemas.PROCEDURE_EXAMPLE)

    try:
        calls = validate_procedure_batch(data)
    except ValidationError as error:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("Datos inválidos", error.message),
        )

    names = ", ".join(call.name for call in calls)
    logger.info("Enviando %d procedimiento(s) al endpoint Oracle: %s", len(calls), names)

    try:
        result = await executor.forward_procedure(body, procedure=names)
    except DownstreamUnavailable:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail(
                "Error de conexión", "No se pudo conectar con el servidor Oracle"
            ),
        )

    # Status and body go back exactly as Oracle sent them
    return Response(
        content=result.content,
        status_code=result.status,
        media_type=result.contentType,
    )
