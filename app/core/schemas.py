from datetime import datetime
from typing import Optional, List, Dict, Any
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# =========================
# Enums
# =========================
class ParameterDirection(str, Enum):
    IN = "IN"
    OUT = "OUT"
    IN_OUT = "IN_OUT"


# =========================
# PROCEDURES
# =========================
class ProcedureParameter(BaseModel):
    name: str
    value: Any = None
    direction: ParameterDirection


class ProcedureCall(BaseModel):
    name: str = Field(min_length=1)
    isFunction: bool
    params: Optional[List[ProcedureParameter]] = None


class ProcedureResult(BaseModel):
    """Outcome of one forwarded procedure call."""

    procedure: str
    status: int
    result: str
    executionTime: Optional[float] = None
    # Raw downstream body and its content type, returned to the caller as-is
    content: bytes = b""
    contentType: Optional[str] = None


# =========================
# INSERT EXECUTION
# =========================
class QueryResult(BaseModel):
    insert: str
    status: int
    result: str

    model_config = ConfigDict(frozen=True)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class ProcessingSummary(BaseModel):
    total: int
    successful: int
    failed: int
    details: List[QueryResult] = []

    @classmethod
    def from_results(cls, results: List[QueryResult]) -> "ProcessingSummary":
        successful = sum(1 for r in results if r.ok)
        return cls(
            total=len(results),
            successful=successful,
            failed=len(results) - successful,
            details=results,
        )


# =========================
# GATEWAY RESPONSES
# =========================
class ErrorResponse(BaseModel):
    error: str
    message: str
    timestamp: datetime

    # receivedBody / example are attached on JSON errors
    model_config = ConfigDict(extra="allow")


class ServerInfo(BaseModel):
    version: str
    uptime: float
    log_file: str


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str
    timestamp: datetime
    server_info: ServerInfo
    endpoints: List[str]


# Example payloads returned alongside JSON parse errors
INSERT_EXAMPLE: List[Dict[str, Any]] = [
    {"tableName": "usuarios", "id": 1, "nombre": "Juan"},
]

PROCEDURE_EXAMPLE: List[Dict[str, Any]] = [
    {
        "name": "GANANCIAS.MOV.PRINCIPAL_MOVIMIENTOS",
        "isFunction": False,
        "params": [{"name": "vPERIODO", "value": 2025, "direction": "IN"}],
    }
]
