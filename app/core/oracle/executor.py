# app/core/oracle/executor.py
"""
EXECUTOR MODULE - Send generated SQL (or procedure calls) to the Oracle API

Processing model:
    Statements are sent strictly one after another: statement i+1 is only
    sent once statement i has returned. The downstream API therefore sees
    inserts in input order, with at most one request in flight per batch.

Failure model:
    Every item is independent. A non-2xx answer is recorded as-is; a
    transport failure (refused, timeout, DNS) is recorded as status 500.
    Neither stops the rest of the batch and nothing is retried.
"""

import logging
import time
from typing import List, Sequence

import httpx

from app.core import schemas
from app.core.config import Settings
from app.core.logs import log_section, truncate

logger = logging.getLogger(__name__)

TRANSPORT_FAILURE_STATUS = 500


class DownstreamUnavailable(Exception):
    """The Oracle API could not be reached at all."""


def describe_error(error: Exception) -> str:
    # Some httpx timeouts carry an empty message
    return str(error) or type(error).__name__


class BatchExecutor:
    """
    Relays work to the downstream Oracle execution API.

    One executor is built per request; it keeps its results in local lists
    only, so concurrent requests never share state beyond the HTTP client.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        insert_url: str,
        procedure_url: str,
        token: str,
        log: logging.Logger = logger,
    ):
        self.client = client
        self.insert_url = insert_url
        self.procedure_url = procedure_url
        self.token = token
        self.log = log

    @classmethod
    def from_settings(
        cls,
        client: httpx.AsyncClient,
        config: Settings,
        log: logging.Logger = logger,
    ) -> "BatchExecutor":
        return cls(
            client=client,
            insert_url=config.insert_url,
            procedure_url=config.procedure_url,
            token=config.ORACLE_TOKEN,
            log=log,
        )

    @property
    def headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}",
        }

    # ========================================================================
    # INSERTS
    # ========================================================================

    async def execute_query(
        self, statement: str, index: int = 0, total: int = 1
    ) -> schemas.QueryResult:
        """
        Send one statement as {"query": statement}.

        Never raises for downstream problems: the outcome is always
        returned as a QueryResult.
        """
        self.log.info("SQL %d/%d: %s", index + 1, total, statement)
        self.log.info("API CALL: POST %s", self.insert_url)

        try:
            response = await self.client.post(
                self.insert_url,
                json={"query": statement},
                headers=self.headers,
            )
        except httpx.HTTPError as error:
            message = describe_error(error)
            self.log.error("Error en INSERT %d: %s", index + 1, message)
            return schemas.QueryResult(
                insert=statement, status=TRANSPORT_FAILURE_STATUS, result=message
            )

        result = response.text
        self.log.info(
            "RESPONSE (%d): INSERT %d completado | query=%s | result=%s",
            response.status_code,
            index + 1,
            truncate(statement, 100),
            truncate(result, 200),
        )

        return schemas.QueryResult(
            insert=statement, status=response.status_code, result=result
        )

    async def execute(self, statements: Sequence[str]) -> schemas.ProcessingSummary:
        """
        Run every statement in order and summarize the outcome.

        Returns:
            ProcessingSummary with one detail per statement, in input order.
        """
        total = len(statements)
        log_section(self.log, f"PROCESANDO {total} INSERTS")

        results: List[schemas.QueryResult] = []
        for i, statement in enumerate(statements):
            # Sequential: the Oracle side must see inserts in input order
            results.append(await self.execute_query(statement, i, total))

        summary = schemas.ProcessingSummary.from_results(results)
        self.log.info(
            "Procesamiento completado: %d exitosos, %d fallidos",
            summary.successful,
            summary.failed,
        )
        return summary

    # ========================================================================
    # PROCEDURES
    # ========================================================================

    async def forward_procedure(
        self, body: bytes, procedure: str = ""
    ) -> schemas.ProcedureResult:
        """
        Forward a procedure request body to the Oracle API untouched.

        Raises:
            DownstreamUnavailable: the request never got an HTTP answer
        """
        self.log.info("API CALL: POST %s | procedure=%s", self.procedure_url, procedure)
        started = time.perf_counter()

        try:
            response = await self.client.post(
                self.procedure_url,
                content=body,
                headers=self.headers,
            )
        except httpx.HTTPError as error:
            message = describe_error(error)
            self.log.error("Error ejecutando procedimiento %s: %s", procedure, message)
            raise DownstreamUnavailable(message) from error

        elapsed = time.perf_counter() - started
        result = schemas.ProcedureResult(
            procedure=procedure,
            status=response.status_code,
            result=response.text,
            executionTime=round(elapsed, 4),
            content=response.content,
            contentType=response.headers.get("content-type"),
        )

        if response.is_success:
            self.log.info("Procedimiento ejecutado exitosamente (%.3fs)", elapsed)
        else:
            self.log.error("Error del servidor Oracle: %d", response.status_code)
        self.log.info(
            "RESPONSE (%d): %s", response.status_code, truncate(result.result, 200)
        )
        return result
