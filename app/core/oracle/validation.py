# app/core/oracle/validation.py
"""
VALIDATION MODULE - Check request shapes before anything is generated or sent

Two modes, one per endpoint:
    /api/oracle/convert    -> validate_insert_batch()
    /api/oracle/procedure  -> validate_procedure_batch()

Validation is all-or-nothing: the first bad element rejects the whole batch,
so nothing reaches the downstream API. Inputs are never mutated.
"""

import logging
from typing import Any, Dict, List, Optional

from app.core import schemas

logger = logging.getLogger(__name__)

VALID_DIRECTIONS = tuple(d.value for d in schemas.ParameterDirection)
# Directions that carry a value into the procedure
VALUE_DIRECTIONS = (
    schemas.ParameterDirection.IN.value,
    schemas.ParameterDirection.IN_OUT.value,
)


class ValidationError(ValueError):
    """
    A batch failed shape validation.

    index and param_index are 1-based; both are None for top-level errors.
    """

    def __init__(
        self,
        reason: str,
        index: Optional[int] = None,
        param_index: Optional[int] = None,
    ):
        self.reason = reason
        self.index = index
        self.param_index = param_index
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if self.index is None:
            return self.reason
        if self.param_index is None:
            return f"Elemento {self.index}: {self.reason}"
        return f"Elemento {self.index}, parámetro {self.param_index}: {self.reason}"


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value != ""


# ============================================================================
# INSERT BATCHES
# ============================================================================


def validate_insert_batch(
    payload: Any, log: logging.Logger = logger
) -> List[Dict[str, Any]]:
    """
    Validate a batch of TableRecords.

    Expected:
        [{"tableName": "usuarios", "id": 1, "nombre": "Juan"}, ...]

    Returns:
        The same list, once every element has a non-empty tableName.

    Raises:
        ValidationError: payload is not a list, or an element is not an
            object with 'tableName'.
    """
    if not isinstance(payload, list):
        log.warning("Insert batch rejected: payload is %s", type(payload).__name__)
        raise ValidationError("Se esperaba un array de objetos")

    for i, item in enumerate(payload, start=1):
        if not isinstance(item, dict) or not _is_non_empty_str(item.get("tableName")):
            log.warning("Insert batch rejected at element %d", i)
            raise ValidationError("debe ser un objeto con 'tableName'", index=i)

    return payload


# ============================================================================
# PROCEDURE BATCHES
# ============================================================================


def _check_parameter(param: Any, index: int, param_index: int) -> None:
    if not isinstance(param, dict):
        raise ValidationError("debe ser un objeto", index, param_index)

    if not _is_non_empty_str(param.get("name")):
        raise ValidationError("debe tener 'name' (string)", index, param_index)

    direction = param.get("direction")
    if direction not in VALID_DIRECTIONS:
        raise ValidationError(
            "debe tener 'direction' (IN, OUT, o IN_OUT)", index, param_index
        )

    # value may be omitted for OUT, but an explicit null is still a value
    if direction in VALUE_DIRECTIONS and "value" not in param:
        raise ValidationError(
            f"con direction '{direction}' debe tener 'value'", index, param_index
        )


def _check_procedure(item: Any, index: int) -> None:
    if not isinstance(item, dict):
        raise ValidationError("debe ser un objeto", index)

    if not _is_non_empty_str(item.get("name")):
        raise ValidationError("debe tener 'name' (string)", index)

    if not isinstance(item.get("isFunction"), bool):
        raise ValidationError("debe tener 'isFunction' (boolean)", index)

    params = item.get("params")
    if params is None:
        return

    if not isinstance(params, list):
        raise ValidationError("'params' debe ser un array", index)

    for j, param in enumerate(params, start=1):
        _check_parameter(param, index, j)


def validate_procedure_batch(
    payload: Any, log: logging.Logger = logger
) -> List[schemas.ProcedureCall]:
    """
    Validate one ProcedureCall or a list of them.

    A single object is wrapped into a one-element list first.

    Returns:
        Parsed ProcedureCall models, in input order.

    Raises:
        ValidationError: naming the 1-based element (and parameter) at fault.
    """
    if isinstance(payload, dict):
        payload = [payload]

    if not isinstance(payload, list):
        log.warning(
            "Procedure batch rejected: payload is %s", type(payload).__name__
        )
        raise ValidationError("Se esperaba un array de objetos o un objeto individual")

    for i, item in enumerate(payload, start=1):
        try:
            _check_procedure(item, i)
        except ValidationError as error:
            log.warning("Procedure batch rejected: %s", error.message)
            raise

    return [schemas.ProcedureCall.model_validate(item) for item in payload]
