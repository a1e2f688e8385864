from datetime import datetime, timezone
from typing import Any, Dict

from app.core import schemas


def error_detail(error: str, message: str, **extra: Any) -> Dict[str, Any]:
    """Body used for every client-facing error: error, message, timestamp + extras."""
    body = schemas.ErrorResponse(
        error=error, message=message, timestamp=datetime.now(timezone.utc), **extra
    )
    return body.model_dump(mode="json")
