"""Translation of domain failures into HTTP errors"""

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException

from loan_dashboard.domain.exceptions import DataAccessError, InputValidationError


@contextmanager
def translate_errors(action: str, request_id: str) -> Iterator[None]:
    """
    Map failures inside the block to HTTP responses.

    - InputValidationError -> 400 with the validation message
    - DataAccessError -> 500 with the driver message (internal API, so it is exposed)
    - anything else -> 500 "Internal server error"
    """
    try:
        yield
    except HTTPException:
        raise
    except InputValidationError as e:
        logging.warning(f"Rejected request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))
    except DataAccessError as e:
        logging.error(
            f"{action} failed: {e.details}",
            extra={"request_id": request_id, "source_table": e.source_table},
        )
        raise HTTPException(status_code=500, detail={"error": f"{action} failed", "details": e.details})
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
