# storefront/api/errors.py
from fastapi import HTTPException

from storefront.domain.errors import (
    StorefrontError,
    NotFoundError,
    ValidationError,
    ConflictError,
    DownstreamError,
    OrderPlacementError,
)


def to_http(e: StorefrontError) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, ConflictError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, OrderPlacementError):
        # the order exists and is flagged, the caller gets its id
        return HTTPException(
            status_code=502,
            detail={"message": str(e), "order_id": e.order_id, "status": e.status},
        )
    if isinstance(e, DownstreamError):
        return HTTPException(status_code=502, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))
