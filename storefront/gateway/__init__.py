# Remote Data Gateway

from .client import GatewayClient
from .models import GatewayError, GatewayResult, GatewayRequestError, UploadResult, FETCH_ERROR
from .query import Query, Filter, Operator

__all__ = [
    "GatewayClient",
    "GatewayError",
    "GatewayResult",
    "GatewayRequestError",
    "UploadResult",
    "FETCH_ERROR",
    "Query",
    "Filter",
    "Operator",
]
