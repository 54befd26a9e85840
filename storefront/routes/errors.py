"""Translate gateway results into HTTP errors"""

import logging
from typing import Any

from fastapi import HTTPException

from ..gateway import GatewayResult

logger = logging.getLogger(__name__)


def ensure_ok(result: GatewayResult, message: str, status_code: int = 502) -> Any:
    """Return the result data, or raise a short user-facing error"""
    if not result.ok:
        logger.error(f"{message}: {result.error.code} {result.error.message}")
        raise HTTPException(status_code=status_code, detail=message)
    return result.data
