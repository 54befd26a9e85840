"""Gateway result values"""

from dataclasses import dataclass
from typing import Any, Optional

FETCH_ERROR = "FETCH_ERROR"


class GatewayRequestError(Exception):
    """Raised when a gateway result is unwrapped for form-level display"""

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


@dataclass
class GatewayError:
    """Error reported by the backend or the transport"""
    message: str
    code: str
    status_code: Optional[int] = None

    @property
    def is_transport(self) -> bool:
        return self.code == FETCH_ERROR


@dataclass
class GatewayResult:
    """Data/error pair returned by every gateway call"""
    data: Any = None
    error: Optional[GatewayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self, fallback: str = "Request failed") -> Any:
        """Return the data or raise GatewayRequestError"""
        if self.error is not None:
            raise GatewayRequestError(
                self.error.message or fallback,
                code=self.error.code,
                status_code=self.error.status_code,
            )
        return self.data


@dataclass
class UploadResult:
    """Result of a blob upload"""
    url: Optional[str] = None
    error: Optional[GatewayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None
