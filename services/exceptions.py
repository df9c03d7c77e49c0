from typing import Any, Dict, List, Optional


class BuyerServiceError(Exception):
    """Base class for failures that are reported back to the caller"""

    kind = "Error"
    status_code = 400

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def payload(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message, "kind": self.kind}
        if self.errors is not None:
            body["errors"] = self.errors
        return body


class ValidationError(BuyerServiceError):
    """Field data is malformed or violates a rule"""

    kind = "ValidationError"
    status_code = 400


class BadRequestError(BuyerServiceError):
    kind = "BadRequest"
    status_code = 400


class NotFoundError(BuyerServiceError):
    kind = "NotFoundError"
    status_code = 404


class OwnerNotFoundError(NotFoundError):
    """The acting identity does not exist (as opposed to lacking permission)"""

    status_code = 401

    def __init__(self, message: str = "Owner not found"):
        super().__init__(message)


class AuthorizationError(BuyerServiceError):
    kind = "AuthorizationError"
    status_code = 403


class RateLimitExceeded(BuyerServiceError):
    kind = "RateLimitExceeded"
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded for update", retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after

    def payload(self) -> Dict[str, Any]:
        body = super().payload()
        if self.retry_after is not None:
            body["retryAfter"] = round(self.retry_after, 1)
        return body


class TransactionError(BuyerServiceError):
    """The atomic commit failed after all rows were staged"""

    kind = "TransactionError"
    status_code = 409
