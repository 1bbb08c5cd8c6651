"""Domain errors raised by store services and rendered as JSON by the API."""

from typing import Any, Dict, Optional


class CreditStoreError(Exception):
    """Base error carrying an HTTP status, a user-facing message and a machine code."""

    status_code: int = 500
    code: str = "internal_error"
    message: str = "Something went wrong"

    def __init__(self, message: str = "", headers: Optional[Dict[str, str]] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.headers = headers

    def to_payload(self) -> Dict[str, Any]:
        return {"success": False, "message": self.message, "code": self.code}


class RequestValidationFailed(CreditStoreError):
    status_code = 400
    code = "validation_error"
    message = "Missing required fields"


class PlayerNotFound(CreditStoreError):
    status_code = 404
    code = "player_not_found"
    message = "Player not found"


class PackageNotFound(CreditStoreError):
    status_code = 404
    code = "package_not_found"
    message = "Package not found"


class AmountMismatch(CreditStoreError):
    status_code = 400
    code = "amount_mismatch"
    message = "Amount mismatch"


class PlayerAlreadyExists(CreditStoreError):
    status_code = 400
    code = "player_exists"
    message = "Username or email already exists"


class PaymentDeclined(CreditStoreError):
    status_code = 400
    code = "payment_declined"
    message = "Payment failed. Please try again."


class TransactionWriteFailed(CreditStoreError):
    status_code = 500
    code = "transaction_write_failed"
    message = "Transaction recording failed"


class PlayerWriteFailed(CreditStoreError):
    status_code = 500
    code = "player_write_failed"
    message = "Error creating player"


class RateLimited(CreditStoreError):
    status_code = 429
    code = "rate_limited"
    message = "Too many requests. Try again later."

    def __init__(self, message: str = "", retry_after: int = 1):
        super().__init__(message, headers={"Retry-After": str(max(int(retry_after), 1))})
        self.retry_after = max(int(retry_after), 1)


class DatabaseUnavailable(CreditStoreError):
    status_code = 500
    code = "database_error"
    message = "Database error"


class PaymentProcessingError(CreditStoreError):
    status_code = 500
    code = "payment_processing_error"
    message = "Payment processing error"
