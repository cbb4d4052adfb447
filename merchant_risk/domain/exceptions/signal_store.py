"""Signal Store-related domain exceptions."""

from .base import DomainException


class SignalStoreException(DomainException):
    """Raised when the Signal Store returns an error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(
            message=message,
            code="SIGNAL_STORE_ERROR",
        )
        self.status_code = status_code


class SignalStoreTimeoutException(SignalStoreException):
    """Raised when the Signal Store times out."""

    def __init__(self):
        super().__init__(
            message="Signal Store request timed out",
            status_code=None,
        )
        self.code = "SIGNAL_STORE_TIMEOUT"


class MerchantNotFoundException(DomainException):
    """Raised when the Signal Store has no facts for a merchant."""

    def __init__(self, merchant_id: str):
        super().__init__(
            message=f"Merchant not found: {merchant_id}",
            code="MERCHANT_NOT_FOUND",
        )
        self.merchant_id = merchant_id
