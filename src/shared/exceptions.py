"""Custom exceptions for the canteen ledger application."""

GENERIC_FAILURE_MESSAGE = "❌ Dekont işlenirken bir hata oluştu. Lütfen tekrar deneyin."


class LedgerException(Exception):
    """Base exception for all canteen ledger errors."""

    user_message = GENERIC_FAILURE_MESSAGE

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundError(LedgerException):
    """Raised when a resource is not found."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class AuthorizationDeniedError(LedgerException):
    """Raised when a chat sender is not on the allow-list."""

    user_message = "⛔ Bu botu kullanma yetkiniz yok."

    def __init__(self, message: str = "Sender not authorized"):
        super().__init__(message, status_code=403)


class UnsupportedAttachmentError(LedgerException):
    """Raised when an attachment is neither an image nor a PDF."""

    user_message = "⚠️ Sadece görsel (JPEG, PNG) ve PDF dosyaları kabul edilmektedir."

    def __init__(self, message: str = "Unsupported attachment type"):
        super().__init__(message, status_code=415)


class ExtractionFailedError(LedgerException):
    """Raised when the vision model call fails or its answer cannot be decoded."""

    user_message = "❌ Dekont analiz edilemedi. Lütfen tekrar deneyin."

    def __init__(self, message: str = "Receipt extraction failed"):
        super().__init__(message, status_code=502)


class UnreadableReceiptError(LedgerException):
    """Raised when extraction succeeded but yielded nothing usable."""

    user_message = (
        "⚠️ Dekont okunamadı veya geçersiz görüntü.\n\n"
        "Lütfen daha net bir görsel gönderin."
    )

    def __init__(self, message: str = "Receipt has no usable amount or counterparty"):
        super().__init__(message, status_code=422)


class StorageError(LedgerException):
    """Raised when storage operations fail."""

    user_message = "❌ Dekont dosyası kaydedilemedi. Lütfen tekrar deneyin."

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(message, status_code=500)


class DatabaseError(LedgerException):
    """Raised when database operations fail."""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message, status_code=500)


class NoSystemUserError(LedgerException):
    """Raised when neither a mapped user nor an administrator exists.

    This is a deployment problem, not a per-message condition.
    """

    def __init__(self, message: str = "No system user available to own transactions"):
        super().__init__(message, status_code=500)


class ChatTransportError(LedgerException):
    """Raised when a Telegram Bot API call fails."""

    user_message = "❌ Dosya Telegram'dan alınamadı. Lütfen tekrar gönderin."

    def __init__(self, message: str = "Chat transport call failed"):
        super().__init__(message, status_code=502)
