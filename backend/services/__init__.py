from .errors import AppError, ConfigurationError, InvalidInputError, NotFoundError, TransportError, VendorError
from .store import conversation_sessions, upload_tasks

__all__ = [
    "AppError",
    "ConfigurationError",
    "InvalidInputError",
    "NotFoundError",
    "TransportError",
    "VendorError",
    "conversation_sessions",
    "upload_tasks",
]
