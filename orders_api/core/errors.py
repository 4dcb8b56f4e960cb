"""
Error taxonomy shared by services and the API layer

Services raise these; the application maps each kind to an HTTP status
(see orders_api.main).
"""


class OrdersError(Exception):
    """Base class for every error the core raises on purpose"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotFoundError(OrdersError):
    """Referenced entity does not exist"""


class InvalidInputError(OrdersError):
    """Malformed or out-of-range caller input"""


class InvalidOperationError(OrdersError):
    """Valid input that violates a business rule"""


class ConflictError(OrdersError):
    """Concurrent modification detected at write time"""


class StorageFailureError(OrdersError):
    """Unexpected failure in the storage layer"""
