"""Exception hierarchy for customer-service.

Every error the service raises on purpose derives from CustomerServiceError.
`status_code` tells the HTTP layer which response to build; the exception
handlers in main.py do the actual mapping.
"""

from __future__ import annotations


class CustomerServiceError(Exception):
    """Base exception for service errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidDataError(CustomerServiceError):
    """Raised when customer data is missing, blank or inconsistent."""

    status_code = 400


class NotFoundError(CustomerServiceError):
    """Raised when no customer exists for the requested id."""

    status_code = 404

    def __init__(self, customer_id: int) -> None:
        self.customer_id = customer_id
        super().__init__(f"Customer not found with ID: {customer_id}")


class NotificationDeliveryError(CustomerServiceError):
    """Raised by a notification sink when an event could not be delivered.

    The service catches and logs it; callers never see it.
    """

    status_code = 502
