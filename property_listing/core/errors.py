"""Error kinds raised by the service layer.

Routers never build HTTP errors for these themselves; ``property_listing.main``
registers one exception handler per kind.
"""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(ServiceError):
    """Malformed identifier or unusable request field. Not retryable."""

    status_code = 400


class NotFoundError(ServiceError):
    """Entity is absent, or not owned by the caller."""

    status_code = 404


class InfrastructureError(ServiceError):
    """Database unreachable or timed out. The caller may retry."""

    status_code = 503
