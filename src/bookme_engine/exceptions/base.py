class BookingEngineError(Exception):
    """Base exception for all booking engine errors."""
    status_code = 500
    code = "internal_error"
    client_message = "Something went wrong. Please try again later."

    def __init__(self, message: str = None):
        super().__init__(message or self.client_message)
        self.message = message or self.client_message


class ClientError(BookingEngineError):
    """Raised for expected, client-correctable request problems."""
    status_code = 400
    code = "client_error"


class ValidationError(ClientError):
    """Raised when input validation fails."""
    code = "validation_error"
    client_message = "Please fill in all required fields."


class TenantNotFoundError(ClientError):
    """Raised when no tenant exists for the given identifier."""
    status_code = 404
    code = "tenant_not_found"
    client_message = "User not found."


class CredentialError(BookingEngineError):
    """Base exception for credential lifecycle failures."""
    pass


class UpstreamError(BookingEngineError):
    """Base exception for failures in a remote dependency."""
    status_code = 502
    code = "upstream_error"
