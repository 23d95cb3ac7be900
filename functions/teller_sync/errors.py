from typing import Optional


class RelayError(Exception):
    """Base class for errors raised by the Teller sync relay."""


class ValidationError(RelayError):
    """The client request is missing required input (e.g. the access token)."""


class UpstreamError(RelayError):
    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Teller API request failed: {status_code} {body}")


class TransportError(RelayError):
    """Teller could not be reached (DNS, connection, TLS, timeout)."""


class ResponseParseError(RelayError):
    """Teller answered 2xx with a body we cannot use."""


class PersistenceError(RelayError):
    """Writing the sync store failed. Logged, never returned to the client."""


class AuthError(RelayError):
    def __init__(self, status_code: int, message: str, challenge: Optional[str] = None):
        self.status_code = status_code
        self.challenge = challenge
        super().__init__(message)
