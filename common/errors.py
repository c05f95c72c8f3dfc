from rest_framework import status


class PortalError(Exception):
    """Base for every error the dues and notification operations raise.

    ``code`` is the error kind returned to API callers, ``status_code`` the
    HTTP status the views answer with.
    """

    code = "PortalError"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)

    def as_payload(self) -> dict:
        return {"error": self.code, "detail": str(self)}


class NotFound(PortalError):
    code = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(PortalError):
    code = "Forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class DuplicatePeriod(PortalError):
    code = "DuplicatePeriod"


class InvalidAmount(PortalError):
    code = "InvalidAmount"


class InvalidPeriod(PortalError):
    code = "InvalidPeriod"


class InvalidContent(PortalError):
    code = "InvalidContent"


class AlreadySettled(PortalError):
    code = "AlreadySettled"
    status_code = status.HTTP_409_CONFLICT


class InvalidSignature(PortalError):
    code = "InvalidSignature"


class UnsupportedChannel(PortalError):
    code = "UnsupportedChannel"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class GatewayError(PortalError):
    """An external gateway call failed. Safe to retry from the caller."""

    code = "GatewayFailure"
    status_code = status.HTTP_502_BAD_GATEWAY


class GatewayTimeout(GatewayError):
    code = "GatewayTimeout"
    status_code = status.HTTP_504_GATEWAY_TIMEOUT


class GatewayFailure(GatewayError):
    code = "GatewayFailure"
