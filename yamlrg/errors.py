"""Domain errors raised by the portal services.

Each error carries the operation, acting identity and target document so the
application-level handler can log enough context to diagnose the failure
while only returning a short message to the caller.
"""

from typing import Optional


class PortalError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 500
    default_message = "Request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        operation: Optional[str] = None,
        actor: Optional[str] = None,
        target: Optional[str] = None,
    ):
        self.message = message or self.default_message
        self.operation = operation
        self.actor = actor
        self.target = target
        super().__init__(self.message)

    def context(self) -> dict:
        return {
            "operation": self.operation,
            "actor": self.actor,
            "target": self.target,
        }


class Unauthorized(PortalError):
    """Actor failed the relevant authorization predicate"""

    status_code = 403
    default_message = "You are not allowed to perform this action"


class NotFound(PortalError):
    """Referenced document does not exist"""

    status_code = 404
    default_message = "Not found"


class ValidationError(PortalError):
    """Malformed input, rejected before any store call"""

    status_code = 400
    default_message = "Invalid input"


class DownstreamFailure(PortalError):
    """Document store or identity provider call failed"""

    status_code = 502
    default_message = "A backing service failed, please try again later"
