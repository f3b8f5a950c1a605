import uuid
from typing import Optional

from placeshare.results import ErrorKind, Result


class OwnershipGuard:
    """
    Compares the owner of a resource with the authenticated caller.

    Pure check with no I/O. Callers run it after the resource is known to
    exist and before anything is mutated.
    """

    def __init__(self, message: str = "You are not allowed to modify this place."):
        self.message = message

    def authorize(
        self,
        resource_owner_id: uuid.UUID,
        caller_id: uuid.UUID,
        message: Optional[str] = None,
    ) -> Result[None]:
        if str(resource_owner_id) != str(caller_id):
            return Result.fail(
                ErrorKind.UNAUTHORIZED,
                message or self.message,
                owner_id=str(resource_owner_id),
                caller_id=str(caller_id),
            )
        return Result.success()
