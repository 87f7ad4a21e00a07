import logging

from pydantic import BaseModel

from backend.core import config
from backend.core.errors import PermissionDenied

logger = logging.getLogger(__name__)

PERMISSION_DENIED_DETAIL = 'Permission denied: You can only manage your own schedule'


class Caller(BaseModel):
    """Identity of whoever is making the request."""
    user_id: str
    role: str | None = None


def is_schedule_mutation_allowed(
    caller_id: str,
    caller_role: str | None,
    target_provider_id: str,
    elevated_role: str | None = None,
) -> bool:
    elevated_role = elevated_role or config.ELEVATED_SCHEDULE_ROLE
    return caller_role == elevated_role or caller_id == target_provider_id


def authorize_schedule_mutation(
    caller_id: str,
    caller_role: str | None,
    target_provider_id: str,
    elevated_role: str | None = None,
) -> bool:
    """Allow editing ``target_provider_id``'s schedule or raise ``PermissionDenied``.

    Providers may manage their own schedule; the elevated role may manage
    anyone's.
    """
    if is_schedule_mutation_allowed(caller_id, caller_role, target_provider_id, elevated_role):
        return True

    logger.warning(
        'Denied schedule change for provider %s by caller %s (role %s)',
        target_provider_id, caller_id, caller_role,
    )
    raise PermissionDenied(PERMISSION_DENIED_DETAIL)
