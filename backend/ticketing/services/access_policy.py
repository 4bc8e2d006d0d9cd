"""
Access policy: who may do what to which rows.

The policy is a fixed table keyed by (role, resource, action). Each entry
says whether the permission applies to any row or only to rows the principal
owns. Anything not in the table is denied.

    role    resource  action     scope
    ------  --------  ---------  -----
    owner   event     read       any
    owner   booking   create     own
    owner   booking   read       own
    owner   booking   cancel     own
    owner   profile   read       own
    owner   profile   update     own
    admin   event     *          any
    admin   booking   create     own
    admin   booking   read       any
    admin   booking   cancel     any
    admin   booking   list_all   any
    admin   profile   read       any
    admin   profile   update     own

Anonymous callers may only read events.
"""

import enum
import uuid
from dataclasses import dataclass
from typing import Optional

from ticketing.core.exceptions import Forbidden
from ticketing.core.logging import get_logger

logger = get_logger(__name__)


class Role(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"


class Resource(str, enum.Enum):
    EVENT = "event"
    BOOKING = "booking"
    PROFILE = "profile"


class Action(str, enum.Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    CANCEL = "cancel"
    LIST_ALL = "list_all"


class Scope(str, enum.Enum):
    ANY = "any"
    OWN = "own"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller as asserted by the identity provider."""

    user_id: uuid.UUID
    is_admin: bool = False
    email: Optional[str] = None

    @property
    def role(self) -> Role:
        return Role.ADMIN if self.is_admin else Role.OWNER


RULES: dict[tuple[Role, Resource, Action], Scope] = {
    (Role.OWNER, Resource.EVENT, Action.READ): Scope.ANY,
    (Role.OWNER, Resource.BOOKING, Action.CREATE): Scope.OWN,
    (Role.OWNER, Resource.BOOKING, Action.READ): Scope.OWN,
    (Role.OWNER, Resource.BOOKING, Action.CANCEL): Scope.OWN,
    (Role.OWNER, Resource.PROFILE, Action.READ): Scope.OWN,
    (Role.OWNER, Resource.PROFILE, Action.UPDATE): Scope.OWN,
    (Role.ADMIN, Resource.EVENT, Action.READ): Scope.ANY,
    (Role.ADMIN, Resource.EVENT, Action.CREATE): Scope.ANY,
    (Role.ADMIN, Resource.EVENT, Action.UPDATE): Scope.ANY,
    (Role.ADMIN, Resource.EVENT, Action.DELETE): Scope.ANY,
    (Role.ADMIN, Resource.BOOKING, Action.CREATE): Scope.OWN,
    (Role.ADMIN, Resource.BOOKING, Action.READ): Scope.ANY,
    (Role.ADMIN, Resource.BOOKING, Action.CANCEL): Scope.ANY,
    (Role.ADMIN, Resource.BOOKING, Action.LIST_ALL): Scope.ANY,
    (Role.ADMIN, Resource.PROFILE, Action.READ): Scope.ANY,
    (Role.ADMIN, Resource.PROFILE, Action.UPDATE): Scope.OWN,
}

PUBLIC_RULES = frozenset({(Resource.EVENT, Action.READ)})


def is_allowed(
    principal: Optional[Principal],
    resource: Resource,
    action: Action,
    owner_id: Optional[uuid.UUID] = None,
) -> bool:
    if principal is None:
        return (resource, action) in PUBLIC_RULES

    scope = RULES.get((principal.role, resource, action))
    if scope is None:
        return False
    if scope is Scope.OWN:
        return owner_id is not None and owner_id == principal.user_id
    return True


def authorize(
    principal: Optional[Principal],
    resource: Resource,
    action: Action,
    owner_id: Optional[uuid.UUID] = None,
) -> None:
    """Raise Forbidden unless the table grants the permission."""
    if is_allowed(principal, resource, action, owner_id):
        return

    logger.warning(
        "access_denied",
        user_id=str(principal.user_id) if principal else None,
        role=principal.role.value if principal else "anonymous",
        resource=resource.value,
        action=action.value,
    )
    raise Forbidden(f"Not allowed to {action.value} this {resource.value}")
