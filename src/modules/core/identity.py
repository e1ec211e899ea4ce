"""Identity gate: resolves the acting user and checks roles.

Roles are Django auth groups (``Manager``, ``Customer``).  The gate is the
first precondition of every mutating catalog / promotions operation and
raises ``DomainError`` subclasses that the ``operation`` boundary
turns into failed results.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Optional

import structlog
from django.conf import settings
from django.contrib.auth import get_user_model

from modules.core.results import DomainError, ErrorCode

logger = structlog.get_logger(__name__)


class Role(StrEnum):
    MANAGER = "Manager"
    CUSTOMER = "Customer"


class NotAuthenticated(DomainError):
    code = ErrorCode.NOT_AUTHENTICATION


class AccountInactive(DomainError):
    code = ErrorCode.ACCOUNT_IS_INACTIVE


class NotAuthorized(DomainError):
    code = ErrorCode.NOT_AUTHORITY


class UserNotFound(DomainError):
    code = ErrorCode.USER_NOT_FOUND


class IdentityGate:
    """Resolve the actor of a request into a local user id with a role."""

    def resolve_acting_user(self, actor: Any, required_role: str) -> Any:
        """Return the actor's user id when it holds *required_role*.

        Raises:
            NotAuthenticated: anonymous or missing actor.
            AccountInactive: the account is deactivated.
            NotAuthorized: the actor lacks the role.
        """
        if actor is None or not getattr(actor, "is_authenticated", False):
            raise NotAuthenticated("No authenticated user.")
        if not getattr(actor, "is_active", False):
            raise AccountInactive(f"User {actor.pk} is inactive.")
        if not self.has_role(actor, required_role):
            logger.warning("identity.role_denied", user_id=str(actor.pk), role=required_role)
            raise NotAuthorized(f"User {actor.pk} lacks role {required_role}.")
        return actor.pk

    def resolve_manager(self, actor: Any) -> Any:
        return self.resolve_acting_user(actor, settings.MANAGER_ROLE)

    @staticmethod
    def has_role(actor: Any, role: str) -> bool:
        groups = getattr(actor, "groups", None)
        if groups is None:
            return False
        return groups.filter(name=role).exists()

    @staticmethod
    def get_user(user_id: Any) -> Optional[Any]:
        """Return the active user with *user_id*, or ``None``."""
        User = get_user_model()
        try:
            return User.objects.filter(pk=user_id, is_active=True).first()
        except (TypeError, ValueError):
            return None

    def require_user(self, user_id: Any) -> Any:
        user = self.get_user(user_id)
        if user is None:
            raise UserNotFound(f"User {user_id} not found.")
        return user
