from rest_framework.permissions import BasePermission

from ticketing.domain import Principal
from ticketing.domain.statuses import Role


class HasRole(BasePermission):
    """Allows requests whose verified principal holds one of ``roles``."""

    roles: tuple[Role, ...] = ()

    def has_permission(self, request, view) -> bool:
        principal = request.auth
        return isinstance(principal, Principal) and principal.role in self.roles


class IsOrganizer(HasRole):
    roles = (Role.ORGANIZER,)


class IsOrganizerOrAdmin(HasRole):
    roles = (Role.ORGANIZER, Role.ADMIN)


class IsAdmin(HasRole):
    roles = (Role.ADMIN,)


class IsAgent(HasRole):
    roles = (Role.AGENT,)
