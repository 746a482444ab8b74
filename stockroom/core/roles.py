"""Role hierarchy and the two authorization policy styles (rank and set membership)."""

from dataclasses import dataclass
from enum import Enum

from stockroom.core.errors import AuthorizationError


class Role(str, Enum):
    """Fixed role set, declared in ascending order of privilege."""

    USER = "user"
    SUPPORT = "support"
    MANAGER = "manager"
    ADMIN = "admin"


ROLE_RANKS: dict[Role, int] = {role: rank for rank, role in enumerate(Role, start=1)}

DEFAULT_ROLE = Role.USER


def parse_role(value: "Role | str | None") -> Role | None:
    """Return the Role for value, or None if it is not a known role."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


def role_rank(role: Role | str) -> int:
    """Numeric rank of role (user=1 .. admin=4). Raises ValueError for unknown roles."""
    parsed = parse_role(role)
    if parsed is None:
        raise ValueError(f"Unknown role: {role!r}")
    return ROLE_RANKS[parsed]


def compare_roles(a: Role | str, b: Role | str) -> int:
    """Total order over roles: negative if a < b, zero if equal, positive if a > b."""
    return role_rank(a) - role_rank(b)


def has_role_at_least(role: Role | str | None, required: Role | str) -> bool:
    """True if role is at least as privileged as required. Unknown roles never qualify."""
    if parse_role(role) is None:
        return False
    return compare_roles(role, required) >= 0


@dataclass(frozen=True)
class MinimumRole:
    """Hierarchical policy: caller rank must be >= required rank."""

    required: Role

    def permits(self, role: Role | str | None) -> bool:
        return has_role_at_least(role, self.required)

    def describe(self) -> list[str]:
        return [self.required.value]


@dataclass(frozen=True)
class AllowedRoles:
    """Set-membership policy: caller role must be one of roles exactly."""

    roles: frozenset[Role]

    @classmethod
    def of(cls, *roles: Role) -> "AllowedRoles":
        return cls(frozenset(roles))

    def permits(self, role: Role | str | None) -> bool:
        parsed = parse_role(role)
        return parsed is not None and parsed in self.roles

    def describe(self) -> list[str]:
        return [r.value for r in sorted(self.roles, key=role_rank)]


Policy = MinimumRole | AllowedRoles

ADMIN_ONLY = MinimumRole(Role.ADMIN)
ALL_ROLES = AllowedRoles(frozenset(Role))


def authorize(role: Role | str | None, policy: Policy) -> None:
    """Raise AuthorizationError unless policy permits role."""
    if not policy.permits(role):
        if policy == ADMIN_ONLY:
            raise AuthorizationError("Access denied. Admin only.")
        raise AuthorizationError(
            f"Access denied. Required role: {', '.join(policy.describe())}"
        )
