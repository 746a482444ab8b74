"""Route guards deciding what a page renders for the current session."""

from dataclasses import dataclass, field
from enum import Enum

from stockroom.client.session import Session, SessionStatus
from stockroom.core.roles import ALL_ROLES, AllowedRoles, Role

LOGIN_PATH = "/login"
HOME_PATH = "/"
PUBLIC_PATHS = frozenset({"/login", "/register"})

ADMIN_PAGES = AllowedRoles.of(Role.ADMIN)

# Per-page set-membership policies.
PAGE_POLICIES: dict[str, AllowedRoles] = {
    "/": ALL_ROLES,
    "/users": ADMIN_PAGES,
    "/materials": ALL_ROLES,
    "/categories": ALL_ROLES,
    "/roles": ADMIN_PAGES,
}


class GuardOutcome(str, Enum):
    LOADING = "loading"
    REDIRECT = "redirect"
    DENIED = "denied"
    ALLOW = "allow"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class GuardDecision:
    """
    What to render. REDIRECT carries the target and, for login redirects, the
    originally requested path; DENIED carries the roles the page requires.
    """

    outcome: GuardOutcome
    redirect_to: str | None = None
    from_path: str | None = None
    required_roles: list[str] = field(default_factory=list)


def guard_route(
    session: Session,
    path: str,
    policies: dict[str, AllowedRoles] | None = None,
) -> GuardDecision:
    """Decide access to a protected page."""
    policies = PAGE_POLICIES if policies is None else policies
    if session.status is SessionStatus.LOADING:
        return GuardDecision(GuardOutcome.LOADING)

    policy = policies.get(path)
    if policy is None:
        return GuardDecision(GuardOutcome.NOT_FOUND)

    if not session.is_authenticated:
        return GuardDecision(GuardOutcome.REDIRECT, redirect_to=LOGIN_PATH, from_path=path)

    if not policy.permits(session.role):
        return GuardDecision(GuardOutcome.DENIED, required_roles=policy.describe())

    return GuardDecision(GuardOutcome.ALLOW)


def guard_public_route(session: Session, from_path: str | None = None) -> GuardDecision:
    """Login/register pages: an authenticated session goes back where it came from."""
    if session.status is SessionStatus.LOADING:
        return GuardDecision(GuardOutcome.LOADING)
    if session.is_authenticated:
        target = from_path if from_path and from_path not in PUBLIC_PATHS else HOME_PATH
        return GuardDecision(GuardOutcome.REDIRECT, redirect_to=target)
    return GuardDecision(GuardOutcome.ALLOW)
