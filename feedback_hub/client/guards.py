"""
Route guards for the web client.

Auth state is handed to the guard explicitly so each decision is a pure function
of (state, required roles). Roles are the only source of truth for admin checks.
"""
import enum
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel

SUPER_ADMIN = "super_admin"
ADMIN = "admin"


class SessionUser(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    roles: List[str] = []

    def has_role(self, *roles: str) -> bool:
        return bool(set(roles).intersection(self.roles))

    @property
    def is_super_admin(self) -> bool:
        return self.has_role(SUPER_ADMIN)


class AuthState(BaseModel):
    user: Optional[SessionUser] = None
    is_authenticated: bool = False
    is_loading: bool = False
    # False until the persisted session has been restored
    has_hydrated: bool = True


class GuardState(str, enum.Enum):
    HYDRATING = "hydrating"
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    UNAUTHORIZED = "unauthorized"
    AUTHORIZED = "authorized"


class Spinner(BaseModel):
    state: GuardState


class Redirect(BaseModel):
    to: str
    replace: bool = True


class RouteGuard:
    required_roles: Tuple[str, ...] = ()
    login_path = "/login"
    unauthorized_path = "/dashboard"

    def evaluate(self, auth: AuthState) -> GuardState:
        if not auth.has_hydrated:
            return GuardState.HYDRATING
        if auth.is_loading:
            return GuardState.LOADING
        if not auth.is_authenticated or auth.user is None:
            return GuardState.UNAUTHENTICATED
        if self.required_roles and not auth.user.has_role(*self.required_roles):
            return GuardState.UNAUTHORIZED
        return GuardState.AUTHORIZED

    def render(self, auth: AuthState, children: Any) -> Any:
        """Returns a Spinner, a Redirect or ``children`` itself."""
        state = self.evaluate(auth)
        if state in (GuardState.HYDRATING, GuardState.LOADING):
            return Spinner(state=state)
        if state == GuardState.UNAUTHENTICATED:
            return Redirect(to=self.login_path)
        if state == GuardState.UNAUTHORIZED:
            return Redirect(to=self.unauthorized_path)
        return children


class ProtectedRoute(RouteGuard):
    pass


class AdminRouteGuard(RouteGuard):
    required_roles = (ADMIN, SUPER_ADMIN)


class SuperAdminRouteGuard(RouteGuard):
    required_roles = (SUPER_ADMIN,)
    unauthorized_path = "/admin"
