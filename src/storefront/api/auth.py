"""Caller identity for API requests.

Authentication happens upstream (gateway or session middleware); it forwards
the authenticated user in ``X-User-Id`` and their role in ``X-User-Role``.
"""

from dataclasses import dataclass

from fastapi import Depends, Header

from storefront.errors import Forbidden, Unauthorized
from storefront.utils.logging import add_context

ADMIN = "admin"
CUSTOMER = "customer"


@dataclass(frozen=True)
class AuthContext:
    user_id: str
    role: str = CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN


async def current_user(
    x_user_id: str = Header(default=""),
    x_user_role: str = Header(default=CUSTOMER),
) -> AuthContext:
    if not x_user_id:
        raise Unauthorized("Authentication required")

    user = AuthContext(user_id=x_user_id, role=(x_user_role or CUSTOMER).lower())
    add_context(user_id=user.user_id, user_role=user.role)
    return user


async def admin_user(user: AuthContext = Depends(current_user)) -> AuthContext:
    if not user.is_admin:
        raise Forbidden("Admin access required", user_id=user.user_id)
    return user
