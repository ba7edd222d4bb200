"""
SNApp Backend: Authenticated User Dependency
==============================================

What:  FastAPI dependency that yields the id of the authenticated user.
How:   Authentication itself (sessions, OAuth, password reset) is handled by
       the auth provider in front of this service, which forwards the
       verified user id in the X-User-ID header. This module only insists
       that the header is present.
Who:   Every /api route handler.
"""

from typing import Optional

from fastapi import Header

from snapp.exceptions import AuthenticationError

USER_ID_HEADER = "X-User-ID"
MAX_USER_ID_LENGTH = 191


async def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER),
) -> str:
    """
    Return the authenticated user id.

    Raises:
        AuthenticationError: header missing, blank or longer than the
            user_id column (→ 401)
    """
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise AuthenticationError()
    if len(user_id) > MAX_USER_ID_LENGTH:
        raise AuthenticationError(message="Invalid user id")
    return user_id
