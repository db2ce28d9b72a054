"""Identity dependency: the current user id from the bearer token."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from searchstate.domain.exceptions import AuthenticationException
from searchstate.infrastructure.security.jwt import token_subject

_bearer = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> str | None:
    """User id from the bearer token's sub claim; None (guest) without a token.

    A token that is present but invalid is an error, not a guest.
    """
    if credentials is None:
        return None
    try:
        return token_subject(credentials.credentials)
    except ValueError as e:
        raise AuthenticationException(str(e)) from e
