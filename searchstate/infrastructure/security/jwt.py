"""Bearer token handling for search-state identity.

Search state is scoped to the subject (sub claim) of the caller's token.
Tokens are issued by the host application; issue_token is for local
tooling and tests.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from searchstate.core.config import get_settings

DEFAULT_TOKEN_LIFETIME = timedelta(minutes=30)


def _signing_key() -> str:
    key = get_settings().secret_key.get_secret_value()
    if not key:
        raise ValueError("SECRET_KEY is not configured; bearer tokens cannot be checked")
    return key


def issue_token(
    subject: str | int,
    lifetime: timedelta = DEFAULT_TOKEN_LIFETIME,
    **claims: Any,
) -> str:
    """Sign a token for subject that expires after lifetime."""
    payload = {**claims, "sub": str(subject), "exp": datetime.now(UTC) + lifetime}
    return cast(str, jwt.encode(payload, _signing_key(), algorithm=get_settings().algorithm))


def token_subject(token: str) -> str:
    """Return the sub claim of a valid, unexpired token.

    Raises:
        ValueError: No signing key, bad signature, expired, or no sub/exp claim.
    """
    try:
        claims = jwt.decode(
            token,
            _signing_key(),
            algorithms=[get_settings().algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid bearer token: {e}") from e
    subject = claims.get("sub")
    if subject in (None, ""):
        raise ValueError("Bearer token has an empty sub claim")
    return str(subject)
