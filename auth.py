"""
Caller identity and seller capability checks.

Sessions are issued by the identity provider (Clerk) as signed JWTs and
arrive either as a bearer token or in the ``__session`` cookie. Only the
``sub`` claim is used: it is the user id everywhere else in the service.
"""

import logging
from typing import Iterable, Optional, Protocol

from fastapi import Depends, Header, Cookie
from jose import JWTError, jwt

import config
from errors import Unauthenticated, Unauthorized

logger = logging.getLogger(__name__)


def decode_session_token(token: str) -> dict:
    if not config.CLERK_JWT_KEY:
        raise Unauthenticated("Session verification is not configured")
    try:
        claims = jwt.decode(
            token,
            config.CLERK_JWT_KEY,
            algorithms=config.CLERK_JWT_ALGORITHMS,
            options={"verify_aud": False},
        )
    except JWTError as e:
        logger.debug("Rejected session token: %s", e)
        raise Unauthenticated("Invalid or expired session") from e
    azp = claims.get("azp")
    if config.CLERK_AUTHORIZED_PARTIES and azp not in config.CLERK_AUTHORIZED_PARTIES:
        raise Unauthenticated("Session issued for an unknown origin")
    return claims


def _session_token(authorization: Optional[str], session: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return session or None


# Dependencies to resolve the caller

def get_optional_user_id(
    authorization: Optional[str] = Header(default=None),
    session: Optional[str] = Cookie(default=None, alias=config.SESSION_COOKIE),
) -> Optional[str]:
    token = _session_token(authorization, session)
    if token is None:
        return None
    user_id = decode_session_token(token).get("sub")
    if not user_id:
        raise Unauthenticated("Invalid session")
    return user_id


def get_current_user_id(user_id: Optional[str] = Depends(get_optional_user_id)) -> str:
    if user_id is None:
        raise Unauthenticated("Not authenticated")
    return user_id


# Seller capability

class SellerPolicy(Protocol):
    def is_seller(self, user_id: Optional[str]) -> bool:
        ...


class AllowListSellerPolicy:
    """Grants seller rights to a fixed set of user ids."""

    def __init__(self, user_ids: Iterable[str]):
        self.user_ids = frozenset(user_ids)

    def is_seller(self, user_id: Optional[str]) -> bool:
        return bool(user_id) and user_id in self.user_ids


def get_seller_policy() -> SellerPolicy:
    return AllowListSellerPolicy(config.SELLER_USER_IDS)


def require_seller(
    user_id: Optional[str] = Depends(get_optional_user_id),
    policy: SellerPolicy = Depends(get_seller_policy),
) -> str:
    if not policy.is_seller(user_id):
        raise Unauthorized("Unauthorized. Only sellers can manage products.")
    return user_id
