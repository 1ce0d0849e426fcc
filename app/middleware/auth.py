"""
Supabase JWT authentication.

The timer engine trusts whatever user id this dependency returns; it never
authenticates on its own. Tokens are verified against the project's JWKS.
"""
import time
import logging
from typing import Optional
from fastapi import HTTPException, Header
from jose import jwt, jwk
import httpx

from app.config import settings

logger = logging.getLogger(__name__)

JWKS_CACHE_SECONDS = 60 * 60
JWT_AUDIENCE = "authenticated"
SUPPORTED_ALGORITHMS = ["ES256", "RS256"]

_jwks_cache: Optional[dict] = None
_jwks_fetched_at: float = 0


def _auth_base_url() -> str:
    if not settings.supabase_url:
        raise ValueError("SUPABASE_URL must be set")
    return f"{settings.supabase_url.rstrip('/')}/auth/v1"


async def get_jwks() -> dict:
    """Fetch the project's JWKS, cached for an hour; a stale cache beats no keys"""
    global _jwks_cache, _jwks_fetched_at

    now = time.time()
    if _jwks_cache and (now - _jwks_fetched_at) < JWKS_CACHE_SECONDS:
        return _jwks_cache

    url = f"{_auth_base_url()}/.well-known/jwks.json"
    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(url, timeout=10.0)
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Failed to fetch JWKS from {url}: {e}")
        if _jwks_cache:
            logger.warning("Using expired JWKS cache")
            return _jwks_cache
        raise HTTPException(status_code=500, detail="Failed to fetch authentication keys")

    _jwks_cache = response.json()
    _jwks_fetched_at = now
    logger.info("JWKS refreshed")
    return _jwks_cache


def _find_signing_key(jwks: dict, kid: str) -> dict:
    for key_data in jwks.get("keys", []):
        if key_data.get("kid") == kid:
            return key_data
    raise HTTPException(status_code=401, detail=f"Key with ID '{kid}' not found in JWKS")


async def verify_token(token: str) -> dict:
    """
    Verify a Supabase access token and return its claims.

    Raises HTTPException(401) for any invalid, expired or unknown token.
    """
    try:
        header = jwt.get_unverified_header(token)
    except jwt.JWTError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {str(e)}")

    kid = header.get("kid")
    if not kid:
        raise HTTPException(status_code=401, detail="Token missing key ID (kid)")

    key = jwk.construct(_find_signing_key(await get_jwks(), kid))
    try:
        return jwt.decode(
            token,
            key,
            algorithms=SUPPORTED_ALGORITHMS,
            audience=JWT_AUDIENCE,
            issuer=_auth_base_url(),
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired")
    except jwt.JWTClaimsError as e:
        raise HTTPException(status_code=401, detail=f"Token validation failed: {str(e)}")
    except jwt.JWTError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {str(e)}")


def _bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header missing")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization header format. Expected 'Bearer <token>'"
        )
    return token.strip()


async def get_current_user_id(
    authorization: Optional[str] = Header(None)
) -> str:
    """FastAPI dependency returning the authenticated user's id (JWT `sub`)"""
    payload = await verify_token(_bearer_token(authorization))
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token: no user ID")
    return user_id
