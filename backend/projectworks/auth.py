from __future__ import annotations

from dataclasses import dataclass, field
import time
from typing import Any

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from projectworks.config import settings
from projectworks.plan.tiers import PlanTier, coerce_tier


_bearer_scheme = HTTPBearer(auto_error=False)
_JWKS_CACHE_TTL_SECONDS = 300.0


@dataclass
class _JwksCache:
    issuer: str = ""
    expires_at: float = 0.0
    keys_by_kid: dict[str, dict[str, Any]] = field(default_factory=dict)

    def lookup(self, issuer: str, now: float) -> dict[str, dict[str, Any]] | None:
        if self.issuer == issuer and self.expires_at > now and self.keys_by_kid:
            return self.keys_by_kid
        return None

    def store(self, issuer: str, now: float, keys_by_kid: dict[str, dict[str, Any]]) -> None:
        self.issuer = issuer
        self.expires_at = now + _JWKS_CACHE_TTL_SECONDS
        self.keys_by_kid = keys_by_kid


_jwks_cache = _JwksCache()


def _auth_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"success": False, "code": "UNAUTHORIZED", "message": detail},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _auth_misconfigured(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"success": False, "code": "AUTH_MISCONFIGURED", "message": detail},
    )


def _cognito_issuer() -> str:
    configured = settings.cognito_issuer.strip().rstrip("/")
    if configured:
        return configured

    region = settings.cognito_region.strip() or settings.aws_region.strip()
    user_pool_id = settings.cognito_user_pool_id.strip()
    if not region or not user_pool_id:
        raise _auth_misconfigured(
            "Auth is enabled but no Cognito issuer is configured. Set COGNITO_ISSUER or "
            "both COGNITO_REGION and COGNITO_USER_POOL_ID."
        )
    return f"https://cognito-idp.{region}.amazonaws.com/{user_pool_id}"


def _signing_keys(issuer: str) -> dict[str, dict[str, Any]]:
    now = time.time()
    cached = _jwks_cache.lookup(issuer, now)
    if cached is not None:
        return cached

    jwks_url = f"{issuer}/.well-known/jwks.json"
    try:
        response = httpx.get(jwks_url, timeout=5.0)
        response.raise_for_status()
        payload = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise _auth_misconfigured(f"Unable to fetch Cognito JWKS from '{jwks_url}': {exc}") from exc

    keys = payload.get("keys") if isinstance(payload, dict) else None
    if not isinstance(keys, list):
        raise _auth_misconfigured("Invalid Cognito JWKS payload: missing 'keys' list.")

    keys_by_kid = {
        key["kid"]: key
        for key in keys
        if isinstance(key, dict) and isinstance(key.get("kid"), str) and key["kid"].strip()
    }
    if not keys_by_kid:
        raise _auth_misconfigured("Cognito JWKS payload did not include any usable signing keys.")

    _jwks_cache.store(issuer, now, keys_by_kid)
    return keys_by_kid


def _client_matches(claims: dict[str, Any], app_client_id: str) -> bool:
    token_use = claims.get("token_use")
    if token_use == "access":
        return claims.get("client_id") == app_client_id
    if token_use == "id":
        audience = claims.get("aud")
        if isinstance(audience, list):
            return app_client_id in audience
        return audience == app_client_id
    return False


def decode_and_validate_cognito_token(token: str) -> dict[str, Any]:
    app_client_id = settings.cognito_app_client_id.strip()
    if not app_client_id:
        raise _auth_misconfigured("Auth is enabled but COGNITO_APP_CLIENT_ID is not configured.")

    issuer = _cognito_issuer()
    try:
        header = jwt.get_unverified_header(token)
    except JWTError as exc:
        raise _auth_error("Malformed JWT header.") from exc

    kid = header.get("kid")
    if not isinstance(kid, str) or not kid.strip():
        raise _auth_error("JWT header does not include a valid key id (kid).")

    signing_key = _signing_keys(issuer).get(kid)
    if signing_key is None:
        raise _auth_error("JWT key id is not recognized by Cognito.")

    try:
        claims = jwt.decode(
            token,
            signing_key,
            algorithms=["RS256"],
            issuer=issuer,
            options={"verify_aud": False},
        )
    except JWTError as exc:
        raise _auth_error(f"Invalid or expired token: {exc}") from exc

    if not _client_matches(claims, app_client_id):
        raise _auth_error("Token was not issued for this application.")
    return claims


def require_authenticated_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> dict[str, Any] | None:
    if not settings.auth_enabled:
        return None

    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _auth_error("Missing bearer token.")

    token = credentials.credentials.strip()
    if not token:
        raise _auth_error("Missing bearer token.")

    return decode_and_validate_cognito_token(token)


def tier_from_claims(claims: dict[str, Any] | None) -> PlanTier:
    """Subscription tier for a request; the configured default applies while auth is disabled."""
    if claims is None:
        return coerce_tier(settings.default_tier)
    return coerce_tier(claims.get(settings.tier_claim))


def resolve_request_tier(
    claims: dict[str, Any] | None = Depends(require_authenticated_user),
) -> PlanTier:
    return tier_from_claims(claims)
