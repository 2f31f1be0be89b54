"""Authentication routes.

Hosts the sign-in flow for every configured provider.

## Endpoints

1. GET /auth/providers - Public provider list for sign-in buttons
2. GET /auth/signin - Sign-in page data (providers, One Tap config, error)
3. GET /auth/signin/{provider} - Redirect to an OAuth provider
4. GET /auth/callback/{provider} - Handle an OAuth callback
5. POST /auth/callback/google-one-tap - Verify a Google One Tap credential
6. GET /auth/session - Current session, or null
7. GET /auth/me - Stored user for the current session
8. POST /auth/signout - Clear the session cookie

## Session Management

Sessions are stored in HTTP-only cookies. The session token is a signed JWT
holding the claims produced by the `jwt` callback.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from authlib.integrations.starlette_client import OAuth, OAuthError
from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request, Response, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from signon.auth.callbacks import AuthConfig, get_auth_config
from signon.auth.dependencies import get_current_user, get_session_token
from signon.auth.google import authorize
from signon.auth.models import Account, AuthUser
from signon.auth.oauth import ProfileError, fetch_user, get_oauth
from signon.auth.providers import (
    GOOGLE_ONE_TAP_ID,
    OneTapProvider,
    find_provider,
)
from signon.auth.session import create_session_token, token_expires_at
from signon.config import get_settings
from signon.models.user import SessionUser, UserRecord

logger = logging.getLogger(__name__)

router = APIRouter()

CALLBACK_URL_SESSION_KEY = "signon.callback_url"


class ProviderResponse(BaseModel):
    """A sign-in button."""

    id: str
    name: str


class SignInPageResponse(BaseModel):
    """Everything the sign-in page needs to render."""

    providers: list[ProviderResponse]
    google_one_tap_enabled: bool
    google_client_id: str | None = None
    error: str | None = None


def _providers_response(config: AuthConfig) -> list[ProviderResponse]:
    return [ProviderResponse(id=p.id, name=p.name) for p in config.provider_map]


async def _sign_in_error(config: AuthConfig, error: str) -> RedirectResponse:
    settings = get_settings()
    url = await config.callbacks.redirect(
        f"{config.pages['sign_in']}?error={error}", settings.auth_url
    )
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


async def _complete_sign_in(
    request: Request,
    config: AuthConfig,
    user: AuthUser,
    account: Account,
    callback_url: str | None,
) -> RedirectResponse:
    """Run the callbacks for an authenticated user and set the session cookie."""
    settings = get_settings()
    callbacks = config.callbacks

    allowed = await callbacks.sign_in(user, account)
    if isinstance(allowed, str):
        url = await callbacks.redirect(allowed, settings.auth_url)
        return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)
    if not allowed:
        logger.info(f"Sign-in denied for {user.email} via {account.provider}")
        return await _sign_in_error(config, "AccessDenied")

    token: dict[str, Any] = {
        "name": user.name,
        "email": user.email,
        "picture": user.image,
    }
    # jose rejects non-string subjects when decoding
    if user.id:
        token["sub"] = str(user.id)
    token = await callbacks.jwt(token, user, account, request=request)

    session_token = create_session_token(token)

    destination = await callbacks.redirect(callback_url or "/", settings.auth_url)
    response = RedirectResponse(url=destination, status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )

    logger.info(f"User {user.email} signed in via {account.provider}")

    return response


@router.get("/providers", response_model=list[ProviderResponse])
async def list_providers(
    config: AuthConfig = Depends(get_auth_config),
) -> list[ProviderResponse]:
    """List the providers that get a sign-in button."""
    return _providers_response(config)


@router.get("/signin", response_model=SignInPageResponse)
async def sign_in_page(
    error: str | None = None,
    config: AuthConfig = Depends(get_auth_config),
) -> SignInPageResponse:
    """Data for the custom sign-in page."""
    one_tap = find_provider(config.providers, GOOGLE_ONE_TAP_ID)

    return SignInPageResponse(
        providers=_providers_response(config),
        google_one_tap_enabled=one_tap is not None,
        google_client_id=one_tap.client_id if one_tap else None,
        error=error,
    )


@router.get("/signin/{provider_id}")
async def oauth_sign_in(
    provider_id: str,
    request: Request,
    callback_url: str | None = Query(default=None, alias="callbackUrl"),
    config: AuthConfig = Depends(get_auth_config),
    oauth: OAuth = Depends(get_oauth),
):
    """Start an OAuth sign-in.

    Redirects the user to the provider's consent screen. The provider
    redirects back to /auth/callback/{provider_id}.
    """
    settings = get_settings()

    provider = find_provider(config.providers, provider_id)
    if provider is None or isinstance(provider, OneTapProvider):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown provider: {provider_id}",
        )

    if callback_url:
        request.session[CALLBACK_URL_SESSION_KEY] = callback_url
    else:
        # Drop a target left behind by an abandoned attempt
        request.session.pop(CALLBACK_URL_SESSION_KEY, None)

    client = oauth.create_client(provider.id)
    redirect_uri = f"{settings.auth_url}/auth/callback/{provider.id}"

    return await client.authorize_redirect(request, redirect_uri)


@router.post("/callback/google-one-tap")
async def google_one_tap_callback(
    request: Request,
    credential: str = Form(default=""),
    callback_url: str | None = Form(default=None, alias="callbackUrl"),
    config: AuthConfig = Depends(get_auth_config),
) -> RedirectResponse:
    """Sign in with a Google One Tap credential."""
    if find_provider(config.providers, GOOGLE_ONE_TAP_ID) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Google One Tap is not enabled",
        )

    user = await authorize({"credential": credential})
    if user is None:
        return await _sign_in_error(config, "CredentialsSignin")

    account = Account(
        type="credentials",
        provider=GOOGLE_ONE_TAP_ID,
        provider_account_id=user.id,
    )

    return await _complete_sign_in(request, config, user, account, callback_url)


@router.get("/callback/{provider_id}")
async def oauth_callback(
    provider_id: str,
    request: Request,
    config: AuthConfig = Depends(get_auth_config),
    oauth: OAuth = Depends(get_oauth),
) -> RedirectResponse:
    """Handle an OAuth callback.

    Exchanges the authorization code for tokens, resolves the user and
    completes the sign-in.
    """
    provider = find_provider(config.providers, provider_id)
    if provider is None or isinstance(provider, OneTapProvider):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown provider: {provider_id}",
        )

    client = oauth.create_client(provider.id)

    try:
        token = await client.authorize_access_token(request)
        user, account = await fetch_user(client, provider, token)
    except (OAuthError, httpx.HTTPError, ProfileError) as e:
        logger.error(f"OAuth callback failed for {provider_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to complete sign-in",
        )

    callback_url = request.session.pop(CALLBACK_URL_SESSION_KEY, None)

    return await _complete_sign_in(request, config, user, account, callback_url)


@router.get("/session")
async def get_session(
    token: dict[str, Any] | None = Depends(get_session_token),
    config: AuthConfig = Depends(get_auth_config),
) -> dict[str, Any] | None:
    """Get the current session, or null when signed out."""
    if token is None:
        return None

    session = {
        "user": {
            "name": token.get("name"),
            "email": token.get("email"),
            "image": token.get("picture"),
        },
        "expires": token_expires_at(token).isoformat(),
    }

    return await config.callbacks.session(session, token)


@router.get("/me", response_model=SessionUser)
async def get_me(
    user: UserRecord = Depends(get_current_user),
) -> SessionUser:
    """Get the stored user for the current session."""
    return user.to_session_user()


@router.post("/signout")
async def sign_out(
    response: Response,
    token: dict[str, Any] | None = Depends(get_session_token),
) -> dict:
    """Sign out the current user.

    Clears the session cookie.
    """
    settings = get_settings()

    if token:
        logger.info(f"User {token.get('email')} signed out")

    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )

    return {"status": "signed_out"}
