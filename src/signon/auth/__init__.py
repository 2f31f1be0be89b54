"""Authentication module for signon.

Wires the supported sign-in methods into one flow.

## Sign-in Methods

- Google One Tap: ID token posted by the browser, verified server-side
- Google: OAuth / OpenID Connect redirect flow
- GitHub: OAuth redirect flow

Each method is enabled by environment configuration (see `signon.config`).

## Flow

1. Provider authenticates the user (`authorize` for One Tap, authlib for OAuth)
2. `sign_in` callback decides whether the user may proceed
3. `jwt` callback upserts the local user and enriches the session token
4. Session token is signed into an HTTP-only cookie
5. `redirect` callback picks a safe post-sign-in destination
6. `session` callback shapes what clients see of the session
"""

from signon.auth.callbacks import (
    AuthCallbacks,
    AuthConfig,
    get_auth_config,
)
from signon.auth.dependencies import (
    get_current_user,
    get_current_user_optional,
    get_session_token,
)
from signon.auth.google import authorize
from signon.auth.models import Account, AuthUser
from signon.auth.providers import (
    ProviderInfo,
    build_providers,
    get_provider_map,
    get_providers,
    provider_map,
)
from signon.auth.session import create_session_token, verify_session_token

__all__ = [
    "Account",
    "AuthCallbacks",
    "AuthConfig",
    "AuthUser",
    "ProviderInfo",
    "authorize",
    "build_providers",
    "create_session_token",
    "get_auth_config",
    "get_current_user",
    "get_current_user_optional",
    "get_provider_map",
    "get_providers",
    "get_session_token",
    "provider_map",
    "verify_session_token",
]
