"""FastAPI application and routes.

This module provides the HTTP surface of the sign-in service.

## API Structure

- /auth - Sign-in pages, provider redirects and callbacks, session
- /health - Liveness check

## Security

- All communication should be over HTTPS in production
- OAuth state is kept in a signed cookie and checked on callback
- Post-sign-in redirects are restricted to the application's origin
"""

from signon.api.app import create_app

__all__ = ["create_app"]
