"""Authentication transports attached to the generic drivers' HTTP clients."""

from __future__ import annotations

from collections.abc import Generator

import httpx


class BearerTokenAuth(httpx.Auth):
    """Send a static token as ``Authorization: Bearer <token>``."""

    def __init__(self, token: str):
        self.token = token

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"Bearer {self.token}"
        yield request


class OAuth2TokenAuth(httpx.Auth):
    """Send an OAuth2 access token from a static token source.

    Bitbucket Cloud treats its tokens as OAuth2 access tokens, so the header
    uses the token's own type and an unauthorised response is not retried
    with a different scheme.
    """

    def __init__(self, access_token: str, token_type: str = "Bearer"):
        self.access_token = access_token
        self.token_type = token_type

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"{self.token_type} {self.access_token}"
        yield request
