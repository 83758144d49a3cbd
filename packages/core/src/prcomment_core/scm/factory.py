"""Provider selection for the generic SCM drivers.

new_client() maps a provider identity to a driver, filling in the public
endpoint for cloud providers and attaching the authentication transport
each backend expects. Harness Code is recognised here but served by
prcomment_core.harness.client.HarnessClient, so no driver is built for it.
"""

from __future__ import annotations

import logging
from enum import Enum

import httpx

from prcomment_core.errors import ConfigError, UnsupportedProviderError
from prcomment_core.harness.client import DEFAULT_BASE_URL as HARNESS_BASE_URL
from prcomment_core.scm.auth import BearerTokenAuth, OAuth2TokenAuth
from prcomment_core.scm.drivers import bitbucket, github, gitlab
from prcomment_core.scm.drivers.base import BaseDriver
from prcomment_core.scm.drivers.gitea import GiteaDriver, GogsDriver

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class Provider(str, Enum):
    GITHUB = "github"
    GITHUB_ENTERPRISE = "github-enterprise"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"
    BITBUCKET_SERVER = "bitbucket-server"
    GITEA = "gitea"
    GOGS = "gogs"
    HARNESS = "harness"
    AZURE_DEVOPS = "azure-devops"

    @classmethod
    def parse(cls, value: str) -> "Provider":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            raise UnsupportedProviderError(f"unsupported SCM provider: {value!r}")


_SELF_HOSTED = {
    Provider.GITHUB_ENTERPRISE: "GitHub Enterprise",
    Provider.BITBUCKET_SERVER: "Bitbucket Server",
    Provider.GITEA: "Gitea",
    Provider.GOGS: "Gogs",
}


DEFAULT_ENDPOINTS = {
    Provider.GITHUB: github.DEFAULT_BASE_URL,
    Provider.GITLAB: gitlab.DEFAULT_ENDPOINT,
    Provider.BITBUCKET: bitbucket.DEFAULT_ENDPOINT,
    Provider.HARNESS: HARNESS_BASE_URL,
}


def supported_providers() -> list[Provider]:
    return [p for p in Provider if p is not Provider.AZURE_DEVOPS]


def requires_endpoint(provider: Provider) -> bool:
    return provider in _SELF_HOSTED


def configure_auth(provider: Provider, token: str) -> httpx.Auth | None:
    """Return the auth transport for ``provider``, or None without a token."""
    if not token:
        return None
    if provider is Provider.BITBUCKET:
        # Bitbucket Cloud tokens are OAuth2 access tokens; Server takes plain bearer.
        return OAuth2TokenAuth(token)
    return BearerTokenAuth(token)


def new_client(
    provider: Provider | str,
    endpoint: str | None = None,
    token: str = "",
    timeout: float = DEFAULT_TIMEOUT,
    log: logging.Logger | None = None,
) -> BaseDriver | None:
    """Build the generic driver for ``provider``.

    Returns None for Harness Code. Raises ConfigError when a self-hosted
    provider has no endpoint and UnsupportedProviderError for anything
    without an implementation.
    """
    provider = Provider.parse(provider) if not isinstance(provider, Provider) else provider
    endpoint = (endpoint or "").rstrip("/")
    log = log or logger

    if provider is Provider.AZURE_DEVOPS:
        raise UnsupportedProviderError("Azure DevOps is not supported yet")
    if provider is Provider.HARNESS:
        log.debug("Harness Code selected; no generic driver built")
        return None
    if requires_endpoint(provider) and not endpoint:
        raise ConfigError(f"endpoint required for {_SELF_HOSTED[provider]}")

    if provider in (Provider.GITHUB, Provider.GITHUB_ENTERPRISE):
        base_url = endpoint if provider is Provider.GITHUB_ENTERPRISE else DEFAULT_ENDPOINTS[provider]
        return github.GitHubDriver(base_url=base_url, token=token, timeout=timeout, log=log)

    if provider is Provider.GITLAB:
        base_url = (endpoint or DEFAULT_ENDPOINTS[provider]) + "/api/v4"
        driver_cls = gitlab.GitLabDriver
    elif provider is Provider.BITBUCKET:
        base_url = endpoint or DEFAULT_ENDPOINTS[provider]
        driver_cls = bitbucket.BitbucketDriver
    elif provider is Provider.BITBUCKET_SERVER:
        base_url = endpoint
        driver_cls = bitbucket.BitbucketServerDriver
    elif provider is Provider.GITEA:
        base_url = endpoint + "/api/v1"
        driver_cls = GiteaDriver
    else:
        base_url = endpoint + "/api/v1"
        driver_cls = GogsDriver

    http = httpx.Client(base_url=base_url, auth=configure_auth(provider, token), timeout=timeout)
    log.debug("Built %s driver for %s", provider.value, base_url)
    return driver_cls(http=http, log=log)
