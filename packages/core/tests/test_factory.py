"""Tests for provider parsing, client construction and auth transports."""

import httpx
import pytest

from prcomment_core.errors import ConfigError, UnsupportedProviderError
from prcomment_core.scm.auth import BearerTokenAuth, OAuth2TokenAuth
from prcomment_core.scm.drivers.bitbucket import BitbucketDriver, BitbucketServerDriver
from prcomment_core.scm.drivers.gitea import GiteaDriver, GogsDriver
from prcomment_core.scm.drivers.github import GitHubDriver
from prcomment_core.scm.drivers.gitlab import GitLabDriver
from prcomment_core.scm.factory import (
    Provider,
    configure_auth,
    new_client,
    requires_endpoint,
    supported_providers,
)

SELF_HOSTED = ["github-enterprise", "bitbucket-server", "gitea", "gogs"]


class TestProviderParse:
    def test_is_case_insensitive(self):
        assert Provider.parse("GitHub") is Provider.GITHUB
        assert Provider.parse(" harness ") is Provider.HARNESS

    def test_unknown_provider_raises(self):
        with pytest.raises(UnsupportedProviderError):
            Provider.parse("perforce")

    def test_supported_providers_excludes_azure(self):
        providers = supported_providers()
        assert Provider.AZURE_DEVOPS not in providers
        assert Provider.HARNESS in providers
        assert len(providers) == 8


class TestNewClient:
    @pytest.mark.parametrize("provider", SELF_HOSTED)
    def test_self_hosted_requires_endpoint(self, provider):
        assert requires_endpoint(Provider.parse(provider))
        with pytest.raises(ConfigError):
            new_client(provider, endpoint="", token="tok")

    @pytest.mark.parametrize(
        "provider, driver_cls",
        [
            ("github-enterprise", GitHubDriver),
            ("bitbucket-server", BitbucketServerDriver),
            ("gitea", GiteaDriver),
            ("gogs", GogsDriver),
        ],
    )
    def test_self_hosted_with_endpoint(self, provider, driver_cls):
        driver = new_client(provider, endpoint="https://scm.example.com", token="tok")
        assert isinstance(driver, driver_cls)
        driver.close()

    @pytest.mark.parametrize(
        "provider, driver_cls",
        [("github", GitHubDriver), ("gitlab", GitLabDriver), ("bitbucket", BitbucketDriver)],
    )
    def test_cloud_providers_need_no_endpoint(self, provider, driver_cls):
        driver = new_client(provider, token="tok")
        assert isinstance(driver, driver_cls)
        driver.close()

    def test_gitlab_default_api_root(self):
        driver = new_client("gitlab", token="tok")
        assert str(driver.http.base_url) == "https://gitlab.com/api/v4/"
        driver.close()

    def test_gitlab_self_hosted_api_root(self):
        driver = new_client("gitlab", endpoint="https://git.example.com/", token="tok")
        assert str(driver.http.base_url) == "https://git.example.com/api/v4/"
        driver.close()

    def test_gitea_api_root(self):
        driver = new_client("gitea", endpoint="https://gitea.example.com", token="tok")
        assert str(driver.http.base_url) == "https://gitea.example.com/api/v1/"
        driver.close()

    def test_harness_returns_no_driver(self):
        assert new_client("harness", token="tok") is None

    def test_azure_devops_is_unsupported(self):
        with pytest.raises(UnsupportedProviderError):
            new_client("azure-devops", token="tok")

    def test_unknown_provider_is_unsupported(self):
        with pytest.raises(UnsupportedProviderError):
            new_client("svn", token="tok")

    def test_bitbucket_cloud_uses_oauth2(self):
        driver = new_client("bitbucket", token="tok")
        assert isinstance(driver.http.auth, OAuth2TokenAuth)
        driver.close()

    def test_bitbucket_server_uses_bearer(self):
        driver = new_client("bitbucket-server", endpoint="https://stash.example.com", token="tok")
        assert isinstance(driver.http.auth, BearerTokenAuth)
        driver.close()


class TestConfigureAuth:
    def test_no_auth_without_token(self):
        assert configure_auth(Provider.GITLAB, "") is None

    @pytest.mark.parametrize("provider", [Provider.GITLAB, Provider.GITEA, Provider.GOGS, Provider.BITBUCKET_SERVER])
    def test_bearer_for_everything_but_bitbucket_cloud(self, provider):
        assert isinstance(configure_auth(provider, "tok"), BearerTokenAuth)

    def test_bearer_header(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200)

        with httpx.Client(transport=httpx.MockTransport(handler), auth=BearerTokenAuth("tok")) as client:
            client.get("https://scm.example.com/")
        assert seen["auth"] == "Bearer tok"

    def test_oauth2_header_uses_token_type(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200)

        auth = OAuth2TokenAuth("tok", token_type="Bearer")
        with httpx.Client(transport=httpx.MockTransport(handler), auth=auth) as client:
            client.get("https://api.bitbucket.org/2.0/user")
        assert seen["auth"] == "Bearer tok"
