"""Error taxonomy shared by every layer of prcomment.

The CLI catches PluginError and turns it into a non-zero exit, so every
failure that should stop a pipeline step derives from it.
"""

from __future__ import annotations


class PluginError(Exception):
    """Base class for all terminal plugin failures."""


class ConfigError(PluginError):
    """A required input is missing, malformed, or contradictory."""


class UnsupportedProviderError(PluginError):
    """The provider identity is unknown or has no backing implementation."""


class UnsupportedOperationError(PluginError):
    """The selected backend cannot perform the requested action (e.g. Gogs statuses)."""


class NoActionError(PluginError):
    """None of the recognised action inputs were supplied."""


class RemoteAPIError(PluginError):
    """A backend request failed.

    Non-2xx responses carry the status code and raw body. Transport and
    decode failures are wrapped in this class too, with ``status_code=None``.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        base = super().__str__()
        if self.status_code is None:
            return base
        return f"{base} (status {self.status_code}): {self.body}"
