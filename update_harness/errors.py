"""Failures raised by the pre-flight gate, the secret expander and the synthesizer."""
from __future__ import annotations

from typing import Iterable


class HarnessError(Exception):
    """Base class for every failure this package raises."""


class WriteAccessError(HarnessError):
    """A credential was granted a write-capable scope; the run must not proceed."""

    def __init__(self, scopes: Iterable[str], endpoint: str = ""):
        self.scopes = sorted(scopes)
        self.endpoint = endpoint
        where = f" at {endpoint}" if endpoint else ""
        super().__init__(
            "for security, credentials used are not allowed to have write access"
            f"{where} (granted: {', '.join(self.scopes)})"
        )


class ProbeError(HarnessError):
    """The scope probe could not be completed, so access is unknown."""


class SecretExpansionError(HarnessError):
    """A `$NAME` placeholder referenced an unset environment variable."""


class MalformedOutputError(HarnessError):
    """A recorded output could not be decoded into its declared shape."""
