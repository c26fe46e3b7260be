"""
Secret expansion.

Credential values written as `$NAME` are placeholders for secrets held in the
environment. The recorder keeps the credentials exactly as the user wrote them;
only the run parameters get the materialized copy, so recorded artifacts never
carry a resolved secret.
"""
from __future__ import annotations

import logging
import os
import re
from typing import Any, List, Mapping, Optional

from . import config
from .errors import SecretExpansionError
from .models import Credential, RunParams

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"^\$([A-Za-z_][A-Za-z0-9_]*)$")


def placeholder_name(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    m = _PLACEHOLDER.match(value)
    return m.group(1) if m else None


def expand_value(value: Any, environ: Mapping[str, str], *, strict: bool = True) -> Any:
    """Resolve one `$NAME` value; anything else is returned unchanged."""
    name = placeholder_name(value)
    if name is None:
        return value
    if name in environ:
        return environ[name]
    if strict:
        raise SecretExpansionError(f"environment variable {name} is not set")
    logger.warning("environment variable %s is not set, substituting an empty value", name)
    return ""


def expand_credential(cred: Credential, environ: Mapping[str, str], *, strict: bool = True) -> Credential:
    expanded = {}
    for key, value in cred.items():
        try:
            expanded[key] = expand_value(value, environ, strict=strict)
        except SecretExpansionError as exc:
            raise SecretExpansionError(f"credential key {key!r}: {exc}") from exc
    return Credential.model_validate(expanded)


def expand_environment_variables(
    recorder: Any,
    params: RunParams,
    *,
    environ: Optional[Mapping[str, str]] = None,
    strict: Optional[bool] = None,
) -> List[Credential]:
    """
    Record `params.creds` on `recorder.input.credentials`, then materialize them.

    Both lists hold independent copies afterwards. Returns the recorded list.
    """
    if environ is None:
        environ = os.environ
    if strict is None:
        strict = config.strict_expansion()

    recorded = [cred.model_copy(deep=True) for cred in params.creds]
    materialized = []
    for idx, cred in enumerate(params.creds):
        try:
            materialized.append(expand_credential(cred, environ, strict=strict))
        except SecretExpansionError as exc:
            raise SecretExpansionError(f"credential {idx}: {exc}") from exc

    recorder.input.credentials = recorded
    params.creds = materialized
    return recorded


def materialized_keys(creds: List[Credential]) -> List[List[str]]:
    """Which keys of each credential hold a placeholder (names only, never values)."""
    return [[k for k, v in cred.items() if placeholder_name(v)] for cred in creds]
