from __future__ import annotations

from pathlib import Path
from typing import Any, List

import yaml
from pydantic import ValidationError

from .models import Credential, Scenario


def _read_yaml(path: Path) -> Any:
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"{path}: invalid YAML: {exc}") from exc


def load_scenario(path: Path) -> Scenario:
    raw = _read_yaml(path)
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: scenario must be a mapping")
    try:
        return Scenario.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(f"{path}: {exc}") from exc


def dump_scenario(scenario: Scenario, path: Path) -> None:
    path.write_text(
        yaml.safe_dump(scenario.to_dict(), sort_keys=False, default_flow_style=False),
        encoding="utf-8",
    )


def load_credentials(path: Path) -> List[Credential]:
    """A credentials file is either a bare list or a mapping with a `credentials` list."""
    raw = _read_yaml(path)
    if isinstance(raw, dict):
        raw = raw.get("credentials")
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a list of credentials")

    creds: List[Credential] = []
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValueError(f"{path}: credential {idx} must be a mapping")
        try:
            creds.append(Credential.model_validate(item))
        except ValidationError as exc:
            raise ValueError(f"{path}: credential {idx}: {exc}") from exc
    return creds
