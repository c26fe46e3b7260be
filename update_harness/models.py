"""
Harness data models.

Scenario files use kebab-case keys (`ignore-conditions`, `dependency-name`, ...),
so every model aliases its snake_case fields to the on-disk spelling and accepts
either form on input.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import CREATE_PULL_REQUEST, GIT_SOURCE, TOKEN_USERNAME


def _kebab(name: str) -> str:
    return name.replace("_", "-")


class HarnessModel(BaseModel):
    model_config = ConfigDict(alias_generator=_kebab, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Credential(HarnessModel):
    """
    One credential as written by the user.

    The known fields are typed; anything provider-specific lands in the extension
    map (pydantic extras) and round-trips untouched.
    """

    model_config = ConfigDict(alias_generator=_kebab, populate_by_name=True, extra="allow")

    type: Optional[str] = None
    host: Optional[str] = None
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = None

    def get(self, key: str, default: Any = None) -> Any:
        return self.to_dict().get(key, default)

    def items(self) -> Iterator[Tuple[str, Any]]:
        return iter(self.to_dict().items())

    def __getitem__(self, key: str) -> Any:
        data = self.to_dict()
        if key not in data:
            raise KeyError(key)
        return data[key]

    def secret(self) -> Optional[str]:
        """The token the provider would see: `token`, else a git_source or x-access-token password."""
        if self.token:
            return self.token
        if self.password and (self.type == GIT_SOURCE or self.username == TOKEN_USERNAME):
            return self.password
        return None

    @property
    def extensions(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class Condition(HarnessModel):
    """An ignore condition: never propose `dependency_name` matching `version_requirement`."""

    dependency_name: str
    source: str = ""
    version_requirement: Optional[str] = None


class Source(HarnessModel):
    model_config = ConfigDict(alias_generator=_kebab, populate_by_name=True, extra="allow")

    provider: str = "github"
    repo: Optional[str] = None
    directory: Optional[str] = None
    branch: Optional[str] = None
    hostname: Optional[str] = None
    api_endpoint: Optional[str] = None


class Job(HarnessModel):
    model_config = ConfigDict(alias_generator=_kebab, populate_by_name=True, extra="allow")

    package_manager: Optional[str] = None
    source: Source = Field(default_factory=Source)
    ignore_conditions: List[Condition] = Field(default_factory=list)

    def api_endpoint(self) -> Optional[str]:
        endpoint = (self.source.api_endpoint or "").strip()
        return endpoint or None


class Dependency(HarnessModel):
    model_config = ConfigDict(alias_generator=_kebab, populate_by_name=True, extra="allow")

    name: str
    version: Optional[str] = None
    previous_version: Optional[str] = None
    requirements: Optional[List[Dict[str, Any]]] = None
    previous_requirements: Optional[List[Dict[str, Any]]] = None
    directory: Optional[str] = None
    removed: bool = False

    @field_validator("version", "previous_version", mode="before")
    @classmethod
    def _scalar_version(cls, value: Any) -> Any:
        # unquoted YAML versions (`1.0`, `2`) load as numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class CreatePullRequest(HarnessModel):
    model_config = ConfigDict(alias_generator=_kebab, populate_by_name=True, extra="allow")

    base_commit_sha: Optional[str] = None
    dependencies: List[Dependency] = Field(default_factory=list)
    pr_title: Optional[str] = None


class UpdateWrapper(HarnessModel):
    model_config = ConfigDict(alias_generator=_kebab, populate_by_name=True, extra="allow")

    data: Any = None


class Output(HarnessModel):
    type: str
    expect: UpdateWrapper = Field(default_factory=UpdateWrapper)

    @property
    def is_create_pull_request(self) -> bool:
        return self.type == CREATE_PULL_REQUEST


class Input(HarnessModel):
    job: Job = Field(default_factory=Job)
    credentials: List[Credential] = Field(default_factory=list)


class Scenario(HarnessModel):
    """Expected-and-actual bundle for one run."""

    input: Input = Field(default_factory=Input)
    output: List[Output] = Field(default_factory=list)


@dataclass
class RunParams:
    """Per-invocation run configuration. Only `creds`, `output` and `job` are read here."""
    creds: List[Credential] = field(default_factory=list)
    output: str = ""
    job: Optional[Job] = None
    timeout_s: Optional[float] = None
    extra: Dict[str, Any] = field(default_factory=dict)
