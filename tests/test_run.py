from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import httpx
import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from update_harness.access import ScopeChecker
from update_harness.errors import ProbeError, WriteAccessError
from update_harness.models import (
    CreatePullRequest,
    Credential,
    Dependency,
    Output,
    RunParams,
    Scenario,
    UpdateWrapper,
)
from update_harness.run import finalize, preflight


def _checker(scopes: str, seen: list) -> tuple[ScopeChecker, httpx.AsyncClient]:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["Authorization"])
        return httpx.Response(200, headers={"X-OAuth-Scopes": scopes}, request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ScopeChecker(default_endpoint="http://github.test", client=client), client


def test_preflight_probes_materialized_token():
    seen: list[str] = []
    checker, client = _checker("read:packages", seen)
    actual = Scenario()
    params = RunParams(creds=[Credential(token="$LOCAL_GITHUB_ACCESS_TOKEN")], output="out.yaml")
    try:
        verdicts = preflight(params, actual, checker=checker, environ={"LOCAL_GITHUB_ACCESS_TOKEN": "ghp_real"})
    finally:
        asyncio.run(client.aclose())

    assert seen == ["token ghp_real"]
    assert len(verdicts) == 1
    assert params.creds[0].token == "ghp_real"
    assert actual.input.credentials[0].token == "$LOCAL_GITHUB_ACCESS_TOKEN"


def test_preflight_rejection_restores_placeholders():
    seen: list[str] = []
    checker, client = _checker("repo, write:packages", seen)
    actual = Scenario()
    params = RunParams(creds=[Credential(token="$LOCAL_GITHUB_ACCESS_TOKEN")])
    try:
        with pytest.raises(WriteAccessError):
            preflight(params, actual, checker=checker, environ={"LOCAL_GITHUB_ACCESS_TOKEN": "ghp_real"})
    finally:
        asyncio.run(client.aclose())

    assert params.creds[0].token == "$LOCAL_GITHUB_ACCESS_TOKEN"
    assert params.creds[0] is not actual.input.credentials[0]


def test_preflight_probe_failure_restores_placeholders():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    checker = ScopeChecker(default_endpoint="http://github.test", client=client)
    params = RunParams(creds=[Credential(token="$TOKEN")])
    try:
        with pytest.raises(ProbeError):
            preflight(params, Scenario(), checker=checker, environ={"TOKEN": "ghp_real"})
    finally:
        asyncio.run(client.aclose())
    assert params.creds[0].token == "$TOKEN"


def test_finalize_appends_conditions():
    scenario = Scenario(output=[Output(
        type="create_pull_request",
        expect=UpdateWrapper(data=CreatePullRequest(dependencies=[Dependency(name="dep1", version="1.0.0")])),
    )])
    added = finalize(RunParams(output="out.yaml"), scenario)
    assert [c.version_requirement for c in added] == [">1.0.0"]
    assert scenario.input.job.ignore_conditions[0].source == "out.yaml"


def test_preflight_gates_git_source_password():
    seen: list[str] = []
    checker, client = _checker("repo", seen)
    params = RunParams(creds=[Credential(
        type="git_source",
        host="github.com",
        username="x-access-token",
        password="$LOCAL_GITHUB_ACCESS_TOKEN",
    )])
    try:
        with pytest.raises(WriteAccessError):
            preflight(params, Scenario(), checker=checker, environ={"LOCAL_GITHUB_ACCESS_TOKEN": "ghp_write"})
    finally:
        asyncio.run(client.aclose())

    assert seen == ["token ghp_write"]
    assert params.creds[0].password == "$LOCAL_GITHUB_ACCESS_TOKEN"
