"""
Credential scope checker - the pre-flight gate.

Every credential that carries a provider token (a `token`, or the password of
a `git_source` / `x-access-token` credential) is probed once against the job's API
endpoint; the granted scopes come back in a response header. Any write-capable
scope rejects the whole run. A probe that cannot complete is a failure too:
"couldn't check" is never read as "no write access".

Usage:
    from update_harness.access import ScopeChecker

    checker = ScopeChecker()
    checker.check_sync(job, credentials)   # raises WriteAccessError / ProbeError
"""
from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Sequence

import httpx

from connectors.github_client import GitHubClient, TokenAuth

from . import config
from .errors import WriteAccessError
from .models import Credential, Job

logger = logging.getLogger(__name__)

_SCOPE_SEPARATORS = re.compile(r"[,\s]+")


def parse_scopes(header: Optional[str]) -> FrozenSet[str]:
    """Split a scopes header (`"repo, read:org"`) into its scope names."""
    if not header:
        return frozenset()
    return frozenset(s for s in _SCOPE_SEPARATORS.split(header) if s)


def write_scopes(scopes: Iterable[str], write_set: Optional[FrozenSet[str]] = None) -> FrozenSet[str]:
    if write_set is None:
        write_set = config.get_write_scopes()
    return frozenset(scopes) & write_set


@dataclass(frozen=True)
class ScopeVerdict:
    """What one probe found."""
    endpoint: str
    scopes: FrozenSet[str]
    write: FrozenSet[str]

    @property
    def allowed(self) -> bool:
        return not self.write


class ScopeChecker:
    def __init__(
        self,
        default_endpoint: Optional[str] = None,
        timeout_s: Optional[float] = None,
        write_set: Optional[FrozenSet[str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.default_endpoint = (default_endpoint or config.get_api_endpoint()).rstrip("/")
        self.timeout_s = timeout_s if timeout_s is not None else config.get_probe_timeout()
        self.write_set = write_set if write_set is not None else config.get_write_scopes()
        self._client = client

    def resolve_endpoint(self, job: Optional[Job]) -> str:
        if job is not None:
            endpoint = job.api_endpoint()
            if endpoint:
                return endpoint.rstrip("/")
        return self.default_endpoint

    async def _probe(self, probe: GitHubClient, endpoint: str, token: str) -> ScopeVerdict:
        header = await probe.granted_scopes(endpoint, TokenAuth(token))
        scopes = parse_scopes(header)
        verdict = ScopeVerdict(endpoint=endpoint, scopes=scopes, write=write_scopes(scopes, self.write_set))
        if not verdict.allowed:
            raise WriteAccessError(verdict.write, endpoint)
        return verdict

    async def check(self, job: Optional[Job], credentials: Sequence[Credential]) -> List[ScopeVerdict]:
        """
        Probe all token-bearing credentials concurrently.

        The first failure wins and cancels the probes still in flight. Cancelling
        the caller cancels every probe and propagates.
        """
        endpoint = self.resolve_endpoint(job)
        tokens = []
        for idx, cred in enumerate(credentials):
            secret = cred.secret()
            if secret:
                tokens.append(secret)
            else:
                logger.debug("credential %d carries no provider token, not probed", idx)
        if not tokens:
            return []

        logger.info("checking %d credential(s) against %s", len(tokens), endpoint)
        probe = GitHubClient(client=self._client, timeout_s=self.timeout_s)
        try:
            tasks = [asyncio.create_task(self._probe(probe, endpoint, t)) for t in tokens]
            try:
                for fut in asyncio.as_completed(tasks):
                    await fut
            finally:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
        finally:
            await probe.aclose()
        return [task.result() for task in tasks]

    def check_sync(self, job: Optional[Job], credentials: Sequence[Credential]) -> List[ScopeVerdict]:
        return asyncio.run(self.check(job, credentials))


def check_access(
    job: Optional[Job],
    credentials: Sequence[Credential],
    *,
    checker: Optional[ScopeChecker] = None,
) -> List[ScopeVerdict]:
    """Raise unless every credential is read-limited; returns the per-credential verdicts."""
    return (checker or ScopeChecker()).check_sync(job, credentials)
