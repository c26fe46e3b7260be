from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

from update_harness.config import SCOPES_HEADER
from update_harness.errors import ProbeError


def _extract_error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except Exception:
        text = response.text.strip()
        return text if text else response.reason_phrase
    if isinstance(body, dict):
        message = body.get("message")
        if message is None:
            return str(body)
        return str(message)
    return str(body)


def _raise_for_status(response: httpx.Response) -> None:
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        request = exc.request
        method = request.method if request else "REQUEST"
        url = str(request.url) if request else str(response.url)
        detail = _extract_error_detail(response)
        raise ProbeError(f"{method} {url} -> {response.status_code}: {detail}") from exc


@dataclass
class TokenAuth:
    token: str

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github+json",
        }


class GitHubClient:
    """
    Minimal identity probe against a GitHub-compatible REST API.

    Only reads the root document; the interesting part is the granted-scopes
    response header, not the body. One instance can serve concurrent probes.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout_s: float = 10.0,
    ):
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def granted_scopes(self, base_url: str, auth: TokenAuth) -> str:
        url = base_url.rstrip("/") + "/"
        try:
            r = await self._client.get(url, headers=auth.headers())
        except httpx.HTTPError as exc:
            raise ProbeError(f"failed request to {url} to check access: {exc}") from exc
        _raise_for_status(r)
        return r.headers.get(SCOPES_HEADER, "")
