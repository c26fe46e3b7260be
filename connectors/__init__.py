"""
Connectors to source-control providers.

The harness core never talks HTTP directly; connectors are the seam between the
pre-flight gate and whatever provider API a job targets.
"""

from .github_client import GitHubClient, TokenAuth

__all__ = ["GitHubClient", "TokenAuth"]
