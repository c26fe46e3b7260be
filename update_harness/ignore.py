"""
Ignore-condition synthesis.

After a run, every dependency a `create_pull_request` output updated becomes an
ignore condition (`>version`) on the scenario's job, so the next run does not
propose the same update again.
"""
from __future__ import annotations

import logging
from typing import List

from pydantic import ValidationError

from .errors import MalformedOutputError
from .models import Condition, CreatePullRequest, Output, RunParams, Scenario

logger = logging.getLogger(__name__)


def _pull_request(idx: int, out: Output) -> CreatePullRequest:
    data = out.expect.data
    if isinstance(data, CreatePullRequest):
        return data
    if not isinstance(data, dict):
        raise MalformedOutputError(
            f"output {idx}: expected a create_pull_request mapping, got {type(data).__name__}"
        )
    try:
        return CreatePullRequest.model_validate(data)
    except ValidationError as exc:
        raise MalformedOutputError(f"output {idx}: failed to decode create_pull_request: {exc}") from exc


def generate_ignore_conditions(params: RunParams, scenario: Scenario) -> List[Condition]:
    """
    Append one condition per updated dependency to `scenario.input.job.ignore_conditions`.

    Removed dependencies and dependencies without a version are skipped. Existing
    conditions are kept and nothing is deduplicated. Returns the conditions added.
    """
    added: List[Condition] = []
    for idx, out in enumerate(scenario.output):
        if not out.is_create_pull_request:
            continue
        pr = _pull_request(idx, out)
        for dep in pr.dependencies:
            if dep.removed:
                continue
            if not dep.version:
                logger.warning("output %d: dependency %s has no version, no ignore condition", idx, dep.name)
                continue
            added.append(Condition(
                dependency_name=dep.name,
                source=params.output,
                version_requirement=">" + dep.version,
            ))

    scenario.input.job.ignore_conditions.extend(added)
    return added
