"""
Run lifecycle hooks for the orchestrator.

    preflight(params, actual)   # before the job starts
    ... job runs, `actual.output` is recorded ...
    finalize(params, actual)    # before `actual` is persisted
"""
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from .access import ScopeChecker, ScopeVerdict
from .expand import expand_environment_variables
from .ignore import generate_ignore_conditions
from .models import Condition, RunParams, Scenario

logger = logging.getLogger(__name__)


def preflight(
    params: RunParams,
    recorder: Any,
    *,
    checker: Optional[ScopeChecker] = None,
    environ: Optional[Mapping[str, str]] = None,
    strict: Optional[bool] = None,
) -> List[ScopeVerdict]:
    """
    Materialize secrets and gate the run on their scopes.

    The probe needs the real tokens, so expansion happens first. If the gate
    rejects them, `params.creds` goes back to the placeholder copy.
    """
    recorded = expand_environment_variables(recorder, params, environ=environ, strict=strict)
    try:
        verdicts = (checker or ScopeChecker()).check_sync(params.job, params.creds)
    except BaseException:
        params.creds = [cred.model_copy(deep=True) for cred in recorded]
        raise
    logger.info("preflight passed for %d credential(s)", len(params.creds))
    return verdicts


def finalize(params: RunParams, scenario: Scenario) -> List[Condition]:
    added = generate_ignore_conditions(params, scenario)
    logger.info("generated %d ignore condition(s) from %s", len(added), params.output or "run")
    return added
