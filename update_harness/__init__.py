"""
update_harness - run validation and scenario reconciliation for a dependency-update test harness

Components:
- access.py: credential scope checker (pre-flight gate, rejects write scopes)
- expand.py: `$NAME` secret expansion into a materialized copy of the credentials
- ignore.py: ignore-condition synthesis from recorded pull request outputs
- run.py: preflight/finalize hooks for the run orchestrator
- models.py: credentials, jobs, scenarios and outputs
- scenario.py: YAML scenario and credential files
"""

__version__ = "0.1.0"

# Lazy imports - connectors import config/errors from this package
def __getattr__(name):
    if name == "ScopeChecker":
        from .access import ScopeChecker
        return ScopeChecker
    elif name == "check_access":
        from .access import check_access
        return check_access
    elif name == "parse_scopes":
        from .access import parse_scopes
        return parse_scopes
    elif name == "expand_environment_variables":
        from .expand import expand_environment_variables
        return expand_environment_variables
    elif name == "generate_ignore_conditions":
        from .ignore import generate_ignore_conditions
        return generate_ignore_conditions
    elif name == "preflight":
        from .run import preflight
        return preflight
    elif name == "finalize":
        from .run import finalize
        return finalize
    elif name in ("Credential", "Condition", "Job", "RunParams", "Scenario"):
        from . import models
        return getattr(models, name)
    elif name in ("HarnessError", "WriteAccessError", "ProbeError", "SecretExpansionError", "MalformedOutputError"):
        from . import errors
        return getattr(errors, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "__version__",
    # Gate
    "ScopeChecker",
    "check_access",
    "parse_scopes",
    # Expansion / synthesis
    "expand_environment_variables",
    "generate_ignore_conditions",
    # Lifecycle
    "preflight",
    "finalize",
    # Models
    "Credential",
    "Condition",
    "Job",
    "RunParams",
    "Scenario",
    # Errors
    "HarnessError",
    "WriteAccessError",
    "ProbeError",
    "SecretExpansionError",
    "MalformedOutputError",
]
