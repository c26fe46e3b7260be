"""
Harness CLI - pre-flight checks and ignore-condition synthesis outside a full run.

Usage:
    python -m update_harness check-access --creds creds.yaml
    python -m update_harness expand --creds creds.yaml
    python -m update_harness ignore --scenario scenario.yaml --source out.yaml --write
"""
from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
from typing import Any, Optional, Sequence

from .access import ScopeChecker
from .config import configure_logging
from .errors import MalformedOutputError, ProbeError, SecretExpansionError, WriteAccessError
from .expand import expand_environment_variables, materialized_keys
from .ignore import generate_ignore_conditions
from .models import Job, RunParams, Scenario, Source
from .scenario import dump_scenario, load_credentials, load_scenario

EXIT_USAGE = 2
EXIT_WRITE_ACCESS = 3
EXIT_PROBE_FAILED = 4


def _emit(payload: Any, output_format: str) -> None:
    if output_format == "json":
        print(json.dumps(payload, sort_keys=True))
        return
    print(payload)


def _fail(message: str, output_format: str, *, code: int = 1) -> None:
    payload = {"status": "error", "error": message, "exit_code": code}
    _emit(payload if output_format == "json" else message, output_format)
    raise SystemExit(code)


def _cmd_check_access(args: argparse.Namespace) -> None:
    params = RunParams(creds=load_credentials(Path(args.creds)))
    if args.api_endpoint:
        params.job = Job(source=Source(api_endpoint=args.api_endpoint))
    expand_environment_variables(Scenario(), params, strict=False if args.lenient else None)
    checker = ScopeChecker()
    verdicts = checker.check_sync(params.job, params.creds)
    _emit(
        {
            "status": "ok",
            "endpoint": checker.resolve_endpoint(params.job),
            "checked": len(verdicts),
            "scopes": [sorted(v.scopes) for v in verdicts],
        },
        args.format,
    )


def _cmd_expand(args: argparse.Namespace) -> None:
    params = RunParams(creds=load_credentials(Path(args.creds)))
    keys = materialized_keys(params.creds)
    expand_environment_variables(Scenario(), params, strict=False if args.lenient else None)
    _emit({"status": "ok", "credentials": len(params.creds), "materialized": keys}, args.format)


def _cmd_ignore(args: argparse.Namespace) -> None:
    path = Path(args.scenario)
    scenario = load_scenario(path)
    added = generate_ignore_conditions(RunParams(output=args.source), scenario)
    if args.write:
        dump_scenario(scenario, path)
    _emit(
        {
            "status": "ok",
            "added": [c.to_dict() for c in added],
            "total": len(scenario.input.job.ignore_conditions),
            "written": bool(args.write),
        },
        args.format,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Dependency-update harness pre-flight and reconciliation")
    parser.add_argument("--format", choices=["json", "text"], default="json")
    parser.add_argument("--log-level", default=os.getenv("UPDATE_HARNESS_LOG_LEVEL"))

    sub = parser.add_subparsers(dest="cmd", required=True)

    p_check = sub.add_parser("check-access", help="Reject credentials holding write scopes")
    p_check.add_argument("--creds", required=True, help="YAML credentials file")
    p_check.add_argument("--api-endpoint", default=None, help="Override the provider API endpoint")
    p_check.add_argument("--lenient", action="store_true", help="Unset $VARS expand to empty values")

    p_expand = sub.add_parser("expand", help="Report which credential keys resolve from the environment")
    p_expand.add_argument("--creds", required=True, help="YAML credentials file")
    p_expand.add_argument("--lenient", action="store_true", help="Unset $VARS expand to empty values")

    p_ignore = sub.add_parser("ignore", help="Derive ignore conditions from a recorded scenario")
    p_ignore.add_argument("--scenario", required=True, help="YAML scenario file")
    p_ignore.add_argument("--source", required=True, help="Source recorded on each condition")
    p_ignore.add_argument("--write", action="store_true", help="Persist the conditions into the scenario")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        if args.cmd == "check-access":
            _cmd_check_access(args)
        elif args.cmd == "expand":
            _cmd_expand(args)
        elif args.cmd == "ignore":
            _cmd_ignore(args)
    except WriteAccessError as exc:
        _fail(str(exc), args.format, code=EXIT_WRITE_ACCESS)
    except ProbeError as exc:
        _fail(str(exc), args.format, code=EXIT_PROBE_FAILED)
    except (SecretExpansionError, MalformedOutputError, ValueError, OSError) as exc:
        _fail(str(exc), args.format, code=EXIT_USAGE)


if __name__ == "__main__":
    main()
