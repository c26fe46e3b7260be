from __future__ import annotations

import sys
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from update_harness.errors import MalformedOutputError
from update_harness.ignore import generate_ignore_conditions
from update_harness.models import (
    Condition,
    CreatePullRequest,
    Dependency,
    Output,
    RunParams,
    Scenario,
    UpdateWrapper,
)

OUTPUT_NAME = "test_output"


def _pr_output(*deps: Dependency) -> Output:
    return Output(type="create_pull_request", expect=UpdateWrapper(data=CreatePullRequest(dependencies=list(deps))))


def test_generates_ignore_conditions():
    scenario = Scenario(output=[_pr_output(Dependency(name="dep1", version="1.0.0"))])

    added = generate_ignore_conditions(RunParams(output=OUTPUT_NAME), scenario)

    expected = Condition(dependency_name="dep1", source=OUTPUT_NAME, version_requirement=">1.0.0")
    assert added == [expected]
    assert scenario.input.job.ignore_conditions == [expected]


def test_handles_removed_dependency():
    scenario = Scenario(output=[_pr_output(Dependency(name="dep1", version="1.0.0", removed=True))])
    assert generate_ignore_conditions(RunParams(output=OUTPUT_NAME), scenario) == []
    assert scenario.input.job.ignore_conditions == []


def test_dependency_without_version_is_skipped(caplog: pytest.LogCaptureFixture):
    scenario = Scenario(output=[_pr_output(Dependency(name="dep1"), Dependency(name="dep2", version="2.1"))])
    with caplog.at_level("WARNING", logger="update_harness.ignore"):
        added = generate_ignore_conditions(RunParams(output=OUTPUT_NAME), scenario)
    assert [c.dependency_name for c in added] == ["dep2"]
    assert "dep1 has no version" in caplog.text


def test_other_output_types_contribute_nothing():
    scenario = Scenario(output=[
        Output(type="update_dependency_list", expect=UpdateWrapper(data={"dependencies": [{"name": "dep1", "version": "1.0.0"}]})),
        Output(type="mark_as_processed", expect=UpdateWrapper(data={"base-commit-sha": "abc"})),
        Output(type="record_update_job_error", expect=UpdateWrapper(data=None)),
    ])
    assert generate_ignore_conditions(RunParams(output=OUTPUT_NAME), scenario) == []


def test_appends_to_existing_conditions_without_dedup():
    scenario = Scenario(output=[_pr_output(Dependency(name="dep1", version="1.0.0"))])
    existing = Condition(dependency_name="old", source="earlier", version_requirement=">0.1")
    scenario.input.job.ignore_conditions.append(existing)
    params = RunParams(output=OUTPUT_NAME)

    generate_ignore_conditions(params, scenario)
    generate_ignore_conditions(params, scenario)

    names = [c.dependency_name for c in scenario.input.job.ignore_conditions]
    assert names == ["old", "dep1", "dep1"]


def test_decodes_raw_recorded_data():
    data = {
        "base-commit-sha": "1c6331732c41e4557a16dacb82534f1d1c831848",
        "dependencies": [
            {"name": "rack", "version": "2.1.4", "previous-version": "2.1.3", "requirements": []},
            {"name": "old-gem", "removed": True},
        ],
        "pr-title": "Bump rack from 2.1.3 to 2.1.4",
    }
    scenario = Scenario(output=[Output(type="create_pull_request", expect=UpdateWrapper(data=data))])
    added = generate_ignore_conditions(RunParams(output="rack.yaml"), scenario)
    assert [c.to_dict() for c in added] == [
        {"dependency-name": "rack", "source": "rack.yaml", "version-requirement": ">2.1.4"}
    ]


@pytest.mark.parametrize("data", [
    "not a mapping",
    None,
    {"dependencies": "rack"},
    {"dependencies": [{"version": "1.0.0"}]},
])
def test_malformed_pull_request_data_is_an_error(data):
    scenario = Scenario(output=[
        _pr_output(Dependency(name="dep1", version="1.0.0")),
        Output(type="create_pull_request", expect=UpdateWrapper(data=data)),
    ])
    with pytest.raises(MalformedOutputError) as exc:
        generate_ignore_conditions(RunParams(output=OUTPUT_NAME), scenario)
    assert "output 1" in str(exc.value)
    assert scenario.input.job.ignore_conditions == []
