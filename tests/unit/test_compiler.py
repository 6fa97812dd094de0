"""End-to-end tests for the experiment compiler."""

import copy

import pytest

from labplan import compile_experiment
from labplan.config.settings import LabPlanSettings
from labplan.exceptions import (
    ExperimentValidationError,
    UnresolvedReferenceError,
    UnsupportedInputError,
)


def test_compile_example(example_experiment):
    before = copy.deepcopy(example_experiment)
    compiled = compile_experiment(example_experiment)

    assert example_experiment == before
    assert len(compiled["plates"]) == 1
    model = compiled["models"][0]
    assert compiled["plates"][0]["models"][0] is model
    assert [w["index"] for w in compiled["plates"][0]["wells"][:16]] == list(range(16))
    assert compiled["instructions"] == []
    assert compiled["jobs"][0]["instructions"] == []


def test_authored_plates_are_replaced(linked_experiment):
    compiled = compile_experiment(linked_experiment)
    # g1 (16) and g2 (2) share a bucket and a plate
    assert len(compiled["plates"]) == 1
    assert [m["name"] for m in compiled["plates"][0]["models"]] == ["g1", "g2"]
    assert compiled["instructions"] == []
    # Nothing in the compiled graph refers to the authored plate any more
    for model in compiled["models"]:
        assert model["instructions"] == []
    for well in compiled["plates"][0]["wells"]:
        assert well is None or any(well["model"] is m for m in compiled["models"])


def test_validation_runs_first(example_experiment):
    example_experiment["models"][0]["count"] = 0
    with pytest.raises(ExperimentValidationError):
        compile_experiment(example_experiment)


def test_validation_can_be_disabled(linked_experiment):
    linked_experiment["plates"][0]["wells"][0]["model"] = "ghost"
    config = LabPlanSettings(validate_before_compile=False)
    with pytest.raises(UnresolvedReferenceError):
        compile_experiment(linked_experiment, config=config)


def test_constraints_rejected(example_experiment):
    with pytest.raises(UnsupportedInputError):
        compile_experiment(example_experiment, constraints=["same-incubator"])


def test_oversized_group_rejected(example_experiment):
    example_experiment["models"][0]["count"] = 200
    with pytest.raises(UnsupportedInputError):
        compile_experiment(example_experiment)


def test_dispatch_checks_every_job(example_experiment):
    # Allocation accepts a group with too few operation lists; dispatch does not
    example_experiment["jobs"].append({"inputs": [], "premixes": [], "instructions": []})
    config = LabPlanSettings(validate_before_compile=False)
    with pytest.raises(UnsupportedInputError):
        compile_experiment(example_experiment, config=config)
