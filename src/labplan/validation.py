"""
Structural validation of experiment documents.

Catches authoring mistakes before they surface as confusing failures deep
inside resolution or allocation. Works on authored and resolved documents
alike. Malformed entries are reported, never raised on.
"""

import logging
from numbers import Real
from typing import Any, Dict, List

from labplan.exceptions import ExperimentValidationError
from labplan.schema import OperationKind, WELL_TYPES

logger = logging.getLogger(__name__)

# Mix percentages are floats; allow for rounding in authored documents
PERCENT_TOLERANCE = 1e-6

REQUIRED_FIELDS = ("version", "models", "materials", "jobs")
OPERATION_TAGS = frozenset(kind.value for kind in OperationKind)


def _material_ref_ok(ref: Any, material_ids: set, n_materials: int) -> bool:
    if isinstance(ref, dict):
        return True
    if isinstance(ref, bool):
        return False
    if isinstance(ref, int):
        return 0 <= ref < n_materials
    if isinstance(ref, str):
        return ref in material_ids or (ref.isdecimal() and int(ref) < n_materials)
    return False


def _entries(value: Any, where: str, errors: List[str]) -> List[Any]:
    """The list at ``where``, or nothing (with an issue) if it is not a list."""
    if value is None:
        return []
    if not isinstance(value, list):
        errors.append(f"{where}: expected a list, got {type(value).__name__}")
        return []
    return value


def _check_unique(entries: List[Any], key: str, collection: str, errors: List[str]) -> None:
    # References resolve by id and by name, so either repeating makes one ambiguous
    seen: Dict[Any, int] = {}
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict) or entry.get(key) is None:
            continue
        value = entry[key]
        if value in seen:
            errors.append(f"{collection}.{i}: duplicate {key} {value!r} (first used by {collection}.{seen[value]})")
        else:
            seen[value] = i


def _check_mix(mix: Any, where: str, material_ids: set, n_materials: int, errors: List[str]) -> None:
    if not isinstance(mix, list) or not mix:
        errors.append(f"{where}: mix must be a non-empty list")
        return
    total = 0.0
    for i, part in enumerate(mix):
        if not isinstance(part, dict):
            errors.append(f"{where}.mix.{i}: expected a mapping, got {part!r}")
            continue
        if not _material_ref_ok(part.get("material"), material_ids, n_materials):
            errors.append(f"{where}.mix.{i}: unknown material {part.get('material')!r}")
        percent = part.get("percent", 0)
        if not isinstance(percent, Real) or isinstance(percent, bool):
            errors.append(f"{where}.mix.{i}: percent must be a number, got {percent!r}")
            continue
        total += percent
    if abs(total - 100) > PERCENT_TOLERANCE:
        errors.append(f"{where}: mix percentages sum to {total:g}, expected 100")


def _check_well_type(well_type: Any, where: str, errors: List[str]) -> None:
    # None falls back to the configured default at allocation
    if isinstance(well_type, str):
        if well_type not in WELL_TYPES:
            errors.append(f"{where}: unknown well type {well_type!r}")
    elif isinstance(well_type, dict):
        missing = [k for k in ("id", "width", "height") if k not in well_type]
        if missing:
            errors.append(f"{where}: well type is missing {missing}")
    elif well_type is not None:
        errors.append(f"{where}: well_type must be an id or a mapping, got {well_type!r}")


def _check_operations(
    operations: List[Any], where: str, material_ids: set, n_materials: int, errors: List[str]
) -> None:
    for j, job_ops in enumerate(operations):
        for k, op in enumerate(_entries(job_ops, f"{where}.operations.{j}", errors)):
            tag = op.get("type") if isinstance(op, dict) else None
            if tag not in OPERATION_TAGS:
                errors.append(f"{where}.operations.{j}.{k}: unknown operation type {tag!r}")
                continue
            if tag != OperationKind.ADD_MATERIALS.value:
                continue
            entries = _entries(op.get("materials"), f"{where}.operations.{j}.{k}.materials", errors)
            for m, entry in enumerate(entries):
                ref = entry.get("type") if isinstance(entry, dict) else entry
                if not isinstance(entry, dict) or not _material_ref_ok(ref, material_ids, n_materials):
                    errors.append(f"{where}.operations.{j}.{k}.materials.{m}: unknown material {ref!r}")


def validate_experiment(experiment: Dict[str, Any], strict: bool = True) -> List[str]:
    """
    Validate an experiment document.

    Args:
        experiment: Authored or resolved experiment
        strict: Raise instead of returning when issues are found

    Returns:
        List of validation errors (empty if valid)

    Raises:
        ExperimentValidationError: If strict and any issue is found
    """
    errors: List[str] = []

    for name in REQUIRED_FIELDS:
        if name not in experiment:
            errors.append(f"Missing required field: {name}")

    materials = _entries(experiment.get("materials"), "materials", errors)
    for i, material in enumerate(materials):
        if not isinstance(material, dict):
            errors.append(f"materials.{i}: expected a mapping, got {type(material).__name__}")
    _check_unique(materials, "id", "materials", errors)
    _check_unique(materials, "name", "materials", errors)
    material_ids = {m.get("id") for m in materials if isinstance(m, dict)}

    # Suggestions may point forward, so check them against the full id set
    for i, material in enumerate(materials):
        if not isinstance(material, dict):
            continue
        groups = _entries(material.get("suggested_materials"), f"materials.{i}.suggested_materials", errors)
        for j, group in enumerate(groups):
            for ref in _entries(group, f"materials.{i}.suggested_materials.{j}", errors):
                if not _material_ref_ok(ref, material_ids, len(materials)):
                    errors.append(f"materials.{i}.suggested_materials.{j}: unknown material {ref!r}")

    jobs = _entries(experiment.get("jobs"), "jobs", errors)
    models = _entries(experiment.get("models"), "models", errors)
    _check_unique(models, "name", "models", errors)
    for i, model in enumerate(models):
        if not isinstance(model, dict):
            errors.append(f"models.{i}: expected a mapping, got {type(model).__name__}")
            continue
        where = f"models.{i} ({model.get('name')!r})"

        count = model.get("count")
        if not isinstance(count, int) or isinstance(count, bool) or count < 1:
            errors.append(f"{where}: count must be a positive integer, got {count!r}")

        _check_well_type(model.get("well_type"), where, errors)

        operations = _entries(model.get("operations", []), f"{where}.operations", errors)
        if len(operations) != len(jobs):
            errors.append(
                f"{where}: has {len(operations)} operation lists but the experiment has {len(jobs)} jobs"
            )
        _check_operations(operations, where, material_ids, len(materials), errors)

    for i, job in enumerate(jobs):
        if not isinstance(job, dict):
            errors.append(f"jobs.{i}: expected a mapping, got {type(job).__name__}")
            continue
        for field in ("inputs", "premixes"):
            for j, source in enumerate(_entries(job.get(field), f"jobs.{i}.{field}", errors)):
                if not isinstance(source, dict):
                    errors.append(f"jobs.{i}.{field}.{j}: expected a mapping, got {source!r}")
                    continue
                _check_mix(source.get("mix"), f"jobs.{i}.{field}.{j}", material_ids, len(materials), errors)

    if errors:
        logger.debug(f"Experiment validation found {len(errors)} issues")
        if strict:
            raise ExperimentValidationError(errors)
    return errors
