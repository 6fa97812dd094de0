"""
Plate Allocator

Places model groups onto physical well plates. Input is a resolved
experiment; output replaces the experiment's plate list (and clears the
top-level and per-model instruction lists, which are rebuilt from the new
placement).

Two steps:

1. Grouping. Model groups may share a plate only if they use the same well
   type and see the same sequence of device operations (Module/External)
   in every job, because a plate goes into a module as a whole. Groups are
   bucketed by a content fingerprint over exactly those fields.

2. Packing. Within each bucket, groups are packed greedily onto plates
   (a max-sum multiple subset sum approximation, not an optimal solver):
   sort by descending count, then per plate take groups in order while
   they fit, then keep adding the largest remaining group that still fits.

A group never spans plates. Each placed group occupies a contiguous run of
wells and each well records its group and the specimen's local index.
"""

import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from labplan.config.settings import LabPlanSettings, settings as default_settings
from labplan.exceptions import UnsupportedInputError
from labplan.fingerprint import SUGGESTION_KEYS, hash_things
from labplan.schema import OperationKind, WellType, well_type_of

logger = logging.getLogger(__name__)


def device_operations(model: Dict[str, Any]) -> List[List[Dict[str, Any]]]:
    """Per job, the ordered operations that need a module or external device."""
    return [
        [op for op in job_ops if OperationKind.of(op).requires_device]
        for job_ops in model.get("operations", [])
    ]


def model_well_type(model: Dict[str, Any], default: Optional[str] = None) -> WellType:
    """Well type of a model group; groups that name none use the configured default."""
    return well_type_of(model.get("well_type") or default or default_settings.default_well_type)


def compatibility_key(
    model: Dict[str, Any], length: Optional[int] = None, default_well_type: Optional[str] = None
) -> str:
    """Fingerprint identifying model groups that may share a plate."""
    well_type = model_well_type(model, default_well_type)
    return hash_things(
        [well_type.to_dict(), device_operations(model)], SUGGESTION_KEYS, length=length
    )


def materials_are_compatible(materials_list: List[List[Dict[str, Any]]], constraints: Any = None) -> bool:
    """
    Check that every material list uses the same set of materials.

    Args:
        materials_list: One list of (resolved) materials per candidate
        constraints: Reserved for future compatibility rules; must be None

    Raises:
        UnsupportedInputError: If constraints are given
    """
    if constraints is not None:
        raise UnsupportedInputError("Material compatibility constraints are not supported")
    if len(materials_list) < 2:
        return True
    signatures = {tuple(sorted(m["id"] for m in materials)) for materials in materials_list}
    return len(signatures) == 1


class PlateAllocator:
    """
    Greedy plate packer for model groups.

    Guarantees:
    - Every model group lands on exactly one plate
    - No plate holds more specimens than its well type's capacity
    - Plate order is bucket order (first appearance), then closing order
    """

    def __init__(self, config: Optional[LabPlanSettings] = None):
        self.config = config or default_settings

    def allocate(self, experiment: Dict[str, Any], constraints: Any = None) -> List[Dict[str, Any]]:
        """
        Place all model groups of a resolved experiment onto new plates.

        Args:
            experiment: Resolved experiment document (modified in place)
            constraints: Reserved for future compatibility rules; must be None

        Returns:
            The new plate list (also stored as ``experiment["plates"]``)

        Raises:
            UnsupportedInputError: If constraints are given, or a group is
                larger than a whole plate
        """
        if constraints is not None:
            raise UnsupportedInputError(
                "Plate compatibility constraints are not supported",
                details={"constraints": constraints},
            )

        buckets = self.group(experiment.get("models", []))
        plates: List[Dict[str, Any]] = []
        for key, models in buckets.items():
            bucket_plates = self.pack(models)
            logger.debug(f"Bucket {key}: {len(models)} model groups on {len(bucket_plates)} plates")
            plates.extend(bucket_plates)

        self._report_utilization(plates)

        # Swap in derived collections only once packing has fully succeeded.
        # Old instructions point at the discarded plates, so none are kept.
        experiment["plates"] = plates
        experiment["instructions"] = []
        for model in experiment.get("models", []):
            model["instructions"] = []
        logger.info(
            f"Packed {sum(len(b) for b in buckets.values())} model groups into "
            f"{len(plates)} plates across {len(buckets)} compatibility buckets"
        )
        return plates

    def group(self, models: List[Dict[str, Any]]) -> "OrderedDict[str, List[Dict[str, Any]]]":
        """Bucket model groups by compatibility fingerprint, keeping first-seen order."""
        buckets: "OrderedDict[str, List[Dict[str, Any]]]" = OrderedDict()
        for model in models:
            key = compatibility_key(
                model, length=self.config.fingerprint_length, default_well_type=self.config.default_well_type
            )
            buckets.setdefault(key, []).append(model)
        return buckets

    def pack(self, models: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Pack one bucket of compatible model groups onto as few plates as the heuristic finds."""
        if not models:
            return []

        well_type = model_well_type(models[0], self.config.default_well_type)
        capacity = well_type.capacity
        for model in models:
            count = model.get("count")
            if not isinstance(count, int) or isinstance(count, bool) or count < 0:
                raise UnsupportedInputError(
                    f"Model group {model.get('name')!r} has invalid count {count!r}"
                )
            if count > capacity:
                raise UnsupportedInputError(
                    f"Model group {model.get('name')!r} needs {count} wells but a "
                    f"{well_type.id} plate only has {capacity}; splitting across plates is not supported",
                    details={"model": model.get("name"), "count": count, "capacity": capacity},
                )

        # Stable sort: equal counts keep authored order
        remaining = sorted(models, key=lambda m: m["count"], reverse=True)
        plates = []
        while remaining:
            plate = new_plate(well_type)
            fill = 0

            # Pass 1: take groups in order until the first one that doesn't fit
            while remaining and remaining[0]["count"] <= capacity - fill:
                fill += place_model(plate, fill, remaining.pop(0))

            # Pass 2: fill gaps with the largest remaining group that still fits
            while True:
                index = next(
                    (i for i, m in enumerate(remaining) if m["count"] <= capacity - fill), None
                )
                if index is None:
                    break
                fill += place_model(plate, fill, remaining.pop(index))

            plates.append(plate)
        return plates

    def _report_utilization(self, plates: List[Dict[str, Any]]) -> None:
        """Diagnostic only: flag nearly empty plates."""
        for number, plate in enumerate(plates):
            used = sum(1 for well in plate["wells"] if well is not None)
            fraction = used / len(plate["wells"]) if plate["wells"] else 0.0
            if fraction < self.config.low_utilization_warning:
                names = [m.get("name") for m in plate["models"]]
                logger.warning(
                    f"Plate {number} is only {fraction:.0%} full ({used}/{len(plate['wells'])} wells, models {names})"
                )


def new_plate(well_type: WellType) -> Dict[str, Any]:
    return {"type": well_type.to_dict(), "models": [], "wells": [None] * well_type.capacity}


def place_model(plate: Dict[str, Any], at: int, model: Dict[str, Any]) -> int:
    """Occupy ``model["count"]`` wells from offset ``at``; returns wells used.

    Precondition: the model fits, i.e. ``at + count <= len(plate["wells"])``.
    """
    plate["models"].append(model)
    for index in range(model["count"]):
        plate["wells"][at + index] = {"model": model, "index": index}
    return model["count"]


def auto_place_models(
    experiment: Dict[str, Any],
    constraints: Any = None,
    config: Optional[LabPlanSettings] = None,
) -> List[Dict[str, Any]]:
    """Replace ``experiment``'s plates with a fresh greedy placement."""
    return PlateAllocator(config).allocate(experiment, constraints)
