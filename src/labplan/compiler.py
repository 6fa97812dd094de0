"""
Experiment compiler.

Authored document in, linked execution plan out:

    validate -> resolve references -> place model groups on plates
             -> dispatch per-job operations

The authored document is never modified; every stage after validation
works on the resolver's deep copy.
"""

import logging
from typing import Any, Dict, Optional

from labplan.allocation import PlateAllocator
from labplan.config.settings import LabPlanSettings, settings as default_settings
from labplan.instructions import generate_instructions
from labplan.resolver import EXPERIMENT_PATHS, ReferenceResolver
from labplan.validation import validate_experiment

logger = logging.getLogger(__name__)


def compile_experiment(
    document: Dict[str, Any],
    constraints: Any = None,
    config: Optional[LabPlanSettings] = None,
) -> Dict[str, Any]:
    """
    Compile an authored experiment into a resolved, plate-allocated plan.

    The dispatch stage resets every job's instruction list and checks that
    each model group has a known operation list for every job. Its
    PendingOperation schedule is only counted here, not kept; callers that
    synthesize instructions get it from ``generate_instructions``.

    Args:
        document: Authored experiment (identifiers as strings/indices)
        constraints: Plate compatibility constraints; must currently be None
        config: Settings (defaults to the environment-derived settings)

    Returns:
        The compiled experiment

    Raises:
        ExperimentValidationError: If validation is enabled and fails
        UnresolvedReferenceError: If a required reference cannot be resolved
        UnsupportedInputError: For constraints, oversized groups, unknown kinds
    """
    config = config or default_settings

    if config.validate_before_compile:
        validate_experiment(document, strict=True)

    experiment = ReferenceResolver(EXPERIMENT_PATHS).resolve(document)
    PlateAllocator(config).allocate(experiment, constraints)
    schedule = generate_instructions(experiment)

    logger.info(
        f"Compiled experiment: {len(experiment.get('models', []))} model groups, "
        f"{len(experiment['plates'])} plates, {len(schedule)} jobs, "
        f"{sum(len(s) for s in schedule)} pending operations"
    )
    return experiment
