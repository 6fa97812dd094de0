"""labplan - compiles authored lab experiment descriptions into linked execution plans."""

__version__ = "0.1.0"

from labplan.exceptions import (
    LabPlanError,
    UnresolvedReferenceError,
    UnsupportedInputError,
    DecisionProtocolError,
    ExperimentValidationError,
)
from labplan.resolver import (
    PathStep,
    ResolutionPath,
    ReferenceResolver,
    EXPERIMENT_PATHS,
    resolve_references,
)
from labplan.allocation import PlateAllocator, auto_place_models, materials_are_compatible
from labplan.variants import VariantTracker, eval_variants
from labplan.compiler import compile_experiment

__all__ = [
    "LabPlanError",
    "UnresolvedReferenceError",
    "UnsupportedInputError",
    "DecisionProtocolError",
    "ExperimentValidationError",
    "PathStep",
    "ResolutionPath",
    "ReferenceResolver",
    "EXPERIMENT_PATHS",
    "resolve_references",
    "PlateAllocator",
    "auto_place_models",
    "materials_are_compatible",
    "VariantTracker",
    "eval_variants",
    "compile_experiment",
]
