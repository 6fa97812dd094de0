"""
Per-job operation dispatch.

Walks every model group's operations for each job and classifies them by
the instruction kind they will become. Instruction bodies (which wells,
which input tube, which pipette) are synthesized by a later stage; this
stage rebuilds each job's instruction list from scratch and hands back the
ordered work list that stage consumes.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from labplan.exceptions import UnsupportedInputError
from labplan.schema import InstructionKind, OperationKind

logger = logging.getLogger(__name__)

INSTRUCTION_FOR_OPERATION: Dict[OperationKind, InstructionKind] = {
    OperationKind.ADD_MATERIALS: InstructionKind.ADD_MATERIAL,
    OperationKind.SET_TEMP: InstructionKind.SET_TEMP,
    OperationKind.REMOVE_MATERIAL: InstructionKind.REMOVE_MATERIAL,
    OperationKind.MIX: InstructionKind.MIX,
    OperationKind.PAUSE: InstructionKind.PAUSE,
    OperationKind.MODULE: InstructionKind.MODULE,
    OperationKind.EXTERNAL: InstructionKind.EXTERNAL,
}


@dataclass
class PendingOperation:
    """One model group's operation in one job, awaiting synthesis."""
    job_index: int
    model: Dict[str, Any]
    operation: Dict[str, Any]
    kind: OperationKind
    instruction_kind: InstructionKind

    @property
    def allow_slack(self) -> bool:
        return bool(self.operation.get("allow_slack", False))


def generate_instructions(experiment: Dict[str, Any]) -> List[List[PendingOperation]]:
    """
    Reset every job's instruction list and classify its pending operations.

    Returns:
        Per job, the pending operations in model order then authored order

    Raises:
        UnsupportedInputError: On an unknown operation type, or a model group
            without an operations entry for some job
    """
    schedule: List[List[PendingOperation]] = []
    for index, job in enumerate(experiment.get("jobs", [])):
        job["instructions"] = []
        pending: List[PendingOperation] = []
        for model in experiment.get("models", []):
            operations = model.get("operations", [])
            if index >= len(operations):
                raise UnsupportedInputError(
                    f"Model group {model.get('name')!r} has no operations for job {index}"
                )
            for operation in operations[index]:
                kind = OperationKind.of(operation)
                pending.append(PendingOperation(
                    job_index=index,
                    model=model,
                    operation=operation,
                    kind=kind,
                    instruction_kind=INSTRUCTION_FOR_OPERATION[kind],
                ))
        logger.debug(f"Job {index}: {len(pending)} operations pending synthesis")
        schedule.append(pending)
    return schedule
