"""
Experiment document vocabulary.

Documents are plain JSON-compatible trees. This module names the closed
sets of tags that appear in them (operation and instruction kinds, well
types) and gives typed views for the pieces the compiler reasons about.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from labplan.exceptions import UnsupportedInputError
from labplan.fingerprint import material_identity

SCHEMA_VERSION = {"major": 0, "minor": 0, "patch": 0}


class OperationKind(str, Enum):
    """Kinds of per-job operation authored on a model group."""
    ADD_MATERIALS = "AddMaterials"
    SET_TEMP = "SetTemp"
    REMOVE_MATERIAL = "RemoveMaterial"
    MIX = "Mix"
    PAUSE = "Pause"
    MODULE = "Module"
    EXTERNAL = "External"

    @property
    def requires_device(self) -> bool:
        """Needs a physical module or an external device, so it constrains plate sharing."""
        return self in (OperationKind.MODULE, OperationKind.EXTERNAL)

    @classmethod
    def of(cls, operation: Dict[str, Any]) -> 'OperationKind':
        tag = operation.get("type") if isinstance(operation, dict) else None
        try:
            return cls(tag)
        except ValueError:
            raise UnsupportedInputError(
                f"Unknown operation type: {tag!r}", details={"operation": operation}
            ) from None


class InstructionKind(str, Enum):
    """Kinds of compiled instruction."""
    UNORDERED = "Unordered"
    ADD_MATERIAL = "AddMaterial"
    SET_TEMP = "SetTemp"
    REMOVE_MATERIAL = "RemoveMaterial"
    MIX = "Mix"
    PAUSE = "Pause"
    MODULE = "Module"
    EXTERNAL = "External"
    PREMIX = "Premix"

    @property
    def targets_model(self) -> bool:
        """Carries model / well_plate / indices back-references."""
        return self not in (InstructionKind.MODULE, InstructionKind.PREMIX)


@dataclass(frozen=True)
class WellType:
    id: str
    width: int
    height: int
    size: int

    @property
    def capacity(self) -> int:
        return self.width * self.height

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "width": self.width, "height": self.height, "size": self.size}


WELL_TYPES: Dict[str, WellType] = {
    "med96": WellType(id="med96", width=12, height=8, size=42),
}


def well_type_of(value: Union[str, Dict[str, Any], WellType]) -> WellType:
    """Look up a well type given its id, an embedded dict, or a WellType."""
    if isinstance(value, WellType):
        return value
    if isinstance(value, str):
        if value not in WELL_TYPES:
            raise UnsupportedInputError(f"Unknown well type: {value!r}")
        return WELL_TYPES[value]
    if isinstance(value, dict):
        try:
            return WellType(
                id=str(value["id"]),
                width=int(value["width"]),
                height=int(value["height"]),
                size=int(value.get("size", 0)),
            )
        except KeyError as e:
            raise UnsupportedInputError(
                f"Well type is missing field {e.args[0]!r}", details={"well_type": value}
            ) from None
    raise UnsupportedInputError(f"Cannot interpret well type: {value!r}")


@dataclass
class Material:
    """
    A named substance.

    Physical properties are carried, not modeled: viscosity, density,
    shear tolerance and sedimentation time feed later pipetting decisions.
    ``suggested_materials`` groups alternatives so that substitutes within one
    group are mutually redundant; it is metadata and excluded from identity.
    """
    id: str
    name: str
    viscosity: float
    density: float
    max_shear_pressure: Optional[float] = None
    sedimentation_time: Optional[float] = None
    temp_link: Optional[List[Dict[str, int]]] = None
    uv_link: Optional[Dict[str, Any]] = None
    suggested_materials: Optional[List[List[str]]] = None

    @property
    def identity(self) -> str:
        return material_identity(self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "viscosity": self.viscosity,
            "density": self.density,
        }
        # Optional fields are omitted rather than nulled, matching authored documents
        for key in ("max_shear_pressure", "sedimentation_time", "temp_link", "uv_link", "suggested_materials"):
            value = getattr(self, key)
            if value is not None:
                data[key] = copy.deepcopy(value)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Material':
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            viscosity=data.get("viscosity", 0),
            density=data.get("density", 1),
            max_shear_pressure=data.get("max_shear_pressure"),
            sedimentation_time=data.get("sedimentation_time"),
            temp_link=data.get("temp_link"),
            uv_link=data.get("uv_link"),
            suggested_materials=data.get("suggested_materials"),
        )


@dataclass
class Version:
    major: int = 0
    minor: int = 0
    patch: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"major": self.major, "minor": self.minor, "patch": self.patch}


def new_experiment(
    models: Optional[List[Dict[str, Any]]] = None,
    materials: Optional[List[Dict[str, Any]]] = None,
    jobs: Optional[List[Dict[str, Any]]] = None,
    allow_pipet_reuse: bool = True,
    version: Optional[Version] = None,
) -> Dict[str, Any]:
    """Assemble an authored experiment document with empty derived collections."""
    return {
        "version": (version or Version()).to_dict(),
        "settings": {"allow_pipet_reuse": allow_pipet_reuse},
        "models": list(models or []),
        "materials": list(materials or []),
        "jobs": list(jobs or []),
        "plates": [],
        "instructions": [],
    }
