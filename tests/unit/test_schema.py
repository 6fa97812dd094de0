"""Tests for the document vocabulary."""

import pytest

from labplan.exceptions import UnsupportedInputError
from labplan.schema import (
    InstructionKind,
    Material,
    OperationKind,
    WELL_TYPES,
    WellType,
    new_experiment,
    well_type_of,
)


class TestOperationKind:

    def test_device_kinds(self):
        assert {k for k in OperationKind if k.requires_device} == {OperationKind.MODULE, OperationKind.EXTERNAL}

    def test_of(self):
        assert OperationKind.of({"type": "Mix"}) is OperationKind.MIX

    @pytest.mark.parametrize("operation", [{"type": "Teleport"}, {}, "Mix", None])
    def test_of_unknown(self, operation):
        with pytest.raises(UnsupportedInputError):
            OperationKind.of(operation)


def test_instruction_targets():
    untargeted = {k for k in InstructionKind if not k.targets_model}
    assert untargeted == {InstructionKind.MODULE, InstructionKind.PREMIX}


class TestWellTypes:

    def test_med96(self):
        med96 = WELL_TYPES["med96"]
        assert (med96.width, med96.height, med96.size) == (12, 8, 42)
        assert med96.capacity == 96

    def test_lookup_forms(self):
        med96 = WELL_TYPES["med96"]
        assert well_type_of("med96") is med96
        assert well_type_of(med96) is med96
        assert well_type_of(med96.to_dict()) == med96

    def test_embedded_without_size(self):
        assert well_type_of({"id": "t", "width": 4, "height": 6}) == WellType("t", 4, 6, 0)

    def test_unknown_id(self):
        with pytest.raises(UnsupportedInputError):
            well_type_of("med384")

    def test_incomplete_mapping(self):
        with pytest.raises(UnsupportedInputError):
            well_type_of({"id": "t", "width": 4})


def test_material_round_trip_omits_unset_fields():
    data = {"id": "pbs1", "name": "Basically water", "viscosity": 0, "density": 1}
    assert Material.from_dict(data).to_dict() == data


def test_new_experiment():
    doc = new_experiment(models=[{"name": "g1"}])
    assert doc["version"] == {"major": 0, "minor": 0, "patch": 0}
    assert doc["settings"] == {"allow_pipet_reuse": True}
    assert doc["plates"] == []
    assert doc["instructions"] == []
    assert doc["models"] == [{"name": "g1"}]
