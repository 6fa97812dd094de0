"""
Unit tests for content fingerprints and material identity.
"""

import pytest

from labplan.fingerprint import canonicalize, hash_things, material_identity
from labplan.schema import Material, WellType


def test_key_order_does_not_matter():
    assert hash_things([{"a": 1, "b": 2}]) == hash_things([{"b": 2, "a": 1}])


def test_thing_order_matters():
    assert hash_things([{"a": 1}, {"b": 2}]) != hash_things([{"b": 2}, {"a": 1}])


def test_boundaries_between_things_matter():
    assert hash_things(["ab"]) != hash_things(["a", "b"])


def test_excluded_keys_dropped_at_every_depth():
    a = {"x": 1, "nested": [{"skip": 1, "keep": 2}], "skip": 3}
    b = {"x": 1, "nested": [{"skip": 9, "keep": 2}]}
    assert hash_things([a], ["skip"]) == hash_things([b], ["skip"])
    assert hash_things([a]) != hash_things([b])


def test_predicate_exclusion():
    assert canonicalize({"_private": 1, "public": 2}, lambda k: k.startswith("_")) == {"public": 2}


def test_dataclasses_canonicalized():
    assert canonicalize(WellType("t", 2, 3, 4)) == {"id": "t", "width": 2, "height": 3, "size": 4}


def test_length():
    assert len(hash_things([1], length=8)) == 8
    assert len(hash_things([1], length=64)) == 64


def test_cycles_rejected():
    a = {}
    a["self"] = a
    with pytest.raises(ValueError):
        hash_things([a])


def test_list_cycles_rejected():
    a = []
    a.append({"inner": a})
    with pytest.raises(ValueError, match="reference cycle"):
        canonicalize(a)


def test_shared_objects_are_not_cycles():
    # Resolved graphs reference the same entity from many places
    shared = {"name": "g1"}
    assert hash_things([[shared, shared]]) == hash_things([[{"name": "g1"}, {"name": "g1"}]])


class TestMaterialIdentity:

    @pytest.fixture
    def gel(self):
        return Material(
            id="hg1",
            name="My super cool hydrogel.",
            viscosity=42,
            density=0.942,
            uv_link={"duration": 2500, "light": [{"wavelength": 230, "intensity": 300}]},
            suggested_materials=[["pbs1"], ["pi1"]],
        )

    def test_stable(self, gel):
        assert gel.identity == Material.from_dict(gel.to_dict()).identity

    def test_suggestions_do_not_affect_identity(self, gel):
        before = gel.identity
        gel.suggested_materials = [["pbs2"]]
        assert gel.identity == before
        gel.suggested_materials = None
        assert gel.identity == before

    @pytest.mark.parametrize("field,value", [
        ("id", "hg2"),
        ("name", "Another gel"),
        ("viscosity", 43),
        ("density", 1.0),
        ("max_shear_pressure", 5.0),
        ("sedimentation_time", 600),
        ("temp_link", [{"duration": 1000, "target": 310}]),
        ("uv_link", {"duration": 2000, "light": []}),
    ])
    def test_other_fields_affect_identity(self, gel, field, value):
        before = gel.identity
        setattr(gel, field, value)
        assert gel.identity != before

    def test_dict_and_dataclass_agree(self, gel):
        assert material_identity(gel.to_dict()) == gel.identity
