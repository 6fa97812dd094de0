"""
Pytest configuration for labplan tests.
"""
import sys
import os
import pytest

# Add src directory to Python path so tests can import labplan without installing
src_path = os.path.abspath(os.path.join(os.path.dirname(__file__), "../src"))
sys.path.insert(0, src_path)


# ==============================================================================
# Document Fixtures
# ==============================================================================

@pytest.fixture
def make_model():
    """
    Factory for authored model groups.

    Usage in tests:
        def test_something(make_model):
            model = make_model("g1", count=16)
    """
    def _make(name, count, well_type="med96", operations=None, n_jobs=1):
        return {
            "name": name,
            "well_type": well_type,
            "count": count,
            "operations": operations if operations is not None else [[] for _ in range(n_jobs)],
            "instructions": [],
        }
    return _make


@pytest.fixture
def materials():
    """Four materials; hg1 and pi1 suggest each other."""
    return [
        {
            "id": "hg1",
            "name": "My super cool hydrogel.",
            "viscosity": 42,
            "density": 0.942,
            "uv_link": {"duration": 2500, "light": [{"wavelength": 230, "intensity": 300}]},
            "suggested_materials": [["pbs1"], ["pi1"]],
        },
        {"id": "pbs1", "name": "Basically water", "viscosity": 0, "density": 1},
        {"id": "pbs2", "name": "Heavy water", "viscosity": 0, "density": 1.1},
        {
            "id": "pi1",
            "name": "The special sauce",
            "viscosity": 0,
            "density": 1,
            "suggested_materials": [["hg1"]],
        },
    ]


@pytest.fixture
def example_experiment(materials):
    """One 16-specimen model group on a 96-well plate, one job."""
    return {
        "version": {"major": 0, "minor": 0, "patch": 0},
        "settings": {"allow_pipet_reuse": True},
        "models": [{
            "name": "g1",
            "well_type": "med96",
            "count": 16,
            "operations": [[{
                "type": "AddMaterials",
                "allow_slack": True,
                "materials": [{"type": "1", "volume": 42}],
            }]],
            "instructions": [],
        }],
        "materials": materials,
        "jobs": [{
            "scheduled": None,
            "inputs": [
                {"mix": [{"material": "hg1", "percent": 20}, {"material": "pbs1", "percent": 80}],
                 "location": {"index": 1}},
                {"mix": [{"material": "pbs1", "percent": 100}], "location": {"index": 2}},
                {"mix": [{"material": "pi1", "percent": 100}], "location": {"index": 3}},
            ],
            "premixes": [],
            "instructions": [],
        }],
        "plates": [],
        "instructions": [],
    }


@pytest.fixture
def linked_experiment(example_experiment, make_model):
    """
    An authored document exercising every experiment resolution path:
    instructions name models and plates, models list instructions, plates
    list models and wells name models (with empty wells in between).
    """
    doc = example_experiment
    doc["models"].append(make_model("g2", count=2))
    doc["plates"] = [{
        "type": "med96",
        "models": ["g1", 1],
        "wells": [{"model": "g1", "index": 0}, None, {"model": "g2", "index": 0},
                  {"model": "1", "index": 1}] + [None] * 92,
    }]
    doc["instructions"] = [
        {"type": "Mix", "allow_slack": False, "model": "g1", "well_plate": 0,
         "indices": [{"model": 0, "well": 0}]},
        {"type": "Module", "allow_slack": True},
    ]
    doc["models"][0]["instructions"] = [0]
    doc["models"][1]["instructions"] = ["0"]
    return doc
