"""
Plate layout views.

Tabular and grid views of allocated plates for review and export. Wells
are numbered row-major: index ``i`` sits in row ``i // width`` and column
``i % width``, named like ``A01``.
"""

from typing import Any, Dict, List

import numpy as np
import pandas as pd

from labplan.schema import well_type_of

PLATE_MAP_COLUMNS = ["plate", "well", "row", "col", "model", "index"]


def well_position(index: int, width: int) -> str:
    """Well name for a row-major well index, e.g. 13 on a 12-wide plate -> 'B02'."""
    row_idx, col_idx = divmod(index, width)
    return f"{chr(ord('A') + row_idx)}{col_idx + 1:02d}"


def _model_name(well: Dict[str, Any]) -> str:
    model = well["model"]
    return model.get("name", "") if isinstance(model, dict) else str(model)


def plate_grid(plate: Dict[str, Any]) -> np.ndarray:
    """
    Occupancy grid of a plate.

    Returns:
        (height, width) array of model names, '' for empty wells
    """
    well_type = well_type_of(plate["type"])
    names = [_model_name(w) if w is not None else "" for w in plate["wells"]]
    return np.array(names, dtype=object).reshape(well_type.height, well_type.width)


def plate_map_frame(plates: List[Dict[str, Any]]) -> pd.DataFrame:
    """One row per well across all plates; empty wells have model None and index -1."""
    rows = []
    for plate_idx, plate in enumerate(plates):
        width = well_type_of(plate["type"]).width
        for well_idx, well in enumerate(plate["wells"]):
            position = well_position(well_idx, width)
            rows.append({
                "plate": plate_idx,
                "well": position,
                "row": position[0],
                "col": well_idx % width + 1,
                "model": _model_name(well) if well is not None else None,
                "index": well["index"] if well is not None else -1,
            })
    return pd.DataFrame(rows, columns=PLATE_MAP_COLUMNS)


def utilization(plates: List[Dict[str, Any]]) -> np.ndarray:
    """Fraction of occupied wells on each plate."""
    if not plates:
        return np.zeros(0)
    occupied = np.array([sum(w is not None for w in p["wells"]) for p in plates], dtype=float)
    capacity = np.array([len(p["wells"]) for p in plates], dtype=float)
    return occupied / capacity
