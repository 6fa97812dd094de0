"""
Content fingerprints.

Stable identifiers for materials and for plate-compatibility buckets.
Two things with the same content hash to the same fingerprint regardless of
key order; excluded keys are dropped at every depth before hashing, so
metadata such as suggested substitutes never affects identity or grouping.
"""

import hashlib
import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Sequence, Union

from labplan.config.settings import settings

KeyFilter = Union[Sequence[str], Callable[[str], bool]]

# Metadata keys that never participate in identity or grouping
SUGGESTION_KEYS = ("suggested_materials",)


def _as_predicate(exclude_keys: Optional[KeyFilter]) -> Callable[[str], bool]:
    if exclude_keys is None:
        return lambda key: False
    if callable(exclude_keys):
        return exclude_keys
    excluded = frozenset(exclude_keys)
    return lambda key: key in excluded


def canonicalize(thing: Any, exclude_keys: Optional[KeyFilter] = None) -> Any:
    """
    Reduce a value to plain JSON types with excluded keys removed.

    Dataclasses become dicts, enums become their values, tuples become lists.
    Dict keys are left for ``json.dumps(sort_keys=True)`` to order.
    """
    is_excluded = _as_predicate(exclude_keys)
    # Containers on the current descent path; shared (non-cyclic) objects are fine
    active = set()

    def walk(value: Any) -> Any:
        if is_dataclass(value) and not isinstance(value, type):
            value = asdict(value)
        if isinstance(value, Enum):
            return value.value
        if not isinstance(value, (dict, list, tuple)):
            return value
        if id(value) in active:
            raise ValueError("reference cycle")
        active.add(id(value))
        try:
            if isinstance(value, dict):
                return {str(k): walk(v) for k, v in value.items() if not is_excluded(str(k))}
            return [walk(v) for v in value]
        finally:
            active.discard(id(value))

    return walk(thing)


def hash_things(
    things: Iterable[Any],
    exclude_keys: Optional[KeyFilter] = None,
    length: Optional[int] = None,
) -> str:
    """
    Hash a sequence of JSON-compatible things into one hex fingerprint.

    Args:
        things: Values to hash, in order (order matters)
        exclude_keys: Key names, or a predicate on key names, dropped at every depth
        length: Hex characters to keep (defaults to settings.fingerprint_length)

    Returns:
        Hex digest prefix

    Raises:
        ValueError: If a thing contains a reference cycle
    """
    digest = hashlib.sha256()
    for thing in things:
        canonical_json = json.dumps(
            canonicalize(thing, exclude_keys), sort_keys=True, separators=(",", ":")
        )
        digest.update(canonical_json.encode("utf-8"))
        # Separator so [a, b] and [ab] never collide
        digest.update(b"\x1e")
    return digest.hexdigest()[: length or settings.fingerprint_length]


def material_identity(material: Any, length: Optional[int] = None) -> str:
    """Identity of a material: every field except suggested substitutes."""
    return hash_things([material], SUGGESTION_KEYS, length=length)
