"""
Reference resolution.

Authored experiment documents link entities by identifier: a plate lists
the names of its model groups, an instruction names the plate it runs on.
Resolution turns that compact tree into a linked graph by replacing each
identifier with the entity it names.

Which fields hold references is data, not code. A ResolutionPath is a list
of steps plus the top-level collection its terminal values point into:

    "plates.*.wells.*?.model" -> "models"

Step tokens:
- ``name``   literal field, required
- ``name?``  literal field, skipped when missing or null
- ``*``      every element of a list, elements required
- ``*?``     every element of a list, null elements skipped

Paths are applied in declared order, so a later path may reach through
entities substituted by an earlier one. The input document is never
mutated: resolution runs on a deep copy, and identifiers are looked up in
the copy so the resulting graph is self-contained.

Resolution is idempotent: a terminal value that is already an entity (a
mapping) passes through unchanged. Any other non-identifier scalar, such as
``True`` or ``1.0``, is rejected.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from labplan.exceptions import UnresolvedReferenceError

logger = logging.getLogger(__name__)

WILDCARD = "*"
OPTIONAL_SUFFIX = "?"


@dataclass(frozen=True)
class PathStep:
    key: str
    optional: bool = False

    @property
    def is_wildcard(self) -> bool:
        return self.key == WILDCARD

    @classmethod
    def parse(cls, token: str) -> 'PathStep':
        optional = token.endswith(OPTIONAL_SUFFIX)
        key = token[:-1] if optional else token
        if not key:
            raise ValueError(f"Empty path step in token {token!r}")
        return cls(key=key, optional=optional)

    def __str__(self) -> str:
        return self.key + (OPTIONAL_SUFFIX if self.optional else "")


@dataclass(frozen=True)
class ResolutionPath:
    steps: Tuple[PathStep, ...]
    collection: str

    def __post_init__(self):
        if not self.steps:
            raise ValueError("A resolution path needs at least one step")

    @classmethod
    def of(cls, pattern: Union[str, Sequence[str]], collection: str) -> 'ResolutionPath':
        """Build a path from a dotted pattern or a list of step tokens."""
        tokens = pattern.split(".") if isinstance(pattern, str) else list(pattern)
        return cls(steps=tuple(PathStep.parse(t) for t in tokens), collection=collection)

    def __str__(self) -> str:
        return ".".join(str(s) for s in self.steps) + f" -> {self.collection}"


# Order matters: instruction and plate entities are substituted before the
# paths that reach into them.
EXPERIMENT_PATHS: Tuple[ResolutionPath, ...] = (
    ResolutionPath.of("instructions.*.model?", "models"),
    ResolutionPath.of("instructions.*.well_plate?", "plates"),
    ResolutionPath.of("models.*.instructions.*", "instructions"),
    ResolutionPath.of("plates.*.models.*", "models"),
    ResolutionPath.of("plates.*.wells.*?.model", "models"),
)


def is_identifier(value: Any) -> bool:
    """Plain identifiers are strings and integer indices (bools excluded)."""
    return isinstance(value, str) or (isinstance(value, int) and not isinstance(value, bool))


class ReferenceResolver:
    """
    Applies an ordered list of resolution paths to documents.

    One resolver can be reused across documents; per-document lookup
    indexes live only for the duration of a ``resolve`` call.
    """

    def __init__(self, paths: Sequence[ResolutionPath] = EXPERIMENT_PATHS):
        self.paths = tuple(paths)

    def resolve(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """
        Return a fully resolved deep copy of ``document``.

        Raises:
            UnresolvedReferenceError: A required step is null/missing, a
                named collection does not exist, or an identifier matches
                no entity.
        """
        root = copy.deepcopy(document)
        run = _ResolutionRun(root)
        for path in self.paths:
            before = run.replaced
            run.walk(root, path.steps, path.collection, [])
            logger.debug(f"Resolved {run.replaced - before} references along {path}")
        logger.info(f"Resolved {run.replaced} references across {len(self.paths)} paths")
        return root


class _ResolutionRun:
    """State for resolving one document: the copy's root and lookup indexes."""

    def __init__(self, root: Dict[str, Any]):
        self.root = root
        self.replaced = 0
        self._indexes: Dict[str, Tuple[Dict[str, Any], Dict[str, Any]]] = {}

    def walk(self, node: Any, steps: Sequence[PathStep], collection: str, trace: List[str]) -> None:
        step, rest = steps[0], steps[1:]
        last = not rest

        if step.is_wildcard:
            if not isinstance(node, list):
                raise UnresolvedReferenceError(
                    ".".join(trace + [step.key]), f"expected a list, got {type(node).__name__}"
                )
            for index, item in enumerate(node):
                here = trace + [str(index)]
                if item is None:
                    if step.optional:
                        continue
                    raise UnresolvedReferenceError(".".join(here))
                if last:
                    node[index] = self.lookup(item, collection, here)
                else:
                    self.walk(item, rest, collection, here)
            return

        here = trace + [step.key]
        if not isinstance(node, dict):
            raise UnresolvedReferenceError(
                ".".join(here), f"expected a mapping, got {type(node).__name__}"
            )
        value = node.get(step.key)
        if value is None:
            if step.optional:
                return
            raise UnresolvedReferenceError(".".join(here))
        if last:
            node[step.key] = self.lookup(value, collection, here)
        else:
            self.walk(value, rest, collection, here)

    def lookup(self, value: Any, collection: str, trace: List[str]) -> Any:
        if isinstance(value, dict):
            # Already an entity
            return value
        if not is_identifier(value):
            raise UnresolvedReferenceError(
                ".".join(trace), f"{value!r} is neither an identifier nor an entity"
            )

        entities = self.root.get(collection)
        if entities is None:
            raise UnresolvedReferenceError(
                ".".join(trace), f"collection {collection!r} does not exist"
            )

        entity = self._find(entities, collection, value)
        if entity is None:
            raise UnresolvedReferenceError(
                ".".join(trace), f"no entity {value!r} in {collection!r}"
            )
        self.replaced += 1
        return entity

    def _find(self, entities: Any, collection: str, value: Union[str, int]) -> Optional[Any]:
        if isinstance(entities, dict):
            return entities.get(str(value))

        if isinstance(value, int) or value.isdecimal():
            index = int(value)
            return entities[index] if 0 <= index < len(entities) else None

        by_id, by_name = self._index(entities, collection)
        if value in by_id:
            return by_id[value]
        return by_name.get(value)

    def _index(self, entities: List[Any], collection: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        # Collections are only mutated element-wise during a run, never re-keyed
        if collection not in self._indexes:
            by_id: Dict[str, Any] = {}
            by_name: Dict[str, Any] = {}
            for entity in entities:
                if not isinstance(entity, dict):
                    continue
                if isinstance(entity.get("id"), str):
                    by_id.setdefault(entity["id"], entity)
                if isinstance(entity.get("name"), str):
                    by_name.setdefault(entity["name"], entity)
            self._indexes[collection] = (by_id, by_name)
        return self._indexes[collection]


def resolve_references(
    document: Dict[str, Any],
    paths: Sequence[ResolutionPath] = EXPERIMENT_PATHS,
) -> Dict[str, Any]:
    """Resolve ``document`` along ``paths`` (the experiment paths by default)."""
    return ReferenceResolver(paths).resolve(document)
