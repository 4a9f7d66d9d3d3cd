"""Turn parsed dataset data into a validated ``Hierarchy``.

Two input shapes are accepted:

    - nested records: one root mapping whose ``children`` hold child mappings
    - flat records: a list of mappings with ``id`` and ``parent`` references

Everything that would break the layout engine's "finite rooted tree"
assumption (cycles, shared subtrees, duplicate identity hints, dangling
parent references, zero or several roots) is rejected here.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from itertools import count
from typing import Any

from loguru import logger
from pydantic import ValidationError

from ..config.defaults import DEFAULT_PALETTE, DEFAULT_ROOT_COLOR
from .exceptions import (
    CyclicHierarchyError,
    DuplicateIdentityError,
    MalformedHierarchyError,
)
from .hierarchy import Expanded, Hierarchy, TreeNode
from .models import FlatRecord, NodeId, NodeRecord


def parse_records(data: Any) -> NodeRecord:
    """Validate raw dataset data into a root ``NodeRecord``.

    Args:
        data: Root mapping, list of flat records, or an existing NodeRecord

    Returns:
        Root record of the hierarchy

    Raises:
        MalformedHierarchyError: If the data is not a finite rooted tree
    """
    if isinstance(data, NodeRecord):
        return data
    if isinstance(data, Mapping):
        _reject_shared_mappings(data)
        try:
            return NodeRecord.model_validate(data)
        except ValidationError as e:
            raise MalformedHierarchyError(
                f"Invalid hierarchy record ({e.error_count()} errors)",
                context={"errors": e.errors(include_url=False)},
            ) from e
    if isinstance(data, Sequence) and not isinstance(data, str | bytes):
        return assemble_flat_records(data)
    raise MalformedHierarchyError(
        f"Unsupported hierarchy data of type {type(data).__name__}"
    )


def _reject_shared_mappings(data: Mapping) -> None:
    """Fail if one mapping object is reachable twice (cycle or shared subtree)."""
    seen: set[int] = set()
    stack: list[Any] = [data]
    while stack:
        item = stack.pop()
        if not isinstance(item, Mapping):
            continue
        if id(item) in seen:
            raise CyclicHierarchyError(
                f"Record {item.get('name', item.get('label'))!r} is reachable more than once",
            )
        seen.add(id(item))
        children = item.get("children")
        if isinstance(children, list):
            stack.extend(children)


def assemble_flat_records(rows: Sequence[Any]) -> NodeRecord:
    """Build a nested record tree from parent-referencing rows.

    Raises:
        DuplicateIdentityError: If two rows share an ``id``
        CyclicHierarchyError: If parent references form a cycle
        MalformedHierarchyError: On dangling parents or a missing/ambiguous root
    """
    try:
        flat = [FlatRecord.model_validate(row) for row in rows]
    except ValidationError as e:
        raise MalformedHierarchyError(
            f"Invalid flat record ({e.error_count()} errors)",
            context={"errors": e.errors(include_url=False)},
        ) from e

    parents: dict[NodeId, NodeId | None] = {}
    for row in flat:
        if row.identity in parents:
            raise DuplicateIdentityError(
                f"Duplicate identity {row.identity!r}",
                context={"identity": row.identity},
            )
        parents[row.identity] = row.parent

    for identity, parent in parents.items():
        if parent is not None and parent not in parents:
            raise MalformedHierarchyError(
                f"Record {identity!r} references unknown parent {parent!r}",
                context={"identity": identity, "parent": parent},
            )

    cycle = _find_parent_cycle(parents)
    if cycle:
        raise CyclicHierarchyError(
            f"Cyclic parent references: {' -> '.join(map(repr, cycle))}",
            context={"cycle": cycle},
        )

    roots = [identity for identity, parent in parents.items() if parent is None]
    if len(roots) != 1:
        raise MalformedHierarchyError(
            f"Expected exactly one root record, found {len(roots)}",
            context={"roots": roots},
        )

    records = {
        row.identity: NodeRecord(
            label=row.label,
            annotation=row.annotation,
            link=row.link,
            identity=row.identity,
        )
        for row in flat
    }
    for row in flat:
        if row.parent is not None:
            records[row.parent].children.append(records[row.identity])
    return records[roots[0]]


def _find_parent_cycle(parents: dict[NodeId, NodeId | None]) -> list[NodeId]:
    """Three-colour walk along parent links; returns the first cycle found."""
    white, gray, black = 0, 1, 2  # noqa: N806
    color = dict.fromkeys(parents, white)

    for start in parents:
        path: list[NodeId] = []
        current: NodeId | None = start
        while current is not None and color[current] == white:
            color[current] = gray
            path.append(current)
            current = parents[current]
        if current is not None and color[current] == gray:
            return path[path.index(current) :] + [current]
        for identity in path:
            color[identity] = black
    return []


def _walk_records(root: NodeRecord) -> Iterator[NodeRecord]:
    """Pre-order over records, rejecting any record object seen twice."""
    seen: set[int] = set()
    stack = [root]
    while stack:
        record = stack.pop()
        if id(record) in seen:
            raise CyclicHierarchyError(
                f"Record {record.label!r} is reachable more than once",
                context={"label": record.label},
            )
        seen.add(id(record))
        yield record
        stack.extend(reversed(record.children))


def build_hierarchy(
    root: NodeRecord,
    palette: Sequence[str] = DEFAULT_PALETTE,
    root_color: str = DEFAULT_ROOT_COLOR,
) -> Hierarchy:
    """Create the node arena for a validated record tree.

    Identity hints are kept; records without one get the next unused
    integer in pre-order. Branch colours are assigned once here: the root
    gets ``root_color`` and each first-generation subtree inherits
    ``palette[index % len(palette)]``.

    Raises:
        CyclicHierarchyError: If a record object is shared or cyclic
        DuplicateIdentityError: If identity hints collide
    """
    records = list(_walk_records(root))

    hinted: set[NodeId] = set()
    for record in records:
        if record.identity is None:
            continue
        if record.identity in hinted:
            raise DuplicateIdentityError(
                f"Duplicate identity {record.identity!r}",
                context={"identity": record.identity},
            )
        hinted.add(record.identity)

    fresh = (n for n in count(1) if n not in hinted)
    identities = {
        id(record): record.identity if record.identity is not None else next(fresh)
        for record in records
    }

    nodes: dict[NodeId, TreeNode] = {}
    stack: list[tuple[NodeRecord, NodeId | None, int]] = [(root, None, 0)]
    while stack:
        record, parent_id, depth = stack.pop()
        identity = identities[id(record)]
        nodes[identity] = TreeNode(
            identity=identity,
            label=record.label,
            annotation=record.annotation,
            link=record.link,
            parent=parent_id,
            depth=depth,
            state=Expanded(tuple(identities[id(c)] for c in record.children)),
        )
        stack.extend((c, identity, depth + 1) for c in reversed(record.children))

    hierarchy = Hierarchy(nodes, identities[id(root)])
    hierarchy.root.branch_color = root_color
    if palette:
        for index, child_id in enumerate(hierarchy.root.children):
            hierarchy.assign_branch_color(child_id, palette[index % len(palette)])

    logger.debug(
        f"Built hierarchy: {len(nodes)} nodes, {len(hinted)} identity hints, "
        f"{len(hierarchy.root.children)} branches"
    )
    return hierarchy


def dataset_title(label: str) -> str:
    """Human-readable title for a dataset root label."""
    return label.replace("_", " ")
