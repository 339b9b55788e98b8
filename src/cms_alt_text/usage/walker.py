"""Locate an asset identifier inside a CMS entry document.

Entries are schema-less JSON objects. An asset may be referenced directly
as a string value, inside an array, as an object carrying the asset's
``uid`` (or ``sys.uid``), or anywhere inside nested components. A
component is an embedded object that declares its own content type through
``_content_type_uid`` or ``content_type_uid``; components nest to any depth,
including inside arrays of components and arrays nested in arrays.

The walk is depth-first in key insertion order, so the returned paths are
stable for a given document.
"""

import logging
from typing import Any

from schemas.usage import ComponentRef, UsagePath

logger = logging.getLogger(__name__)

METADATA_KEYS = frozenset(
    {"uid", "_version", "updated_at", "created_at", "ACL", "_owner", "sys"}
)
COMPONENT_MARKERS = ("_content_type_uid", "content_type_uid")
DEFAULT_MAX_DEPTH = 64

PathStep = str | int


def component_uid(node: dict[str, Any]) -> str | None:
    """Return the component content type uid of an object, if it declares one."""
    for marker in COMPONENT_MARKERS:
        value = node.get(marker)
        if isinstance(value, str) and value:
            return value
    return None


def references_asset(node: dict[str, Any], asset_uid: str) -> bool:
    """Whether an object stands for the asset itself (``uid`` or ``sys.uid``)."""
    if node.get("uid") == asset_uid:
        return True
    sys_info = node.get("sys")
    return isinstance(sys_info, dict) and sys_info.get("uid") == asset_uid


def format_path(path: list[PathStep]) -> str:
    """Render a path as ``field[0].child`` for log messages."""
    rendered = ""
    for step in path:
        if isinstance(step, int):
            rendered += f"[{step}]"
        else:
            rendered += f".{step}" if rendered else step
    return rendered or "<root>"


def find_asset_paths(
    asset_uid: str,
    node: Any,
    path: list[PathStep] | None = None,
    component_chain: list[ComponentRef] | None = None,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[UsagePath]:
    """Find every location of ``asset_uid`` inside an entry document.

    Args:
        asset_uid: Identifier of the asset to look for
        node: Entry document, or any object or array inside one
        path: Path of ``node`` from the entry root
        component_chain: Components enclosing ``node``, outermost first
        max_depth: Object and array nesting depth after which a branch is truncated

    Returns:
        Usage paths in traversal order. Paths are not yet tagged with the
        originating entry; the resolver does that.
    """
    found: list[UsagePath] = []
    _walk(
        asset_uid,
        node,
        list(path or []),
        list(component_chain or []),
        found,
        set(),
        max_depth,
    )
    return found


def _walk(
    asset_uid: str,
    node: Any,
    path: list[PathStep],
    chain: list[ComponentRef],
    found: list[UsagePath],
    active: set[int],
    depth_left: int,
    field_name: str | None = None,
) -> None:
    if not isinstance(node, (dict, list)):
        return

    # Parsed JSON is a tree; in-memory documents are not guaranteed to be.
    if id(node) in active:
        logger.warning(f"Cycle detected at {format_path(path)}, branch truncated")
        return
    if depth_left <= 0:
        logger.warning(f"Maximum depth reached at {format_path(path)}, branch truncated")
        return

    active.add(id(node))
    try:
        if isinstance(node, dict):
            _walk_fields(asset_uid, node, path, chain, found, active, depth_left)
        else:
            _walk_items(asset_uid, node, field_name, path, chain, found, active, depth_left)
    finally:
        active.discard(id(node))


def _walk_fields(
    asset_uid: str,
    node: dict[str, Any],
    path: list[PathStep],
    chain: list[ComponentRef],
    found: list[UsagePath],
    active: set[int],
    depth_left: int,
) -> None:
    for key, value in node.items():
        if key in METADATA_KEYS or value is None:
            continue

        field_path = [*path, key]

        if isinstance(value, str):
            if value == asset_uid:
                found.append(_usage(field_path, key, chain))
        elif isinstance(value, list):
            _walk_items(asset_uid, value, key, field_path, chain, found, active, depth_left)
        elif isinstance(value, dict):
            _visit_object(asset_uid, value, key, field_path, chain, found, active, depth_left)


def _walk_items(
    asset_uid: str,
    items: list[Any],
    field_name: str | None,
    path: list[PathStep],
    chain: list[ComponentRef],
    found: list[UsagePath],
    active: set[int],
    depth_left: int,
) -> None:
    """Search array elements; nested arrays keep the enclosing field name.

    A top-level array has no enclosing field, so its elements are named by
    their index.
    """
    for index, item in enumerate(items):
        item_path = [*path, index]
        name = field_name if field_name is not None else str(index)
        if isinstance(item, str):
            if item == asset_uid:
                found.append(_usage(item_path, name, chain))
        elif isinstance(item, dict):
            _visit_object(asset_uid, item, name, item_path, chain, found, active, depth_left)
        elif isinstance(item, list):
            _walk(asset_uid, item, item_path, chain, found, active, depth_left - 1, name)


def _visit_object(
    asset_uid: str,
    node: dict[str, Any],
    field_name: str,
    path: list[PathStep],
    chain: list[ComponentRef],
    found: list[UsagePath],
    active: set[int],
    depth_left: int,
) -> None:
    uid = component_uid(node)
    child_chain = [*chain, ComponentRef(uid=uid, field_name=field_name)] if uid else chain

    if references_asset(node, asset_uid):
        found.append(_usage(path, field_name, child_chain))
        return

    _walk(asset_uid, node, path, child_chain, found, active, depth_left - 1)


def _usage(path: list[PathStep], field_name: str, chain: list[ComponentRef]) -> UsagePath:
    return UsagePath(path=path, field_name=field_name, component_hierarchy=list(chain))
