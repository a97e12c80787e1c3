"""Resolve caller-supplied item references before a stock transaction opens.

A reference may carry a document path (``materials/12``), an explicit
type and id, and/or a human-readable code. Direct lookup is tried first,
then lookup by code. Nothing here runs inside a transaction, and failures
are collected so callers can report every bad reference at once.
"""

from dataclasses import dataclass, field

from common.choices import ItemType

COLLECTION_ITEM_TYPES = {
    "materials": ItemType.MATERIAL,
    "fragrances": ItemType.FRAGRANCE,
}


@dataclass(frozen=True)
class ItemReference:
    key: str
    item_type: str | None = None
    item_id: int | None = None
    path: str = ""
    code: str = ""


@dataclass
class Resolution:
    resolved: dict = field(default_factory=dict)  # key -> (item_type, item_id)
    failed: list = field(default_factory=list)

    def __contains__(self, key) -> bool:
        return key in self.resolved

    def target(self, key):
        return self.resolved[key]


def parse_item_path(path: str):
    """Return ``(item_type, item_id)`` for ``<collection>/<id>`` or None."""
    parts = [part for part in (path or "").strip().split("/") if part]
    if len(parts) != 2:
        return None
    item_type = COLLECTION_ITEM_TYPES.get(parts[0])
    if item_type is None:
        return None
    try:
        return item_type, int(parts[1])
    except ValueError:
        return None


def _direct_target(ref: ItemReference):
    if ref.path:
        target = parse_item_path(ref.path)
        if target is not None and (ref.item_type is None or ref.item_type == target[0]):
            return target
    if ref.item_type and ref.item_id is not None:
        return ref.item_type, int(ref.item_id)
    return None


def resolve_item_references(refs, *, store) -> Resolution:
    resolution = Resolution()
    for ref in refs:
        target = _direct_target(ref)
        if target is not None and store.item_exists(*target):
            resolution.resolved[ref.key] = target
            continue

        found = None
        if ref.code:
            candidates = [ref.item_type] if ref.item_type else list(COLLECTION_ITEM_TYPES.values())
            for item_type in candidates:
                item_id = store.find_item_by_code(item_type, ref.code)
                if item_id is not None:
                    found = (item_type, item_id)
                    break
        if found is not None:
            resolution.resolved[ref.key] = found
            continue

        resolution.failed.append(
            {
                "key": ref.key,
                "item_type": ref.item_type or (target[0] if target else None),
                "item_id": ref.item_id if ref.item_id is not None else (target[1] if target else None),
                "path": ref.path,
                "code": ref.code,
                "error": "Item not found",
            }
        )
    return resolution
