"""Store — the in-memory object store and the single owner of all registries.

A Store instance holds, per module name:

- the ordered item list (the only mutable state callers care about),
- the template, hook, relation, and computed-field registries,
- one history stack shared by every module.

Every mutation follows the same protocol: copy the request into a proposed
value, run the cancelable ``before:*`` hooks, apply, push a history entry,
run the ``after:*`` hooks, then forward the event to the plugin bus.

INVARIANT: Every value returned to a caller is a deep copy.
INVARIANT: A vetoed mutation leaves items, history, and after-hooks untouched.
INVARIANT: Every public method runs under one re-entrant lock per store.
"""

from __future__ import annotations

import copy
import functools
import logging
import math
import random
import threading
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, Concatenate, ParamSpec, TypeVar

from modstore.domain.errors import DuplicateItemError, PreconditionError
from modstore.domain.history import (
    AddEntry,
    BulkRemoveEntry,
    BulkUpdateEntry,
    Change,
    HistoryEntry,
    HistoryKind,
    RemoveEntry,
    UpdateEntry,
)
from modstore.domain.hooks import HookDecision, HookEvent
from modstore.domain.ids import CodeSequencer, generate_item_id
from modstore.domain.items import (
    Item,
    clone_item,
    clone_items,
    matches_key,
    merge_item,
    normalize_tags,
    to_number,
)
from modstore.domain.predicates import FunctionPredicate, KeyPredicate, Predicate
from modstore.domain.relations import Relation
from modstore.domain.tags import with_tag, without_tag
from modstore.infrastructure.history import HistoryStack
from modstore.infrastructure.hooks import HookBus, HookFn
from modstore.infrastructure.query import QueryEngine
from modstore.infrastructure.registries import ComputedRegistry, RelationRegistry, TemplateRegistry

if TYPE_CHECKING:
    from modstore.plugins.event_bus import EventBus

logger = logging.getLogger(__name__)

StatOp = str | Callable[[list[Item]], Any]

P = ParamSpec("P")
R = TypeVar("R")


def _synchronized(
    method: Callable[Concatenate[Store, P], R],
) -> Callable[Concatenate[Store, P], R]:
    """Run *method* while holding the store's lock."""

    @functools.wraps(method)
    def wrapper(self: Store, *args: P.args, **kwargs: P.kwargs) -> R:
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


def _field_comparator(field_name: str, *, reverse: bool = False) -> Callable[[Item, Item], int]:
    """``<`` comparison on one field; missing/None values sort last in either direction."""
    sign = -1 if reverse else 1

    def compare(a: Item, b: Item) -> int:
        va, vb = a.get(field_name), b.get(field_name)
        if va is None or vb is None:
            return (va is None) - (vb is None)
        if va == vb:
            return 0
        try:
            return sign * (-1 if va < vb else 1)
        except TypeError:
            ka = (type(va).__name__, str(va))
            kb = (type(vb).__name__, str(vb))
            return sign * ((ka > kb) - (ka < kb))

    return compare


def _stat_number(value: Any) -> float:
    number = to_number(value)
    return 0.0 if math.isnan(number) else number


class Store:
    """In-memory module store with hooks, relations, computed fields, and undo.

    Usage::

        store = Store()
        store.register_template("students", {"name": "", "age": 0})
        amy = store.add("students", {"name": "Amy", "age": 20})
        store.update("students", amy["code"], {"age": 21})
        store.undo()
    """

    def __init__(self, *, event_bus: EventBus | None = None) -> None:
        self._lock = threading.RLock()
        self._modules: dict[str, list[Item]] = {}
        self._templates = TemplateRegistry()
        self._hooks = HookBus()
        self._relations = RelationRegistry()
        self._computed = ComputedRegistry()
        self._history = HistoryStack()
        self._codes = CodeSequencer()
        self._query = QueryEngine(self.get_related)
        self._undo_handlers: dict[HistoryKind, Callable[[Any], None]] = {
            HistoryKind.ADD: self._undo_add,
            HistoryKind.REMOVE: self._undo_remove,
            HistoryKind.UPDATE: self._undo_update,
            HistoryKind.BULK_UPDATE: self._undo_bulk_update,
            HistoryKind.BULK_REMOVE: self._undo_bulk_remove,
        }
        self.event_bus = event_bus

    # ------------------------------------------------------------------
    # Registries
    # ------------------------------------------------------------------

    @_synchronized
    def register_template(self, module: str, template: Mapping[str, Any] | None = None) -> None:
        """Set the default item shape for *module*, replacing any earlier one."""
        self._templates.register(module, template or {})

    @_synchronized
    def template(self, module: str) -> Item:
        return self._templates.get(module)

    @_synchronized
    def on(self, module: str, event: str, fn: HookFn) -> None:
        """Register a lifecycle hook (``before:add``, ``after:update``, ...)."""
        self._hooks.on(module, event, fn)

    @_synchronized
    def add_relation(
        self,
        module_from: str,
        module_to: str,
        key_from: str,
        key_to: str,
        **extra: Any,
    ) -> Relation:
        """Declare that ``module_from[key_from] == module_to[key_to]`` links items.

        Raises:
            PreconditionError: If either module name is empty.
        """
        if not module_from or not module_to:
            msg = "both modules required"
            raise PreconditionError(msg)
        relation = Relation(key_from=key_from, key_to=key_to, extra=dict(extra))
        self._relations.add(module_from, module_to, relation)
        self._hooks.emit(
            module_from,
            HookEvent.RELATION_ADDED,
            {"from": module_from, "to": module_to, "relation": relation.to_dict()},
        )
        return relation

    @_synchronized
    def register_computed(self, module: str, name: str, fn: Callable[[Item], Any]) -> None:
        self._computed.register(module, name, fn)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @_synchronized
    def modules(self) -> list[str]:
        """Names of every module that currently has an item list."""
        return list(self._modules)

    @_synchronized
    def get(self, module: str, id_or_code: Any) -> Item | None:
        """Return a copy of the first item whose id or code matches, else None."""
        live = self._find(module, id_or_code)
        return clone_item(live) if live is not None else None

    @_synchronized
    def get_all(
        self,
        module: str,
        *,
        sort_by: str | None = None,
        reverse: bool = False,
    ) -> list[Item]:
        """Return copies of every item in *module*.

        With *sort_by*, the stored order itself is re-sorted (stable) first.
        *reverse* flips the order of present values only; items missing the
        field stay at the end.
        """
        items = self._modules.get(module)
        if items is None:
            return []
        if sort_by:
            compare = _field_comparator(sort_by, reverse=reverse)
            items.sort(key=functools.cmp_to_key(compare))
        return clone_items(items)

    @_synchronized
    def count(self, module: str) -> int:
        return len(self._modules.get(module, ()))

    @_synchronized
    def get_related(
        self,
        module_from: str,
        item_id: Any,
        module_to: str,
        *,
        filter: Callable[[Item], Any] | None = None,  # noqa: A002
        limit: int | None = None,
    ) -> list[Item]:
        """Items in *module_to* linked to one item of *module_from*.

        Matches from every relation declared for the pair are unioned and
        de-duplicated in first-seen order. A missing item or missing
        relations yield an empty list.
        """
        source = self._find(module_from, item_id)
        if source is None:
            return []
        relations = self._relations.between(module_from, module_to)
        if not relations:
            return []

        targets = self._modules.get(module_to, [])
        seen: set[int] = set()
        matched: list[Item] = []
        for relation in relations:
            if relation.key_from not in source:
                continue
            value = source[relation.key_from]
            for target in targets:
                if id(target) in seen or relation.key_to not in target:
                    continue
                if target[relation.key_to] == value:
                    seen.add(id(target))
                    matched.append(target)

        result = clone_items(matched)
        if filter is not None:
            result = [item for item in result if filter(item)]
        if limit is not None and limit > 0:
            result = result[:limit]
        return result

    @_synchronized
    def compute(self, module: str, id_or_code: Any, name: str) -> Any:
        """Evaluate a computed field on a copy of the item.

        Returns None both for a missing item and an unknown field name.
        """
        live = self._find(module, id_or_code)
        if live is None:
            return None
        fn = self._computed.get(module, name)
        if fn is None:
            return None
        return fn(clone_item(live))

    @_synchronized
    def search(self, module: str, q: Any, fields: Iterable[str] | None = None) -> list[Item]:
        """Case-insensitive substring search over *fields*.

        Matches accumulate per field: an item matching two fields appears
        twice. Without *fields*, every field name present in the module is
        searched in first-seen order.
        """
        items = self._modules.get(module, [])
        if fields is None:
            fields = list(dict.fromkeys(key for item in items for key in item))
        return clone_items(self._query.search(items, q, fields))

    @_synchronized
    def query(self, module: str, filters: Any) -> list[Item]:
        """Return copies of the items matching a filter tree."""
        items = list(self._modules.get(module, []))
        return clone_items(self._query.filter(module, items, filters))

    @_synchronized
    def stats(self, module: str, op: StatOp = "count", field: str | None = None) -> Any:
        """Aggregate ``count``, ``sum``, ``avg``, or a custom reducer over copies."""
        items = self._modules.get(module, [])
        if callable(op):
            return op(clone_items(items))
        if op == "count":
            return len(items)
        if op == "sum":
            return sum(_stat_number(item.get(field)) for item in items) if field else 0.0
        if op == "avg":
            if not items or not field:
                return 0
            return sum(_stat_number(item.get(field)) for item in items) / len(items)
        return None

    @_synchronized
    def sample(self, module: str, n: int = 1) -> list[Item]:
        """Up to *n* distinct items chosen at random."""
        items = self._modules.get(module, [])
        if not items or n <= 0:
            return []
        return clone_items(random.sample(items, min(n, len(items))))

    @_synchronized
    def code_sequence(self, module: str) -> int:
        """Last code sequence number handed out for *module*."""
        return self._codes.current(module)

    @_synchronized
    def restore_code_sequence(self, module: str, sequence: int) -> None:
        """Fast-forward the code counter of *module* (used when loading snapshots)."""
        self._codes.advance(module, sequence)

    @_synchronized
    def history(self) -> list[HistoryEntry]:
        """Copies of the recorded history entries, oldest first."""
        return self._history.entries()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @_synchronized
    def add(self, module: str, item: Mapping[str, Any] | None = None) -> Item | None:
        """Create an item from the module template plus *item*.

        Assigns ``id`` and ``code`` when absent and normalizes ``tags``.
        Returns a copy of the stored item, or None if a ``before:add``
        hook vetoed it.

        Raises:
            PreconditionError: If *module* is empty.
            DuplicateItemError: If an explicit ``id`` is already live.
        """
        if not module:
            msg = "module name required"
            raise PreconditionError(msg)
        items = self._modules.setdefault(module, [])

        candidate = merge_item(self._templates.get(module), item or {})
        if candidate.get("id") is None:
            candidate["id"] = generate_item_id()
        elif any(existing.get("id") == candidate["id"] for existing in items):
            raise DuplicateItemError(module, candidate["id"])
        if not candidate.get("code"):
            taken = {existing.get("code") for existing in items}
            candidate["code"] = self._codes.next_code(module, taken)
        candidate["tags"] = normalize_tags(candidate.get("tags"))

        if self._vetoed(module, HookEvent.BEFORE_ADD, clone_item(candidate)):
            return None

        items.append(candidate)
        self._history.push(AddEntry(module=module, id=candidate["id"]))
        logger.debug("Added %s/%s (%s)", module, candidate["id"], candidate["code"])
        self._hooks.emit(module, HookEvent.AFTER_ADD, clone_item(candidate))
        self._dispatch_event(
            "post_add",
            {
                "module": module,
                "item_id": candidate["id"],
                "code": candidate["code"],
                "tags": list(candidate["tags"]),
            },
        )
        return clone_item(candidate)

    @_synchronized
    def update(
        self,
        module: str,
        id_or_code: Any,
        patch: Mapping[str, Any] | None = None,
    ) -> Item | None:
        """Shallow-merge *patch* into an item.

        Returns a copy of the updated item, or None when the item is
        missing or a ``before:update`` hook vetoed the change.

        Raises:
            DuplicateItemError: If *patch* gives the item the ``id`` or
                ``code`` of another live item.
        """
        live = self._find(module, id_or_code)
        if live is None:
            return None
        patch = patch or {}
        before = self._apply_patch(module, live, patch)
        if before is None:
            return None
        self._history.push(
            UpdateEntry(module=module, id=live.get("id"), before=before, after=clone_item(live))
        )
        self._announce_update(module, live, patch)
        return clone_item(live)

    @_synchronized
    def remove(self, module: str, id_or_code: Any) -> bool:
        """Remove one item. False when missing or vetoed."""
        if module not in self._modules:
            return False
        live = self._find(module, id_or_code)
        if live is None:
            return False
        if not self._splice(module, live):
            return False
        self._history.push(RemoveEntry(module=module, removed=clone_item(live)))
        self._announce_remove(module, live)
        return True

    @_synchronized
    def bulk_update(
        self,
        module: str,
        predicate: Predicate,
        patch: Mapping[str, Any] | None = None,
    ) -> int:
        """Patch every matching item, skipping vetoed ones.

        Records one aggregate history entry covering the items actually
        changed. Returns how many were changed.
        Raises DuplicateItemError, keeping the changes made so far, when
        *patch* would give an item another live item's ``id`` or ``code``.
        """
        self._require_predicate(predicate)
        patch = patch or {}
        changes: list[Change] = []
        try:
            for live in list(self._modules.get(module, [])):
                if not predicate.matches(clone_item(live)):
                    continue
                before = self._apply_patch(module, live, patch)
                if before is None:
                    continue
                changes.append(Change(before=before, after=clone_item(live)))
                self._announce_update(module, live, patch)
        finally:
            if changes:
                self._history.push(BulkUpdateEntry(module=module, changes=tuple(changes)))
        return len(changes)

    @_synchronized
    def bulk_remove(self, module: str, predicate: Predicate) -> int:
        """Remove every matching item, skipping vetoed ones.

        The history entry keeps the whole pre-removal list so undo can
        restore it in one step. Returns how many were removed.
        """
        self._require_predicate(predicate)
        items = self._modules.get(module)
        if items is None:
            return 0
        snapshot = clone_items(items)
        removed = 0
        try:
            for live in list(items):
                if not predicate.matches(clone_item(live)):
                    continue
                if not self._splice(module, live):
                    continue
                removed += 1
                self._announce_remove(module, live)
        finally:
            if removed:
                self._history.push(BulkRemoveEntry(module=module, before=tuple(snapshot)))
        return removed

    @_synchronized
    def add_tag(self, module: str, id_or_code: Any, tag: str) -> Item | None:
        """Append *tag* (deduplicated) through :meth:`update`."""
        live = self._find(module, id_or_code)
        if live is None:
            return None
        return self.update(module, id_or_code, {"tags": with_tag(live.get("tags"), tag)})

    @_synchronized
    def remove_tag(self, module: str, id_or_code: Any, tag: str) -> Item | None:
        """Drop *tag* through :meth:`update`."""
        live = self._find(module, id_or_code)
        if live is None:
            return None
        return self.update(module, id_or_code, {"tags": without_tag(live.get("tags"), tag)})

    @_synchronized
    def seed(
        self,
        module: str,
        n: int = 1,
        factory: Mapping[str, Any] | Callable[[int], Mapping[str, Any]] | None = None,
    ) -> list[Item]:
        """Add *n* items built from a mapping or ``factory(i)``; vetoed ones are skipped."""
        created: list[Item] = []
        for i in range(n):
            if callable(factory):
                fields = factory(i)
            else:
                fields = dict(factory or {})
            added = self.add(module, fields)
            if added is not None:
                created.append(added)
        return created

    @_synchronized
    def clear(self, module: str | None = None) -> None:
        """Empty one module, or every module when *module* is None.

        Either form also empties the whole history stack, not just the
        entries of the cleared module.
        """
        if module:
            self._modules[module] = []
        else:
            self._modules.clear()
        self._history.clear()
        logger.debug("Cleared %s and history", module or "all modules")
        self._dispatch_event("post_clear", {"module": module})

    @_synchronized
    def drop_module(self, module: str) -> int:
        """Clear *module* and forget it entirely. Returns how many items it held."""
        count = len(self._modules.get(module, ()))
        self.clear(module)
        del self._modules[module]
        return count

    @_synchronized
    def undo(self) -> bool:
        """Reverse the most recent committed mutation.

        Undoing an ``add`` goes through :meth:`remove` (hooks included) and
        so pushes a new ``remove`` entry. Returns False on an empty history.
        """
        entry = self._history.pop()
        if entry is None:
            return False
        handler = self._undo_handlers.get(getattr(entry, "kind", None))
        if handler is None:
            logger.debug("Unrecognized history entry: %r", entry)
            return False
        handler(entry)
        logger.debug("Undid %s on %s", entry.kind, entry.module)
        self._dispatch_event("post_undo", {"kind": str(entry.kind), "module": entry.module})
        return True

    # ------------------------------------------------------------------
    # Undo handlers
    # ------------------------------------------------------------------

    def _undo_add(self, entry: AddEntry) -> None:
        self.remove(entry.module, entry.id)

    def _undo_remove(self, entry: RemoveEntry) -> None:
        self._modules.setdefault(entry.module, []).append(clone_item(entry.removed))

    def _undo_update(self, entry: UpdateEntry) -> None:
        self._restore(entry.module, entry.id, entry.before)

    def _undo_bulk_update(self, entry: BulkUpdateEntry) -> None:
        for change in entry.changes:
            self._restore(entry.module, change.after.get("id"), change.before)

    def _undo_bulk_remove(self, entry: BulkRemoveEntry) -> None:
        self._modules[entry.module] = clone_items(entry.before)

    def _restore(self, module: str, item_id: Any, before: Mapping[str, Any]) -> None:
        """Reset a live item to its pre-image, dropping fields added since."""
        for live in self._modules.get(module, []):
            if live.get("id") == item_id:
                live.clear()
                live.update(clone_item(before))
                return

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def attach_event_bus(self, bus: EventBus | None) -> None:
        """Forward committed mutations to a plugin event bus."""
        self.event_bus = bus

    def _find(self, module: str, id_or_code: Any) -> Item | None:
        for item in self._modules.get(module, ()):
            if matches_key(item, id_or_code):
                return item
        return None

    def _vetoed(self, module: str, event: HookEvent, payload: Any) -> bool:
        return self._hooks.emit_cancelable(module, event, payload) is HookDecision.CANCEL

    def _apply_patch(self, module: str, live: Item, patch: Mapping[str, Any]) -> Item | None:
        """Run ``before:update`` and apply *patch* in place.

        Returns the pre-image, or None if a hook vetoed the change.
        """
        self._reject_key_collision(module, live, patch)
        before = clone_item(live)
        proposed = merge_item(live, patch)
        payload = {"before": clone_item(before), "after": proposed}
        if self._vetoed(module, HookEvent.BEFORE_UPDATE, payload):
            return None
        live.update(copy.deepcopy(dict(patch)))
        return before

    def _reject_key_collision(self, module: str, live: Item, patch: Mapping[str, Any]) -> None:
        """Raise DuplicateItemError if *patch* moves ``id`` or ``code`` onto another live item."""
        for key in ("id", "code"):
            if key not in patch or patch[key] == live.get(key):
                continue
            for other in self._modules.get(module, ()):
                if other is not live and other.get(key) == patch[key]:
                    raise DuplicateItemError(module, patch[key])

    def _announce_update(self, module: str, live: Item, patch: Mapping[str, Any]) -> None:
        self._hooks.emit(module, HookEvent.AFTER_UPDATE, clone_item(live))
        self._dispatch_event(
            "post_update",
            {"module": module, "item_id": live.get("id"), "fields_changed": sorted(patch)},
        )

    def _splice(self, module: str, live: Item) -> bool:
        """Run ``before:remove`` and take *live* out of its list. False if vetoed."""
        if self._vetoed(module, HookEvent.BEFORE_REMOVE, clone_item(live)):
            return False
        items = self._modules.get(module, [])
        for index, candidate in enumerate(items):
            if candidate is live:
                del items[index]
                return True
        return False

    def _announce_remove(self, module: str, live: Item) -> None:
        logger.debug("Removed %s/%s", module, live.get("id"))
        self._hooks.emit(module, HookEvent.AFTER_REMOVE, clone_item(live))
        self._dispatch_event("post_remove", {"module": module, "item_id": live.get("id")})

    @staticmethod
    def _require_predicate(predicate: Any) -> None:
        if not isinstance(predicate, (KeyPredicate, FunctionPredicate)):
            msg = f"Expected KeyPredicate or FunctionPredicate, got {type(predicate).__name__}"
            raise TypeError(msg)

    def _dispatch_event(self, hook_name: str, payload: dict[str, Any]) -> None:
        """Forward a lifecycle event to the plugin bus, if one is attached.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        bus = self.event_bus
        if bus is None:
            return
        bus.dispatch(hook_name, payload)
