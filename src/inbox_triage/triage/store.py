"""Optimistic local view of inbox triage state.

The store owns the rendered item list between refreshes. Triage actions hide
items immediately and dispatch their bridge call as a background task; the
task's completion either confirms the hide or rolls it back.

Notes:
    All state changes happen synchronously on the event loop thread, inside
    a public method or a task's completion step, so no locking is needed.
    Mutating methods must be called while an asyncio loop is running.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Callable, Iterable
from typing import Any, Protocol

import structlog

from inbox_triage.config import Settings
from inbox_triage.models import (
    Item,
    MutationKind,
    MutationNotice,
    PendingMutation,
    SimilarityPrompt,
)
from inbox_triage.parsing.addresses import extract_domain

from .similar import find_similar

logger = structlog.get_logger()

MAX_NOTICES = 50


class TriageBackend(Protocol):
    """Remote operations the store depends on."""

    async def fetch_items(self, account: str) -> list[Item]: ...

    async def mutate_item(
        self,
        item_id: str,
        account: str,
        action: str,
        metadata: dict[str, Any] | None = None,
    ) -> bool: ...

    async def create_deal(self, item: Item, account: str, deal_type: str) -> bool: ...


class OptimisticMutationStore:
    """Authoritative local triage state for one account.

    Presentation code reads state through the properties and changes it
    only through the action methods (apply_single, apply_bulk, refresh and
    the selection/prompt helpers built on them).
    """

    def __init__(
        self,
        backend: TriageBackend,
        account: str,
        *,
        items: Iterable[Item] | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            backend: Remote collaborator (usually a BridgeClient).
            account: Active account the mutations are issued for.
            items: Initial item list. Normally populated by refresh().
            settings: Application settings. If None, uses default settings.
        """
        from inbox_triage.config import get_settings

        self.settings = settings or get_settings()
        self.account = account
        self._backend = backend

        self._items: list[Item] = list(items or [])
        self._ignored: set[str] = set()
        self._pending: dict[str, list[PendingMutation]] = {}
        self._confirmed: set[str] = set()
        self._generation = 0
        self._next_mutation_id = 1
        self._tasks: set[asyncio.Task[None]] = set()

        self._prompt: SimilarityPrompt | None = None
        self._selected: set[str] = set()
        self._open_item_id: str | None = None
        self._notices: deque[MutationNotice] = deque(maxlen=MAX_NOTICES)
        self._listeners: list[Callable[[], None]] = []

        self.error: str | None = None
        self.loading = False

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def visible_items(self) -> list[Item]:
        return [i for i in self._items if i.id not in self._ignored]

    @property
    def unread_count(self) -> int:
        return sum(1 for i in self.visible_items if not i.read)

    @property
    def ignored_ids(self) -> frozenset[str]:
        return frozenset(self._ignored)

    @property
    def pending(self) -> list[PendingMutation]:
        """Mutations whose remote call has not resolved yet, oldest first."""
        pending = [m for chain in self._pending.values() for m in chain]
        return sorted(pending, key=lambda m: m.mutation_id)

    @property
    def similarity_prompt(self) -> SimilarityPrompt | None:
        return self._prompt

    @property
    def selected_ids(self) -> frozenset[str]:
        return frozenset(self._selected)

    @property
    def open_item_id(self) -> str | None:
        return self._open_item_id

    def drain_notices(self) -> list[MutationNotice]:
        """Return and clear the rollback notices collected so far."""
        notices = list(self._notices)
        self._notices.clear()
        return notices

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a change listener. Returns a function that unregisters it."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def apply_single(self, item_id: str, kind: MutationKind | str) -> PendingMutation:
        """Hide one item now and dispatch its remote mutation.

        Archive and ignore also look for other visible items from the same
        sender domain and, if there are any, replace the similarity prompt.

        Returns:
            The pending record for the dispatched call.
        """
        kind = MutationKind(kind)
        loop = asyncio.get_running_loop()
        (mutation,) = self._hide([item_id], kind)

        if kind.offers_similar:
            self._offer_similar(item_id)

        self._dispatch(loop, mutation)
        self._notify()
        return mutation

    def apply_bulk(self, item_ids: Iterable[str], kind: MutationKind | str) -> list[PendingMutation]:
        """Hide several items in one step and dispatch one call per item.

        Calls run concurrently and settle independently; a failure rolls
        back only its own item.
        """
        kind = MutationKind(kind)
        ids = list(dict.fromkeys(item_ids))
        if not ids:
            return []

        loop = asyncio.get_running_loop()
        mutations = self._hide(ids, kind)
        for mutation in mutations:
            self._dispatch(loop, mutation)

        logger.info("bulk_mutation_applied", kind=kind.value, count=len(ids))
        self._notify()
        return mutations

    def accept_similar(self) -> list[PendingMutation]:
        """Archive every candidate of the open similarity prompt."""
        prompt = self._prompt
        if prompt is None:
            return []
        self._prompt = None
        ids = [c.id for c in prompt.candidates if c.id not in self._ignored]
        logger.info("similar_items_accepted", domain=prompt.domain, count=len(ids))
        mutations = self.apply_bulk(ids, MutationKind.ARCHIVE)
        if not mutations:
            self._notify()
        return mutations

    def dismiss_similar(self) -> None:
        if self._prompt is not None:
            self._prompt = None
            self._notify()

    def apply_to_domain(self, domain: str, kind: MutationKind | str) -> list[PendingMutation]:
        """Apply ``kind`` to every visible item whose sender is at ``domain``."""
        wanted = domain.strip().lstrip("@").lower()
        ids = [i.id for i in self.visible_items if extract_domain(i.sender) == wanted]
        return self.apply_bulk(ids, kind)

    # ------------------------------------------------------------------
    # Selection mode and detail view
    # ------------------------------------------------------------------

    def toggle_select(self, item_id: str) -> None:
        if item_id in self._selected:
            self._selected.discard(item_id)
        else:
            self._selected.add(item_id)
        self._notify()

    def select_all(self) -> None:
        """Select every visible item, or clear the selection if all already are."""
        visible = {i.id for i in self.visible_items}
        if visible and visible <= self._selected:
            self._selected.clear()
        else:
            self._selected = visible
        self._notify()

    def clear_selection(self) -> None:
        self._selected.clear()
        self._notify()

    def apply_selection(self, kind: MutationKind | str) -> list[PendingMutation]:
        ids = [i.id for i in self._items if i.id in self._selected]
        self._selected.clear()
        mutations = self.apply_bulk(ids, kind)
        if not mutations:
            self._notify()
        return mutations

    def open_detail(self, item_id: str) -> None:
        self._open_item_id = item_id
        self._notify()

    def close_detail(self) -> None:
        self._open_item_id = None
        self._notify()

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(self) -> bool:
        """Replace the item list with a fresh fetch and drop optimistic state.

        In-flight calls are not cancelled; their completions become no-ops.
        On failure the current view is kept and ``error`` is set.

        Returns:
            True if the fetch succeeded.
        """
        self.loading = True
        self.error = None
        self._notify()

        try:
            items = await self._backend.fetch_items(self.account)
        except Exception as exc:  # noqa: BLE001
            logger.exception("refresh_failed", account=self.account, error=str(exc))
            self.error = str(exc) or exc.__class__.__name__
            self.loading = False
            self._notify()
            return False

        dropped = sum(len(chain) for chain in self._pending.values())
        self._generation += 1
        self._items = list(items)
        self._ignored.clear()
        self._pending.clear()
        self._confirmed.clear()
        self._prompt = None

        present = {i.id for i in self._items}
        self._selected &= present
        if self._open_item_id not in present:
            self._open_item_id = None

        self.loading = False
        logger.info(
            "store_refreshed",
            account=self.account,
            item_count=len(self._items),
            dropped_pending=dropped,
        )
        self._notify()
        return True

    async def settle(self) -> None:
        """Wait until every dispatched mutation has resolved."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _find(self, item_id: str) -> Item | None:
        return next((i for i in self._items if i.id == item_id), None)

    def _hide(self, ids: list[str], kind: MutationKind) -> list[PendingMutation]:
        mutations = []
        for item_id in ids:
            mutation = PendingMutation(
                mutation_id=self._next_mutation_id,
                item_id=item_id,
                kind=kind,
                prior_ignored_state=item_id in self._ignored,
                generation=self._generation,
            )
            self._next_mutation_id += 1
            self._pending.setdefault(item_id, []).append(mutation)
            self._ignored.add(item_id)
            self._selected.discard(item_id)
            mutations.append(mutation)

        if self._open_item_id in self._ignored:
            self._open_item_id = None
        self._prune_prompt()
        return mutations

    def _offer_similar(self, item_id: str) -> None:
        item = self._find(item_id)
        if item is None:
            return
        similar = find_similar(
            item,
            self._items,
            self._ignored,
            skip_domains=self.settings.similar_skip_domains,
        )
        if similar:
            domain = extract_domain(item.sender) or "this sender"
            self._prompt = SimilarityPrompt(domain=domain, candidates=similar)
            logger.info("similar_items_found", domain=domain, count=len(similar))

    def _prune_prompt(self) -> None:
        if self._prompt is None:
            return
        remaining = [c for c in self._prompt.candidates if c.id not in self._ignored]
        if not remaining:
            self._prompt = None
        elif len(remaining) != len(self._prompt.candidates):
            self._prompt = SimilarityPrompt(domain=self._prompt.domain, candidates=remaining)

    def _dispatch(self, loop: asyncio.AbstractEventLoop, mutation: PendingMutation) -> None:
        task = loop.create_task(self._run(mutation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug(
            "mutation_dispatched",
            item_id=mutation.item_id,
            kind=mutation.kind.value,
            mutation_id=mutation.mutation_id,
        )

    async def _send(self, mutation: PendingMutation) -> bool:
        item = self._find(mutation.item_id) or Item(id=mutation.item_id)
        action = mutation.kind.remote_action
        if action is not None:
            return await self._backend.mutate_item(
                mutation.item_id, self.account, action, item.metadata()
            )
        return await self._backend.create_deal(item, self.account, mutation.kind.value)

    async def _run(self, mutation: PendingMutation) -> None:
        try:
            ok = await self._send(mutation)
            error = None if ok else "bridge reported failure"
        except Exception as exc:  # noqa: BLE001
            ok = False
            error = str(exc) or exc.__class__.__name__

        if ok:
            self._confirm(mutation)
        else:
            self._rollback(mutation, error or "unknown error")

    def _release(self, mutation: PendingMutation) -> bool:
        """Drop ``mutation`` from its item's chain. False if it is stale."""
        if mutation.generation != self._generation:
            logger.debug(
                "stale_mutation_ignored",
                item_id=mutation.item_id,
                mutation_id=mutation.mutation_id,
            )
            return False

        chain = self._pending.get(mutation.item_id, [])
        if mutation in chain:
            chain.remove(mutation)
        if not chain:
            self._pending.pop(mutation.item_id, None)
        return True

    def _confirm(self, mutation: PendingMutation) -> None:
        if not self._release(mutation):
            return
        self._confirmed.add(mutation.item_id)
        logger.debug("mutation_confirmed", item_id=mutation.item_id, kind=mutation.kind.value)
        self._notify()

    def _rollback(self, mutation: PendingMutation, error: str) -> None:
        if not self._release(mutation):
            return

        item_id = mutation.item_id
        # Another unresolved or confirmed mutation still needs the item hidden.
        restored = item_id not in self._pending and item_id not in self._confirmed
        if restored:
            self._ignored.discard(item_id)

        self._notices.append(MutationNotice(item_id=item_id, kind=mutation.kind, error=error))
        logger.warning(
            "mutation_rolled_back",
            item_id=item_id,
            kind=mutation.kind.value,
            restored=restored,
            error=error,
        )
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()
