"""Create-or-update convergence of named objects.

``reconcile`` drives one object toward the output of a desired-state
function. The function receives the current object (or None when absent)
and returns the object as it should be; it must not mutate its argument and
applying it to its own output must change nothing.

Concurrent writers are resolved by the store's optimistic concurrency: a
conflicting write restarts the fetch, compute and write cycle.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from kubenode_mcp.utils.errors import ConflictError, DeadlineExceededError, NotFoundError

logger = logging.getLogger(__name__)

DesiredStateFn = Callable[[dict[str, Any] | None], dict[str, Any]]

DEFAULT_MAX_RETRIES = 5
DEFAULT_BACKOFF = 0.01


class ObjectStore(Protocol):
    """Named objects in one scope, with optimistic concurrency on update."""

    kind: str

    def get(self, name: str) -> dict[str, Any]:
        """Return the object, raising NotFoundError when absent."""
        ...

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Create the object, raising ConflictError when it already exists."""
        ...

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace the object, raising ConflictError when it changed since read."""
        ...


class ReconcileAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass
class ReconcileResult:
    """Outcome of one reconcile call."""

    kind: str
    name: str
    action: ReconcileAction
    attempts: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "name": self.name,
            "action": self.action.value,
            "attempts": self.attempts,
        }


def _attempt(name: str, desired_fn: DesiredStateFn, store: ObjectStore) -> ReconcileAction:
    try:
        existing = store.get(name)
    except NotFoundError:
        store.create(desired_fn(None))
        return ReconcileAction.CREATED

    desired = desired_fn(existing)
    if desired == existing:
        return ReconcileAction.UNCHANGED

    store.update(desired)
    return ReconcileAction.UPDATED


def reconcile(
    name: str,
    desired_fn: DesiredStateFn,
    store: ObjectStore,
    *,
    max_retries: int = DEFAULT_MAX_RETRIES,
    backoff: float = DEFAULT_BACKOFF,
    timeout: float | None = None,
) -> ReconcileResult:
    """Make the object ``name`` in ``store`` equal ``desired_fn`` of its current value.

    Args:
        name: Object name.
        desired_fn: Pure function from the current object (None when absent)
            to the desired object.
        store: Backing object store.
        max_retries: Retries after a conflicting write before giving up.
        backoff: Base delay in seconds between retries, with up to 10% jitter.
        timeout: Seconds after which no further attempt is started.

    Returns:
        What was done and how many attempts it took.

    Raises:
        ConflictError: If every attempt hit a conflict. The error is retryable.
        DeadlineExceededError: If the timeout elapsed before an attempt.
    """
    deadline = time.monotonic() + timeout if timeout is not None else None
    attempts = 0

    while True:
        if deadline is not None and time.monotonic() >= deadline:
            raise DeadlineExceededError(
                f"Deadline exceeded reconciling {store.kind} '{name}'",
                {"kind": store.kind, "name": name, "attempts": attempts},
            )

        attempts += 1
        try:
            action = _attempt(name, desired_fn, store)
        except ConflictError as e:
            if attempts > max_retries:
                raise ConflictError(
                    f"Gave up reconciling {store.kind} '{name}' after {attempts} attempts: "
                    f"{e.message}",
                    {"kind": store.kind, "name": name, "attempts": attempts},
                ) from e
            logger.debug(f"Conflict reconciling {store.kind} {name}, retrying (attempt {attempts})")
            if backoff > 0:
                time.sleep(backoff * (1 + random.uniform(0, 0.1)))
            continue

        if action != ReconcileAction.UNCHANGED:
            logger.info(f"Reconciled {store.kind} {name}: {action.value}")
        return ReconcileResult(kind=store.kind, name=name, action=action, attempts=attempts)


def reconcile_all(
    creators: Iterable[tuple[str, DesiredStateFn]],
    store: ObjectStore,
    **kwargs: Any,
) -> list[ReconcileResult]:
    """Reconcile each ``(name, desired_fn)`` pair in order, stopping at the first error."""
    return [reconcile(name, desired_fn, store, **kwargs) for name, desired_fn in creators]
