"""Fragment merger for rebuilding closed contours.

This module provides the FragmentMerger class which splices open fragments
at matching endpoints until no further progress is possible. It is a greedy,
single-threaded merge driven by a work queue of unconsumed endpoints: for a
tile decomposition of one label map every true border crossing produces
exactly one matching endpoint, so greedy matching is correct there.
"""

from collections import deque
from dataclasses import dataclass, field

import structlog

from contourjoin.core.endpoints import Endpoint, EndpointIndex
from contourjoin.core.store import PackedContourStore
from contourjoin.domain import DefectReason, EndSelector

logger = structlog.get_logger(__name__)


@dataclass
class MergeOutcome:
    """Result of running the merger to its fixed point.

    Attributes:
        completed: Contours closed by the merger, in order of completion
        unresolved: Endpoints left unconsumed, with the reason they stayed open
        splices: Number of two-fragment splices
        closures: Number of fragments closed onto themselves
    """

    completed: list[int] = field(default_factory=list)
    unresolved: list[tuple[Endpoint, DefectReason]] = field(default_factory=list)
    splices: int = 0
    closures: int = 0


class FragmentMerger:
    """Matches and splices open fragments into closed loops.

    The store is mutated in place. Endpoints are processed in ascending
    contour id, head before tail; after each splice the two ends of the
    surviving fragment are queued again so it can keep growing. A fragment
    closes onto itself only when its head and tail are each other's best
    match, so under a positive tolerance a nearer or equally near end of
    another fragment is spliced first.
    """

    def __init__(self, store: PackedContourStore, index: EndpointIndex) -> None:
        self._store = store
        self._index = index
        self._ends: dict[int, dict[EndSelector, Endpoint]] = {}
        for endpoint in index:
            self._ends.setdefault(endpoint.contour_id, {})[endpoint.end] = endpoint

    def run(self) -> MergeOutcome:
        """Merge until the work queue is exhausted.

        Returns:
            MergeOutcome with completed contours and unresolved endpoints
        """
        outcome = MergeOutcome()
        queue = deque(self._index.unconsumed())

        while queue:
            endpoint = queue.popleft()
            if endpoint.consumed:
                continue

            match = self._index.best(endpoint, include_own=True)
            if match is None:
                continue

            if match.contour_id == endpoint.contour_id:
                # own other end is nearest; close only if that end agrees
                back = self._index.best(match, include_own=True)
                assert back is not None
                if back is endpoint:
                    self._close(endpoint.contour_id, outcome)
                    continue
                endpoint, match = match, back

            survivor = self._splice(endpoint, match)
            outcome.splices += 1

            head = self._ends[survivor][EndSelector.HEAD]
            tail = self._ends[survivor][EndSelector.TAIL]
            if self._closes(head, tail):
                self._close(survivor, outcome)
            else:
                queue.append(head)
                queue.append(tail)

        for endpoint in self._index.unconsumed():
            reason = (
                DefectReason.LABEL_MISMATCH
                if self._index.nearby_other_labels(endpoint)
                else DefectReason.UNRESOLVED_ENDPOINT
            )
            outcome.unresolved.append((endpoint, reason))

        logger.debug(
            "Merge reached fixed point",
            splices=outcome.splices,
            closures=outcome.closures,
            unresolved=len(outcome.unresolved),
        )
        return outcome

    def _splice(self, endpoint: Endpoint, match: Endpoint) -> int:
        a, end_a = endpoint.contour_id, endpoint.end
        b, end_b = match.contour_id, match.end

        # the far end of b becomes the new end of a on the joined side
        carried = self._ends[b][end_b.other()]
        survivor = self._store.splice(a, end_a, b, end_b)

        self._index.consume(endpoint)
        self._index.consume(match)
        del self._ends[b]

        carried.contour_id = survivor
        carried.end = end_a
        self._ends[survivor][end_a] = carried

        logger.debug(
            "Spliced fragments",
            survivor=survivor,
            absorbed=b,
            at=endpoint.point.to_tuple(),
            label=endpoint.label,
        )
        return survivor

    def _closes(self, head: Endpoint, tail: Endpoint) -> bool:
        """Check that a fragment's two ends are each other's best match."""
        return (
            self._index.best(head, include_own=True) is tail
            and self._index.best(tail, include_own=True) is head
        )

    def _close(self, contour_id: int, outcome: MergeOutcome) -> None:
        dx, dy, _ = self._index.tolerance
        self._store.close(contour_id, (dx, dy))
        for endpoint in self._ends.pop(contour_id).values():
            self._index.consume(endpoint)
        outcome.closures += 1
        outcome.completed.append(contour_id)
