"""
Explicit work-stack executor.

Tree walks are expressed as queues of (handler, arg1, arg2) work items.
A handler descends by pushing a new queue; that queue is drained before
the rest of the current one, which gives depth-first pre-order without
using the Python call stack.
"""

from typing import Any, Callable, List, Tuple

Handler = Callable[[Any, Any], None]
WorkItem = Tuple[Handler, Any, Any]


class WorkStack:
    """A stack of work queues, one per traversal depth."""

    def __init__(self):
        self._queues: List[List[WorkItem]] = []
        self._positions: List[int] = []
        self.executed = 0
        self.max_depth = 0

    @property
    def depth(self) -> int:
        return len(self._queues)

    def pending(self) -> int:
        """Number of queued work items not yet executed."""
        return sum(len(queue) - position for queue, position in zip(self._queues, self._positions))

    def push(self, queue: List[WorkItem]) -> None:
        if not queue:
            return
        self._queues.append(queue)
        self._positions.append(0)
        if len(self._queues) > self.max_depth:
            self.max_depth = len(self._queues)

    def run(self, handler: Handler, arg1: Any, arg2: Any = None) -> None:
        """Execute handler(arg1, arg2) and all the work it pushes."""
        if self._queues:
            raise RuntimeError("WorkStack is already running")

        self.push([(handler, arg1, arg2)])
        queues = self._queues
        positions = self._positions
        try:
            while queues:
                queue = queues[-1]
                position = positions[-1]
                if position >= len(queue):
                    queues.pop()
                    positions.pop()
                    continue
                handler, arg1, arg2 = queue[position]
                positions[-1] = position + 1
                self.executed += 1
                handler(arg1, arg2)
        finally:
            queues.clear()
            positions.clear()
