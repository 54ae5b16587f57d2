"""Application layer - Re-entrance detection for eligibility checks and resolution."""

import threading
from contextlib import contextmanager
from typing import Any, Iterator, List

from reflectinject.domain import CircularDependencyError


class CircularDependencyDetector:
    """Detects a type re-entering its own eligibility check or resolution.

    Uses thread-local storage to track the stack of types currently being
    processed. When a type appears twice in the stack, a cycle is detected.
    Threads working on the same registry never see each other's stacks.

    Attributes:
        _local: Thread-local storage for the stacks.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def _get_stack(self) -> List[Any]:
        if not hasattr(self._local, "stack"):
            self._local.stack = []
        return self._local.stack

    def push(self, dependency_type: Any) -> None:
        """Add a type to the current thread's stack.

        Args:
            dependency_type: The type being processed.

        Raises:
            CircularDependencyError: If the type is already in the stack.
        """
        stack = self._get_stack()

        if dependency_type in stack:
            cycle_start_index = stack.index(dependency_type)
            raise CircularDependencyError(stack[cycle_start_index:] + [dependency_type])

        stack.append(dependency_type)

    def pop(self) -> None:
        stack = self._get_stack()
        if stack:
            stack.pop()

    @contextmanager
    def track(self, dependency_type: Any) -> Iterator[None]:
        """Keep ``dependency_type`` on the stack for the duration of the block.

        Example:
            >>> detector = CircularDependencyDetector()
            >>> with detector.track(ServiceA):
            ...     with detector.track(ServiceA):  # Raises CircularDependencyError
            ...         pass
        """
        self.push(dependency_type)
        try:
            yield
        finally:
            self.pop()

