"""
Synchronous observer channel for locus graph structure changes.
"""

from collections.abc import Callable
from typing import NamedTuple


class NodeMoveMessage(NamedTuple):
    """A node was added (``is_add``) or deleted at ``(locus_index, node_index)``."""

    is_add: bool
    locus_index: int
    node_index: int


NodeObserver = Callable[[NodeMoveMessage], None]


class Notifier:
    """
    Delivers messages to registered observers on the calling thread.

    Observers are called in registration order. A callback that raises
    propagates out of the mutation that triggered it.
    """

    def __init__(self) -> None:
        self._observers: list[NodeObserver] = []

    def register_observer(self, observer: NodeObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unregister_observer(self, observer: NodeObserver) -> None:
        self._observers.remove(observer)

    def notify_observers(self, message: NodeMoveMessage) -> None:
        for observer in list(self._observers):
            observer(message)
