"""
Mutation notification for BeautifulSoup trees.

A live browser document reports its own changes. A parsed soup does not,
so ``SoupNotifier`` plays the host's role: it performs structural edits on
behalf of the caller and reports them as mutation records to every
registration observing the affected subtree.
"""

import itertools
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, Protocol

import structlog
from bs4 import NavigableString, Tag

from ..errors import HostFacilityError
from .tree import is_attached, is_element

logger = structlog.get_logger(__name__)


class MutationKind(str, Enum):
    """Kinds of change the scanner reacts to."""
    ELEMENT_ADDED = "childList"
    TEXT_CHANGED = "characterData"


@dataclass(frozen=True)
class MutationRecord:
    """
    One observed change.

    For ELEMENT_ADDED the target is the parent that received
    ``added_nodes``; for TEXT_CHANGED the target is the text node itself.
    """
    kind: MutationKind
    target: Any
    added_nodes: tuple = ()


@dataclass(frozen=True)
class ObserveOptions:
    """What a registration wants to hear about."""
    child_list: bool = True
    character_data: bool = True
    subtree: bool = True


MutationCallback = Callable[[list[MutationRecord]], None]


class MutationNotifier(Protocol):
    def register(self, target: Any, options: ObserveOptions, callback: MutationCallback) -> Any: ...

    def unregister(self, handle: Any) -> None: ...


@dataclass(frozen=True)
class _Registration:
    handle: int
    target: Any
    options: ObserveOptions
    callback: MutationCallback


class SoupNotifier:
    """Synthetic mutation notification host for BeautifulSoup trees."""

    def __init__(self):
        self._registrations: dict[int, _Registration] = {}
        self._handles = itertools.count(1)
        self._batch_depth = 0
        self._buffer: list[MutationRecord] = []

    def register(self, target: Any, options: ObserveOptions, callback: MutationCallback) -> int:
        if not is_element(target):
            raise HostFacilityError(
                "Observation target must be an element",
                facility="mutation_notifier",
                operation="register",
                context={"target_type": type(target).__name__},
            )

        handle = next(self._handles)
        self._registrations[handle] = _Registration(handle, target, options, callback)
        logger.debug("Observer registered", handle=handle, target=target.name)
        return handle

    def unregister(self, handle: Any) -> None:
        if self._registrations.pop(handle, None) is None:
            raise HostFacilityError(
                "Unknown observer handle",
                facility="mutation_notifier",
                operation="unregister",
                context={"handle": handle},
            )
        logger.debug("Observer unregistered", handle=handle)

    @property
    def observer_count(self) -> int:
        return len(self._registrations)

    @contextmanager
    def batch(self) -> Iterator['SoupNotifier']:
        """Coalesce every record emitted inside the block into one delivery."""
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._buffer:
                records, self._buffer = self._buffer, []
                self._dispatch(records)

    def emit(self, record: MutationRecord) -> None:
        if self._batch_depth:
            self._buffer.append(record)
        else:
            self._dispatch([record])

    def _observes(self, registration: _Registration, record: MutationRecord) -> bool:
        options = registration.options
        if record.kind == MutationKind.ELEMENT_ADDED and not options.child_list:
            return False
        if record.kind == MutationKind.TEXT_CHANGED and not options.character_data:
            return False
        if record.target is registration.target:
            return True
        return options.subtree and is_attached(record.target, registration.target)

    def _dispatch(self, records: list[MutationRecord]) -> None:
        for registration in list(self._registrations.values()):
            # a callback may have unregistered a later observer
            if registration.handle not in self._registrations:
                continue
            relevant = [r for r in records if self._observes(registration, r)]
            if relevant:
                registration.callback(relevant)

    # Mutation helpers

    def append(self, parent: Tag, *nodes: Any) -> None:
        """Append nodes to ``parent`` and report them as added."""
        for node in nodes:
            parent.append(node)
        self.emit(MutationRecord(MutationKind.ELEMENT_ADDED, parent, tuple(nodes)))

    def insert_before(self, reference: Any, *nodes: Any) -> None:
        """Insert nodes ahead of ``reference`` and report them as added."""
        parent = reference.parent
        if parent is None:
            raise ValueError("Reference node is not attached to a tree")
        reference.insert_before(*nodes)
        self.emit(MutationRecord(MutationKind.ELEMENT_ADDED, parent, tuple(nodes)))

    def replace_with(self, old: Any, *nodes: Any) -> None:
        """Swap ``old`` for ``nodes`` and report the new nodes as added."""
        parent = old.parent
        if parent is None:
            raise ValueError("Replaced node is not attached to a tree")
        old.replace_with(*nodes)
        self.emit(MutationRecord(MutationKind.ELEMENT_ADDED, parent, tuple(nodes)))

    def replace_text(self, text_node: NavigableString, new_text: str) -> NavigableString:
        """
        Change the content of a text node.

        Soup strings are immutable, so the node is swapped for a new one;
        the record targets the node now in the tree, which is returned.
        """
        if text_node.parent is None:
            raise ValueError("Text node is not attached to a tree")
        new_node = NavigableString(new_text)
        text_node.replace_with(new_node)
        self.emit(MutationRecord(MutationKind.TEXT_CHANGED, new_node))
        return new_node
