"""Validate and save hooks.

A hook action is either the name of a node method (resolved through node
dispatch, so traits may call methods of their host) or a function taking
the node.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from flat_mapper.core.enums import HookEvent

if TYPE_CHECKING:
    from flat_mapper.node.base import Node

logger = logging.getLogger(__name__)

HookAction = str | Callable[["Node"], Any]


@dataclass(frozen=True)
class Hook:
    """A declared hook."""

    event: HookEvent
    action: HookAction

    def run(self, node: Node) -> Any:
        if isinstance(self.action, str):
            return getattr(node, self.action)()
        return self.action(node)


def run_hooks(hooks: Iterable[Hook], event: HookEvent, node: Node) -> None:
    """Run every hook registered for *event*, in declaration order."""
    for hook in hooks:
        if hook.event is event:
            logger.debug("Running %s hook %r on %r", event.value, hook.action, node)
            hook.run(node)


def run_with_hooks(
    hooks: Iterable[Hook],
    before: HookEvent,
    after: HookEvent,
    node: Node,
    body: Callable[[], bool],
) -> bool:
    """Run *body* between the *before* and *after* hooks and return its result."""
    hooks = tuple(hooks)
    run_hooks(hooks, before, node)
    result = body()
    run_hooks(hooks, after, node)
    return result
