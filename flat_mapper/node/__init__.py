"""Nodes - mappers over target objects."""

from __future__ import annotations

from flat_mapper.node.base import EmptyNode, Node

__all__ = [
    "Node",
    "EmptyNode",
]
