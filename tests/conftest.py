"""
Root pytest configuration and shared fixtures.

Provides node/tree factories in the JSON wire shape and a well-formed
reference tree used across the unit tests.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest


def build_node(
    node_id: Optional[str],
    node_type: Optional[str] = "task",
    title: Optional[str] = None,
    *,
    priority: Optional[str] = "medium",
    description: Optional[str] = "Describe the work to be done",
    hours: Optional[float] = 8,
    dependencies: Optional[List[str]] = None,
    children: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Build one node dict with sensible defaults; None omits the field."""
    node: Dict[str, Any] = {
        "id": node_id,
        "type": node_type,
        "title": title if title is not None else f"Work item {node_id}",
        "priority": priority,
        "dependencies": list(dependencies or []),
        "children": list(children or []),
    }
    if description is not None:
        node["description"] = description
    if hours is not None:
        node["estimatedHours"] = hours
    return node


@pytest.fixture
def make_node():
    """Return the node factory."""
    return build_node


@pytest.fixture
def valid_tree():
    """Return a small well-formed tree: objective > strategy > initiative > 2 tasks."""
    return [
        build_node(
            "o1",
            "objective",
            "Grow the business",
            priority="high",
            hours=24,
            children=[
                build_node(
                    "s1",
                    "strategy",
                    "Expand into new markets",
                    hours=24,
                    children=[
                        build_node(
                            "i1",
                            "initiative",
                            "Open a regional office",
                            hours=24,
                            children=[
                                build_node("t1", "task", "Find office space", hours=8),
                                build_node(
                                    "t2",
                                    "task",
                                    "Hire the local team",
                                    hours=16,
                                    dependencies=["t1"],
                                ),
                            ],
                        )
                    ],
                )
            ],
        )
    ]


@pytest.fixture
def tree_copy(valid_tree):
    """Return a helper that deep-copies the reference tree."""
    return lambda: copy.deepcopy(valid_tree)


@pytest.fixture
def write_tree(tmp_path):
    """Return a helper writing JSON data to a file under tmp_path."""

    def _write(data: Any, name: str = "tree.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data, indent=2))
        return path

    return _write
