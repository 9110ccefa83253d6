"""Project Scheduling Workflows."""

from __future__ import annotations

PROJECT_WORKFLOW = {
    "name": "project_lifecycle",
    "states": ["planning", "active", "on_hold", "completed", "cancelled"],
    "transitions": {
        "planning": ["active", "cancelled"],
        "active": ["on_hold", "completed", "cancelled"],
        "on_hold": ["active", "cancelled"],
    },
}


def allowed_transitions(workflow: dict, from_state: str) -> tuple[str, ...]:
    """States reachable in one step; terminal states return ``()``."""
    return tuple(workflow["transitions"].get(from_state, ()))


def can_transition(workflow: dict, from_state: str, to_state: str) -> bool:
    return to_state in allowed_transitions(workflow, from_state)
