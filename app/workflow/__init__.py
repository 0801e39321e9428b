"""
Workflow
State machines for approvable resources, feedback and lost & found items,
plus the membership engine; every write goes through apply_transition
"""

from app.workflow.engine import apply_transition, load, Transition
from app.workflow.approval import ApprovableResource, EVENT_WORKFLOW, CLUB_WORKFLOW

__all__ = [
    "apply_transition",
    "load",
    "Transition",
    "ApprovableResource",
    "EVENT_WORKFLOW",
    "CLUB_WORKFLOW",
]
