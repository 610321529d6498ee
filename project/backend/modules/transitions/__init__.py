"""
Transition Selector Module.

Rule engine mapping adjacent scene tags to a transition descriptor.
"""

from modules.transitions.selector import select_transition, transition_after

__all__ = [
    "select_transition",
    "transition_after",
]
