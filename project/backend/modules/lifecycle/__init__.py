"""
Workspace Lifecycle Module.
"""

from modules.lifecycle.manager import WorkspaceManager

__all__ = ["WorkspaceManager"]
