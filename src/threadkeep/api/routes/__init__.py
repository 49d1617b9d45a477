"""
API routes for ThreadKeep.
"""

from threadkeep.api.routes import conversations, files, sync

__all__ = [
    "conversations",
    "files",
    "sync",
]
