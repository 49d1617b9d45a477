"""
ThreadKeep - sync and storage backend for browser-captured AI chat conversations.
"""

__version__ = "0.1.0"
