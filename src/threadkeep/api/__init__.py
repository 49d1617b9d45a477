"""
HTTP API for ThreadKeep.
"""
