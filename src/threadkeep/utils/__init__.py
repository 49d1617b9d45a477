"""
Utility helpers for ThreadKeep.
"""
