"""
Database access for ThreadKeep.
"""
