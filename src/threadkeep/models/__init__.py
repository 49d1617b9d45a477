"""
Database and payload models for ThreadKeep.
"""
