"""
Application services for ThreadKeep.
"""
