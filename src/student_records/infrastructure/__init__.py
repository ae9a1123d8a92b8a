"""
Infrastructure layer - file persistence for the student store.
"""
