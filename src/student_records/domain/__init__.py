"""
Domain layer - Core entities

This layer contains:
- Student entity and its comparison keys
"""
