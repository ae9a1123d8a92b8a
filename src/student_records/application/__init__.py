"""
Application layer - Use case orchestration

This layer contains:
- Event bus and domain events for UI synchronization
- Student validation rules
- Store settings
- SyncController (debounced auto-save, polled auto-reload)
- Search filtering
"""
