from student_records.application.sync.sync_controller import SyncController, describe_event

__all__ = [
    'SyncController',
    'describe_event',
]
