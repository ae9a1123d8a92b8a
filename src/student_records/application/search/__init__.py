from student_records.application.search.student_search import (
    build_search_predicate,
    filter_students,
    searchable_text,
)

__all__ = [
    'build_search_predicate',
    'filter_students',
    'searchable_text',
]
