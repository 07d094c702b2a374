"""
Tracking Context

Responsibilities:
- Stores job applications and their status per partition
- Persists small per-partition settings (e.g., an external API key)
- Keeps application document fields and CV version links in step

Owns: JobApplication records, application-document links
Never: Validates status transitions (any known status may be set)
"""

from jobfolio.contexts.tracking.application_data_structure import (
    APPLICATION_STATUSES,
    WORK_TYPES,
    JobApplication,
)
from jobfolio.contexts.tracking.application_store import ApplicationStore
from jobfolio.contexts.tracking.linker import ApplicationLinker, DanglingLink, get_document_display_name

__all__ = [
    "JobApplication",
    "APPLICATION_STATUSES",
    "WORK_TYPES",
    "ApplicationStore",
    "ApplicationLinker",
    "DanglingLink",
    "get_document_display_name",
]
