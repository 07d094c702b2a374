"""
Documents Context

Responsibilities:
- Stores resume and cover-letter versions with lineage and content hashes
- Manages the reusable section library and its starter templates
- Assembles compositions of sections into LaTeX
- Provides line-based version comparison for display

Owns: CVVersion, ResumeSection, CVComposition records
Never: Compiles LaTeX or edits application records
"""

from jobfolio.contexts.documents.composition_store import CompositionStore
from jobfolio.contexts.documents.cv_version_store import CVVersionStore
from jobfolio.contexts.documents.diff_engine import (
    DiffResult,
    compare_versions,
    format_diff_for_display,
    get_diff_stats,
)
from jobfolio.contexts.documents.document_data_structures import (
    DOCUMENT_TYPES,
    SECTION_TYPES,
    CVComposition,
    CVVersion,
    ResumeSection,
)
from jobfolio.contexts.documents.latex_template import create_blank_template, validate_latex
from jobfolio.contexts.documents.section_store import SectionStore

__all__ = [
    # Data structures
    "CVVersion",
    "ResumeSection",
    "CVComposition",
    "DOCUMENT_TYPES",
    "SECTION_TYPES",
    # Stores
    "CVVersionStore",
    "SectionStore",
    "CompositionStore",
    # Display helpers
    "DiffResult",
    "compare_versions",
    "format_diff_for_display",
    "get_diff_stats",
    "create_blank_template",
    "validate_latex",
]
