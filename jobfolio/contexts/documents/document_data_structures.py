"""
Document data structures for the Documents context.

- CVVersion: one immutable snapshot of a resume or cover letter
- ResumeSection: reusable block of resume content (plain text + LaTeX)
- CVComposition: ordered selection of sections that forms a resume
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from jobfolio.utils.records import record_from_dict, record_to_dict

DOCUMENT_TYPES = ("resume", "cover-letter")
SECTION_TYPES = ("education", "experience", "research", "skills", "achievements", "custom")


def validate_document_type(document_type: str) -> str:
    """
    Raises:
        ValueError: If document_type is not one of DOCUMENT_TYPES
    """
    if document_type not in DOCUMENT_TYPES:
        raise ValueError(
            f"Unknown document type '{document_type}'. Expected one of: {list(DOCUMENT_TYPES)}"
        )
    return document_type


def validate_section_type(section_type: str) -> str:
    """
    Raises:
        ValueError: If section_type is not one of SECTION_TYPES
    """
    if section_type not in SECTION_TYPES:
        raise ValueError(
            f"Unknown section type '{section_type}'. Expected one of: {list(SECTION_TYPES)}"
        )
    return section_type


@dataclass
class CVVersion:
    """
    Snapshot of a resume or cover letter.

    Identity of the content is the hash, not the version number: two versions
    may carry the same text, and version numbers are only unique in intent.

    A missing document_type means "resume" (records written before cover
    letters existed have no type).
    """

    id: str
    version_number: int = field(metadata={"key": "versionNumber"})
    content: str
    created: str = ""
    title: Optional[str] = None
    document_type: Optional[str] = field(default=None, metadata={"key": "type"})
    format: Optional[str] = None
    updated: Optional[str] = None
    tags: Optional[List[str]] = None
    note: Optional[str] = None
    parent_id: Optional[str] = field(default=None, metadata={"key": "parentId"})
    hash: Optional[str] = None
    linked_applications: Optional[List[str]] = field(
        default=None, metadata={"key": "linkedApplications"}
    )

    @property
    def kind(self) -> str:
        """Document type with the backward-compatible resume default applied."""
        return self.document_type or "resume"

    @property
    def is_cover_letter(self) -> bool:
        return self.kind == "cover-letter"

    @classmethod
    def new(cls, content: str, version_number: int, **kwargs) -> "CVVersion":
        """Create a version with a fresh UUID."""
        if kwargs.get("document_type") is not None:
            validate_document_type(kwargs["document_type"])
        return cls(id=str(uuid.uuid4()), version_number=version_number, content=content, **kwargs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CVVersion":
        return record_from_dict(cls, data)

    def to_dict(self) -> Dict[str, Any]:
        return record_to_dict(self)


@dataclass
class ResumeSection:
    """
    Reusable resume content block.

    content (plain text) and latex_content (markup) describe the same thing;
    whoever writes one is responsible for keeping the other in step.

    Templates (is_template=True) are seed content: they are cloned with
    SectionStore.create_section_from_template(), never edited in place.
    """

    id: str
    section_type: str = field(metadata={"key": "type"})
    title: str
    content: str = ""
    latex_content: str = field(default="", metadata={"key": "latexContent"})
    tags: List[str] = field(default_factory=list)
    created: str = ""
    updated: str = ""
    version_number: int = field(default=1, metadata={"key": "versionNumber"})
    is_template: bool = field(default=False, metadata={"key": "isTemplate"})
    parent_id: Optional[str] = field(default=None, metadata={"key": "parentId"})

    @classmethod
    def new(cls, section_type: str, title: str, **kwargs) -> "ResumeSection":
        """
        Create a section with a fresh UUID.

        Raises:
            ValueError: If section_type is unknown
        """
        validate_section_type(section_type)
        return cls(id=str(uuid.uuid4()), section_type=section_type, title=title, **kwargs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResumeSection":
        return record_from_dict(cls, data)

    def to_dict(self) -> Dict[str, Any]:
        return record_to_dict(self)


@dataclass
class CVComposition:
    """
    Ordered selection of resume sections.

    section_order holds indices into section_ids; the resume lists
    section_ids[i] for each i in section_order.
    """

    id: str
    name: str
    section_ids: List[str] = field(default_factory=list, metadata={"key": "sectionIds"})
    section_order: List[int] = field(default_factory=list, metadata={"key": "sectionOrder"})
    created: str = ""
    updated: str = ""
    version_number: int = field(default=1, metadata={"key": "versionNumber"})

    @classmethod
    def new(cls, name: str, section_ids: List[str], **kwargs) -> "CVComposition":
        """Create a composition with a fresh UUID and natural section order."""
        kwargs.setdefault("section_order", list(range(len(section_ids))))
        return cls(id=str(uuid.uuid4()), name=name, section_ids=list(section_ids), **kwargs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CVComposition":
        return record_from_dict(cls, data)

    def to_dict(self) -> Dict[str, Any]:
        return record_to_dict(self)
