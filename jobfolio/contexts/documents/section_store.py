"""
Resume section library.

Sections are reusable resume blocks. Templates are read-only seeds: users
clone them with create_section_from_template() and edit the clone.
"""

from typing import Any, Dict, List, Optional

from jobfolio.contexts.documents.default_templates import get_default_templates
from jobfolio.contexts.documents.document_data_structures import (
    ResumeSection,
    validate_section_type,
)
from jobfolio.contexts.documents.logger import _log_info, _log_success, _log_warning
from jobfolio.contexts.storage.collection_store import TimestampedCollectionStore
from jobfolio.contexts.storage.exceptions import EntityNotFoundError
from jobfolio.contexts.storage.namespaced import SECTIONS_KEY
from jobfolio.utils.timestamp import now_iso

TEMPLATE_OVERRIDE_FIELDS = ("title", "content", "latex_content", "tags")


class SectionStore(TimestampedCollectionStore[ResumeSection]):
    """Resume sections and section templates of one partition."""

    base_key = SECTIONS_KEY
    record_cls = ResumeSection
    entity_type = "ResumeSection"

    def _stamp(self, entity: ResumeSection, existing: Optional[Dict[str, Any]]) -> ResumeSection:
        if existing is not None and existing.get("isTemplate"):
            _log_warning(f"Template section {entity.id} is being overwritten in place")
        return super()._stamp(entity, existing)

    def get_sections_by_type(self, section_type: str) -> List[ResumeSection]:
        """Sections (templates included) of one section type."""
        validate_section_type(section_type)
        return [s for s in self.get_all() if s.section_type == section_type]

    def get_templates(self) -> List[ResumeSection]:
        """Template sections only."""
        return [s for s in self.get_all() if s.is_template]

    def create_section_from_template(
        self, template_id: str, overrides: Optional[Dict[str, Any]] = None
    ) -> ResumeSection:
        """
        Clone a template into a new, editable section.

        The clone starts at version 1 with parent_id pointing at the template.
        Empty override values fall back to the template's own values.

        Args:
            template_id: Id of the template to clone
            overrides: Optional values for title, content, latex_content, tags

        Returns:
            The stored clone

        Raises:
            EntityNotFoundError: If no section has template_id
            ValueError: If overrides contains an unsupported field
        """
        overrides = overrides or {}
        unsupported = set(overrides) - set(TEMPLATE_OVERRIDE_FIELDS)
        if unsupported:
            raise ValueError(
                f"Unsupported template override(s): {sorted(unsupported)}. "
                f"Allowed: {list(TEMPLATE_OVERRIDE_FIELDS)}"
            )

        template = self.get_by_id(template_id)
        if template is None:
            raise EntityNotFoundError(self.entity_type, template_id, self.partition)

        now = now_iso()
        section = ResumeSection.new(
            section_type=template.section_type,
            title=overrides.get("title") or f"{template.title} (Copy)",
            content=overrides.get("content") or template.content,
            latex_content=overrides.get("latex_content") or template.latex_content,
            tags=list(overrides.get("tags") or template.tags),
            created=now,
            updated=now,
            version_number=1,
            parent_id=template_id,
            is_template=False,
        )
        stored = self.save(section)
        _log_info(f"Created section '{stored.title}' from template {template_id}")
        return stored

    def create_section_version(self, section_id: str, **changes) -> ResumeSection:
        """
        Save an edited copy of a section as its next version.

        The copy gets a new id, version_number + 1 and parent_id = section_id;
        the original section is left as it was.

        Raises:
            EntityNotFoundError: If no section has section_id
            ValueError: If changes contains a field other than title, content,
                        latex_content or tags
        """
        unsupported = set(changes) - set(TEMPLATE_OVERRIDE_FIELDS)
        if unsupported:
            raise ValueError(f"Unsupported section change(s): {sorted(unsupported)}")

        source = self.get_by_id(section_id)
        if source is None:
            raise EntityNotFoundError(self.entity_type, section_id, self.partition)

        now = now_iso()
        fields = {
            "title": source.title,
            "content": source.content,
            "latex_content": source.latex_content,
            "tags": list(source.tags),
            **changes,
        }
        section = ResumeSection.new(
            section_type=source.section_type,
            created=now,
            updated=now,
            version_number=source.version_number + 1,
            parent_id=section_id,
            is_template=False,
            **fields,
        )
        return self.save(section)

    def initialize_default_templates(self) -> List[ResumeSection]:
        """
        Seed the starter templates unless any template already exists.

        Returns:
            The templates created ([] when seeding was skipped)
        """
        if self.get_templates():
            return []

        created = []
        for fields in get_default_templates(self.partition):
            template = ResumeSection.new(version_number=1, is_template=True, **fields)
            created.append(self.save(template))

        _log_success(f"Seeded {len(created)} default section template(s) in '{self.partition}'")
        return created
