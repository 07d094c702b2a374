"""
CV version store.

Holds every resume and cover-letter snapshot of a partition. New edits are
saved as new versions (next version number, parent_id pointing at the
version they came from); linked_applications records which applications
each version was sent with.
"""

from dataclasses import replace
from typing import Any, Dict, List, Optional

from jobfolio.contexts.documents.document_data_structures import CVVersion, validate_document_type
from jobfolio.contexts.documents.logger import _log_debug, _log_error, _log_info
from jobfolio.contexts.storage.collection_store import CollectionStore
from jobfolio.contexts.storage.exceptions import EntityNotFoundError
from jobfolio.contexts.storage.namespaced import CV_VERSIONS_KEY
from jobfolio.utils.hashing import content_hash
from jobfolio.utils.timestamp import now_iso


class CVVersionStore(CollectionStore[CVVersion]):
    """
    Resume and cover-letter versions of one partition.

    Example:
        store = CVVersionStore(kv, partition="zh")
        v1 = store.create_version(latex_text, note="Resume v1")
        store.link_to_application(v1.id, application.id)
    """

    base_key = CV_VERSIONS_KEY
    record_cls = CVVersion
    entity_type = "CVVersion"

    def _stamp(self, entity: CVVersion, existing: Optional[Dict[str, Any]]) -> CVVersion:
        if existing is None:
            return replace(entity, created=entity.created or now_iso())
        return replace(entity, updated=now_iso())

    # =========================================================================
    # VERSIONING
    # =========================================================================

    @staticmethod
    def create_hash_for_content(content: str) -> str:
        """Content digest used as the version's identity for deduplication."""
        return content_hash(content)

    def create_version(
        self,
        content: str,
        document_type: str = "resume",
        parent_id: Optional[str] = None,
        note: Optional[str] = None,
        tags: Optional[List[str]] = None,
        title: Optional[str] = None,
        format: Optional[str] = "latex",
    ) -> CVVersion:
        """
        Save content as a brand-new version.

        The version number is the next free one in this partition and the
        content hash is computed here.

        Args:
            content: Full document text
            document_type: "resume" or "cover-letter"
            parent_id: Version this one was edited from (lineage only)
            note: Human label (defaults to "Resume vN" / "Cover letter vN")
            tags: Optional tags
            title: Optional title
            format: Content format marker

        Returns:
            The stored version
        """
        validate_document_type(document_type)
        version_number = self.get_next_version_number()
        if note is None:
            label = "Resume" if document_type == "resume" else "Cover letter"
            note = f"{label} v{version_number}"

        version = CVVersion.new(
            content=content,
            version_number=version_number,
            document_type=document_type,
            parent_id=parent_id,
            note=note,
            tags=list(tags or []),
            title=title,
            format=format,
            hash=self.create_hash_for_content(content),
            linked_applications=[],
        )
        stored = self.save(version)
        _log_info(f"Created {document_type} version {version_number} ({stored.id})")
        return stored

    def update_cv(self, version_id: str, updates: Dict[str, Any]) -> bool:
        """
        Patch selected fields of a stored version (stored camelCase keys).

        Returns:
            True if the version existed and was updated, False otherwise
        """
        try:
            records = self._read_records()
            for index, record in enumerate(records):
                if record.get("id") == version_id:
                    records[index] = {**record, **updates, "id": version_id}
                    self._write_records(records)
                    return True
            _log_debug(f"update_cv: version {version_id} not found, nothing updated")
            return False
        except Exception as e:
            _log_error(f"Failed to update CV version {version_id}: {e}")
            raise

    def find_by_hash(self, digest: str) -> List[CVVersion]:
        """Versions whose stored content hash equals digest."""
        return [v for v in self.get_all() if v.hash == digest]

    def get_by_type(self, document_type: str) -> List[CVVersion]:
        """Versions of one document type (untyped versions count as resumes)."""
        validate_document_type(document_type)
        return [v for v in self.get_all() if v.kind == document_type]

    # =========================================================================
    # APPLICATION LINKS
    # =========================================================================

    def link_to_application(self, version_id: str, application_id: str) -> CVVersion:
        """
        Record that version_id was used for application_id.

        Idempotent: the application id appears at most once.

        Raises:
            EntityNotFoundError: If no version has version_id
        """
        version = self.get_by_id(version_id)
        if version is None:
            raise EntityNotFoundError(self.entity_type, version_id, self.partition)

        linked = list(version.linked_applications or [])
        if application_id in linked:
            return version

        linked.append(application_id)
        return self.save(replace(version, linked_applications=linked))

    def unlink_from_application(self, version_id: str, application_id: str) -> Optional[CVVersion]:
        """
        Drop application_id from a version's links.

        Idempotent; a missing version is ignored (returns None).
        """
        version = self.get_by_id(version_id)
        if version is None:
            _log_debug(f"unlink: version {version_id} not found, nothing to unlink")
            return None

        linked = [a for a in (version.linked_applications or []) if a != application_id]
        return self.save(replace(version, linked_applications=linked))

    def get_versions_for_application(self, application_id: str) -> List[CVVersion]:
        """Versions whose linked_applications contain application_id."""
        return [v for v in self.get_all() if application_id in (v.linked_applications or [])]
