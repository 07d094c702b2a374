"""
Two-sided links between applications and document versions.

An application names its resume / cover letter through
resume_version_id / cover_letter_version_id; each CV version lists the
applications it was used for in linked_applications. Nothing in storage keeps
the two sides in step, so every link change goes through ApplicationLinker.

References are weak. Deleting a CV version leaves its id in applications;
find_dangling_links() reports such stale ids, it never repairs them.
"""

from dataclasses import dataclass, replace
from typing import List, Optional

from jobfolio.contexts.documents.cv_version_store import CVVersionStore
from jobfolio.contexts.documents.document_data_structures import CVVersion, validate_document_type
from jobfolio.contexts.storage.exceptions import EntityNotFoundError
from jobfolio.contexts.tracking.application_data_structure import JobApplication
from jobfolio.contexts.tracking.application_store import ApplicationStore
from jobfolio.contexts.tracking.logger import _log_error, _log_warning, log_link_change

LINK_FIELDS = {
    "resume": "resume_version_id",
    "cover-letter": "cover_letter_version_id",
}

DEFAULT_DISPLAY_NAMES = {
    "resume": "Resume",
    "cover-letter": "Cover Letter",
}


@dataclass
class DanglingLink:
    """Application field pointing at a CV version that no longer exists."""

    application_id: str
    field_name: str
    version_id: str


def get_document_display_name(document: Optional[CVVersion], document_type: str) -> str:
    """Title of a document, or the generic name of its type."""
    validate_document_type(document_type)
    if document is not None and document.title:
        return document.title
    return DEFAULT_DISPLAY_NAMES[document_type]


class ApplicationLinker:
    """
    Keeps application document fields and CV version links consistent.

    Args:
        applications: Application store of one partition
        cv_versions: CV version store of the same partition

    Raises:
        ValueError: If the stores belong to different partitions
    """

    def __init__(self, applications: ApplicationStore, cv_versions: CVVersionStore):
        if applications.partition != cv_versions.partition:
            raise ValueError(
                f"Cannot link across partitions: applications in '{applications.partition}', "
                f"CV versions in '{cv_versions.partition}'"
            )
        self.applications = applications
        self.cv_versions = cv_versions

    def set_document_link(
        self,
        application_id: str,
        version_id: Optional[str],
        document_type: str = "resume",
    ) -> JobApplication:
        """
        Point an application's resume or cover letter at version_id (None clears it).

        Order of writes: link the new version, save the application, then
        unlink the previously linked version. The new version is checked
        first, so an unknown version_id changes nothing.

        Returns:
            The stored application

        Raises:
            EntityNotFoundError: If the application or the new version is missing
        """
        validate_document_type(document_type)
        field_name = LINK_FIELDS[document_type]

        application = self.applications.get_by_id(application_id)
        if application is None:
            raise EntityNotFoundError(
                self.applications.entity_type, application_id, self.applications.partition
            )

        previous = getattr(application, field_name)

        if version_id:
            self.cv_versions.link_to_application(version_id, application_id)

        if previous == version_id:
            return application

        stored = self.applications.save(replace(application, **{field_name: version_id}))

        if previous:
            self.cv_versions.unlink_from_application(previous, application_id)

        log_link_change(application_id, field_name, previous, version_id)
        return stored

    def link_resume(self, application_id: str, version_id: Optional[str]) -> JobApplication:
        return self.set_document_link(application_id, version_id, "resume")

    def link_cover_letter(self, application_id: str, version_id: Optional[str]) -> JobApplication:
        return self.set_document_link(application_id, version_id, "cover-letter")

    def load_linked_applications_for_document(
        self, document_id: str, document_type: str
    ) -> List[JobApplication]:
        """Applications whose resume / cover-letter field points at document_id ([] on failure)."""
        validate_document_type(document_type)
        field_name = LINK_FIELDS[document_type]
        try:
            return [
                app for app in self.applications.get_all() if getattr(app, field_name) == document_id
            ]
        except Exception as e:
            _log_error(f"Failed to load linked applications for {document_type} {document_id}: {e}")
            return []

    def linked_applications_for_delete(self, version_id: str) -> List[str]:
        """
        Application ids a caller should warn about before deleting version_id.

        Deleting is still allowed afterwards; this is the confirmation data only.
        """
        version = self.cv_versions.get_by_id(version_id)
        linked = set(version.linked_applications or []) if version else set()
        for document_type in LINK_FIELDS:
            linked.update(
                app.id for app in self.load_linked_applications_for_document(version_id, document_type)
            )
        if linked:
            _log_warning(f"Version {version_id} is linked to {len(linked)} application(s)")
        return sorted(linked)

    def find_dangling_links(self) -> List[DanglingLink]:
        """Application document fields that reference missing CV versions."""
        known = {v.id for v in self.cv_versions.get_all()}
        dangling = []
        for app in self.applications.get_all():
            for field_name in LINK_FIELDS.values():
                version_id = getattr(app, field_name)
                if version_id and version_id not in known:
                    dangling.append(DanglingLink(app.id, field_name, version_id))
        return dangling
