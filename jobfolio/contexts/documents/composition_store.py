"""
CV composition store.

A composition picks sections from the library and fixes their order. Its
LaTeX is generated on demand from whatever the referenced sections contain
at that moment.
"""

from typing import List, Optional

from jobfolio.contexts.documents.cv_version_store import CVVersionStore
from jobfolio.contexts.documents.document_data_structures import (
    CVComposition,
    CVVersion,
    ResumeSection,
)
from jobfolio.contexts.documents.logger import _log_info, _log_warning
from jobfolio.contexts.documents.section_store import SectionStore
from jobfolio.contexts.storage.collection_store import TimestampedCollectionStore
from jobfolio.contexts.storage.exceptions import EntityNotFoundError
from jobfolio.contexts.storage.kv_store import KeyValueStore
from jobfolio.contexts.storage.namespaced import COMPOSITIONS_KEY, DEFAULT_PARTITION

SECTION_SEPARATOR = "\n\n"


class CompositionStore(TimestampedCollectionStore[CVComposition]):
    """
    Compositions of one partition.

    Args:
        kv: Underlying persisted store
        partition: Partition this store reads and writes
        sections: Section store used to resolve section ids (defaults to the
                  same partition's SectionStore)
    """

    base_key = COMPOSITIONS_KEY
    record_cls = CVComposition
    entity_type = "CVComposition"

    def __init__(
        self,
        kv: KeyValueStore,
        partition: str = DEFAULT_PARTITION,
        sections: Optional[SectionStore] = None,
    ):
        super().__init__(kv, partition)
        self.sections = sections or SectionStore(kv, self.partition)

    def resolve_sections(self, composition: CVComposition) -> List[ResumeSection]:
        """
        Sections of a composition in display order.

        section_order entries index into section_ids. Out-of-range indices and
        ids that no longer resolve to a section are skipped. An empty
        section_order means section_ids order.
        """
        by_id = {s.id: s for s in self.sections.get_all()}

        order = composition.section_order or list(range(len(composition.section_ids)))
        ordered = []
        for index in order:
            if not 0 <= index < len(composition.section_ids):
                _log_warning(f"Composition {composition.id}: section index {index} out of range")
                continue
            section = by_id.get(composition.section_ids[index])
            if section is None:
                _log_warning(
                    f"Composition {composition.id}: section {composition.section_ids[index]} not found"
                )
                continue
            ordered.append(section)
        return ordered

    def generate_latex_from_composition(self, composition_id: str) -> str:
        """
        Concatenate the LaTeX of a composition's sections, blank-line separated.

        Raises:
            EntityNotFoundError: If no composition has composition_id
        """
        composition = self.get_by_id(composition_id)
        if composition is None:
            raise EntityNotFoundError(self.entity_type, composition_id, self.partition)

        sections = self.resolve_sections(composition)
        return SECTION_SEPARATOR.join(section.latex_content for section in sections)

    def create_version_from_composition(
        self,
        composition_id: str,
        cv_versions: Optional[CVVersionStore] = None,
        note: Optional[str] = None,
    ) -> CVVersion:
        """
        Store the composition's current LaTeX as a new resume version tagged "composed".

        Raises:
            EntityNotFoundError: If no composition has composition_id
        """
        latex = self.generate_latex_from_composition(composition_id)
        composition = self.get_by_id(composition_id)
        cv_versions = cv_versions or CVVersionStore(self.store.kv, self.partition)

        version = cv_versions.create_version(
            content=latex,
            document_type="resume",
            note=note or composition.name,
            tags=["composed"],
        )
        _log_info(f"Composition '{composition.name}' saved as version {version.version_number}")
        return version
