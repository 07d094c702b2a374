"""The four entity stores of one partition, opened together."""

from dataclasses import dataclass

from jobfolio.contexts.documents.composition_store import CompositionStore
from jobfolio.contexts.documents.cv_version_store import CVVersionStore
from jobfolio.contexts.documents.section_store import SectionStore
from jobfolio.contexts.storage.kv_store import KeyValueStore
from jobfolio.contexts.storage.namespaced import partition_keys, validate_partition
from jobfolio.contexts.tracking.application_store import ApplicationStore


@dataclass
class PartitionStores:
    partition: str
    applications: ApplicationStore
    cv_versions: CVVersionStore
    sections: SectionStore
    compositions: CompositionStore

    @classmethod
    def open(cls, kv: KeyValueStore, partition: str) -> "PartitionStores":
        """Construct every store of partition (running legacy migration once each)."""
        validate_partition(partition)
        sections = SectionStore(kv, partition)
        return cls(
            partition=partition,
            applications=ApplicationStore(kv, partition),
            cv_versions=CVVersionStore(kv, partition),
            sections=sections,
            compositions=CompositionStore(kv, partition, sections=sections),
        )

    def by_collection(self) -> dict:
        """Stores keyed by backup collection name, in restore order."""
        return {
            "applications": self.applications,
            "cvVersions": self.cv_versions,
            "sections": self.sections,
            "compositions": self.compositions,
        }

    def storage_keys(self) -> list[str]:
        return partition_keys(self.partition)
