"""
Job application store.

Applications share one record per partition with a small config bag:

    job-assistant-data-<partition> -> {"applications": [...], "config": {...}}

Other keys found in that record are carried along untouched on every write.
"""

from dataclasses import replace
from typing import Any, Dict, List, Optional

from jobfolio.contexts.storage.collection_store import CollectionStore
from jobfolio.contexts.storage.exceptions import EntityNotFoundError
from jobfolio.contexts.storage.namespaced import APPLICATIONS_KEY
from jobfolio.contexts.tracking.application_data_structure import JobApplication, validate_status
from jobfolio.contexts.tracking.logger import _log_error, _log_info
from jobfolio.utils.timestamp import now_iso


def _empty_container() -> Dict[str, Any]:
    return {"applications": [], "config": {}}


class ApplicationStore(CollectionStore[JobApplication]):
    """
    Applications of one partition plus that partition's persisted settings.

    Example:
        store = ApplicationStore(kv, partition="en")
        app = store.save(JobApplication.new("Backend Engineer", "Acme"))
        store.update_status(app.id, "applied")
    """

    base_key = APPLICATIONS_KEY
    record_cls = JobApplication
    entity_type = "JobApplication"

    def _read_container(self) -> Dict[str, Any]:
        container = self.store.get(self.base_key)
        if not isinstance(container, dict):
            return _empty_container()
        container.setdefault("applications", [])
        container.setdefault("config", {})
        return container

    def _read_records(self) -> List[Dict[str, Any]]:
        records = self._read_container()["applications"]
        return records if isinstance(records, list) else []

    def _write_records(self, records: List[Dict[str, Any]]) -> None:
        container = self._read_container()
        container["applications"] = records
        self.store.set(self.base_key, container)

    def _stamp(self, entity: JobApplication, existing: Optional[Dict[str, Any]]) -> JobApplication:
        now = now_iso()
        if existing is None:
            return replace(entity, created_at=entity.created_at or now, updated_at=now)
        return replace(entity, updated_at=now)

    def update_status(self, application_id: str, status: str) -> JobApplication:
        """
        Set an application's status.

        Any known status is accepted regardless of the current one.

        Raises:
            EntityNotFoundError: If no application has application_id
            ValueError: If status is unknown
        """
        validate_status(status)
        application = self.get_by_id(application_id)
        if application is None:
            _log_error(f"Cannot update status: application {application_id} not found")
            raise EntityNotFoundError(self.entity_type, application_id, self.partition)

        updated = self.save(replace(application, status=status))
        _log_info(f"Application {application_id}: {application.status} -> {status}")
        return updated

    def get_config(self) -> Dict[str, Any]:
        """Persisted settings of this partition ({} on read failure)."""
        try:
            config = self._read_container()["config"]
            return config if isinstance(config, dict) else {}
        except Exception as e:
            _log_error(f"Failed to load config from '{self.storage_key}': {e}")
            return {}

    def save_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge config into the persisted settings (keys not given are kept).

        Returns:
            The merged settings
        """
        try:
            container = self._read_container()
            merged = {**container["config"], **config}
            container["config"] = merged
            self.store.set(self.base_key, container)
            return merged
        except Exception as e:
            _log_error(f"Failed to save config to '{self.storage_key}': {e}")
            raise
