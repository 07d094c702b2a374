"""Shared fixtures: an in-memory store, per-partition stores and sample entities."""

import importlib.util
from pathlib import Path

import pytest

from jobfolio.contexts.backup import BackupEngine, BackupPolicy, PartitionStores
from jobfolio.contexts.documents import CVVersion, ResumeSection
from jobfolio.contexts.storage import MemoryKeyValueStore
from jobfolio.contexts.tracking import JobApplication

SCRIPTS_PATH = Path(__file__).resolve().parents[1] / "scripts"


@pytest.fixture(autouse=True)
def isolated_event_log(tmp_path, monkeypatch):
    """Keep storage events of every test inside its tmp_path."""
    events_file = tmp_path / "storage_events.log"
    monkeypatch.setenv("STORAGE_EVENTS_FILE", str(events_file))
    return events_file


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def zh(kv):
    return PartitionStores.open(kv, "zh")


@pytest.fixture
def en(kv):
    return PartitionStores.open(kv, "en")


@pytest.fixture
def policy():
    return BackupPolicy()


@pytest.fixture
def engine(kv, policy):
    return BackupEngine(kv, policy)


@pytest.fixture
def acme_application():
    return JobApplication.new(
        "Backend Engineer",
        "Acme",
        url="https://acme.example/jobs/42",
        requirements=["Python", "PostgreSQL"],
        location="Berlin",
        work_type="hybrid",
    )


@pytest.fixture
def sample_section():
    return ResumeSection.new(
        "experience",
        "Acme internship",
        content="Built the billing service",
        latex_content="\\item Built the billing service",
        tags=["experience"],
    )


@pytest.fixture
def sample_version():
    return CVVersion.new("\\documentclass{article}\n\\begin{document}\nHi\n\\end{document}", 1)


def load_script(name: str):
    """Import a module from scripts/ by file name (scripts/ is not a package)."""
    spec = importlib.util.spec_from_file_location(name, SCRIPTS_PATH / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def backups_cli():
    return load_script("manage_backups")


@pytest.fixture
def documents_cli():
    return load_script("manage_documents")
