"""Unit tests for CompositionStore."""

import pytest

from jobfolio.contexts.documents import CompositionStore, CVComposition, CVVersionStore, ResumeSection, SectionStore
from jobfolio.contexts.storage import EntityNotFoundError


@pytest.fixture
def sections(kv):
    store = SectionStore(kv, "zh")
    saved = [
        store.save(ResumeSection.new("education", "Uni", latex_content="\\section{Education}")),
        store.save(ResumeSection.new("experience", "Acme", latex_content="\\section{Experience}")),
        store.save(ResumeSection.new("skills", "Skills", latex_content="\\section{Skills}")),
    ]
    return store, saved


@pytest.mark.unit
def test_generate_latex_follows_section_order(kv, sections):
    """Test reordering by index and blank-line separation."""
    section_store, (edu, exp, skills) = sections
    store = CompositionStore(kv, "zh", sections=section_store)
    composition = store.save(
        CVComposition.new("Backend", [edu.id, exp.id, skills.id], section_order=[1, 0, 2])
    )

    latex = store.generate_latex_from_composition(composition.id)

    assert latex == "\\section{Experience}\n\n\\section{Education}\n\n\\section{Skills}"


@pytest.mark.unit
def test_unresolved_and_out_of_range_entries_are_skipped(kv, sections):
    """Test that dangling section ids and bad indices are dropped."""
    section_store, (edu, _exp, skills) = sections
    store = CompositionStore(kv, "zh", sections=section_store)
    composition = store.save(
        CVComposition.new("Sparse", [edu.id, "deleted-section", skills.id], section_order=[2, 1, 7, 0])
    )

    latex = store.generate_latex_from_composition(composition.id)

    assert latex == "\\section{Skills}\n\n\\section{Education}"


@pytest.mark.unit
def test_empty_order_means_natural_order(kv, sections):
    """Test compositions stored without sectionOrder."""
    section_store, (edu, exp, _skills) = sections
    store = CompositionStore(kv, "zh", sections=section_store)
    composition = store.save(CVComposition.new("Natural", [exp.id, edu.id], section_order=[]))

    assert store.generate_latex_from_composition(composition.id) == (
        "\\section{Experience}\n\n\\section{Education}"
    )


@pytest.mark.unit
def test_generate_latex_missing_composition_raises(kv):
    """Test NotFound for an unknown composition id."""
    with pytest.raises(EntityNotFoundError):
        CompositionStore(kv, "zh").generate_latex_from_composition("missing")


@pytest.mark.unit
def test_create_version_from_composition(kv, sections):
    """Test saving a composition as a tagged resume version."""
    section_store, (edu, exp, _skills) = sections
    store = CompositionStore(kv, "zh", sections=section_store)
    composition = store.save(CVComposition.new("Backend", [edu.id, exp.id]))
    cv_versions = CVVersionStore(kv, "zh")

    version = store.create_version_from_composition(composition.id, cv_versions)

    assert version.tags == ["composed"]
    assert version.note == "Backend"
    assert version.content == store.generate_latex_from_composition(composition.id)
    assert cv_versions.get_by_id(version.id) is not None


@pytest.mark.unit
def test_composition_version_numbers(kv):
    """Test next version number over compositions."""
    store = CompositionStore(kv, "en")
    assert store.get_next_version_number() == 1

    store.save(CVComposition.new("A", [], version_number=1))
    store.save(CVComposition.new("B", [], version_number=2))

    assert store.get_next_version_number() == 3
