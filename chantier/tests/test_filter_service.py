# chantier/tests/test_filter_service.py
from chantier.services.filter_service import FilterSelection, FilterService


def ids(entities):
    return [e.id for e in entities]


def test_no_selection_returns_everything(seeded):
    filters = FilterService(seeded)
    assert ids(filters.available_categories()) == ["c1", "c2", "c3"]
    assert ids(filters.available_contractors()) == ["k1", "k2"]
    assert ids(filters.available_projects()) == ["p1", "p2"]
    assert filters.available_blocks() == []


def test_categories_union_of_project_and_contractor(seeded):
    filters = FilterService(seeded)
    assert ids(filters.available_categories(project_id="p1")) == ["c1", "c2"]
    assert ids(filters.available_categories(contractor_id="k2")) == ["c3"]
    # 两个条件取并集
    assert ids(filters.available_categories(project_id="p1", contractor_id="k2")) == ["c1", "c2", "c3"]


def test_contractors_intersection_of_project_and_category(seeded):
    filters = FilterService(seeded)
    assert ids(filters.available_contractors(project_id="p1")) == ["k1"]
    assert ids(filters.available_contractors(category_id="c3")) == ["k2"]
    assert ids(filters.available_contractors(project_id="p1", category_id="c3")) == []


def test_projects_union_of_category_and_contractor(seeded):
    filters = FilterService(seeded)
    assert ids(filters.available_projects(category_id="c3")) == ["p2"]
    assert ids(filters.available_projects(category_id="c1", contractor_id="k2")) == ["p1", "p2"]
    assert ids(filters.available_projects(contractor_id="missing")) == []


def test_blocks_of_selected_project(seeded):
    assert ids(FilterService(seeded).available_blocks("p1")) == ["b1", "b2"]


def test_project_change_clears_blocks(seeded):
    selection = FilterSelection(project_id="p1", block_ids=["b1"])
    updated = FilterService(seeded).on_project_change(selection, "p2")
    assert updated.project_id == "p2"
    assert updated.block_ids == []
    # 原对象不变
    assert selection.block_ids == ["b1"]


def test_category_change_drops_incompatible_contractor(seeded):
    filters = FilterService(seeded)
    selection = FilterSelection(contractor_id="k1", category_id="c1")

    kept = filters.on_category_change(selection, "c2")
    assert kept.contractor_id == "k1"

    dropped = filters.on_category_change(selection, "c3")
    assert dropped.category_id == "c3"
    assert dropped.contractor_id is None


def test_contractor_change_selects_first_category(seeded):
    filters = FilterService(seeded)
    updated = filters.on_contractor_change(FilterSelection(category_id="c3"), "k1")
    assert updated.contractor_id == "k1"
    assert updated.category_id == "c1"

    cleared = filters.on_contractor_change(updated, None)
    assert cleared.contractor_id is None
    assert cleared.category_id == "c1"


def test_options_bundle(seeded):
    options = FilterService(seeded).options(FilterSelection(project_id="p2"))
    assert ids(options["blocks"]) == ["b3"]
    assert ids(options["categories"]) == ["c3"]
    assert ids(options["contractors"]) == ["k2"]
    assert ids(options["projects"]) == ["p1", "p2"]
