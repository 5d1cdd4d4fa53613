from directory.cms.graph_loader import parse_hospitals
from directory.engine.facets import OptionSet, compute_facets
from directory.engine.projector import project
from directory.models.filter_model import FILTER_KEYS, FilterState, FilterValue


def _facets(hospitals, state):
    result = project(hospitals, state)
    return compute_facets(result.view, result.branches, result.doctors, result.treatments)


def _names(options):
    return [o.name for o in options]


def test_unfiltered_facets_cover_every_key(hospitals):
    facets = _facets(hospitals, FilterState())
    assert set(facets) == set(FILTER_KEYS)
    assert _names(facets["city"]) == ["Delhi", "Pune"]
    assert _names(facets["state"]) == ["Delhi", "Maharashtra"]
    assert _names(facets["branch"]) == ["Central", "North", "South"]
    assert _names(facets["treatment"]) == ["Angioplasty", "Knee Replacement"]
    assert _names(facets["doctor"]) == ["Dr. A", "Dr. B", "Dr. C"]
    assert _names(facets["specialization"]) == ["Interventional Cardiology", "Joint Surgery"]
    assert _names(facets["department"]) == ["Cardiology", "Orthopedics"]
    assert {o.id for o in facets["location"]} == {
        "city:city-delhi",
        "state:Delhi",
        "city:city-pune",
        "state:Maharashtra",
    }


def test_option_ids_are_unique(hospitals):
    facets = _facets(hospitals, FilterState(view="doctors"))
    for options in facets.values():
        ids = [o.id for o in options]
        assert len(ids) == len(set(ids))
    assert [o.id for o in facets["doctor"]] == ["doc-a", "doc-b", "doc-c"]


def test_narrowing_filters_never_adds_options(hospitals):
    before = _facets(hospitals, FilterState(view="doctors"))
    after = _facets(hospitals, FilterState(view="doctors", specialization=FilterValue(id="s-ortho")))

    assert _names(after["city"]) == ["Pune"]
    assert _names(after["doctor"]) == ["Dr. A"]
    for key in FILTER_KEYS:
        assert {o.id for o in after[key]} <= {o.id for o in before[key]}


def test_city_next_to_doctor_filter_never_adds_options(records):
    # Central (Delhi) also offers knee replacement, but Dr. A only practices at South (Pune)
    records[1]["branches"][0]["treatments"].append({"_id": "t-knee", "name": "Knee Replacement"})
    hospitals = parse_hospitals(records)
    doctor_only = FilterState(view="treatments", doctor=FilterValue(id="doc-a"))

    result = project(hospitals, doctor_only)
    assert [loc.branch_id for loc in result.treatments[0].filtered_branches_available_at] == ["b-south"]

    before = _facets(hospitals, doctor_only)
    after = _facets(hospitals, doctor_only.model_copy(update={"city": FilterValue(query="Delhi")}))
    assert _names(before["city"]) == ["Pune"]
    assert after["city"] == []
    assert after["treatment"] == []
    for key in FILTER_KEYS:
        assert {o.id for o in after[key]} <= {o.id for o in before[key]}


def test_doctor_view_cities_follow_filtered_locations(hospitals):
    facets = _facets(hospitals, FilterState(view="doctors", treatment=FilterValue(query="knee")))
    assert _names(facets["city"]) == ["Pune"]


def test_empty_results_give_empty_facets(hospitals):
    facets = _facets(hospitals, FilterState(treatment=FilterValue(id="missing")))
    assert all(options == [] for options in facets.values())


def test_option_set_sorts_case_insensitively_and_keeps_first_name():
    options = OptionSet()
    options.add("2", "beta")
    options.add("1", "Alpha")
    options.add("3", "gamma")
    options.add("1", "Renamed")
    options.add(None, "No id")
    options.add("4", "")
    assert [(o.id, o.name) for o in options.sorted()] == [("1", "Alpha"), ("2", "beta"), ("3", "gamma")]
