import pytest

from directory.cms.graph_loader import parse_hospitals
from directory.engine.filter_state import set_filter_field
from directory.engine.projector import project, sort_entities
from directory.models.filter_model import FilterState, FilterValue


def _names(items):
    return [item.name for item in items]


def _north_south_graph(with_specialist: bool):
    cardio_dept = {"_id": "dep-cardio", "name": "Cardiology"}
    south = {
        "_id": "b-south",
        "branchName": "South",
        "city": [{"_id": "c-pune", "cityName": "Pune"}],
        "doctors": [
            {
                "_id": "doc-a",
                "doctorName": "Dr. A",
                "specialization": [{"_id": "s-cardio", "name": "Cardiology", "department": [cardio_dept]}],
            }
        ],
    }
    if with_specialist:
        south["specialists"] = [
            {"_id": "sp1", "name": "Heart Unit", "department": [cardio_dept], "treatments": [{"_id": "t-cardio", "name": "Cardiology"}]}
        ]
    return parse_hospitals(
        [
            {
                "_id": "h-apollo",
                "hospitalName": "Apollo",
                "branches": [
                    {
                        "_id": "b-north",
                        "branchName": "North",
                        "city": [{"_id": "c-delhi", "cityName": "Delhi"}],
                        "treatments": [{"_id": "t-cardio", "name": "Cardiology"}],
                        "specialists": [
                            {"_id": "sp0", "name": "Cardiac Unit", "department": [cardio_dept], "treatments": [{"_id": "t-cardio", "name": "Cardiology"}]}
                        ],
                    },
                    south,
                ],
            }
        ]
    )


def test_unfiltered_projection_sorted_by_name(hospitals):
    result = project(hospitals, FilterState())
    assert result.view == "hospitals"
    assert result.count == 3
    assert _names(result.branches) == ["Central", "North", "South"]
    assert _names(result.doctors) == ["Dr. A", "Dr. B", "Dr. C"]
    assert _names(result.treatments) == ["Angioplasty", "Knee Replacement"]


def test_treatment_filter_needs_department_and_location():
    hospitals = _north_south_graph(with_specialist=False)
    result = project(hospitals, FilterState(view="doctors", treatment=FilterValue(query="cardio")))
    # Dr. A shares the department but South does not offer the treatment
    assert result.doctors == []
    assert result.count == 0


def test_treatment_filter_includes_doctor_at_offering_branch():
    hospitals = _north_south_graph(with_specialist=True)
    result = project(hospitals, FilterState(view="doctors", treatment=FilterValue(query="cardio")))
    assert _names(result.doctors) == ["Dr. A"]
    assert [loc.branch_name for loc in result.doctors[0].filtered_locations] == ["South"]
    assert result.count == 1


def test_treatment_filter_projects_all_views(hospitals):
    state = FilterState(view="doctors", treatment=FilterValue(query="angio"))
    result = project(hospitals, state)
    assert _names(result.doctors) == ["Dr. B", "Dr. C"]
    dr_b = result.doctors[0]
    assert [loc.branch_id for loc in dr_b.filtered_locations] == ["b-north"]
    assert _names(result.branches) == ["Central", "North"]
    assert _names(result.treatments) == ["Angioplasty"]


def test_unmatched_primary_empties_every_view(hospitals):
    for key in ("treatment", "doctor", "branch"):
        state = set_filter_field(FilterState(), key, "id", "missing")
        result = project(hospitals, state)
        assert result.branches == []
        assert result.doctors == []
        assert result.treatments == []
        assert result.count == 0


def test_doctor_filter_narrows_branches_and_treatments(hospitals):
    result = project(hospitals, FilterState(view="treatments", doctor=FilterValue(id="doc-a")))
    assert _names(result.doctors) == ["Dr. A"]
    assert _names(result.branches) == ["South"]
    assert _names(result.treatments) == ["Knee Replacement"]
    assert [loc.branch_id for loc in result.treatments[0].filtered_branches_available_at] == ["b-south"]
    assert result.count == 1


def test_city_filter_scopes_locations(hospitals):
    result = project(hospitals, FilterState(view="doctors", city=FilterValue(id="city-delhi")))
    assert _names(result.doctors) == ["Dr. B", "Dr. C"]
    # the hospital-level listing has no city, so only the branch survives
    assert [loc.branch_id for loc in result.doctors[0].filtered_locations] == ["b-north"]
    assert [loc.branch_id for loc in result.doctors[0].locations] == [None, "b-north"]
    assert _names(result.treatments) == ["Angioplasty"]
    assert _names(result.branches) == ["Central", "North"]


def test_specialization_filter_reaches_treatments(hospitals):
    result = project(hospitals, FilterState(view="treatments", specialization=FilterValue(id="s-ortho")))
    assert _names(result.doctors) == ["Dr. A"]
    assert _names(result.branches) == ["South"]
    assert _names(result.treatments) == ["Knee Replacement"]


def test_count_follows_view(hospitals):
    for view, expected in (("hospitals", 3), ("doctors", 3), ("treatments", 2)):
        assert project(hospitals, FilterState(view=view)).count == expected


@pytest.mark.parametrize(
    "sort_by, branches, doctors, treatments",
    [
        ("az", ["Central", "North", "South"], ["Dr. A", "Dr. B", "Dr. C"], ["Angioplasty", "Knee Replacement"]),
        ("za", ["South", "North", "Central"], ["Dr. C", "Dr. B", "Dr. A"], ["Knee Replacement", "Angioplasty"]),
        ("popular", ["Central"], ["Dr. B"], ["Angioplasty"]),
    ],
)
def test_sorting(hospitals, sort_by, branches, doctors, treatments):
    result = project(hospitals, FilterState(sort_by=sort_by))
    assert _names(result.branches) == branches
    assert _names(result.doctors) == doctors
    assert _names(result.treatments) == treatments


def test_sort_entities_ignores_case():
    class Item:
        def __init__(self, name):
            self.name = name

    items = [Item("beta"), Item("Alpha"), Item("gamma")]
    assert _names(sort_entities(items, "all")) == ["Alpha", "beta", "gamma"]


def test_projection_is_repeatable(hospitals):
    state = FilterState(view="doctors", city=FilterValue(query="del"))
    assert project(hospitals, state) == project(hospitals, state)
