import pytest

from directory.engine.extractor import extract_treatments
from directory.engine.filter_state import set_filter_field
from directory.engine.matcher import flatten_branches, match_branches
from directory.models.filter_model import FilterState


@pytest.fixture()
def treatments(hospitals):
    return extract_treatments(hospitals)


def _match(hospitals, treatments, *fields):
    state = FilterState()
    for key, sub_key, value in fields:
        state = set_filter_field(state, key, sub_key, value)
    return [b.id for b in match_branches(hospitals, state, treatments)]


def test_flatten_annotates_parent_hospital(hospitals):
    branches = flatten_branches(hospitals)
    assert [(b.id, b.hospital_id, b.hospital_name, b.hospital_logo) for b in branches] == [
        ("b-north", "h-apollo", "Apollo", "apollo.png"),
        ("b-south", "h-apollo", "Apollo", "apollo.png"),
        ("b-central", "h-fortis", "Fortis", None),
    ]


def test_no_filters_match_every_branch(hospitals, treatments):
    assert _match(hospitals, treatments) == ["b-north", "b-south", "b-central"]


@pytest.mark.parametrize(
    "field, expected",
    [
        (("city", "id", "city-delhi"), ["b-north", "b-central"]),
        (("city", "query", "PUN"), ["b-south"]),
        (("state", "query", "maha"), ["b-south"]),
        (("location", "id", "state:Delhi"), ["b-north", "b-central"]),
        (("location", "id", "city:city-pune"), ["b-south"]),
        (("branch", "query", "nor"), ["b-north"]),
        (("treatment", "query", "angio"), ["b-north", "b-central"]),
        (("department", "query", "ortho"), ["b-south"]),
        (("department", "id", "dep-cardio"), ["b-north"]),
    ],
)
def test_single_field(hospitals, treatments, field, expected):
    assert _match(hospitals, treatments, field) == expected


def test_specialization_matches_branch_or_its_doctors(hospitals, treatments):
    # South lists no specialization itself, only its doctor does
    assert _match(hospitals, treatments, ("specialization", "id", "s-ortho")) == ["b-south"]
    assert _match(hospitals, treatments, ("specialization", "id", "s-cardio")) == ["b-north", "b-central"]


def test_filters_combine_conjunctively(hospitals, treatments):
    assert _match(hospitals, treatments, ("city", "id", "city-delhi"), ("branch", "query", "central")) == ["b-central"]
    assert _match(hospitals, treatments, ("city", "id", "city-pune"), ("treatment", "query", "angio")) == []


def test_unmatched_treatment_filter_yields_no_branches(hospitals, treatments):
    assert _match(hospitals, treatments, ("treatment", "id", "t-missing")) == []
