"""Facet options computed from the current, already filtered results."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from directory.models.extended_model import (
    AnnotatedBranchModel,
    ExtendedDoctorModel,
    ExtendedTreatmentModel,
)
from directory.models.filter_model import FILTER_KEYS, FilterOption
from directory.models.hospital_model import CityModel
from directory.utils.text_helpers import sort_key


class OptionSet:
    """Options deduplicated by id; the first name seen for an id wins."""

    def __init__(self) -> None:
        self._options: Dict[str, FilterOption] = {}

    def add(self, option_id: Optional[str], name: Optional[str]) -> None:
        if not option_id or not name or option_id in self._options:
            return
        self._options[option_id] = FilterOption(id=option_id, name=name)

    def sorted(self) -> List[FilterOption]:
        return sorted(self._options.values(), key=lambda o: sort_key(o.name))


def _view_cities(
    view: str,
    branches: Sequence[AnnotatedBranchModel],
    doctors: Sequence[ExtendedDoctorModel],
    treatments: Sequence[ExtendedTreatmentModel],
) -> Iterable[CityModel]:
    if view == "doctors":
        for doctor in doctors:
            for loc in doctor.display_locations():
                yield from loc.cities
    elif view == "treatments":
        for treatment in treatments:
            for loc in treatment.display_locations():
                yield from loc.cities
    else:
        for branch in branches:
            yield from branch.city


def compute_facets(
    view: str,
    branches: Sequence[AnnotatedBranchModel],
    doctors: Sequence[ExtendedDoctorModel],
    treatments: Sequence[ExtendedTreatmentModel],
) -> Dict[str, List[FilterOption]]:
    """Options for every filter key, sorted by name.

    Location facets (city, state, location) follow the view: branch cities for
    hospitals, the doctors' filtered locations for doctors, the treatments'
    filtered branches for treatments. Specialization and department options
    always come from the filtered doctors.
    """
    sets = {key: OptionSet() for key in FILTER_KEYS}

    for city in _view_cities(view, branches, doctors, treatments):
        sets["city"].add(city.id, city.name)
        sets["location"].add(f"city:{city.id}", city.name)
        if city.state:
            sets["state"].add(city.state, city.state)
            sets["location"].add(f"state:{city.state}", city.state)

    for branch in branches:
        sets["branch"].add(branch.id, branch.name)
    for treatment in treatments:
        sets["treatment"].add(treatment.id, treatment.name)
    for doctor in doctors:
        sets["doctor"].add(doctor.base_id, doctor.name)
        for spec in doctor.specialization:
            sets["specialization"].add(spec.id, spec.name)
        for dept in doctor.departments:
            sets["department"].add(dept.id, dept.name)

    return {key: option_set.sorted() for key, option_set in sets.items()}
