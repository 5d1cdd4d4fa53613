"""Branch matching against the active filter state."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Set

from directory.logger import logger
from directory.models.extended_model import AnnotatedBranchModel, ExtendedTreatmentModel
from directory.models.filter_model import FilterState, FilterValue
from directory.models.hospital_model import BranchModel, CityModel, HospitalModel, SpecializationModel
from directory.utils.text_helpers import contains_text, matches_value


def flatten_branches(hospitals: Iterable[HospitalModel]) -> List[AnnotatedBranchModel]:
    """Every branch of every hospital, annotated with its parent's id, name and logo."""
    flat: List[AnnotatedBranchModel] = []
    for hospital in hospitals:
        for branch in hospital.branches:
            fields = {name: getattr(branch, name) for name in BranchModel.model_fields}
            flat.append(
                AnnotatedBranchModel(
                    **fields,
                    hospital_id=hospital.id,
                    hospital_name=hospital.name,
                    hospital_logo=hospital.logo,
                )
            )
    return flat


def match_treatment_ids(filters: FilterState, treatments: Iterable[ExtendedTreatmentModel]) -> Set[str]:
    """Ids of the treatments selected by the treatment filter (empty when inactive)."""
    value = filters.treatment
    if not value.active:
        return set()
    return {t.id for t in treatments if t.id and matches_value(value.id, value.query, t.id, t.name)}


# --- per-field predicates ----------------------------------------------------------

def city_matches(cities: Sequence[CityModel], value: FilterValue) -> bool:
    return any(matches_value(value.id, value.query, c.id, c.name) for c in cities)


def state_matches(cities: Sequence[CityModel], value: FilterValue) -> bool:
    return any(matches_value(value.id, value.query, c.state, c.state) for c in cities if c.state)


def location_matches(cities: Sequence[CityModel], value: FilterValue) -> bool:
    """Combined city/state filter: ids are `city:<id>` or `state:<name>`."""
    for c in cities:
        if value.id and (value.id == f"city:{c.id}" or (c.state and value.id == f"state:{c.state}")):
            return True
        if contains_text(c.name, value.query) or contains_text(c.state, value.query):
            return True
    return False


def cities_match(cities: Sequence[CityModel], filters: FilterState) -> bool:
    """City, state and location filters, conjunctively; inactive ones pass."""
    if filters.city.active and not city_matches(cities, filters.city):
        return False
    if filters.state.active and not state_matches(cities, filters.state):
        return False
    if filters.location.active and not location_matches(cities, filters.location):
        return False
    return True


def specialization_matches(specializations: Sequence[SpecializationModel], value: FilterValue) -> bool:
    return any(matches_value(value.id, value.query, s.id, s.name) for s in specializations)


def branch_offers_any(branch: BranchModel, treatment_ids: Set[str]) -> bool:
    return any(t.id in treatment_ids for t in branch.offered_treatments())


def branch_matches(branch: AnnotatedBranchModel, filters: FilterState, treatment_ids: Set[str]) -> bool:
    if not cities_match(branch.city, filters):
        return False

    if filters.branch.active and not matches_value(filters.branch.id, filters.branch.query, branch.id, branch.name):
        return False

    if filters.treatment.active and not branch_offers_any(branch, treatment_ids):
        return False

    if filters.department.active:
        departments = [d for specialist in branch.specialists for d in specialist.department]
        if not any(matches_value(filters.department.id, filters.department.query, d.id, d.name) for d in departments):
            return False

    if filters.specialization.active:
        value = filters.specialization
        if not (
            specialization_matches(branch.specialization, value)
            or any(specialization_matches(d.specialization, value) for d in branch.doctors)
        ):
            return False

    return True


def match_branches(
    hospitals: Sequence[HospitalModel],
    filters: FilterState,
    extended_treatments: Sequence[ExtendedTreatmentModel],
) -> List[AnnotatedBranchModel]:
    """Branches passing every active filter.

    A treatment filter that selects no treatment yields no branches at all.
    """
    treatment_ids: Set[str] = set()
    if filters.treatment.active:
        treatment_ids = match_treatment_ids(filters, extended_treatments)
        if not treatment_ids:
            logger.debug("Treatment filter {} matches no treatment", filters.treatment)
            return []

    return [b for b in flatten_branches(hospitals) if branch_matches(b, filters, treatment_ids)]
