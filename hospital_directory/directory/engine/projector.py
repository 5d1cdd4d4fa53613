"""Result projection for the three views.

All three collections (branches, doctors, treatments) are computed for every
filter state; the view only decides which one is counted. Doctors and
treatments carry the subset of their locations that satisfy the active
location-scoped filters.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Set, TypeVar

from directory.engine.extractor import extract_doctors, extract_treatments
from directory.engine.matcher import (
    cities_match,
    flatten_branches,
    match_branches,
    match_treatment_ids,
    specialization_matches,
)
from directory.logger import logger
from directory.models.extended_model import (
    AnnotatedBranchModel,
    ExtendedDoctorModel,
    ExtendedTreatmentModel,
    LocationModel,
)
from directory.models.filter_model import FilterState, ProjectionResult
from directory.models.hospital_model import DepartmentModel, HospitalModel
from directory.utils.text_helpers import matches_value, sort_key

T = TypeVar("T")


def _department_matches(departments: Iterable[DepartmentModel], filters: FilterState) -> bool:
    value = filters.department
    return any(matches_value(value.id, value.query, d.id, d.name) for d in departments)


class CrossFilter:
    """Id sets derived once per filter state and shared by every predicate."""

    def __init__(
        self,
        filters: FilterState,
        branches: Sequence[AnnotatedBranchModel],
        doctors: Sequence[ExtendedDoctorModel],
        treatments: Sequence[ExtendedTreatmentModel],
    ) -> None:
        self.filters = filters
        self.empty = False

        self.treatment_ids: Set[str] = set()
        self.treatment_branch_ids: Set[str] = set()
        self.treatment_department_ids: Set[str] = set()
        if filters.treatment.active:
            self.treatment_ids = match_treatment_ids(filters, treatments)
            for t in treatments:
                if t.id in self.treatment_ids:
                    self.treatment_branch_ids.update(loc.branch_id for loc in t.branches_available_at if loc.branch_id)
                    self.treatment_department_ids.update(d.id for d in t.departments if d.id)
            self.empty = self.empty or not self.treatment_ids

        self.doctor_ids: Set[str] = set()
        self.doctor_branch_ids: Set[str] = set()
        self.doctor_treatment_ids: Set[str] = set()
        if filters.doctor.active:
            value = filters.doctor
            matched = [d for d in doctors if matches_value(value.id, value.query, d.base_id, d.name)]
            self.doctor_ids = {d.base_id for d in matched}
            for d in matched:
                self.doctor_branch_ids.update(loc.branch_id for loc in d.locations if loc.branch_id)
                for spec in d.specialization:
                    self.doctor_treatment_ids.update(t.id for t in spec.treatments if t.id)
            for t in treatments:
                if any(loc.branch_id in self.doctor_branch_ids for loc in t.branches_available_at):
                    self.doctor_treatment_ids.add(t.id)
            self.empty = self.empty or not self.doctor_ids

        self.branch_ids: Set[str] = set()
        if filters.branch.active:
            value = filters.branch
            self.branch_ids = {b.id for b in branches if matches_value(value.id, value.query, b.id, b.name)}
            self.empty = self.empty or not self.branch_ids

        self.specialization_treatment_ids: Set[str] = set()
        self.specialization_department_ids: Set[str] = set()
        if filters.specialization.active:
            for d in doctors:
                for spec in d.specialization:
                    if specialization_matches([spec], filters.specialization):
                        self.specialization_treatment_ids.update(t.id for t in spec.treatments if t.id)
                        self.specialization_department_ids.update(dept.id for dept in spec.department if dept.id)

    def location_scoped(self, with_treatment: bool = False, with_doctor: bool = False) -> bool:
        f = self.filters
        if f.city.active or f.state.active or f.location.active or f.branch.active:
            return True
        return (with_treatment and f.treatment.active) or (with_doctor and f.doctor.active)

    def location_passes(self, location: LocationModel, with_treatment: bool = False) -> bool:
        f = self.filters
        if not cities_match(location.cities, f):
            return False
        if f.branch.active and location.branch_id not in self.branch_ids:
            return False
        if with_treatment and f.treatment.active and location.branch_id not in self.treatment_branch_ids:
            return False
        return True


def filter_doctors(doctors: Sequence[ExtendedDoctorModel], cross: CrossFilter) -> List[ExtendedDoctorModel]:
    """Doctors passing the filters, each with `filtered_locations` set.

    Under a treatment filter a doctor needs both a department shared with the
    selected treatments and a location at a branch offering them.
    """
    if cross.empty:
        return []
    f = cross.filters
    scoped = cross.location_scoped(with_treatment=True)
    out: List[ExtendedDoctorModel] = []
    for doctor in doctors:
        if f.doctor.active and doctor.base_id not in cross.doctor_ids:
            continue
        if f.specialization.active and not specialization_matches(doctor.specialization, f.specialization):
            continue
        if f.department.active and not _department_matches(doctor.departments, f):
            continue
        if f.treatment.active and not any(d.id in cross.treatment_department_ids for d in doctor.departments):
            continue

        locations = [loc for loc in doctor.locations if cross.location_passes(loc, with_treatment=True)]
        if scoped and not locations:
            continue
        out.append(doctor.model_copy(update={"filtered_locations": locations}))
    return out


def filter_treatments(treatments: Sequence[ExtendedTreatmentModel], cross: CrossFilter) -> List[ExtendedTreatmentModel]:
    """Treatments passing the filters, each with `filtered_branches_available_at` set."""
    if cross.empty:
        return []
    f = cross.filters
    scoped = cross.location_scoped(with_doctor=True)
    out: List[ExtendedTreatmentModel] = []
    for treatment in treatments:
        if f.treatment.active and treatment.id not in cross.treatment_ids:
            continue
        if f.doctor.active and treatment.id not in cross.doctor_treatment_ids:
            continue
        if f.department.active and not _department_matches(treatment.departments, f):
            continue
        if f.specialization.active and not (
            treatment.id in cross.specialization_treatment_ids
            or any(d.id in cross.specialization_department_ids for d in treatment.departments)
        ):
            continue

        candidates = treatment.branches_available_at
        if f.doctor.active:
            # Treatments linked only through a specialization keep their other locations
            at_doctor = [loc for loc in candidates if loc.branch_id in cross.doctor_branch_ids]
            if at_doctor:
                candidates = at_doctor
        locations = [loc for loc in candidates if cross.location_passes(loc)]
        if scoped and not locations:
            continue
        out.append(treatment.model_copy(update={"filtered_branches_available_at": locations}))
    return out


def filter_branches(
    hospitals: Sequence[HospitalModel],
    treatments: Sequence[ExtendedTreatmentModel],
    cross: CrossFilter,
) -> List[AnnotatedBranchModel]:
    if cross.empty:
        return []
    branches = match_branches(hospitals, cross.filters, treatments)
    if cross.filters.doctor.active:
        branches = [b for b in branches if b.id in cross.doctor_branch_ids]
    return branches


def sort_entities(items: Sequence[T], sort_by: str) -> List[T]:
    """`popular` keeps popular entities in their current order; `za` sorts descending, anything else ascending."""
    if sort_by == "popular":
        return [item for item in items if getattr(item, "popular", False)]
    return sorted(items, key=lambda item: sort_key(getattr(item, "name", "")), reverse=sort_by == "za")


def project(
    hospitals: Sequence[HospitalModel],
    filters: FilterState,
    doctors: Optional[Sequence[ExtendedDoctorModel]] = None,
    treatments: Optional[Sequence[ExtendedTreatmentModel]] = None,
) -> ProjectionResult:
    """Filtered, sorted branches, doctors and treatments for `filters.view`."""
    if doctors is None:
        doctors = extract_doctors(hospitals)
    if treatments is None:
        treatments = extract_treatments(hospitals)

    cross = CrossFilter(filters, flatten_branches(hospitals), doctors, treatments)
    if cross.empty:
        logger.debug("Active primary filter matches nothing: {}", filters.active_keys())

    branches = sort_entities(filter_branches(hospitals, treatments, cross), filters.sort_by)
    matched_doctors = sort_entities(filter_doctors(doctors, cross), filters.sort_by)
    matched_treatments = sort_entities(filter_treatments(treatments, cross), filters.sort_by)

    counts = {
        "hospitals": len(branches),
        "doctors": len(matched_doctors),
        "treatments": len(matched_treatments),
    }
    logger.debug("Projection for view {}: {}", filters.view, counts)
    return ProjectionResult(
        view=filters.view,
        branches=branches,
        doctors=matched_doctors,
        treatments=matched_treatments,
        count=counts[filters.view],
    )
