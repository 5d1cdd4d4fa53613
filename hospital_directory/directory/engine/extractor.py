"""Entity extraction: turn the nested hospital graph into unique doctors and treatments."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from directory.logger import logger
from directory.models.extended_model import (
    ExtendedDoctorModel,
    ExtendedTreatmentModel,
    LocationModel,
    TreatmentLocationModel,
)
from directory.models.hospital_model import (
    BranchModel,
    DepartmentModel,
    DoctorModel,
    HospitalModel,
    TreatmentModel,
)

DEFAULT_TREATMENT_COST = "Price Varies"


class GraphVisitor:
    """Callbacks invoked by `walk_graph` for every doctor and treatment occurrence."""

    def visit_doctor(self, hospital: HospitalModel, branch: Optional[BranchModel], doctor: DoctorModel) -> None:
        pass

    def visit_treatment(
        self,
        hospital: HospitalModel,
        branch: Optional[BranchModel],
        treatment: TreatmentModel,
        departments: List[DepartmentModel],
    ) -> None:
        pass


def specialist_departments(branch: BranchModel, treatment_id: Optional[str]) -> List[DepartmentModel]:
    """Departments of every specialist at the branch that lists the treatment."""
    if not treatment_id:
        return []
    departments: List[DepartmentModel] = []
    for specialist in branch.specialists:
        if any(t.id == treatment_id for t in specialist.treatments):
            departments.extend(specialist.department)
    return departments


def walk_graph(hospitals: Iterable[HospitalModel], visitor: GraphVisitor) -> None:
    """Visit every doctor and treatment in deterministic order.

    Hospital order first; within a hospital its own doctors and treatments
    (no branch context), then each branch's doctors, treatments and
    specialists' treatments.
    """
    for hospital in hospitals:
        for doctor in hospital.doctors:
            visitor.visit_doctor(hospital, None, doctor)
        for treatment in hospital.treatments:
            visitor.visit_treatment(hospital, None, treatment, [])

        for branch in hospital.branches:
            for doctor in branch.doctors:
                visitor.visit_doctor(hospital, branch, doctor)
            for treatment in branch.offered_treatments():
                visitor.visit_treatment(hospital, branch, treatment, specialist_departments(branch, treatment.id))


def merge_departments(target: Dict[str, DepartmentModel], departments: Iterable[DepartmentModel]) -> None:
    """Id-keyed union; the first department seen for an id wins."""
    for dept in departments:
        if dept.id and dept.id not in target:
            target[dept.id] = dept


def _fields_of(model) -> dict:
    return {name: getattr(model, name) for name in type(model).model_fields}


class _Entry:
    __slots__ = ("record", "locations", "location_keys", "departments")

    def __init__(self, record) -> None:
        self.record = record
        self.locations: list = []
        self.location_keys: set = set()
        self.departments: Dict[str, DepartmentModel] = {}

    def add_location(self, location: LocationModel) -> bool:
        if location.key in self.location_keys:
            return False
        self.location_keys.add(location.key)
        self.locations.append(location)
        return True


class DoctorCollector(GraphVisitor):
    """Accumulates doctor occurrences into one entry per doctor id."""

    def __init__(self) -> None:
        self._entries: Dict[str, _Entry] = {}
        self.dropped = 0

    def visit_doctor(self, hospital: HospitalModel, branch: Optional[BranchModel], doctor: DoctorModel) -> None:
        if not doctor.id:
            logger.warning(
                "Dropping doctor without id '{}' at hospital {} (branch {})",
                doctor.name,
                hospital.id,
                branch.id if branch else None,
            )
            self.dropped += 1
            return

        entry = self._entries.get(doctor.id)
        if entry is None:
            entry = _Entry(doctor)
            self._entries[doctor.id] = entry

        entry.add_location(
            LocationModel(
                hospital_id=hospital.id,
                hospital_name=hospital.name,
                branch_id=branch.id if branch else None,
                branch_name=branch.name if branch else None,
                cities=list(branch.city) if branch else [],
            )
        )
        merge_departments(entry.departments, (d for spec in doctor.specialization for d in spec.department))

    def build(self) -> List[ExtendedDoctorModel]:
        return [
            ExtendedDoctorModel(
                **_fields_of(entry.record),
                base_id=base_id,
                locations=entry.locations,
                departments=list(entry.departments.values()),
            )
            for base_id, entry in self._entries.items()
        ]


class TreatmentCollector(GraphVisitor):
    """Accumulates treatment occurrences into one entry per treatment id."""

    def __init__(self) -> None:
        self._entries: Dict[str, _Entry] = {}
        self.dropped = 0

    def visit_treatment(
        self,
        hospital: HospitalModel,
        branch: Optional[BranchModel],
        treatment: TreatmentModel,
        departments: List[DepartmentModel],
    ) -> None:
        if not treatment.id:
            logger.warning(
                "Dropping treatment without id '{}' at hospital {} (branch {})",
                treatment.name,
                hospital.id,
                branch.id if branch else None,
            )
            self.dropped += 1
            return

        entry = self._entries.get(treatment.id)
        if entry is None:
            entry = _Entry(treatment)
            self._entries[treatment.id] = entry

        unique: Dict[str, DepartmentModel] = {}
        merge_departments(unique, departments)
        entry.add_location(
            TreatmentLocationModel(
                hospital_id=hospital.id,
                hospital_name=hospital.name,
                branch_id=branch.id if branch else None,
                branch_name=branch.name if branch else None,
                cities=list(branch.city) if branch else [],
                departments=list(unique.values()),
                cost=treatment.cost,
            )
        )
        merge_departments(entry.departments, unique.values())

    def build(self) -> List[ExtendedTreatmentModel]:
        out = []
        for entry in self._entries.values():
            fields = _fields_of(entry.record)
            fields["cost"] = fields.get("cost") or DEFAULT_TREATMENT_COST
            out.append(
                ExtendedTreatmentModel(
                    **fields,
                    branches_available_at=entry.locations,
                    departments=list(entry.departments.values()),
                )
            )
        return out


def extract_doctors(hospitals: Sequence[HospitalModel]) -> List[ExtendedDoctorModel]:
    """One `ExtendedDoctorModel` per distinct doctor id, in first-seen order."""
    collector = DoctorCollector()
    walk_graph(hospitals, collector)
    doctors = collector.build()
    logger.debug("Extracted {} doctors ({} dropped)", len(doctors), collector.dropped)
    return doctors


def extract_treatments(hospitals: Sequence[HospitalModel]) -> List[ExtendedTreatmentModel]:
    """One `ExtendedTreatmentModel` per distinct treatment id, in first-seen order."""
    collector = TreatmentCollector()
    walk_graph(hospitals, collector)
    treatments = collector.build()
    logger.debug("Extracted {} treatments ({} dropped)", len(treatments), collector.dropped)
    return treatments
