"""Derived records built from the hospital graph."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from directory.models.hospital_model import (
    BranchModel,
    CityModel,
    DepartmentModel,
    DoctorModel,
    TreatmentModel,
)


class LocationModel(BaseModel):
    """A hospital, and optionally one of its branches, where a doctor practices."""

    model_config = ConfigDict(frozen=True)

    hospital_id: str
    hospital_name: str
    branch_id: Optional[str] = None
    branch_name: Optional[str] = None
    cities: List[CityModel] = Field(default_factory=list)

    @property
    def key(self) -> tuple:
        return (self.hospital_id, self.branch_id)


class TreatmentLocationModel(LocationModel):
    departments: List[DepartmentModel] = Field(default_factory=list)
    cost: Optional[str] = None


class ExtendedDoctorModel(DoctorModel):
    """One record per distinct doctor id with every place the doctor appears."""

    base_id: str
    locations: List[LocationModel] = Field(default_factory=list)
    departments: List[DepartmentModel] = Field(default_factory=list)
    # Set by the projector: the locations that satisfy the active filters
    filtered_locations: Optional[List[LocationModel]] = None

    def display_locations(self) -> List[LocationModel]:
        return self.locations if self.filtered_locations is None else self.filtered_locations


class ExtendedTreatmentModel(TreatmentModel):
    """One record per distinct treatment id with every branch offering it."""

    branches_available_at: List[TreatmentLocationModel] = Field(default_factory=list)
    departments: List[DepartmentModel] = Field(default_factory=list)
    filtered_branches_available_at: Optional[List[TreatmentLocationModel]] = None

    def display_locations(self) -> List[TreatmentLocationModel]:
        if self.filtered_branches_available_at is None:
            return self.branches_available_at
        return self.filtered_branches_available_at


class AnnotatedBranchModel(BranchModel):
    """A branch flattened out of its hospital, carrying the parent's identity."""

    hospital_id: str
    hospital_name: str
    hospital_logo: Optional[str] = None
