"""Filter state and projection result models."""

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

from directory.models.extended_model import (
    AnnotatedBranchModel,
    ExtendedDoctorModel,
    ExtendedTreatmentModel,
)

View = Literal["hospitals", "doctors", "treatments"]
SortBy = Literal["all", "popular", "az", "za"]
SubKey = Literal["id", "query"]

VIEWS = ("hospitals", "doctors", "treatments")
SORT_OPTIONS = ("all", "popular", "az", "za")
FILTER_KEYS = (
    "city",
    "state",
    "treatment",
    "specialization",
    "department",
    "doctor",
    "branch",
    "location",
)
# At most one of these may be non-empty at a time
PRIMARY_KEYS = ("doctor", "treatment", "branch")
# Cleared whenever a primary key is set
DEPENDENT_KEYS = ("department", "specialization")


class FilterValue(BaseModel):
    """A single filter field: a selected option id or a free-text query, never both."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    query: str = ""

    @property
    def active(self) -> bool:
        return bool(self.id or self.query)


class FilterState(BaseModel):
    model_config = ConfigDict(frozen=True)

    view: View = "hospitals"
    city: FilterValue = Field(default_factory=FilterValue)
    state: FilterValue = Field(default_factory=FilterValue)
    treatment: FilterValue = Field(default_factory=FilterValue)
    specialization: FilterValue = Field(default_factory=FilterValue)
    department: FilterValue = Field(default_factory=FilterValue)
    doctor: FilterValue = Field(default_factory=FilterValue)
    branch: FilterValue = Field(default_factory=FilterValue)
    location: FilterValue = Field(default_factory=FilterValue)
    sort_by: SortBy = "all"

    def get_field(self, key: str) -> FilterValue:
        return getattr(self, key)

    def active_keys(self) -> List[str]:
        return [key for key in FILTER_KEYS if self.get_field(key).active]


class FilterOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class ProjectionResult(BaseModel):
    """All three result collections for one filter state; only `count` depends on the view."""

    view: View
    branches: List[AnnotatedBranchModel] = Field(default_factory=list)
    doctors: List[ExtendedDoctorModel] = Field(default_factory=list)
    treatments: List[ExtendedTreatmentModel] = Field(default_factory=list)
    count: int = 0
