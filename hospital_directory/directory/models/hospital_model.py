"""Pydantic models for the hospital graph served by the CMS.

The CMS hands out a denormalized tree: hospitals own branches, and both levels
carry their own doctor and treatment references. The same doctor or treatment
id may appear at several places in the tree; these models keep each
occurrence as it was delivered and leave merging to the extractor.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from directory.utils.text_helpers import clean_text


def _ensure_list(v: Any) -> List[Any]:
    if v is None:
        return []
    if isinstance(v, (list, tuple)):
        return [item for item in v if item is not None]
    return [v]


def _strip(v: Any) -> Any:
    return clean_text(v) if isinstance(v, str) else v


def _normalize_flag(v: Any) -> bool:
    if v in (None, "", "-"):
        return False
    if isinstance(v, str):
        return v.strip().lower() == "true"
    return bool(v)


def _optional_text(v: Any) -> Optional[str]:
    if v is None:
        return None
    if isinstance(v, (int, float)):
        return str(v)
    return clean_text(str(v))


class _GraphModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class CityModel(_GraphModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str = Field(default="", validation_alias=AliasChoices("cityName", "name"))
    state: Optional[str] = None
    country: Optional[str] = None

    @field_validator("name", mode="before")
    def strip_name(cls, v):  # noqa: N805
        return _strip(v) or ""

    @field_validator("state", "country", mode="before")
    def strip_strings(cls, v):  # noqa: N805
        return _strip(v)


class DepartmentModel(_GraphModel):
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    name: str = ""

    @field_validator("name", mode="before")
    def strip_name(cls, v):  # noqa: N805
        return _strip(v) or ""


class TreatmentModel(_GraphModel):
    # id stays optional so malformed records reach the extractor, which drops them
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    name: str = Field(default="", validation_alias=AliasChoices("name", "treatmentName"))
    cost: Optional[str] = None
    category: Optional[str] = None
    duration: Optional[str] = None
    description: Optional[str] = None
    popular: bool = False

    @field_validator("name", mode="before")
    def strip_name(cls, v):  # noqa: N805
        return _strip(v) or ""

    @field_validator("cost", "category", "duration", "description", mode="before")
    def normalize_text(cls, v):  # noqa: N805
        return _optional_text(v)

    @field_validator("popular", mode="before")
    def normalize_popular(cls, v):  # noqa: N805
        return _normalize_flag(v)


class SpecializationModel(_GraphModel):
    """A doctor's specialization: a department link plus the treatments it covers."""

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    name: str = Field(default="", validation_alias=AliasChoices("name", "title", "specialty"))
    department: List[DepartmentModel] = Field(default_factory=list)
    treatments: List[TreatmentModel] = Field(default_factory=list)

    @field_validator("name", mode="before")
    def strip_name(cls, v):  # noqa: N805
        return _strip(v) or ""

    @field_validator("department", "treatments", mode="before")
    def ensure_list(cls, v):  # noqa: N805
        return _ensure_list(v)


class SpecialistModel(SpecializationModel):
    """Branch-scoped bundle linking departments and treatments to a branch."""


class DoctorModel(_GraphModel):
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    name: str = Field(default="", validation_alias=AliasChoices("doctorName", "name"))
    specialization: List[SpecializationModel] = Field(default_factory=list)
    qualification: Optional[str] = None
    experience_years: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("experienceYears", "experience_years")
    )
    designation: Optional[str] = None
    about: Optional[str] = Field(default=None, validation_alias=AliasChoices("aboutDoctor", "about"))
    profile_image: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("profileImage", "profile_image")
    )
    popular: bool = False

    @field_validator("name", mode="before")
    def strip_name(cls, v):  # noqa: N805
        return _strip(v) or ""

    @field_validator("specialization", mode="before")
    def ensure_specialization_list(cls, v):  # noqa: N805
        # CMS rows hold a reference list, a single object, or bare names
        out = []
        for item in _ensure_list(v):
            if isinstance(item, str):
                text = item.strip()
                if text:
                    out.append({"id": text, "name": text})
            else:
                out.append(item)
        return out

    @field_validator("qualification", "experience_years", "designation", "about", "profile_image", mode="before")
    def normalize_text(cls, v):  # noqa: N805
        return _optional_text(v)

    @field_validator("popular", mode="before")
    def normalize_popular(cls, v):  # noqa: N805
        return _normalize_flag(v)


class BranchModel(_GraphModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str = Field(default="", validation_alias=AliasChoices("branchName", "name"))
    address: Optional[str] = None
    city: List[CityModel] = Field(default_factory=list)
    treatments: List[TreatmentModel] = Field(default_factory=list)
    doctors: List[DoctorModel] = Field(default_factory=list)
    specialists: List[SpecialistModel] = Field(default_factory=list)
    specialization: List[SpecializationModel] = Field(default_factory=list)
    total_beds: Optional[str] = Field(default=None, validation_alias=AliasChoices("totalBeds", "total_beds"))
    no_of_doctors: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("noOfDoctors", "no_of_doctors")
    )
    year_established: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("yearEstablished", "year_established")
    )
    description: Optional[str] = None
    image: Optional[str] = Field(default=None, validation_alias=AliasChoices("branchImage", "image"))
    popular: bool = False

    @field_validator("name", mode="before")
    def strip_name(cls, v):  # noqa: N805
        return _strip(v) or ""

    @field_validator("city", "treatments", "doctors", "specialists", "specialization", mode="before")
    def ensure_list(cls, v):  # noqa: N805
        return _ensure_list(v)

    @field_validator("address", "total_beds", "no_of_doctors", "year_established", "description", "image", mode="before")
    def normalize_text(cls, v):  # noqa: N805
        return _optional_text(v)

    @field_validator("popular", mode="before")
    def normalize_popular(cls, v):  # noqa: N805
        return _normalize_flag(v)

    def offered_treatments(self) -> List[TreatmentModel]:
        """Treatments listed on the branch itself followed by those of its specialists."""
        out = list(self.treatments)
        for specialist in self.specialists:
            out.extend(specialist.treatments)
        return out


class HospitalModel(_GraphModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str = Field(default="", validation_alias=AliasChoices("hospitalName", "name"))
    logo: Optional[str] = None
    year_established: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("yearEstablished", "year_established")
    )
    description: Optional[str] = None
    treatments: List[TreatmentModel] = Field(default_factory=list)
    doctors: List[DoctorModel] = Field(default_factory=list)
    branches: List[BranchModel] = Field(default_factory=list)
    popular: bool = False

    @field_validator("name", mode="before")
    def strip_name(cls, v):  # noqa: N805
        return _strip(v) or ""

    @field_validator("treatments", "doctors", "branches", mode="before")
    def ensure_list(cls, v):  # noqa: N805
        return _ensure_list(v)

    @field_validator("logo", "year_established", "description", mode="before")
    def normalize_text(cls, v):  # noqa: N805
        return _optional_text(v)

    @field_validator("popular", mode="before")
    def normalize_popular(cls, v):  # noqa: N805
        return _normalize_flag(v)
