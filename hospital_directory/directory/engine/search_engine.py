"""Request-scoped search over one snapshot of the hospital graph."""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from directory.engine.extractor import extract_doctors, extract_treatments
from directory.engine.facets import compute_facets
from directory.engine.projector import project
from directory.errors import GraphFetchError
from directory.logger import logger
from directory.models.extended_model import ExtendedDoctorModel, ExtendedTreatmentModel
from directory.models.filter_model import FilterOption, FilterState, ProjectionResult
from directory.models.hospital_model import HospitalModel


class GraphSource(Protocol):
    def fetch_hospital_graph(self) -> List[HospitalModel]:
        ...


class SearchEngine:
    """Fetches the graph once, then answers projections and facets from memory.

    Usage:
        engine = SearchEngine(CMSClient())
        result = engine.project("doctors", filters)
    """

    def __init__(self, source: GraphSource, memoize: bool = True) -> None:
        self.source = source
        self.memoize = memoize
        self._hospitals: Optional[Tuple[HospitalModel, ...]] = None
        self._doctors: Tuple[ExtendedDoctorModel, ...] = ()
        self._treatments: Tuple[ExtendedTreatmentModel, ...] = ()
        self._projections: Dict[FilterState, ProjectionResult] = {}
        self._facets: Dict[FilterState, Dict[str, List[FilterOption]]] = {}

    @classmethod
    def from_hospitals(cls, hospitals: Sequence[HospitalModel], memoize: bool = True) -> "SearchEngine":
        engine = cls(source=None, memoize=memoize)  # type: ignore[arg-type]
        engine._set_graph(hospitals)
        return engine

    def _set_graph(self, hospitals: Sequence[HospitalModel]) -> None:
        self._hospitals = tuple(hospitals)
        self._doctors = tuple(extract_doctors(self._hospitals))
        self._treatments = tuple(extract_treatments(self._hospitals))
        self.clear_cache()
        logger.info(
            "Loaded hospital graph: {} hospitals, {} doctors, {} treatments",
            len(self._hospitals),
            len(self._doctors),
            len(self._treatments),
        )

    def load(self) -> Tuple[HospitalModel, ...]:
        """Fetch the graph on first use; later calls return the same snapshot."""
        if self._hospitals is not None:
            return self._hospitals

        source_name = type(self.source).__name__
        logger.info("Fetching hospital graph from {}", source_name)
        try:
            hospitals = self.source.fetch_hospital_graph()
        except GraphFetchError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise GraphFetchError(source_name, f"fetch failed: {exc}", exc) from exc

        self._set_graph(hospitals)
        return self._hospitals

    @property
    def hospitals(self) -> Tuple[HospitalModel, ...]:
        return self.load()

    @property
    def doctors(self) -> Tuple[ExtendedDoctorModel, ...]:
        self.load()
        return self._doctors

    @property
    def treatments(self) -> Tuple[ExtendedTreatmentModel, ...]:
        self.load()
        return self._treatments

    def project(self, view: str, filters: FilterState) -> ProjectionResult:
        if filters.view != view:
            filters = filters.model_copy(update={"view": view})

        hospitals = self.load()
        if self.memoize and filters in self._projections:
            return self._projections[filters]

        result = project(hospitals, filters, doctors=self._doctors, treatments=self._treatments)
        if self.memoize:
            self._projections[filters] = result
        return result

    def facets(self, view: str, filters: FilterState) -> Dict[str, List[FilterOption]]:
        result = self.project(view, filters)
        key = filters.model_copy(update={"view": result.view})
        if self.memoize and key in self._facets:
            return self._facets[key]

        facets = compute_facets(result.view, result.branches, result.doctors, result.treatments)
        if self.memoize:
            self._facets[key] = facets
        return facets

    def clear_cache(self) -> None:
        """Drop memoized projections and facets; the loaded graph is kept."""
        self._projections.clear()
        self._facets.clear()
