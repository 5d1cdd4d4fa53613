"""Parse raw CMS hospital records into graph models."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from pydantic import ValidationError

from directory.errors import GraphFetchError
from directory.logger import logger
from directory.models.hospital_model import HospitalModel


def parse_hospitals(records: Iterable[Dict[str, Any]]) -> List[HospitalModel]:
    """Validate hospital records; a record that fails validation is logged and skipped."""
    hospitals: List[HospitalModel] = []
    for index, record in enumerate(records):
        try:
            hospitals.append(HospitalModel.model_validate(record))
        except ValidationError as exc:
            name = record.get("hospitalName") or record.get("name") if isinstance(record, dict) else None
            logger.warning("Skipping invalid hospital record #{} ({}): {}", index, name, exc.errors()[:3])
    return hospitals


def unwrap_items(payload: Any) -> List[Dict[str, Any]]:
    """Accept either a bare array or an `{"items": [...]}` envelope."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("items"), list):
        return payload["items"]
    raise ValueError("Graph payload must be a JSON array or an object with an 'items' array")


def load_graph_file(path: Union[str, Path]) -> List[HospitalModel]:
    """Read a hospital graph from a JSON file."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
        records = unwrap_items(payload)
    except (OSError, ValueError) as exc:
        raise GraphFetchError("file", f"cannot read {path}: {exc}", exc) from exc

    hospitals = parse_hospitals(records)
    logger.info("Loaded {} hospitals from {}", len(hospitals), path)
    return hospitals


class FileGraphSource:
    """Graph source backed by a JSON file on disk."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def fetch_hospital_graph(self) -> List[HospitalModel]:
        return load_graph_file(self.path)
