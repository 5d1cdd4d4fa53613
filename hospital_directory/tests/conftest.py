from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("LOG_DIR", str(Path(tempfile.gettempdir()) / "hospital_directory_test_logs"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

from directory.cms.graph_loader import parse_hospitals  # noqa: E402

CARDIO_DEPT = {"_id": "dep-cardio", "name": "Cardiology"}
ORTHO_DEPT = {"_id": "dep-ortho", "name": "Orthopedics"}

DELHI = {"_id": "city-delhi", "cityName": "Delhi", "state": "Delhi", "country": "India"}
PUNE = {"_id": "city-pune", "cityName": "Pune", "state": "Maharashtra", "country": "India"}

ANGIO = {"_id": "t-angio", "name": "Angioplasty", "cost": "2000", "popular": "true"}
KNEE = {"_id": "t-knee", "name": "Knee Replacement", "cost": None}

CARDIO_SPEC = {
    "_id": "s-cardio",
    "name": "Interventional Cardiology",
    "department": [CARDIO_DEPT],
    "treatments": [ANGIO],
}
ORTHO_SPEC = {"_id": "s-ortho", "name": "Joint Surgery", "department": [ORTHO_DEPT], "treatments": [KNEE]}

DR_A = {"_id": "doc-a", "doctorName": "Dr. A", "specialization": [ORTHO_SPEC]}
DR_B = {"_id": "doc-b", "doctorName": "Dr. B", "specialization": [CARDIO_SPEC], "popular": True}
DR_C = {"_id": "doc-c", "doctorName": "Dr. C", "specialization": [CARDIO_SPEC]}


def directory_records() -> list:
    """Two hospitals, three branches, three doctors, two treatments."""
    return [
        {
            "_id": "h-apollo",
            "hospitalName": "Apollo",
            "logo": "apollo.png",
            "doctors": [DR_B],
            "treatments": [],
            "branches": [
                {
                    "_id": "b-north",
                    "branchName": "North",
                    "city": [DELHI],
                    "treatments": [ANGIO],
                    "doctors": [DR_B],
                    "specialists": [
                        {"_id": "sp-cardiac", "name": "Cardiac Care", "department": [CARDIO_DEPT], "treatments": [ANGIO]}
                    ],
                    "specialization": [CARDIO_SPEC],
                },
                {
                    "_id": "b-south",
                    "branchName": "South",
                    "city": [PUNE],
                    "treatments": [KNEE],
                    "doctors": [DR_A],
                    "specialists": [
                        {"_id": "sp-joint", "name": "Joint Care", "department": [ORTHO_DEPT], "treatments": [KNEE]}
                    ],
                },
            ],
        },
        {
            "_id": "h-fortis",
            "hospitalName": "Fortis",
            "branches": [
                {
                    "_id": "b-central",
                    "branchName": "Central",
                    "city": [DELHI],
                    "treatments": [dict(ANGIO, cost="2500")],
                    "doctors": [DR_C],
                    "popular": True,
                }
            ],
        },
    ]


@pytest.fixture()
def records():
    return directory_records()


@pytest.fixture()
def hospitals(records):
    return parse_hospitals(records)
