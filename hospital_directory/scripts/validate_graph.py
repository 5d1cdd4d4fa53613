"""Validate a hospital graph file and generate statistics."""

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from directory.cms.graph_loader import load_graph_file
from directory.engine.extractor import extract_doctors, extract_treatments
from directory.models.hospital_model import HospitalModel


def validate_graph(hospitals: List[HospitalModel]) -> Dict:
    """Return statistics and data-quality issues for a parsed graph."""
    branches = [b for h in hospitals for b in h.branches]
    doctor_refs = [d for h in hospitals for d in h.doctors] + [d for b in branches for d in b.doctors]
    treatment_refs = [t for h in hospitals for t in h.treatments] + [t for b in branches for t in b.offered_treatments()]

    stats = {
        "hospitals": {
            "total": len(hospitals),
            "without_branches": sum(1 for h in hospitals if not h.branches),
        },
        "branches": {
            "total": len(branches),
            "without_city": sum(1 for b in branches if not b.city),
            "without_treatments": sum(1 for b in branches if not b.offered_treatments()),
        },
        "doctors": {
            "references": len(doctor_refs),
            "distinct": len(extract_doctors(hospitals)),
            "without_id": sum(1 for d in doctor_refs if not d.id),
            "without_department": sum(
                1 for d in doctor_refs if not any(spec.department for spec in d.specialization)
            ),
        },
        "treatments": {
            "references": len(treatment_refs),
            "distinct": len(extract_treatments(hospitals)),
            "without_id": sum(1 for t in treatment_refs if not t.id),
            "without_cost": sum(1 for t in treatment_refs if not t.cost),
        },
        "issues": [],
    }

    if stats["doctors"]["without_id"]:
        stats["issues"].append(f"{stats['doctors']['without_id']} doctor references have no id and will be dropped")
    if stats["treatments"]["without_id"]:
        stats["issues"].append(f"{stats['treatments']['without_id']} treatment references have no id and will be dropped")
    if stats["doctors"]["without_department"]:
        stats["issues"].append(
            f"{stats['doctors']['without_department']} doctor references have no department link "
            "and never match a treatment filter"
        )
    if stats["branches"]["without_city"]:
        stats["issues"].append(f"{stats['branches']['without_city']} branches have no city")

    return stats


def print_report(stats: Dict) -> None:
    print("=" * 80)
    print("HOSPITAL GRAPH VALIDATION REPORT")
    print("=" * 80)
    for section in ("hospitals", "branches", "doctors", "treatments"):
        print(f"\n{section.upper()}:")
        for key, value in stats[section].items():
            print(f"  {key}: {value}")

    print("\nISSUES:")
    if stats["issues"]:
        for issue in stats["issues"]:
            print(f"  [WARN] {issue}")
    else:
        print("  [OK] No issues found")


def main() -> None:
    parser = argparse.ArgumentParser(description="Validate a hospital graph JSON file")
    parser.add_argument("graph", help="Path to the hospital graph JSON file")
    parser.add_argument("--json", action="store_true", help="Print statistics as JSON")
    args = parser.parse_args()

    stats = validate_graph(load_graph_file(args.graph))
    if args.json:
        print(json.dumps(stats, indent=2))
    else:
        print_report(stats)


if __name__ == "__main__":
    main()
