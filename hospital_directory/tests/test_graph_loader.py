import json

import pytest

from directory.cms.graph_loader import FileGraphSource, load_graph_file, parse_hospitals, unwrap_items
from directory.errors import GraphFetchError
from scripts.validate_graph import validate_graph


def test_load_graph_file_with_envelope(tmp_path, records):
    path = tmp_path / "graph.json"
    path.write_text(json.dumps({"items": records, "total": len(records)}), encoding="utf-8")

    hospitals = load_graph_file(path)
    assert [h.id for h in hospitals] == ["h-apollo", "h-fortis"]
    assert FileGraphSource(path).fetch_hospital_graph() == hospitals


def test_load_graph_file_with_bare_array(tmp_path, records):
    path = tmp_path / "graph.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    assert len(load_graph_file(str(path))) == 2


def test_missing_file_raises_graph_fetch_error(tmp_path):
    with pytest.raises(GraphFetchError) as exc_info:
        load_graph_file(tmp_path / "missing.json")
    assert exc_info.value.source == "file"


def test_malformed_file_raises_graph_fetch_error(tmp_path):
    path = tmp_path / "graph.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(GraphFetchError):
        load_graph_file(path)


def test_unwrap_items_rejects_other_shapes():
    with pytest.raises(ValueError):
        unwrap_items({"hospitals": []})


def test_validate_graph_reports_counts_and_issues(records):
    records.append(
        {
            "_id": "h-empty",
            "hospitalName": "Empty",
            "doctors": [{"doctorName": "No Id"}],
            "branches": [{"_id": "b-x", "branchName": "Nowhere"}],
        }
    )
    stats = validate_graph(parse_hospitals(records))
    assert stats["hospitals"] == {"total": 3, "without_branches": 0}
    assert stats["branches"]["total"] == 4
    assert stats["branches"]["without_city"] == 1
    assert stats["doctors"]["distinct"] == 3
    assert stats["doctors"]["without_id"] == 1
    assert stats["treatments"]["distinct"] == 2
    assert any("no id" in issue for issue in stats["issues"])
    assert any("no city" in issue for issue in stats["issues"])
