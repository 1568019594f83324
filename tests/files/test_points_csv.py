# tests/files/test_points_csv.py
import pytest

from subcatch_pop.app.diagnostics import Diagnostics, FatalError, RowIssue
from subcatch_pop.io.points_csv import read_points


def _csv(tmp_path, text, name="points.csv"):
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return p


def test_reads_points_and_ignores_other_columns(tmp_path):
    p = _csv(
        tmp_path,
        'objectid,WKT,oc,waterconne\n1,"POINT (530000.5 180000.25)",2.4,yes\n2,"MULTIPOINT ((1 2))",1,no\n',
    )
    diags = Diagnostics()
    pts = read_points(p, diags)
    assert [(pt.x, pt.y, pt.weight) for pt in pts] == [(530000.5, 180000.25, 2.4), (1.0, 2.0, 1.0)]
    assert [pt.source_id for pt in pts] == ["row 2", "row 3"]
    assert len(diags) == 0


def test_geometry_column_precedence(tmp_path):
    # WKT beats geometry when both exist
    p = _csv(tmp_path, 'geometry,WKT,OC\n"POINT (9 9)","POINT (1 1)",1\n')
    (pt,) = read_points(p, Diagnostics())
    assert (pt.x, pt.y) == (1.0, 1.0)


def test_lowercase_oc_wins_over_uppercase(tmp_path):
    p = _csv(tmp_path, 'wkt,OC,oc\n"POINT (1 1)",9,2\n')
    (pt,) = read_points(p, Diagnostics())
    assert pt.weight == 2.0


@pytest.mark.parametrize("oc", ["0", "abc", "", "-3"])
def test_bad_weight_rows_are_skipped(tmp_path, oc):
    p = _csv(tmp_path, f'WKT,oc\n"POINT (1 1)",{oc}\n"POINT (2 2)",1\n')
    diags = Diagnostics()
    pts = read_points(p, diags)
    assert len(pts) == 1
    (issue,) = diags.of_type(RowIssue)
    assert issue.row == 2
    assert "missing or non-positive weight" in issue.message
    assert issue.data["WKT"] == "POINT (1 1)"


def test_missing_geometry_column_is_row_scoped(tmp_path):
    p = _csv(tmp_path, "x,y,oc\n1,2,3\n4,5,6\n")
    diags = Diagnostics()
    assert read_points(p, diags) == []
    assert [e.row for e in diags.of_type(RowIssue)] == [2, 3]
    assert "Missing WKT geometry for row 2" in diags.of_type(RowIssue)[0].message


def test_blank_lines_are_not_rows(tmp_path):
    p = _csv(tmp_path, 'WKT,oc\n\n"POINT (1 1)",1\n\n')
    diags = Diagnostics()
    assert len(read_points(p, diags)) == 1
    assert len(diags) == 0


def test_row_of_empty_fields_is_reported(tmp_path):
    p = _csv(tmp_path, 'WKT,oc\n"POINT (1 1)",1\n,\n')
    diags = Diagnostics()
    assert len(read_points(p, diags)) == 1
    (issue,) = diags.of_type(RowIssue)
    assert issue.row == 3
    assert "Missing WKT geometry for row 3" in issue.message


def test_only_empty_field_rows_are_issues_not_fatal(tmp_path):
    p = _csv(tmp_path, "WKT,oc\n,\n,\n")
    diags = Diagnostics()
    assert read_points(p, diags) == []
    assert [e.row for e in diags.of_type(RowIssue)] == [2, 3]


def test_missing_file_is_fatal(tmp_path):
    with pytest.raises(FatalError, match="not found"):
        read_points(tmp_path / "missing.csv", Diagnostics())


@pytest.mark.parametrize("text", ["", "WKT,oc\n", "WKT,oc\n\n\n"])
def test_empty_file_is_fatal(tmp_path, text):
    with pytest.raises(FatalError, match="empty"):
        read_points(_csv(tmp_path, text), Diagnostics())


def test_bom_header_is_handled(tmp_path):
    p = tmp_path / "bom.csv"
    p.write_bytes('\ufeffWKT,oc\n"POINT (3 4)",1\n'.encode("utf-8"))
    (pt,) = read_points(p, Diagnostics())
    assert (pt.x, pt.y) == (3.0, 4.0)
