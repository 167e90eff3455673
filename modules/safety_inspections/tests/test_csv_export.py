from __future__ import annotations

from datetime import date

from modules.safety_inspections.exporters.csv_exporter import (
    BOM,
    default_filename,
    export_followup_csv,
    render_followup_csv,
)
from modules.safety_inspections.models import Finding, flatten_at_risk


def _entries(make_record):
    guard = Finding.at_risk(
        "Guarding",
        observation='Guard "missing" on belt, line 2',
        remedial_action="Fit temporary barrier",
        likelihood="Possible",
        severity="Major",
        target_date="2024-05-20",
        finding_id="g",
        photo_data="iVBORw0KGgo=",
    )
    wiring = Finding.at_risk(
        "Electrical",
        observation="Loose socket",
        likelihood="Rare",
        severity="Minor",
        action_status="Completed",
        finding_id="w",
        photo_url="https://example.com/socket.jpg",
    )
    record = make_record("INS-1", date(2024, 5, 14), "Line A", [guard, wiring, Finding.safe("Fire Safety", finding_id="s")])
    return flatten_at_risk([record])


def test_english_export(make_record):
    text = render_followup_csv(_entries(make_record), "en")
    assert text.startswith(BOM)
    lines = text[len(BOM):].split("\n")
    assert lines[0] == (
        '"Date","Location","Category","Observation","Risk Level","Remedial Action",'
        '"Target Date","Status","Inspector","Photo URL"'
    )
    assert lines[1] == (
        '"2024-05-14","Line A","Guarding","Guard ""missing"" on belt, line 2","High",'
        '"Fit temporary barrier","2024-05-20","Pending","Inspector Lee","[Image Data Uploaded]"'
    )
    assert lines[2].endswith('"Low","","","Completed","Inspector Lee","https://example.com/socket.jpg"')
    assert len(lines) == 3


def test_chinese_labels(make_record):
    text = render_followup_csv(_entries(make_record), "zh")
    header, first, second = text[len(BOM):].split("\n")
    assert header.startswith('"日期","地點","類別","發現事項"')
    assert '"高"' in first and '"待處理"' in first and '"[已上傳照片數據]"' in first
    assert '"低"' in second and '"已完成"' in second


def test_empty_export_has_header_only():
    text = render_followup_csv([], "en")
    assert text.count("\n") == 0
    assert text.startswith(BOM + '"Date"')


def test_export_to_file(make_record, tmp_path):
    path = export_followup_csv(_entries(make_record), tmp_path / "out" / default_filename(date(2024, 5, 15)), "en")
    assert path.name == "Safety_FollowUp_2024-05-15.csv"
    assert path.read_bytes().startswith(b"\xef\xbb\xbf")
    assert path.read_text(encoding="utf-8-sig").startswith('"Date"')
