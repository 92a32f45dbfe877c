"""
엑셀/CSV → 셀 그리드 읽기 테스트
"""

from datetime import datetime

import openpyxl
import pytest

from adreport.parsers.ad_sheet import parse_file
from adreport.parsers.base import ReportParseError
from adreport.parsers.sheet_reader import read_grid


@pytest.fixture
def xlsx_path(tmp_path):
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.append(["캠페인", "Spring Sale"])
    ws.append(["광고주", "Acme"])
    ws.append([None, None, None])
    ws.append(["날짜", "노출", "클릭"])
    ws.append([datetime(2026, 1, 1), 100, 5])
    ws.append(["2026.01.02", 0, 0])
    ws.append([datetime(2026, 1, 3), 200, 10])

    path = tmp_path / "campaign.xlsx"
    wb.save(path)
    return path


def test_read_xlsx(xlsx_path):
    grid = read_grid(xlsx_path)

    # 빈 행 제거
    assert len(grid) == 6
    assert grid[0][:2] == ["캠페인", "Spring Sale"]
    assert grid[3][0] == "2026-01-01"
    assert grid[3][1] == 100


def test_read_xlsx_bytes(xlsx_path):
    grid = read_grid(xlsx_path.read_bytes(), "upload.XLSX")
    assert grid[2] == ["날짜", "노출", "클릭"]


def test_parse_xlsx_file(xlsx_path):
    report = parse_file(xlsx_path)

    assert report.summary.advertiser == "Acme"
    assert report.summary.name == "Spring Sale"
    assert [r.date for r in report.rows] == ["2026-01-01", "2026-01-03"]
    assert report.summary.total_impressions == 300
    assert report.summary.avg_ctr == 5.0


def test_read_csv_with_ragged_rows():
    content = (
        "광고 성과 리포트\n"
        "광고주,Acme\n"
        "\n"
        "날짜,노출수,클릭수,CTR\n"
        '2026.02.01,"1,200",24,2%\n'
    ).encode("utf-8")

    grid = read_grid(content, "report.csv")

    assert grid[0] == ["광고 성과 리포트"]
    assert grid[-1] == ["2026.02.01", "1,200", "24", "2%"]

    report = parse_file(content, "report.csv")
    assert report.rows[0].impressions == 1200
    assert report.rows[0].ctr == 2.0


def test_read_cp949_csv():
    content = "날짜,노출,클릭\n2026.03.01,100,1\n".encode("cp949")
    grid = read_grid(content, "report.csv")
    assert grid[0] == ["날짜", "노출", "클릭"]


def test_read_tsv():
    content = "날짜\t노출\t클릭\n2026.03.01\t100\t1\n".encode("utf-8")
    assert read_grid(content, "report.tsv")[1] == ["2026.03.01", "100", "1"]


def test_unsupported_extension():
    with pytest.raises(ReportParseError):
        read_grid(b"%PDF-1.4", "report.pdf")


def test_empty_content():
    with pytest.raises(ReportParseError):
        read_grid(b"", "report.csv")


def test_blank_only_content():
    with pytest.raises(ReportParseError):
        read_grid(b",,\n,,\n", "report.csv")


def test_broken_xlsx():
    with pytest.raises(ReportParseError):
        read_grid(b"not a zip file", "report.xlsx")
