"""
리포트 PDF 생성 테스트 (weasyprint는 가짜 모듈로 대체)
"""

import sys
from datetime import datetime
from types import ModuleType

import pytest

from adreport.report.pdf_generator import (
    generate_report_pdf,
    get_pdf_filename,
    render_report_html,
    render_report_pdf_bytes,
)


class FakeHTML:
    rendered = []

    def __init__(self, string):
        self.string = string
        FakeHTML.rendered.append(string)

    def write_pdf(self, target=None):
        if target is None:
            return b"%PDF-fake"
        with open(target, "wb") as f:
            f.write(b"%PDF-fake")


@pytest.fixture
def fake_weasyprint(monkeypatch):
    module = ModuleType("weasyprint")
    module.HTML = FakeHTML
    FakeHTML.rendered = []
    monkeypatch.setitem(sys.modules, "weasyprint", module)
    return FakeHTML


def test_pdf_filename():
    today = datetime(2026, 3, 9)
    assert get_pdf_filename("Acme", today) == "Ad_Report_Acme_2026-03-09.pdf"
    assert get_pdf_filename("Acme Corp/Korea", today) == "Ad_Report_Acme_Corp-Korea_2026-03-09.pdf"
    assert get_pdf_filename('a:b*c?"d"', today) == "Ad_Report_a-b-c--d-_2026-03-09.pdf"


def test_render_html_contents(sample_report):
    html = render_report_html(sample_report, insight="**좋은** 성과")

    assert "Spring Sale" in html
    assert "Acme" in html
    assert "5,000" in html
    assert "1.74%" in html
    assert 'id="ai-insight-container"' in html
    assert "**좋은** 성과" in html
    assert "size: A4" in html
    assert html.count("<tr><td>") == 4


def test_render_html_embeds_chart_images(sample_report):
    html = render_report_html(sample_report)

    assert html.count('src="data:image/png;base64,') == 2
    assert "<svg" not in html


def test_render_html_hides_screen_only_elements(sample_report):
    html = render_report_html(sample_report)
    print_css = html.split("@media print")[1]

    for selector in ("header", "#month-filter-ui", "#ai-insight-container", ".print-hide-btn"):
        assert selector in print_css


def test_render_html_without_insight(sample_report):
    assert 'id="ai-insight-container"' not in render_report_html(sample_report)


def test_render_html_month(sample_report):
    html = render_report_html(sample_report, month="02")

    assert "2월 데이터" in html
    assert "3,500" in html
    assert html.count("<tr><td>") == 2


def test_render_html_escapes_text(sample_report):
    sample_report.summary.name = "<script>alert(1)</script>"
    html = render_report_html(sample_report)
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_generate_report_pdf(tmp_path, sample_report, fake_weasyprint):
    output = tmp_path / "out" / "report.pdf"

    path = generate_report_pdf(sample_report, str(output), month="01")

    assert path == str(output)
    assert output.read_bytes() == b"%PDF-fake"
    assert "1,500" in fake_weasyprint.rendered[0]


def test_render_report_pdf_bytes(sample_report, fake_weasyprint):
    assert render_report_pdf_bytes(sample_report) == b"%PDF-fake"
