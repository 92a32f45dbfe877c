"""
Step 2: 광고 성과 리포트 PDF 생성

리포트 화면(요약 카드, 노출/CTR 차트, 상세 테이블)을 HTML로 렌더링한 뒤
weasyprint로 A4 PDF를 만듭니다.

PDF 출력 시 제외되는 화면 요소 (print 스타일시트에서 제거):
- 상단 내비게이션 헤더 (header)
- 월 필터 (#month-filter-ui)
- AI 진단 영역 (#ai-insight-container)
- 편집 버튼류 (.print-hide-btn)
"""

import logging
import re
from datetime import datetime
from html import escape
from pathlib import Path
from typing import Optional

from adreport.parsers.base import ReportData
from adreport.report.charts import ctr_chart_png, impressions_chart_png, png_data_uri
from adreport.report.view import (
    ALL_MONTHS,
    CTR_THRESHOLD,
    available_months,
    build_view,
    filter_by_month,
    month_label,
)

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME = re.compile(r'[/\\?%*:|"<>]')


def get_pdf_filename(advertiser: str, today: Optional[datetime] = None) -> str:
    """Ad_Report_<광고주>_<YYYY-MM-DD>.pdf"""
    today = today or datetime.now()
    safe_name = _UNSAFE_FILENAME.sub("-", advertiser)
    safe_name = re.sub(r"\s+", "_", safe_name)
    return f"Ad_Report_{safe_name}_{today.strftime('%Y-%m-%d')}.pdf"


def generate_report_pdf(
    report: ReportData,
    output_path: str,
    month: str = ALL_MONTHS,
    insight: str = "",
) -> str:
    """
    리포트 PDF 생성

    Args:
        report: 현재 리포트 데이터
        output_path: 저장할 PDF 경로
        month: 화면에서 선택된 월 ("all" 또는 "02" 등)
        insight: 화면에 표시 중인 AI 진단 텍스트 (PDF에서는 제외됨)

    Returns:
        생성된 PDF 파일 경로
    """
    from weasyprint import HTML

    html_content = render_report_html(report, month=month, insight=insight)

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    try:
        HTML(string=html_content).write_pdf(str(output_file))
    except Exception as e:
        logger.error("PDF 생성 실패: %s", e)
        raise

    return str(output_file)


def render_report_pdf_bytes(report: ReportData, month: str = ALL_MONTHS, insight: str = "") -> bytes:
    """API 다운로드용 PDF 바이트"""
    from weasyprint import HTML

    return HTML(string=render_report_html(report, month=month, insight=insight)).write_pdf()


def render_report_html(report: ReportData, month: str = ALL_MONTHS, insight: str = "") -> str:
    """리포트 화면 HTML (브라우저 표시와 PDF 출력 공용)"""
    view = build_view(report, month)
    summary = report.summary
    rows = filter_by_month(report.rows, month)

    cards_html = "".join(
        f"""
        <div class="card">
            <p class="lbl">{escape(card['label'])}</p>
            <p class="val">{escape(card['display'])}</p>
            <p class="sub">{escape(card['sub_value'])}</p>
        </div>"""
        for card in view["cards"]
    )

    month_buttons = "".join(
        f'<span class="chip{" on" if m == view["selected_month"] else ""}">{month_label(m)}</span>'
        for m in [ALL_MONTHS] + available_months(report.rows)
    )

    insight_html = ""
    if insight:
        insight_html = f"""
    <div id="ai-insight-container" class="insight">
        <h3>AI 캠페인 진단</h3>
        <p>{escape(insight)}</p>
    </div>"""

    scope_badge = ""
    if view["selected_month"] != ALL_MONTHS:
        scope_badge = f'<span class="badge">{month_label(month)} 데이터</span>'

    html = f"""<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<style>
    @page {{
        size: A4;
        margin: 12mm 10mm 12mm 10mm;
    }}
    * {{
        font-family: 'Noto Sans CJK KR', 'Noto Sans', -apple-system, 'Apple SD Gothic Neo', sans-serif;
        box-sizing: border-box;
    }}
    body {{
        margin: 0; padding: 0;
        font-size: 9pt; line-height: 1.5; color: #0f172a; background: #f8fafc;
    }}
    header {{
        display: flex; justify-content: space-between; align-items: center;
        padding: 8px 0; border-bottom: 1px solid #e2e8f0; margin-bottom: 12px;
    }}
    .advertiser {{ font-size: 8pt; color: #94a3b8; font-weight: bold; text-transform: uppercase; }}
    h1 {{ margin: 2px 0 4px 0; font-size: 18pt; }}
    .period {{ font-size: 9pt; color: #475569; font-weight: bold; }}
    .chip {{ display: inline-block; padding: 2px 8px; margin-right: 2px; border-radius: 8px; font-size: 7.5pt; color: #64748b; }}
    .chip.on {{ background: #4f46e5; color: #fff; }}
    .insight {{
        margin: 12px 0; padding: 12px 14px; border-radius: 12px;
        background: #4f46e5; color: #eef2ff;
    }}
    .insight h3 {{ margin: 0 0 4px 0; font-size: 10pt; }}
    .cards {{ display: flex; gap: 10px; margin: 14px 0; }}
    .card {{
        flex: 1; background: #fff; border: 1px solid #f1f5f9; border-radius: 10px; padding: 10px 12px;
    }}
    .card p {{ margin: 0; }}
    .card .lbl {{ font-size: 7.5pt; color: #64748b; text-transform: uppercase; }}
    .card .val {{ font-size: 15pt; font-weight: bold; }}
    .card .sub {{ font-size: 7pt; color: #94a3b8; }}
    .section-title {{ font-size: 11pt; font-weight: bold; margin: 14px 0 6px 0; }}
    .badge {{ font-size: 7pt; color: #6366f1; background: #eef2ff; padding: 1px 6px; border-radius: 8px; }}
    .chart {{ background: #fff; border: 1px solid #f1f5f9; border-radius: 10px; padding: 8px; margin-bottom: 10px; }}
    .chart h5 {{ margin: 0 0 4px 0; font-size: 8pt; color: #94a3b8; }}
    .chart-img {{ width: 100%; }}
    .detail {{ width: 100%; border-collapse: collapse; font-size: 8pt; background: #fff; }}
    .detail th {{
        background: #f8fafc; color: #94a3b8; padding: 5px 4px; text-align: left;
        border-bottom: 1px solid #e2e8f0; font-size: 7pt;
    }}
    .detail td {{ padding: 4px; border-bottom: 1px solid #f1f5f9; }}
    .detail td.num {{ text-align: right; font-family: monospace; }}
    .detail td.hi {{ color: #10b981; font-weight: bold; }}
    .detail td.lo {{ color: #94a3b8; }}
    .empty {{ text-align: center; color: #cbd5e1; padding: 20px; font-style: italic; }}
    @media print {{
        header, #month-filter-ui, #ai-insight-container, .print-hide-btn {{
            display: none !important;
        }}
    }}
</style>
</head>
<body>
    <header>
        <strong>Report Master</strong>
        <span class="print-hide-btn">PDF 다운로드</span>
    </header>

    <div class="advertiser">{escape(summary.advertiser)}</div>
    <h1>{escape(summary.name)} <span class="print-hide-btn">✎</span></h1>
    <div class="period">{escape(summary.period)}</div>
    <div id="month-filter-ui">{month_buttons}</div>
    {insight_html}

    <div class="cards">{cards_html}
    </div>

    <div class="section-title">성과 추이 분석 {scope_badge}</div>
    <div class="chart">
        <h5>노출 변동 추이</h5>
        {_chart_img(impressions_chart_png(view['charts']['impressions']), "노출 변동 추이")}
    </div>
    <div class="chart">
        <h5>클릭 효율 (CTR)</h5>
        {_chart_img(ctr_chart_png(view['charts']['ctr']), "클릭 효율")}
    </div>

    <div class="section-title">데이터 상세 로그</div>
    <table class="detail">
        <thead>
            <tr>
                <th style="width:8%;">No.</th>
                <th style="width:22%;">광고상품</th>
                <th style="width:25%;">날짜</th>
                <th style="width:15%; text-align:right;">노출수 (Imp)</th>
                <th style="width:15%; text-align:right;">클릭수 (Click)</th>
                <th style="width:15%; text-align:right;">CTR (%)</th>
            </tr>
        </thead>
        <tbody>
            {_build_table_rows(rows)}
        </tbody>
    </table>
</body>
</html>"""
    return html


# ──────────────────────────────────────────────
# 내부 헬퍼 함수
# ──────────────────────────────────────────────

def _build_table_rows(rows) -> str:
    if not rows:
        return '<tr><td colspan="6" class="empty">No performance data available for this selection.</td></tr>'

    html = ""
    for row in rows:
        ctr_class = "hi" if row.ctr > CTR_THRESHOLD else "lo"
        html += "<tr>"
        html += f"<td>{row.no}</td>"
        html += f"<td>{escape(row.product)}</td>"
        html += f"<td>{escape(row.date)}</td>"
        html += f'<td class="num">{row.impressions:,}</td>'
        html += f'<td class="num">{row.clicks:,}</td>'
        html += f'<td class="num {ctr_class}">{row.ctr:.2f}%</td>'
        html += "</tr>"
    return html


def _chart_img(png: bytes, alt: str) -> str:
    if not png:
        return '<p class="empty">데이터 없음</p>'
    return f'<img class="chart-img" src="{png_data_uri(png)}" alt="{alt}">'
