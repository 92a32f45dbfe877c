"""
리포트 화면 데이터

월 필터, 요약 카드, 차트 시리즈, 테이블 페이지네이션 계산.
렌더러(HTML/PDF, API 응답)는 이 모듈의 결과만 사용합니다.
"""

import math
import re
from typing import Any, Dict, List, Sequence

from adreport.parsers.ad_sheet import summarize_rows
from adreport.parsers.base import AdRow, ReportData, extract_month

ALL_MONTHS = "all"
PAGE_SIZE_OPTIONS = (20, 50, 100)
DEFAULT_PAGE_SIZE = 20
MAX_VISIBLE_PAGES = 5

CTR_THRESHOLD = 0.1
CTR_HIGH_COLOR = "#10b981"
CTR_LOW_COLOR = "#f59e0b"

_DATE_SPLIT = re.compile(r"[.\-]")


def available_months(rows: Sequence[AdRow]) -> List[str]:
    """행 날짜에서 추출한 월 목록 (숫자 순 정렬, 중복 제거)"""
    months = {m for m in (extract_month(r.date) for r in rows) if m}
    return sorted(months, key=int)


def filter_by_month(rows: Sequence[AdRow], month: str = ALL_MONTHS) -> List[AdRow]:
    """month="all"이면 전체, 아니면 해당 월 행만 (월 추출 불가 행 제외)"""
    if not month or month == ALL_MONTHS:
        return list(rows)
    return [r for r in rows if extract_month(r.date) == month]


def month_label(month: str) -> str:
    """"02" → "2월", "all" → "전체" """
    if not month or month == ALL_MONTHS:
        return "전체"
    return f"{int(month)}월"


def metric_cards(rows: Sequence[AdRow], month: str = ALL_MONTHS) -> List[Dict[str, Any]]:
    """노출 / 클릭 / 효율(CTR) 카드"""
    total_impressions, total_clicks, ctr = summarize_rows(rows)
    scoped = month and month != ALL_MONTHS

    def sub(kind: str) -> str:
        return f"{month_label(month)} {kind}" if scoped else f"누적 {kind}"

    return [
        {"label": "Impressions", "value": total_impressions, "display": f"{total_impressions:,}",
         "sub_value": sub("노출량")},
        {"label": "Clicks", "value": total_clicks, "display": f"{total_clicks:,}",
         "sub_value": sub("클릭량")},
        {"label": "Efficiency", "value": ctr, "display": f"{ctr:g}%",
         "sub_value": f"{month_label(month)} 클릭율" if scoped else "평균 클릭율"},
    ]


def format_axis_date(value: str) -> str:
    """
    차트 X축 라벨: "2026.02.06 (금)" → "02.06 (26)"

    연-월-일 형식이 아니면 원본 그대로 반환
    """
    if not value:
        return ""
    parts = _DATE_SPLIT.split(value.split(" ")[0])
    if len(parts) >= 3:
        return f"{parts[1]}.{parts[2]} ({parts[0][2:]})"
    return value


def ctr_color(ctr: float) -> str:
    return CTR_HIGH_COLOR if ctr > CTR_THRESHOLD else CTR_LOW_COLOR


def chart_series(rows: Sequence[AdRow]) -> Dict[str, List[Dict[str, Any]]]:
    """노출 추이(영역 차트) / CTR(막대 차트) 시리즈"""
    return {
        "impressions": [
            {"date": r.date, "label": format_axis_date(r.date), "value": r.impressions}
            for r in rows
        ],
        "ctr": [
            {"date": r.date, "label": format_axis_date(r.date), "value": r.ctr, "color": ctr_color(r.ctr)}
            for r in rows
        ],
    }


def paginate(rows: Sequence[AdRow], page: int = 1, per_page: int = DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
    """
    테이블 페이지 계산

    현재 페이지는 [1, total_pages] 범위로 보정하고, 페이지 번호는 최대 5개를 노출합니다.
    """
    if per_page not in PAGE_SIZE_OPTIONS:
        raise ValueError(f"지원하지 않는 페이지 크기: {per_page} (허용: {PAGE_SIZE_OPTIONS})")

    total = len(rows)
    total_pages = math.ceil(total / per_page)
    page = min(max(1, page), max(1, total_pages))

    start_idx = (page - 1) * per_page
    page_rows = list(rows[start_idx:start_idx + per_page])

    start_page = max(1, page - 2)
    end_page = min(total_pages, start_page + MAX_VISIBLE_PAGES - 1)
    if end_page - start_page < MAX_VISIBLE_PAGES - 1:
        start_page = max(1, end_page - MAX_VISIBLE_PAGES + 1)

    return {
        "page": page,
        "per_page": per_page,
        "total": total,
        "total_pages": total_pages,
        "showing_from": 0 if total == 0 else start_idx + 1,
        "showing_to": min(total, page * per_page),
        "page_numbers": list(range(start_page, end_page + 1)) if total_pages else [],
        "rows": [r.to_dict() for r in page_rows],
    }


def build_view(report: ReportData, month: str = ALL_MONTHS) -> Dict[str, Any]:
    """요약 + 월 목록 + 카드 + 차트 (편집기/뷰어 공통 화면 데이터)"""
    rows = filter_by_month(report.rows, month)
    return {
        "summary": report.summary.to_dict(),
        "months": available_months(report.rows),
        "selected_month": month or ALL_MONTHS,
        "cards": metric_cards(rows, month),
        "charts": chart_series(rows),
        "row_count": len(rows),
    }
