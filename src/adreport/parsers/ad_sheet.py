"""
광고 성과 시트 파서
==============================
구조가 일정하지 않은 광고 리포트 시트에서 데이터 테이블을 찾아
일자별 성과 행과 캠페인 메타데이터를 추출합니다.

시트 구조 (일반적인 형태):
- 상단 N행: 제목, 광고주/캠페인/기간 라벨과 값 (위치 불규칙)
- 헤더 행: 날짜 | 광고상품 | 노출 | 클릭 | ... (노출+클릭 키워드가 같은 행에 존재)
- 이후: 데이터 행 (합계/빈 행 포함 가능)

처리 순서: 헤더 탐색 → 컬럼 매핑 → 메타데이터 수집 → 행 추출/집계 → 리포트 조립
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from .base import (
    DEFAULT_DATE,
    DEFAULT_PRODUCT,
    AdRow,
    CampaignMetadata,
    CampaignSummary,
    Cell,
    ColumnMapping,
    ReportData,
    ReportDefaults,
    ReportParseError,
    calc_ctr,
    cell_text,
    extract_number,
    is_blank,
    normalize_token,
    to_count,
)
from .keywords import DEFAULT_KEYWORDS, KeywordConfig, KeywordSet, contains_any
from .sheet_reader import Grid, read_grid

logger = logging.getLogger(__name__)

HEADER_SCAN_ROWS = 50


def parse_file(
    source: Union[str, Path, bytes],
    filename: str = None,
    keywords: KeywordConfig = None,
    defaults: ReportDefaults = None,
) -> ReportData:
    """파일 경로 또는 업로드 바이트를 읽어 ReportData 생성"""
    grid = read_grid(source, filename)
    return parse_grid(grid, keywords=keywords, defaults=defaults)


def parse_grid(
    grid: Grid,
    keywords: KeywordConfig = None,
    defaults: ReportDefaults = None,
) -> ReportData:
    """
    셀 그리드 → ReportData

    같은 그리드에 대해 항상 같은 결과를 반환합니다 (상태 없음).

    Raises:
        ReportParseError: 빈 그리드, 헤더 없음, 필수 컬럼 없음, 유효 행 없음
    """
    keywords = keywords or DEFAULT_KEYWORDS
    defaults = defaults or ReportDefaults()

    if not grid:
        raise ReportParseError("엑셀 파일에 데이터가 없습니다.")

    header_idx = locate_header_row(grid, keywords.impressions, keywords.clicks)
    mapping = map_columns(grid[header_idx], keywords)
    logger.info("헤더 행: %d, 컬럼: %s", header_idx + 1, mapping)

    metadata = scavenge_metadata(grid, header_idx, keywords)
    rows = extract_rows(grid, header_idx, mapping)

    return assemble_report(metadata, rows, defaults)


# ──────────────────────────────────────────────
# 헤더 탐색
# ──────────────────────────────────────────────

def locate_header_row(
    grid: Grid,
    impression_keywords: KeywordSet,
    click_keywords: KeywordSet,
    scan_rows: int = HEADER_SCAN_ROWS,
) -> int:
    """
    노출/클릭 키워드가 같은 행에 함께 있는 첫 행을 헤더로 판단

    상단 scan_rows 행까지만 탐색합니다. 키워드 하나만 있는 행(제목 등)은 무시.
    """
    for i in range(min(scan_rows, len(grid))):
        row_text = "|".join(normalize_token(c) for c in grid[i])
        if contains_any(row_text, impression_keywords) and contains_any(row_text, click_keywords):
            return i

    raise ReportParseError("데이터 테이블의 헤더(노출, 클릭 등)를 찾을 수 없습니다.")


# ──────────────────────────────────────────────
# 컬럼 매핑
# ──────────────────────────────────────────────

def find_column(header: Sequence[str], keywords: KeywordSet) -> Optional[int]:
    """키워드를 포함하는 첫 번째 헤더 컬럼 인덱스 (없으면 None)"""
    for j, text in enumerate(header):
        if contains_any(text, keywords):
            return j
    return None


def map_columns(header_row: Sequence[Cell], keywords: KeywordConfig = None) -> ColumnMapping:
    """
    헤더 행의 각 셀을 정규화한 뒤 필드별 컬럼 위치 결정

    노출/클릭은 필수, 상품/날짜는 없으면 None (행 추출 시 기본값 사용)
    """
    keywords = keywords or DEFAULT_KEYWORDS
    header = [normalize_token(c) for c in header_row]

    mapping = ColumnMapping(
        product=find_column(header, keywords.product),
        date=find_column(header, keywords.date),
        impressions=find_column(header, keywords.impressions),
        clicks=find_column(header, keywords.clicks),
    )

    if mapping.impressions is None or mapping.clicks is None:
        raise ReportParseError("필수 컬럼(노출, 클릭)을 찾을 수 없습니다.")

    if mapping.product is None:
        logger.warning("광고상품 컬럼 없음 → '%s' 사용", DEFAULT_PRODUCT)
    if mapping.date is None:
        logger.warning("날짜 컬럼 없음 → '%s' 사용", DEFAULT_DATE)

    return mapping


# ──────────────────────────────────────────────
# 메타데이터 수집
# ──────────────────────────────────────────────

def find_labeled_value(grid: Grid, header_idx: int, keywords: KeywordSet) -> str:
    """
    헤더 위 영역에서 라벨 셀을 찾아 오른쪽 값 반환

    라벨 바로 오른쪽(+1)이 비어 있으면 +2 셀 사용. 못 찾으면 "".
    """
    for r in range(header_idx):
        row = grid[r]
        for c, cell in enumerate(row):
            if not contains_any(normalize_token(cell), keywords):
                continue
            for offset in (1, 2):
                value = _cell_at(row, c + offset)
                if not is_blank(value):
                    return cell_text(value)
            return ""
    return ""


def scavenge_metadata(grid: Grid, header_idx: int, keywords: KeywordConfig = None) -> CampaignMetadata:
    keywords = keywords or DEFAULT_KEYWORDS
    return CampaignMetadata(
        advertiser=find_labeled_value(grid, header_idx, keywords.advertiser),
        campaign_name=find_labeled_value(grid, header_idx, keywords.campaign),
        period=find_labeled_value(grid, header_idx, keywords.period),
    )


# ──────────────────────────────────────────────
# 행 추출 / 집계
# ──────────────────────────────────────────────

def extract_rows(grid: Grid, header_idx: int, mapping: ColumnMapping) -> List[AdRow]:
    """
    헤더 아래 데이터 행 추출

    원본 노출 값이 0 이하이거나 숫자가 아닌 행(빈 행, 패딩)은 제외하고,
    남은 행에 1부터 순번을 다시 매깁니다. 0.4처럼 반올림하면 0이 되는
    노출은 1로 올립니다.
    """
    rows = []
    skipped = 0

    for raw in grid[header_idx + 1:]:
        raw_impressions = extract_number(_cell_at(raw, mapping.impressions))
        if not raw_impressions > 0:
            skipped += 1
            continue
        impressions = max(1, to_count(raw_impressions))

        clicks = max(0, to_count(extract_number(_cell_at(raw, mapping.clicks))))

        rows.append(AdRow(
            no=len(rows) + 1,
            product=_label(raw, mapping.product, DEFAULT_PRODUCT),
            date=_label(raw, mapping.date, DEFAULT_DATE),
            impressions=impressions,
            clicks=clicks,
            ctr=calc_ctr(clicks, impressions),
        ))

    if skipped:
        logger.info("노출 0/비정상 행 %d개 제외", skipped)

    if not rows:
        raise ReportParseError("분석할 수 있는 데이터가 없습니다.")

    return rows


def summarize_rows(rows: Sequence[AdRow]) -> Tuple[int, int, float]:
    """(총 노출, 총 클릭, 평균 CTR), 행이 없으면 CTR 0"""
    total_impressions = sum(r.impressions for r in rows)
    total_clicks = sum(r.clicks for r in rows)
    return total_impressions, total_clicks, calc_ctr(total_clicks, total_impressions)


# ──────────────────────────────────────────────
# 리포트 조립
# ──────────────────────────────────────────────

def assemble_report(
    metadata: CampaignMetadata,
    rows: List[AdRow],
    defaults: ReportDefaults = None,
) -> ReportData:
    """
    메타데이터 + 행 → ReportData

    기간 라벨이 없으면 "첫 행 날짜 ~ 마지막 행 날짜"
    """
    defaults = defaults or ReportDefaults()

    period = metadata.period
    if not period or period == DEFAULT_DATE:
        period = f"{rows[0].date} ~ {rows[-1].date}" if rows else DEFAULT_DATE

    total_impressions, total_clicks, avg_ctr = summarize_rows(rows)

    summary = CampaignSummary(
        name=metadata.campaign_name or defaults.campaign_name,
        advertiser=metadata.advertiser or defaults.advertiser,
        period=period,
        total_impressions=total_impressions,
        total_clicks=total_clicks,
        avg_ctr=avg_ctr,
    )
    return ReportData(summary=summary, rows=list(rows))


def _cell_at(row: Sequence[Cell], idx: Optional[int]) -> Cell:
    if idx is None or idx >= len(row):
        return ""
    return row[idx]


def _label(row: Sequence[Cell], idx: Optional[int], fallback: str) -> str:
    cell = _cell_at(row, idx)
    # 숫자 0은 빈 칸과 같이 취급
    if isinstance(cell, (int, float)) and not isinstance(cell, bool) and cell == 0:
        return fallback
    text = cell_text(cell)
    return text or fallback
