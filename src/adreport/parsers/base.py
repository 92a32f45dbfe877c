"""
공통 데이터 클래스 및 유틸리티

광고 성과 리포트의 데이터 구조(AdRow / CampaignSummary / ReportData)와
셀 정규화, 월 추출 함수를 제공합니다.
"""

import math
import re
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Union

# 원본 셀 값: 문자열 | 숫자 | 빈 값
Cell = Union[str, int, float, None]

DEFAULT_PRODUCT = "기본배너"
DEFAULT_DATE = "-"
DEFAULT_CAMPAIGN_NAME = "New Campaign Report"

_TOKEN_STRIP = re.compile(r"[^A-Za-z0-9가-힣]")
_WHITESPACE = re.compile(r"\s+")
_NUMBER = re.compile(r"[-+]?[0-9]*\.?[0-9]+")
_MONTH_WITH_YEAR = re.compile(r"\d{4}[.\-](\d{2})")
_MONTH_BEFORE_DOT = re.compile(r"(\d{2})\.")


class ReportParseError(ValueError):
    """파일 구조 오류 (헤더 없음, 필수 컬럼 없음, 유효 데이터 없음 등)"""


@dataclass
class ColumnMapping:
    """의미 필드 → 컬럼 인덱스 (None = 찾지 못함)"""
    product: Optional[int] = None
    date: Optional[int] = None
    impressions: Optional[int] = None
    clicks: Optional[int] = None


@dataclass
class CampaignMetadata:
    """헤더 위 영역에서 수집한 라벨 값 (없으면 빈 문자열)"""
    advertiser: str = ""
    campaign_name: str = ""
    period: str = ""


@dataclass
class ReportDefaults:
    """메타데이터를 찾지 못했을 때 사용할 기본값"""
    advertiser: str = ""
    campaign_name: str = DEFAULT_CAMPAIGN_NAME


@dataclass
class AdRow:
    """정규화된 일자별 광고 성과 행"""
    no: int
    product: str
    date: str
    impressions: int
    clicks: int
    ctr: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "no": self.no,
            "product": self.product,
            "date": self.date,
            "impressions": self.impressions,
            "clicks": self.clicks,
            "ctr": self.ctr,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AdRow":
        return cls(
            no=int(data["no"]),
            product=str(data.get("product", DEFAULT_PRODUCT)),
            date=str(data.get("date", DEFAULT_DATE)),
            impressions=int(data.get("impressions", 0)),
            clicks=int(data.get("clicks", 0)),
            ctr=float(data.get("ctr", 0.0)),
        )


@dataclass
class CampaignSummary:
    """캠페인 요약 (합계 + 평균 CTR)"""
    name: str
    advertiser: str
    period: str
    total_impressions: int = 0
    total_clicks: int = 0
    avg_ctr: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "advertiser": self.advertiser,
            "period": self.period,
            "totalImpressions": self.total_impressions,
            "totalClicks": self.total_clicks,
            "avgCtr": self.avg_ctr,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CampaignSummary":
        return cls(
            name=str(data.get("name", "")),
            advertiser=str(data.get("advertiser", "")),
            period=str(data.get("period", "")),
            total_impressions=int(data.get("totalImpressions", 0)),
            total_clicks=int(data.get("totalClicks", 0)),
            avg_ctr=float(data.get("avgCtr", 0.0)),
        )


@dataclass
class ReportData:
    """파싱 1회의 최종 결과: 요약 + 행 목록"""
    summary: CampaignSummary
    rows: List[AdRow] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "rows": [row.to_dict() for row in self.rows],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReportData":
        return cls(
            summary=CampaignSummary.from_dict(data.get("summary", {})),
            rows=[AdRow.from_dict(r) for r in data.get("rows", [])],
        )


# ──────────────────────────────────────────────
# 셀 정규화
# ──────────────────────────────────────────────

def normalize_token(cell: Cell) -> str:
    """
    키워드 매칭용 토큰 변환 (표시용 아님)

    공백 제거 → 영문/숫자/한글 음절 외 문자 제거 → 대문자

    Examples:
        >>> normalize_token(" 노출 수 (Imp.) ")
        '노출수IMP'
        >>> normalize_token(None)
        ''
    """
    if cell is None:
        return ""
    text = _WHITESPACE.sub("", str(cell))
    return _TOKEN_STRIP.sub("", text).upper()


def extract_number(cell: Cell) -> float:
    """
    셀 값에서 숫자 추출: 괄호 주석, 콤마, % 처리

    Examples:
        >>> extract_number("1,234")
        1234.0
        >>> extract_number("10(5%)")
        10.0
        >>> extract_number("abc")
        0
    """
    if isinstance(cell, (int, float)) and not isinstance(cell, bool):
        return cell
    if cell is None:
        return 0

    s = str(cell).split("(")[0]
    s = s.replace(",", "").replace("%", "").strip()

    m = _NUMBER.search(s)
    if not m:
        return 0
    return float(m.group(0))


def cell_text(cell: Cell) -> str:
    """표시용 셀 텍스트 (정수형 float은 .0 없이)"""
    if cell is None:
        return ""
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    return str(cell).strip()


def is_blank(cell: Cell) -> bool:
    return cell_text(cell) == ""


def round_half_up(value: float, digits: int = 2) -> float:
    """소수점 반올림 (ROUND_HALF_UP)"""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def to_count(value: float) -> int:
    """노출/클릭 수를 정수로 변환 (반올림, NaN/inf는 0)"""
    if not math.isfinite(value):
        return 0
    return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def calc_ctr(clicks: float, impressions: float) -> float:
    """CTR(%) = clicks / impressions × 100, 노출 0이면 0"""
    if not impressions:
        return 0.0
    return round_half_up(clicks / impressions * 100, 2)


# ──────────────────────────────────────────────
# 월 추출
# ──────────────────────────────────────────────

def extract_month(date_text: str) -> Optional[str]:
    """
    날짜 문자열에서 2자리 월 추출

    예: "2026.02.06 (금)" → "02"
        "2026-11-03"     → "11"
        "26.02."         → "02"
        "02.06"          → "02"
        "N/A"            → None
    """
    if not date_text:
        return None

    m = _MONTH_WITH_YEAR.search(date_text)
    if m:
        return m.group(1)

    # 연도 없는 형식: 점 앞 2자리 중 마지막 (YY.MM. / YY.MM.DD / MM.DD)
    groups = _MONTH_BEFORE_DOT.findall(date_text)
    if groups:
        return groups[-1]

    return None
