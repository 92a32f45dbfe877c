"""
키워드 세트 (헤더/메타데이터 퍼지 매칭용)

모든 토큰은 normalize_token() 결과와 비교되므로 대문자/공백 없는 형태로 둡니다.
"""

from dataclasses import dataclass, fields, replace
from typing import Dict, Iterable, Tuple

from .base import normalize_token

KeywordSet = Tuple[str, ...]

IMPRESSION_KEYWORDS: KeywordSet = ("노출", "IMPRESSION", "IMP", "VIEW")
CLICK_KEYWORDS: KeywordSet = ("클릭", "CLICK")
PRODUCT_KEYWORDS: KeywordSet = ("상품", "PRODUCT", "광고", "소재", "캠페인")
DATE_KEYWORDS: KeywordSet = ("날짜", "DATE", "일자", "시작")

ADVERTISER_KEYWORDS: KeywordSet = ("광고주", "ADVERTISER", "CLIENT")
CAMPAIGN_KEYWORDS: KeywordSet = ("캠페인", "CAMPAIGN", "REPORT")
PERIOD_KEYWORDS: KeywordSet = ("기간", "PERIOD", "DATE")


@dataclass(frozen=True)
class KeywordConfig:
    """파서에 주입되는 키워드 세트 묶음"""
    impressions: KeywordSet = IMPRESSION_KEYWORDS
    clicks: KeywordSet = CLICK_KEYWORDS
    product: KeywordSet = PRODUCT_KEYWORDS
    date: KeywordSet = DATE_KEYWORDS
    advertiser: KeywordSet = ADVERTISER_KEYWORDS
    campaign: KeywordSet = CAMPAIGN_KEYWORDS
    period: KeywordSet = PERIOD_KEYWORDS

    def extended(self, extra: Dict[str, Iterable[str]]) -> "KeywordConfig":
        """
        설정 파일의 추가 키워드를 기본 세트 뒤에 병합

        예: {"impressions": ["노출수"], "advertiser": ["브랜드"]}
        """
        known = {f.name for f in fields(self)}
        changes = {}
        for name, tokens in extra.items():
            if name not in known:
                raise ValueError(f"알 수 없는 키워드 세트: {name}")
            merged = list(getattr(self, name))
            for token in tokens:
                norm = normalize_token(token)
                if norm and norm not in merged:
                    merged.append(norm)
            changes[name] = tuple(merged)
        return replace(self, **changes)


DEFAULT_KEYWORDS = KeywordConfig()


def contains_any(text: str, keywords: KeywordSet) -> bool:
    """정규화된 텍스트에 키워드가 하나라도 포함되는지 (부분 일치)"""
    return any(k in text for k in keywords)
