"""
AI 캠페인 진단 (Gemini)

리포트 요약 수치로 3문장 분량의 한국어 성과 요약을 생성합니다.
API 키가 없으면 빈 문자열, 호출 실패 시 고정 안내 문구를 반환합니다.
"""

import logging
from typing import Any, Optional

from google import genai

from adreport.parsers.base import CampaignSummary, ReportData
from adreport.settings import DEFAULT_GEMINI_MODEL

logger = logging.getLogger(__name__)

INSIGHT_FAILURE_MESSAGE = "분석을 생성할 수 없습니다."

PROMPT_TEMPLATE = """광고 분석 보고서 요약 요청:
광고주: {advertiser}
캠페인: {campaign}
성과: 노출 {impressions:,}, 클릭 {clicks:,}, CTR {ctr}%
전문 마케터의 시선에서 성과를 3문장으로 요약하고, **강조**를 사용하여 신뢰감 있는 한국어로 작성해주세요."""


def build_prompt(summary: CampaignSummary) -> str:
    return PROMPT_TEMPLATE.format(
        advertiser=summary.advertiser,
        campaign=summary.name,
        impressions=summary.total_impressions,
        clicks=summary.total_clicks,
        ctr=summary.avg_ctr,
    )


def generate_insight(
    report: ReportData,
    api_key: str = "",
    model: str = DEFAULT_GEMINI_MODEL,
    client: Optional[Any] = None,
) -> str:
    """
    캠페인 진단 텍스트 생성

    Args:
        report: 현재 리포트 데이터
        api_key: Gemini API 키 (없으면 호출하지 않음)
        model: 모델명
        client: 주입할 genai.Client (테스트용)

    Returns:
        진단 텍스트 / "" (키 없음) / "분석을 생성할 수 없습니다." (호출 실패)
    """
    if client is None:
        if not api_key:
            logger.info("GEMINI_API_KEY 없음, AI 진단 생략")
            return ""
        client = genai.Client(api_key=api_key)

    prompt = build_prompt(report.summary)

    try:
        response = client.models.generate_content(model=model, contents=prompt)
    except Exception as e:
        logger.warning("AI 진단 생성 실패: %s", e)
        return INSIGHT_FAILURE_MESSAGE

    text = (getattr(response, "text", None) or "").strip()
    return text or INSIGHT_FAILURE_MESSAGE
