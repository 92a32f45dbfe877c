"""
광고 성과 리포트 - FastAPI 백엔드

웹 UI 중심 아키텍처:
1. 엑셀/CSV 업로드 → 파싱 → 현재 리포트로 보관
2. 월 필터 / 카드 / 차트 / 테이블 페이지 조회, 캠페인명 수정
3. AI 진단 생성 → PDF 다운로드 / 거래처용 데이터 패키지(zip) 다운로드
4. 거래처 배포 → 읽기 전용 뷰어 조회
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Optional
from urllib.parse import quote

import uvicorn
from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel

from adreport.parsers.ad_sheet import parse_file
from adreport.parsers.base import CampaignSummary, ReportData, ReportParseError
from adreport.report.insight import generate_insight
from adreport.report.packager import (
    build_package_zip_async,
    default_client_key,
    get_package_filename,
    load_month_rows,
    load_package_index,
    write_package,
)
from adreport.report.pdf_generator import get_pdf_filename, render_report_pdf_bytes
from adreport.report.view import (
    ALL_MONTHS,
    DEFAULT_PAGE_SIZE,
    available_months,
    build_view,
    filter_by_month,
    paginate,
)
from adreport.settings import load_settings

logger = logging.getLogger(__name__)

# FastAPI 앱 생성
app = FastAPI(
    title="Ad Report API",
    description="광고 성과 리포트 생성 및 거래처 배포 API",
    version="1.0.0"
)

# CORS 설정 (웹 UI 접근 허용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

settings = load_settings()

# PDF 렌더링 등 블로킹 작업용
executor = ThreadPoolExecutor(max_workers=4)


class ReportStore:
    """현재 편집 중인 리포트 (단일 세션)"""

    def __init__(self):
        self.report: Optional[ReportData] = None
        self.insight: str = ""
        self.source_file: str = ""

    def replace(self, report: ReportData, source_file: str = "") -> None:
        self.report = report
        self.insight = ""
        self.source_file = source_file

    def clear(self) -> None:
        self.report = None
        self.insight = ""
        self.source_file = ""

    def require(self) -> ReportData:
        if self.report is None:
            raise HTTPException(status_code=404, detail="분석된 리포트가 없습니다. 파일을 먼저 업로드하세요")
        return self.report


store = ReportStore()


# ============================================================================
# Pydantic 모델
# ============================================================================

class TitleRequest(BaseModel):
    """캠페인명 수정"""
    name: str


class PackageRequest(BaseModel):
    """데이터 패키지 요청 (client_key 생략 시 광고주명에서 생성)"""
    client_key: Optional[str] = None
    insight: Optional[str] = None


class PublishRequest(BaseModel):
    """거래처 배포 요청"""
    insight: Optional[str] = None


# ============================================================================
# 초기화
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """시작 시 초기화"""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.info("Ad Report API 시작")
    logger.info("데이터 디렉토리: %s", settings.data_dir)
    logger.info("AI 진단: %s", "사용" if settings.gemini_api_key else "미설정")


@app.get("/health")
async def health_check():
    """헬스 체크"""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


# ============================================================================
# 업로드 & 파싱
# ============================================================================

@app.post("/api/reports/parse")
async def parse_report(file: UploadFile = File(...)) -> Dict[str, Any]:
    """엑셀/CSV 업로드 및 파싱 (실패 시 현재 리포트 유지)"""
    defaults = settings.report_defaults
    # 시트에 광고주가 없으면 현재 리포트의 광고주를 이어서 사용
    if store.report is not None and store.report.summary.advertiser:
        defaults = replace(defaults, advertiser=store.report.summary.advertiser)

    try:
        content = await file.read()
        loop = asyncio.get_running_loop()
        report = await loop.run_in_executor(
            executor,
            lambda: parse_file(
                content,
                file.filename,
                keywords=settings.keywords,
                defaults=defaults,
            ),
        )
    except ReportParseError as e:
        logger.warning("파싱 실패 (%s): %s", file.filename, e)
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("파일 처리 실패: %s", file.filename)
        raise HTTPException(status_code=400, detail=f"파일 처리 실패: {str(e)}")

    store.replace(report, file.filename or "")
    logger.info("리포트 로드: %s (%d행)", report.summary.name, len(report.rows))

    response = build_view(report, ALL_MONTHS)
    response["source_file"] = store.source_file
    return response


# ============================================================================
# 리포트 조회 / 편집
# ============================================================================

@app.get("/api/reports/current")
async def get_current_report(month: str = Query(ALL_MONTHS)) -> Dict[str, Any]:
    """현재 리포트 화면 데이터 (요약, 월 목록, 카드, 차트)"""
    report = store.require()
    month = _check_month(report, month)
    response = build_view(report, month)
    response["insight"] = store.insight
    response["source_file"] = store.source_file
    return response


@app.get("/api/reports/current/rows")
async def get_current_rows(
    month: str = Query(ALL_MONTHS),
    page: int = Query(1),
    per_page: int = Query(DEFAULT_PAGE_SIZE),
) -> Dict[str, Any]:
    """상세 테이블 페이지"""
    report = store.require()
    month = _check_month(report, month)
    try:
        return paginate(filter_by_month(report.rows, month), page=page, per_page=per_page)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.patch("/api/reports/current/title")
async def update_title(request: TitleRequest) -> Dict[str, Any]:
    """캠페인명 수정"""
    report = store.require()
    name = request.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="캠페인명을 입력하세요")
    report.summary.name = name
    return {"status": "updated", "summary": report.summary.to_dict()}


@app.post("/api/reports/current/insight")
async def create_insight() -> Dict[str, Any]:
    """AI 캠페인 진단 생성 (키 미설정 시 빈 문자열)"""
    report = store.require()
    loop = asyncio.get_running_loop()
    insight = await loop.run_in_executor(
        executor,
        lambda: generate_insight(report, api_key=settings.gemini_api_key, model=settings.gemini_model),
    )
    store.insight = insight
    return {"insight": insight, "enabled": bool(settings.gemini_api_key)}


# ============================================================================
# 내보내기 (PDF / 데이터 패키지)
# ============================================================================

@app.get("/api/reports/current/pdf")
async def download_pdf(month: str = Query(ALL_MONTHS)):
    """리포트 PDF 다운로드"""
    report = store.require()
    month = _check_month(report, month)
    try:
        loop = asyncio.get_running_loop()
        pdf_bytes = await loop.run_in_executor(
            executor,
            lambda: render_report_pdf_bytes(report, month=month, insight=store.insight),
        )
    except Exception as e:
        logger.error("PDF 생성 실패: %s", e)
        raise HTTPException(status_code=500, detail=f"PDF 생성 실패: {str(e)}")

    filename = get_pdf_filename(report.summary.advertiser)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": _attachment(filename)},
    )


@app.post("/api/reports/current/package")
async def download_package(request: PackageRequest) -> Response:
    """거래처용 데이터 패키지 zip 다운로드"""
    report = store.require()
    client_key = request.client_key or default_client_key(report.summary.advertiser)
    insight = store.insight if request.insight is None else request.insight
    try:
        zip_bytes = await build_package_zip_async(report, client_key, insight)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    filename = get_package_filename(report.summary.advertiser)
    return Response(
        content=zip_bytes,
        media_type="application/zip",
        headers={"Content-Disposition": _attachment(filename)},
    )


# ============================================================================
# 거래처 배포 / 읽기 전용 뷰어
# ============================================================================

@app.post("/api/clients/{client_key}/publish")
async def publish_client(client_key: str, request: Optional[PublishRequest] = None) -> Dict[str, Any]:
    """현재 리포트를 거래처 데이터 디렉토리에 배포"""
    report = store.require()
    insight = store.insight if request is None or request.insight is None else request.insight
    try:
        files = write_package(report, client_key, settings.data_dir, insight)
        return {
            "status": "published",
            "client_key": client_key,
            "months": available_months(report.rows),
            "files": files,
            "published_at": datetime.now().isoformat(),
        }
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError as e:
        logger.error("배포 실패 (%s): %s", client_key, e)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/clients/{client_key}")
async def get_client_report(client_key: str, month: str = Query(ALL_MONTHS)) -> Dict[str, Any]:
    """거래처 뷰어: 요약 + 월 목록 + AI 진단 + 선택 월 카드/차트"""
    try:
        index = load_package_index(settings.data_dir, client_key)
        rows = load_month_rows(settings.data_dir, client_key, month)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    report = ReportData(summary=CampaignSummary.from_dict(index.get("summary", {})), rows=rows)
    response = build_view(report, month)
    response["months"] = index.get("months", [])
    response["selected_month"] = month or ALL_MONTHS
    response["insight"] = index.get("aiInsight", "")
    return response


@app.get("/api/clients/{client_key}/rows")
async def get_client_rows(
    client_key: str,
    month: str = Query(ALL_MONTHS),
    page: int = Query(1),
    per_page: int = Query(DEFAULT_PAGE_SIZE),
) -> Dict[str, Any]:
    """거래처 뷰어 테이블 페이지"""
    try:
        rows = load_month_rows(settings.data_dir, client_key, month)
        return paginate(rows, page=page, per_page=per_page)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ============================================================================
# 내부 헬퍼 함수
# ============================================================================

def _check_month(report: ReportData, month: str) -> str:
    if not month or month == ALL_MONTHS:
        return ALL_MONTHS
    if month not in available_months(report.rows):
        raise HTTPException(status_code=404, detail=f"{month}월 데이터가 없습니다")
    return month


def _attachment(filename: str) -> str:
    # 한글 파일명은 RFC 5987 형식으로 전달
    return f"attachment; filename*=UTF-8''{quote(filename)}"


if __name__ == "__main__":
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
