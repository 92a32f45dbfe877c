"""
Step 3: 거래처용 JSON 데이터 패키지

읽기 전용 뷰어가 사용하는 정적 파일 구조:

    data/<client_key>/index.json   요약 + 월 목록 + AI 진단 텍스트
    data/<client_key>/<MM>.json    해당 월 행 목록

zip 바이트(다운로드용) 또는 디렉토리(배포용)로 출력합니다.
"""

import asyncio
import io
import json
import re
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Union

from adreport.parsers.base import AdRow, ReportData
from adreport.report.view import ALL_MONTHS, available_months, filter_by_month

DATA_ROOT = "data"
INDEX_FILENAME = "index.json"
DEFAULT_CLIENT_KEY = "client"

_MONTH_KEY = re.compile(r"^\d{2}$")


def normalize_client_key(raw: str) -> str:
    """
    거래처 키 정규화: 소문자, 공백 → "_", [a-z0-9_-] 외 문자 제거

    Raises:
        ValueError: 정규화 후 빈 문자열
    """
    key = re.sub(r"\s+", "_", (raw or "").strip().lower())
    key = re.sub(r"[^a-z0-9_\-]", "", key)
    if not key:
        raise ValueError(f"사용할 수 없는 거래처 키입니다: {raw!r} (영문/숫자/-/_ 필요)")
    return key


def default_client_key(advertiser: str) -> str:
    """광고주명에서 거래처 키 생성 (영문/숫자가 없으면 "client")"""
    try:
        return normalize_client_key(advertiser)
    except ValueError:
        return DEFAULT_CLIENT_KEY


def build_package_files(report: ReportData, client_key: str, insight: str = "") -> Dict[str, bytes]:
    """
    패키지 파일 목록 생성

    Returns:
        {"data/<key>/index.json": b"...", "data/<key>/02.json": b"...", ...}
    """
    key = normalize_client_key(client_key)
    months = available_months(report.rows)
    folder = f"{DATA_ROOT}/{key}"

    index = {
        "summary": report.summary.to_dict(),
        "months": months,
        "aiInsight": insight or "",
    }

    files = {f"{folder}/{INDEX_FILENAME}": _dump(index)}
    for month in months:
        month_rows = filter_by_month(report.rows, month)
        files[f"{folder}/{month}.json"] = _dump([r.to_dict() for r in month_rows])

    return files


def build_package_zip(report: ReportData, client_key: str, insight: str = "") -> bytes:
    """패키지 zip 바이트"""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, content in build_package_files(report, client_key, insight).items():
            zf.writestr(name, content)
    return buffer.getvalue()


async def build_package_zip_async(report: ReportData, client_key: str, insight: str = "") -> bytes:
    """압축을 워커 스레드에서 실행 (API 이벤트 루프 블로킹 방지)"""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, build_package_zip, report, client_key, insight)


def write_package(report: ReportData, client_key: str, root_dir: Union[str, Path], insight: str = "") -> List[str]:
    """
    패키지를 디렉토리에 기록 (root_dir/data/<key>/...)

    새 파일을 모두 기록한 뒤, 새 패키지에 없는 이전 월 파일을 제거합니다.

    Returns:
        기록된 파일 경로 목록
    """
    root = Path(root_dir)
    key = normalize_client_key(client_key)
    folder = root / DATA_ROOT / key

    files = build_package_files(report, key, insight)

    written = []
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        written.append(str(path))

    for old in folder.glob("*.json"):
        if old.relative_to(root).as_posix() not in files:
            old.unlink()
    return written


def get_package_filename(advertiser: str) -> str:
    return f"Report_Package_{advertiser}.zip"


# ──────────────────────────────────────────────
# 읽기 전용 뷰어 로더
# ──────────────────────────────────────────────

def load_package_index(root_dir: Union[str, Path], client_key: str) -> Dict[str, Any]:
    """
    index.json 로드

    Raises:
        FileNotFoundError: 배포된 패키지 없음
    """
    path = Path(root_dir) / DATA_ROOT / normalize_client_key(client_key) / INDEX_FILENAME
    if not path.exists():
        raise FileNotFoundError(f"{client_key} 데이터를 찾을 수 없습니다")
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_month_rows(root_dir: Union[str, Path], client_key: str, month: str = ALL_MONTHS) -> List[AdRow]:
    """
    월별 행 로드

    month="all"이면 index의 월 순서대로 모든 월 파일을 이어 붙입니다.
    (월을 추출할 수 없는 행은 패키지에 포함되지 않음)
    """
    key = normalize_client_key(client_key)
    folder = Path(root_dir) / DATA_ROOT / key

    if not month or month == ALL_MONTHS:
        months = load_package_index(root_dir, key).get("months", [])
    else:
        if not _MONTH_KEY.match(month):
            raise ValueError(f"월 형식 오류: {month} (예: 02)")
        months = [month]

    rows = []
    for m in months:
        path = folder / f"{m}.json"
        if not path.exists():
            raise FileNotFoundError(f"{key}/{m}.json 데이터를 찾을 수 없습니다")
        with open(path, "r", encoding="utf-8") as f:
            rows.extend(AdRow.from_dict(r) for r in json.load(f))
    return rows


def _dump(data: Any) -> bytes:
    return json.dumps(data, ensure_ascii=False, indent=2).encode("utf-8")
