"""
엑셀/CSV 파일 → 2차원 셀 그리드

첫 번째 시트만 읽고, 빈 셀은 "", 빈 행은 제거합니다.
날짜 셀은 "YYYY-MM-DD" 문자열로 변환하여 파서가 라이브러리 타입을 보지 않도록 합니다.
"""

import csv
import io
import logging
from datetime import date, datetime, time
from pathlib import Path
from typing import List, Union

import openpyxl
import pandas as pd

from .base import Cell, ReportParseError

logger = logging.getLogger(__name__)

Grid = List[List[Cell]]

EXCEL_EXTENSIONS = (".xlsx", ".xlsm")
LEGACY_EXCEL_EXTENSIONS = (".xls",)
TEXT_EXTENSIONS = (".csv", ".tsv", ".txt")
SUPPORTED_EXTENSIONS = EXCEL_EXTENSIONS + LEGACY_EXCEL_EXTENSIONS + TEXT_EXTENSIONS


def read_grid(source: Union[str, Path, bytes], filename: str = None) -> Grid:
    """
    파일을 셀 그리드로 읽기

    Args:
        source: 파일 경로 또는 업로드된 파일 바이트
        filename: source가 bytes일 때 확장자 판별용 파일명

    Returns:
        행 리스트 (빈 행 제거됨)

    Raises:
        ReportParseError: 지원하지 않는 형식 / 빈 파일 / 읽기 실패
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        filename = filename or path.name
        content = path.read_bytes()
    else:
        content = source

    if not filename:
        raise ReportParseError("파일 이름이 없어 형식을 판별할 수 없습니다.")
    if not content:
        raise ReportParseError("엑셀 파일에 데이터가 없습니다.")

    ext = Path(filename).suffix.lower()
    try:
        if ext in EXCEL_EXTENSIONS:
            rows = _read_xlsx(content)
        elif ext in LEGACY_EXCEL_EXTENSIONS:
            rows = _read_legacy_excel(content)
        elif ext in TEXT_EXTENSIONS:
            rows = _read_delimited(content, ext)
        else:
            raise ReportParseError(
                f"지원하지 않는 파일 형식입니다: {ext or filename}\n"
                f"지원 형식: {', '.join(SUPPORTED_EXTENSIONS)}"
            )
    except ReportParseError:
        raise
    except Exception as e:
        raise ReportParseError(f"파일을 읽을 수 없습니다: {e}") from e

    grid = [row for row in (_clean_row(r) for r in rows) if row]
    if not grid:
        raise ReportParseError("엑셀 파일에 데이터가 없습니다.")

    logger.info("%s: %d행 읽음", filename, len(grid))
    return grid


# ──────────────────────────────────────────────
# 내부 헬퍼 함수
# ──────────────────────────────────────────────

def _read_xlsx(content: bytes) -> list:
    wb = openpyxl.load_workbook(io.BytesIO(content), data_only=True, read_only=True)
    try:
        ws = wb[wb.sheetnames[0]]
        return [list(r) for r in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def _read_legacy_excel(content: bytes) -> list:
    df = pd.read_excel(io.BytesIO(content), sheet_name=0, header=None, dtype=object)
    df = df.astype(object).where(pd.notna(df), None)
    return df.values.tolist()


def _read_delimited(content: bytes, ext: str) -> list:
    text = _decode(content)
    if ext == ".tsv":
        sep = "\t"
    elif ext == ".csv":
        sep = ","
    else:
        try:
            sep = csv.Sniffer().sniff(text[:4096], delimiters=",\t;|").delimiter
        except csv.Error:
            sep = ","

    # 상단 제목 행과 테이블 행의 컬럼 수가 달라 DataFrame 대신 행 단위로 읽음
    return list(csv.reader(io.StringIO(text), delimiter=sep))


def _decode(content: bytes) -> str:
    # 한글 엑셀 CSV는 cp949로 저장되는 경우가 많음
    for encoding in ("utf-8-sig", "cp949"):
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    return content.decode("utf-8", errors="replace")


def _to_cell(value) -> Cell:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.strftime("%Y-%m-%d")
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, (int, float, str)):
        return value
    return str(value)


def _clean_row(row) -> List[Cell]:
    """셀 변환 후, 모든 셀이 비어 있으면 빈 리스트 반환"""
    cells = [_to_cell(v) for v in row]
    if all(isinstance(c, str) and c.strip() == "" for c in cells):
        return []
    return cells
