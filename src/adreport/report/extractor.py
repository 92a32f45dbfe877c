"""
Step 1: 리포트 데이터 추출

업로드된 엑셀/CSV 파일에서 ReportData를 추출하고 JSON으로 저장/로드합니다.
"""

import json
from pathlib import Path
from typing import Any, Dict, Union

from adreport.parsers.ad_sheet import parse_file
from adreport.parsers.base import ReportData, ReportDefaults
from adreport.parsers.keywords import KeywordConfig
from adreport.report.view import available_months


def extract_report_data(
    source: Union[str, Path, bytes],
    filename: str = None,
    keywords: KeywordConfig = None,
    defaults: ReportDefaults = None,
) -> Dict[str, Any]:
    """
    파일에서 리포트 데이터 추출

    Returns:
        {
            "source_file": "report.xlsx",
            "summary": {"name": ..., "advertiser": ..., "period": ...,
                        "totalImpressions": 300, "totalClicks": 15, "avgCtr": 5.0},
            "rows": [{"no": 1, "product": ..., "date": ..., "impressions": ..., ...}],
            "months": ["01", "02"],
            "row_count": 2
        }
    """
    if filename is None and isinstance(source, (str, Path)):
        filename = Path(source).name

    report = parse_file(source, filename, keywords=keywords, defaults=defaults)

    result = report.to_dict()
    result["source_file"] = filename or ""
    result["months"] = available_months(report.rows)
    result["row_count"] = len(report.rows)
    return result


def save_extracted_data(data: Dict[str, Any], output_path: str) -> None:
    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def load_extracted_data(json_path: str) -> ReportData:
    """저장된 추출 결과를 ReportData로 로드"""
    with open(json_path, "r", encoding="utf-8") as f:
        return ReportData.from_dict(json.load(f))
