"""
리포트 파이프라인

Step 1: extractor      - 엑셀/CSV → ReportData
Step 2: pdf_generator  - 리포트 화면 → A4 PDF
Step 3: packager       - 거래처용 JSON 데이터 패키지
"""

from adreport.report.extractor import extract_report_data, load_extracted_data, save_extracted_data
from adreport.report.packager import build_package_zip, load_month_rows, load_package_index, write_package
from adreport.report.pdf_generator import generate_report_pdf, get_pdf_filename

__all__ = [
    "extract_report_data",
    "save_extracted_data",
    "load_extracted_data",
    "generate_report_pdf",
    "get_pdf_filename",
    "build_package_zip",
    "write_package",
    "load_package_index",
    "load_month_rows",
]
