"""광고 성과 시트 파서 패키지"""

from adreport.parsers.base import (
    AdRow,
    CampaignSummary,
    ReportData,
    ReportDefaults,
    ReportParseError,
    extract_month,
    extract_number,
    normalize_token,
)
from adreport.parsers.ad_sheet import parse_file, parse_grid
