"""
리포트 생성기 설정

우선순위: 환경변수 > config/report_config.json > 기본값
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from adreport.parsers.base import DEFAULT_CAMPAIGN_NAME, ReportDefaults
from adreport.parsers.keywords import DEFAULT_KEYWORDS, KeywordConfig

BASE_PATH = Path(__file__).resolve().parent.parent.parent
CONFIG_FILENAME = "report_config.json"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"

ENV_KEYS = {
    "data_dir": "ADREPORT_DATA_DIR",
    "output_dir": "ADREPORT_OUTPUT_DIR",
    "default_advertiser": "ADREPORT_DEFAULT_ADVERTISER",
    "default_campaign_name": "ADREPORT_DEFAULT_CAMPAIGN",
    "gemini_api_key": "GEMINI_API_KEY",
    "gemini_model": "GEMINI_MODEL",
}


@dataclass
class Settings:
    data_dir: Path = BASE_PATH / "data"
    output_dir: Path = BASE_PATH / "output"
    default_advertiser: str = ""
    default_campaign_name: str = DEFAULT_CAMPAIGN_NAME
    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_GEMINI_MODEL
    keywords: KeywordConfig = field(default_factory=lambda: DEFAULT_KEYWORDS)

    @property
    def report_defaults(self) -> ReportDefaults:
        return ReportDefaults(
            advertiser=self.default_advertiser,
            campaign_name=self.default_campaign_name,
        )


def load_settings(config_dir: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> Settings:
    """
    설정 로드

    Args:
        config_dir: report_config.json이 있는 디렉토리 (기본: <프로젝트>/config)
        environ: 환경변수 매핑 (테스트용, 기본: os.environ)
    """
    environ = os.environ if environ is None else environ
    config_dir = Path(config_dir) if config_dir else BASE_PATH / "config"

    file_config = _load_config_file(config_dir / CONFIG_FILENAME)

    values: Dict[str, Any] = {}
    for name, env_key in ENV_KEYS.items():
        if environ.get(env_key):
            values[name] = environ[env_key]
        elif file_config.get(name):
            values[name] = file_config[name]

    for name in ("data_dir", "output_dir"):
        if name in values:
            values[name] = Path(values[name])

    keywords = DEFAULT_KEYWORDS
    if file_config.get("keywords"):
        keywords = keywords.extended(file_config["keywords"])

    return Settings(keywords=keywords, **values)


def _load_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"설정 파일 형식 오류 (객체 필요): {path}")
    return data
