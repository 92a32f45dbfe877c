"""
설정 로드 테스트 (환경변수 > 설정 파일 > 기본값)
"""

import json
from pathlib import Path

import pytest

from adreport.parsers.base import DEFAULT_CAMPAIGN_NAME
from adreport.settings import DEFAULT_GEMINI_MODEL, load_settings


def _write_config(config_dir, data):
    (config_dir / "report_config.json").write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")


def test_defaults(tmp_path):
    settings = load_settings(str(tmp_path), environ={})

    assert settings.default_advertiser == ""
    assert settings.default_campaign_name == DEFAULT_CAMPAIGN_NAME
    assert settings.gemini_api_key == ""
    assert settings.gemini_model == DEFAULT_GEMINI_MODEL
    assert settings.data_dir.name == "data"


def test_config_file(tmp_path):
    _write_config(tmp_path, {
        "default_advertiser": "Acme",
        "data_dir": str(tmp_path / "published"),
        "keywords": {"impressions": ["도달 수"]},
    })

    settings = load_settings(str(tmp_path), environ={})

    assert settings.default_advertiser == "Acme"
    assert settings.data_dir == tmp_path / "published"
    assert "도달수" in settings.keywords.impressions
    assert "노출" in settings.keywords.impressions
    assert settings.report_defaults.advertiser == "Acme"


def test_environment_overrides_file(tmp_path):
    _write_config(tmp_path, {"default_advertiser": "Acme", "gemini_model": "file-model"})

    settings = load_settings(str(tmp_path), environ={
        "ADREPORT_DEFAULT_ADVERTISER": "Env Co",
        "GEMINI_API_KEY": "secret",
        "ADREPORT_OUTPUT_DIR": "/tmp/reports",
    })

    assert settings.default_advertiser == "Env Co"
    assert settings.gemini_api_key == "secret"
    assert settings.gemini_model == "file-model"
    assert settings.output_dir == Path("/tmp/reports")


def test_invalid_config_file(tmp_path):
    _write_config(tmp_path, ["not", "an", "object"])
    with pytest.raises(ValueError):
        load_settings(str(tmp_path), environ={})


def test_unknown_keyword_set(tmp_path):
    _write_config(tmp_path, {"keywords": {"revenue": ["매출"]}})
    with pytest.raises(ValueError):
        load_settings(str(tmp_path), environ={})
