"""
AI 캠페인 진단 테스트 (Gemini 클라이언트는 가짜 객체로 대체)
"""

from types import SimpleNamespace

from adreport.report import insight as insight_module
from adreport.report.insight import INSIGHT_FAILURE_MESSAGE, build_prompt, generate_insight


class FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate_content(self, model, contents):
        self.calls.append({"model": model, "contents": contents})
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)


class FakeClient:
    def __init__(self, **kwargs):
        self.models = FakeModels(**kwargs)


def test_build_prompt(sample_report):
    prompt = build_prompt(sample_report.summary)

    assert "광고주: Acme" in prompt
    assert "캠페인: Spring Sale" in prompt
    assert "노출 5,000" in prompt
    assert "CTR 1.74%" in prompt
    assert "3문장" in prompt


def test_generate_insight(sample_report):
    client = FakeClient(text="  **안정적인** 성과입니다.  ")

    result = generate_insight(sample_report, model="gemini-test", client=client)

    assert result == "**안정적인** 성과입니다."
    assert client.models.calls[0]["model"] == "gemini-test"
    assert "Spring Sale" in client.models.calls[0]["contents"]


def test_generate_insight_without_key(sample_report, monkeypatch):
    def fail(**kwargs):
        raise AssertionError("클라이언트를 만들면 안 됨")

    monkeypatch.setattr(insight_module.genai, "Client", fail)
    assert generate_insight(sample_report, api_key="") == ""


def test_generate_insight_creates_client(sample_report, monkeypatch):
    created = {}

    def fake_client(api_key):
        created["api_key"] = api_key
        return FakeClient(text="요약")

    monkeypatch.setattr(insight_module.genai, "Client", fake_client)

    assert generate_insight(sample_report, api_key="test-key") == "요약"
    assert created["api_key"] == "test-key"


def test_generate_insight_failure(sample_report):
    client = FakeClient(error=RuntimeError("quota exceeded"))
    assert generate_insight(sample_report, client=client) == INSIGHT_FAILURE_MESSAGE


def test_generate_insight_empty_response(sample_report):
    assert generate_insight(sample_report, client=FakeClient(text=None)) == INSIGHT_FAILURE_MESSAGE
