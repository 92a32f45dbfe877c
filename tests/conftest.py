import pytest

from adreport.parsers.ad_sheet import parse_grid


def make_grid():
    """캠페인/광고주 라벨 + 헤더 + 2개월 데이터 (노출 0 행 포함)"""
    return [
        ["광고 성과 리포트"],
        ["캠페인", "Spring Sale", "", "광고주", "Acme"],
        ["기간", "", "2026.01.01 ~ 2026.02.28"],
        ["날짜", "광고상품", "노출수", "클릭수", "CTR"],
        ["2026.01.01 (목)", "메인배너", "1,000", "12", "1.2%"],
        ["2026.01.02 (금)", "메인배너", "0", "0", "0%"],
        ["2026.01.15 (목)", "서브배너", 500, 0, 0],
        ["2026.02.03 (화)", "메인배너", "2,000", "30", "1.5%"],
        ["2026.02.04 (수)", "", 1500, 45, 3],
        ["합계", "", "", "", ""],
    ]


@pytest.fixture
def sample_grid():
    return make_grid()


@pytest.fixture
def sample_report():
    return parse_grid(make_grid())
