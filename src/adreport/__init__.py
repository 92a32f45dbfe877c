"""광고 성과 리포트 생성기"""

__version__ = "1.0.0"
