"""
리포트 차트 (matplotlib PNG)

- 노출 변동 추이: 영역 차트 (fill_between)
- 클릭 효율(CTR): 막대 차트, 기준치 초과 초록 / 이하 주황

PDF HTML에는 base64 data URI로 삽입합니다.
"""

import base64
import io
from typing import Any, Dict, List

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.ticker import FuncFormatter

AREA_COLOR = "#6366f1"
MAX_AXIS_LABELS = 8


def impressions_chart_png(points: List[Dict[str, Any]]) -> bytes:
    """노출 추이 영역 차트 PNG (points가 비어 있으면 b"")"""
    if not points:
        return b""

    xs = list(range(len(points)))
    values = [p["value"] for p in points]

    fig, ax = plt.subplots(figsize=(7.2, 2.4))
    ax.fill_between(xs, values, color=AREA_COLOR, alpha=0.1)
    ax.plot(xs, values, color=AREA_COLOR, linewidth=2)
    ax.set_ylim(bottom=0)
    ax.yaxis.set_major_formatter(FuncFormatter(lambda v, _: f"{v:,.0f}"))
    _style_axes(ax, points)
    return _to_png(fig)


def ctr_chart_png(points: List[Dict[str, Any]]) -> bytes:
    """CTR 막대 차트 PNG (막대 색상은 points의 color)"""
    if not points:
        return b""

    xs = list(range(len(points)))
    fig, ax = plt.subplots(figsize=(7.2, 2.4))
    ax.bar(xs, [p["value"] for p in points], color=[p["color"] for p in points], width=0.7)
    ax.set_ylim(bottom=0)
    ax.yaxis.set_major_formatter(FuncFormatter(lambda v, _: f"{v:g}%"))
    _style_axes(ax, points)
    return _to_png(fig)


def png_data_uri(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


# ──────────────────────────────────────────────
# 내부 헬퍼 함수
# ──────────────────────────────────────────────

def _style_axes(ax, points: List[Dict[str, Any]]) -> None:
    # 라벨이 겹치지 않도록 최대 8개만 표시
    every = max(1, len(points) // MAX_AXIS_LABELS)
    ticks = list(range(0, len(points), every))
    ax.set_xticks(ticks)
    ax.set_xticklabels([points[i]["label"] for i in ticks], fontsize=7, color="#64748b")
    ax.tick_params(axis="y", labelsize=7, colors="#64748b")
    ax.grid(axis="y", color="#f1f5f9")
    for side in ("top", "right"):
        ax.spines[side].set_visible(False)


def _to_png(fig) -> bytes:
    buf = io.BytesIO()
    try:
        fig.tight_layout()
        fig.savefig(buf, format="png", dpi=150)
    finally:
        plt.close(fig)
    return buf.getvalue()
