"""
카드 시세 이력 생성 / 요약 통계 유틸리티

- 시세 이력은 외부 시세 API 연동 전까지 사용하는 모의 데이터
- 같은 카드, 같은 날짜에는 항상 같은 시계열을 반환 (카드 ID + 기준일로 시드)
"""
from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

DEFAULT_BASE_PRICE = 10.0
VOLATILITY = 0.3       # 30% 변동폭
MIN_PRICE = 0.01


def generate_price_history(
    card_id: int,
    base_price: Optional[float],
    days: int,
    today: date,
) -> List[Dict[str, Any]]:
    """
    today로 끝나는 days+1개의 일별 시세 포인트 생성

    Args:
        card_id: 카드 ID (시드)
        base_price: 기준가 (없거나 0이면 10)
        days: 조회 기간 (일)
        today: 기준일 (시드)

    Returns:
        [{"date": date, "price": float, "volume": int}, ...] 날짜 오름차순
    """
    base = float(base_price) if base_price else DEFAULT_BASE_PRICE
    rng = random.Random(f"{card_id}:{today.isoformat()}")

    points = []
    for i in range(days, -1, -1):
        # 기간 전반부는 완만한 상승, 후반부는 소폭 하락 보정
        trend = 0.002 if i > days / 2 else -0.001
        random_change = (rng.random() - 0.5) * VOLATILITY
        price = base * (1 + trend * i + random_change)

        points.append({
            "date": today - timedelta(days=i),
            "price": round(max(MIN_PRICE, price), 2),
            "volume": rng.randint(10, 109),
        })
    return points


def summarize_prices(prices: List[float]) -> Optional[Dict[str, Any]]:
    """
    시세 요약 통계

    - change: 마지막 두 포인트 비교
    - volatility: 표본 표준편차 / 평균 * 100
    - trend: 변동률 부호 기준 up / down / stable
    """
    if not prices:
        return None

    s = pd.Series(prices, dtype=float)
    current_price = float(s.iloc[-1])
    previous_price = float(s.iloc[-2]) if len(s) > 1 else current_price

    change = current_price - previous_price
    change_percent = (change / previous_price * 100) if previous_price > 0 else 0.0

    avg_price = float(s.mean())
    volatility = float(s.std(ddof=1) / avg_price * 100) if len(s) > 1 and avg_price > 0 else 0.0

    trend = {1: "up", -1: "down"}.get(int(np.sign(change_percent)), "stable")

    return {
        "current_price": round(current_price, 2),
        "change": round(change, 2),
        "change_percent": round(change_percent, 2),
        "min_price": round(float(s.min()), 2),
        "max_price": round(float(s.max()), 2),
        "avg_price": round(avg_price, 2),
        "volatility": round(volatility, 2),
        "trend": trend,
    }
