"""
가중치 기반 추첨

구간 [0, total) 에서 r 을 뽑고 누적 가중치가 처음으로 r 을 넘는(r < cum) 항목을 고른다.
항목 i 의 당첨 확률은 weight_i / total 이며, 같은 목록 순서와 같은 난수에 대해 결과가 결정적이다.
"""

import random
from numbers import Integral
from typing import Callable, Generic, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


class WeightedDrawError(Exception):
    """추첨 실패의 베이스 클래스"""


class EmptyPoolError(WeightedDrawError):
    pass


class ZeroTotalWeightError(WeightedDrawError):
    pass


class SelectionError(WeightedDrawError):
    """누적 합 부동소수점 오차 등으로 아무것도 선택되지 않은 경우"""


class WeightedDrawSelector(Generic[T]):
    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.SystemRandom()

    def select(self, entries: Sequence[Tuple[T, float]]) -> T:
        if not entries:
            raise EmptyPoolError("No eligible items to draw from")

        weights = [_normalize_weight(w) for _, w in entries]
        total = sum(weights)
        if total <= 0:
            raise ZeroTotalWeightError(f"Total weight is {total}")

        r = self._roll(weights, total)

        cumulative = 0
        for (item, _), weight in zip(entries, weights):
            cumulative += weight
            if r < cumulative:
                return item

        raise SelectionError(f"Roll {r} did not land in any band (total={total})")

    def select_by(self, items: Sequence[T], weight_of: Callable[[T], float]) -> T:
        return self.select([(item, weight_of(item)) for item in items])

    def _roll(self, weights, total):
        # 정수 가중치는 randrange 로 정확한 [0, total) 정수를 뽑는다
        if all(isinstance(w, Integral) for w in weights):
            return self._rng.randrange(total)
        return self._rng.random() * total


def _normalize_weight(weight):
    if weight is None or weight <= 0:
        return 0
    # DB Float 컬럼의 1.0, 9.0 같은 값은 정수 경로로 보낸다
    if isinstance(weight, float) and weight.is_integer():
        return int(weight)
    return weight
