import random
from collections import Counter
from unittest.mock import Mock

import pytest

from gachaapi.core.weighted_draw import (
    EmptyPoolError,
    SelectionError,
    WeightedDrawSelector,
    ZeroTotalWeightError,
)


def fixed_rng(randrange=None, random_value=None):
    rng = Mock(spec=random.Random)
    if randrange is not None:
        rng.randrange.return_value = randrange
    if random_value is not None:
        rng.random.return_value = random_value
    return rng


class TestWeightedDrawSelector:
    """가중치 추첨 테스트"""

    @pytest.mark.parametrize(
        "roll, expected",
        [(0, "a"), (1, "b"), (9, "b")],
    )
    def test_integer_bands_are_half_open(self, roll, expected):
        """정수 가중치: [0,1) -> a, [1,10) -> b"""
        # Given
        selector = WeightedDrawSelector(rng=fixed_rng(randrange=roll))

        # When
        result = selector.select([("a", 1), ("b", 9)])

        # Then
        assert result == expected

    def test_integral_float_weights_use_integer_roll(self):
        """DB Float 컬럼의 1.0, 9.0 은 randrange(10) 으로 뽑는다"""
        # Given
        rng = fixed_rng(randrange=0)
        selector = WeightedDrawSelector(rng=rng)

        # When
        result = selector.select([("a", 1.0), ("b", 9.0)])

        # Then
        assert result == "a"
        rng.randrange.assert_called_once_with(10)
        rng.random.assert_not_called()

    def test_fractional_weights_boundary_goes_to_next_item(self):
        """누적 합과 같은 값은 다음 항목에 속한다 (strict <)"""
        # Given: total=2.0, r = 0.25 * 2.0 = 0.5 == a 의 누적 합
        selector = WeightedDrawSelector(rng=fixed_rng(random_value=0.25))

        # When
        result = selector.select([("a", 0.5), ("b", 1.5)])

        # Then
        assert result == "b"

    def test_fractional_weights_just_below_boundary(self):
        selector = WeightedDrawSelector(rng=fixed_rng(random_value=0.2499))

        assert selector.select([("a", 0.5), ("b", 1.5)]) == "a"

    def test_non_positive_weights_contribute_nothing(self):
        """weight <= 0 항목은 절대 선택되지 않는다"""
        # Given
        rng = fixed_rng(randrange=0)
        selector = WeightedDrawSelector(rng=rng)

        # When
        result = selector.select([("zero", 0), ("negative", -3), ("b", 5)])

        # Then
        assert result == "b"
        rng.randrange.assert_called_once_with(5)

    def test_empty_pool(self):
        selector = WeightedDrawSelector(rng=fixed_rng(randrange=0))

        with pytest.raises(EmptyPoolError):
            selector.select([])

    def test_zero_total_weight(self):
        selector = WeightedDrawSelector(rng=fixed_rng(randrange=0))

        with pytest.raises(ZeroTotalWeightError):
            selector.select([("a", 0), ("b", 0.0)])

    def test_roll_outside_range_is_selection_error(self):
        """난수원이 범위를 벗어나면 아무것도 고르지 않고 SelectionError"""
        selector = WeightedDrawSelector(rng=fixed_rng(random_value=1.0))

        with pytest.raises(SelectionError):
            selector.select([("a", 0.5), ("b", 0.5)])

    def test_select_by_uses_weight_accessor(self):
        # Given
        items = [{"id": 1, "weight": 3}, {"id": 2, "weight": 7}]
        selector = WeightedDrawSelector(rng=fixed_rng(randrange=3))

        # When
        result = selector.select_by(items, lambda item: item["weight"])

        # Then
        assert result["id"] == 2

    def test_same_seed_same_sequence(self):
        """같은 순서 + 같은 시드면 결과가 같다"""
        entries = [("a", 1), ("b", 2), ("c", 3)]

        first = WeightedDrawSelector(rng=random.Random(7))
        second = WeightedDrawSelector(rng=random.Random(7))

        assert [first.select(entries) for _ in range(50)] == [
            second.select(entries) for _ in range(50)
        ]

    def test_default_rng_is_system_random(self):
        selector = WeightedDrawSelector()

        assert selector.select([("only", 1)]) == "only"


class TestWeightedDrawDistribution:
    """시드 고정 난수로 빈도 수렴 확인"""

    def test_one_to_nine_ratio(self):
        """A=1, B=9 를 10,000 번 뽑으면 B 비율이 90% 근처"""
        # Given
        selector = WeightedDrawSelector(rng=random.Random(20250101))
        entries = [("A", 1), ("B", 9)]

        # When
        counts = Counter(selector.select(entries) for _ in range(10_000))

        # Then
        assert abs(counts["B"] / 10_000 - 0.9) < 0.015

    def test_float_weights_converge(self):
        # Given
        selector = WeightedDrawSelector(rng=random.Random(42))
        entries = [("S", 0.5), ("A", 2.5), ("F", 7.0)]
        total = 10.0
        n = 20_000

        # When
        counts = Counter(selector.select(entries) for _ in range(n))

        # Then
        for name, weight in entries:
            assert abs(counts[name] / n - weight / total) < 0.02
