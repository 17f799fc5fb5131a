"""
Tests for the block reducers and the minimum-valid-count policy.
"""

import math

import numpy as np
import pytest

from coarse_resample import (
    Reducer,
    closest_to_mean,
    conditional_mean,
    quadratic_mean_over_count,
)

NA = np.nan
FIVE_VALID = [1, 2, 3, 4, 5, NA, NA, NA, NA]
FOUR_VALID = [1, 2, 3, 4, NA, NA, NA, NA, NA]


@pytest.mark.parametrize("reducer", list(Reducer))
def test_four_valid_cells_give_no_data(reducer):
    assert math.isnan(reducer(FOUR_VALID))


def test_five_valid_cells_give_values():
    assert conditional_mean(FIVE_VALID) == pytest.approx(3.0)
    assert closest_to_mean(FIVE_VALID) == 3.0
    assert quadratic_mean_over_count(FIVE_VALID) == pytest.approx(math.sqrt(55) / 5)
    assert quadratic_mean_over_count(FIVE_VALID) == pytest.approx(1.4832, abs=1e-4)


def test_enum_members_dispatch_to_functions():
    assert Reducer.MEAN(FIVE_VALID) == conditional_mean(FIVE_VALID)
    assert Reducer.CLOSEST(FIVE_VALID) == closest_to_mean(FIVE_VALID)
    assert Reducer.UNCERTAINTY(FIVE_VALID) == quadratic_mean_over_count(FIVE_VALID)


def test_min_valid_count_is_configurable():
    block = [2.0, 4.0, NA, NA]
    assert math.isnan(conditional_mean(block))
    assert conditional_mean(block, min_valid_count=2) == pytest.approx(3.0)
    assert math.isnan(conditional_mean(block, min_valid_count=3))


def test_negative_min_valid_count_rejected():
    with pytest.raises(ValueError):
        conditional_mean(FIVE_VALID, min_valid_count=-1)


def test_all_no_data_block_never_raises():
    block = [NA] * 9
    for reducer in Reducer:
        assert math.isnan(reducer(block))
        assert math.isnan(reducer(block, min_valid_count=0))


def test_closest_to_mean_tie_takes_first_cell():
    # mean is 2.0, both 1.0 and 3.0 are at distance 1
    assert closest_to_mean([1.0, 3.0, NA, NA], min_valid_count=2) == 1.0
    assert closest_to_mean([3.0, 1.0, NA, NA], min_valid_count=2) == 3.0


def test_closest_to_mean_returns_observed_value():
    block = [0.1, 0.2, 0.9, 0.3, 0.35, NA, 0.25, 0.2, NA]
    result = closest_to_mean(block)
    assert result in block
    mean = np.nanmean(block)
    valid = np.array([v for v in block if not math.isnan(v)])
    assert abs(result - mean) == pytest.approx(np.min(np.abs(valid - mean)))


def test_uncertainty_divides_by_count_not_sqrt_count():
    block = np.full(9, 0.3)
    expected = math.sqrt(9 * 0.09) / 9
    assert quadratic_mean_over_count(block) == pytest.approx(expected)
    assert quadratic_mean_over_count(block) != pytest.approx(0.3)


def test_reducers_vectorise_over_leading_axes():
    blocks = np.array([
        [FIVE_VALID, FOUR_VALID],
        [[0.5] * 9, [1.0] * 7 + [NA, NA]],
    ], dtype=float)

    means = conditional_mean(blocks)

    assert means.shape == (2, 2)
    assert means[0, 0] == pytest.approx(3.0)
    assert math.isnan(means[0, 1])
    assert means[1, 0] == pytest.approx(0.5)
    assert means[1, 1] == pytest.approx(1.0)
    assert closest_to_mean(blocks).shape == (2, 2)
    assert quadratic_mean_over_count(blocks).shape == (2, 2)


def test_mean_is_order_independent():
    rng = np.random.default_rng(3)
    block = rng.uniform(0, 1, 9)
    block[[2, 7]] = NA
    shuffled = rng.permutation(block)
    assert conditional_mean(block) == pytest.approx(conditional_mean(shuffled))
    assert quadratic_mean_over_count(block) == pytest.approx(quadratic_mean_over_count(shuffled))


@pytest.mark.parametrize("name, expected", [
    ("mean", Reducer.MEAN),
    ("Conditional-Mean", Reducer.MEAN),
    ("closest", Reducer.CLOSEST),
    ("closest_to_mean", Reducer.CLOSEST),
    ("uncertainty", Reducer.UNCERTAINTY),
    ("quadratic-mean-over-count", Reducer.UNCERTAINTY),
    (Reducer.CLOSEST, Reducer.CLOSEST),
])
def test_reducer_from_name(name, expected):
    assert Reducer.from_name(name) is expected


def test_reducer_from_unknown_name():
    with pytest.raises(ValueError, match="Unknown reducer"):
        Reducer.from_name("median")
