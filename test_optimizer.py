import logging
from dataclasses import replace

import pytest

from dealanalyser.optimizer import (
    DealClassification,
    adjust_to_max_purchase_price,
    analyse_sale_price,
    classify,
    classify_price,
    minimum_annual_cashflow,
)
from dealanalyser.returns import evaluate
from dealanalyser.schema import FINANCIAL_CONSTANTS, DealTerms

PASSING = (DealClassification.ACCEPTABLE, DealClassification.EXACT_MINIMUM)


def test_minimum_annual_cashflow(duplex):
    assert minimum_annual_cashflow(duplex) == 100 * 2 * 12


def test_classify_cheap_and_expensive(duplex):
    assert classify_price(duplex, 100000) in PASSING
    assert classify_price(duplex, 2_000_000) is DealClassification.TOO_LOW


def test_classify_exact_minimum_band(duplex):
    summary = evaluate(duplex, 100000)
    wide = FINANCIAL_CONSTANTS.model_copy(update={"exact_minimum_tolerance": 1e9})

    assert classify(summary, duplex) is DealClassification.ACCEPTABLE
    assert classify(summary, duplex, wide) is DealClassification.EXACT_MINIMUM


@pytest.mark.parametrize("above_minimum, expected", [
    (0.0, DealClassification.EXACT_MINIMUM),
    (0.999, DealClassification.EXACT_MINIMUM),
    (1.0, DealClassification.ACCEPTABLE),
    (-0.001, DealClassification.TOO_LOW),
])
def test_classify_exact_minimum_boundary(duplex, above_minimum, expected):
    minimum = minimum_annual_cashflow(duplex)
    summary = replace(evaluate(duplex, 100000), avg_cashflow=minimum + above_minimum)

    assert classify(summary, duplex) is expected


@pytest.mark.parametrize("deal_name", ["duplex", "single_family", "condo"])
def test_classification_is_monotonic_in_price(deal_name, request):
    deal = request.getfixturevalue(deal_name)

    results = [classify_price(deal, price) for price in range(5000, 1_500_001, 25000)]

    assert results[0] in PASSING
    assert results[-1] is DealClassification.TOO_LOW
    first_fail = results.index(DealClassification.TOO_LOW)
    assert all(r is DealClassification.TOO_LOW for r in results[first_fail:])


def test_adjust_duplex_to_max_price(duplex):
    result = adjust_to_max_purchase_price(duplex)

    assert result.solved
    assert result.classification in PASSING
    assert result.summary == evaluate(duplex, result.purchase_price)
    assert result.sale_price == 372000
    assert result.evaluations > 1
    if result.classification is DealClassification.ACCEPTABLE:
        assert classify_price(duplex, result.purchase_price + 1) is DealClassification.TOO_LOW


@pytest.mark.parametrize("deal_name", ["single_family", "condo"])
def test_adjusted_price_is_the_boundary(deal_name, request):
    deal = request.getfixturevalue(deal_name)

    result = adjust_to_max_purchase_price(deal)

    assert result.purchase_price > 0
    assert result.classification in PASSING
    if result.classification is DealClassification.ACCEPTABLE:
        assert classify_price(deal, result.purchase_price + 1) is DealClassification.TOO_LOW


def test_adjust_stops_on_exact_minimum(duplex):
    wide = FINANCIAL_CONSTANTS.model_copy(update={"exact_minimum_tolerance": 1e9})

    result = adjust_to_max_purchase_price(duplex, wide)

    assert result.classification is DealClassification.EXACT_MINIMUM
    assert classify_price(duplex, result.purchase_price, wide) is DealClassification.EXACT_MINIMUM


def test_unsolvable_deal_returns_zero(caplog):
    deal = DealTerms(sale_price=200000, monthly_rent=0)

    with caplog.at_level(logging.WARNING, logger="dealanalyser.optimizer"):
        result = adjust_to_max_purchase_price(deal)

    assert result.purchase_price == 0
    assert result.classification is DealClassification.TOO_LOW
    assert not result.solved
    assert "No purchase price" in caplog.text


def test_bracket_expansion_is_capped(duplex, caplog):
    lenient = FINANCIAL_CONSTANTS.model_copy(update={
        "minimum_roi": -1e12,
        "minimum_coc_roi": -1e12,
        "minimum_monthly_cashflow_per_door": -1e12,
        "max_bracket_doublings": 3,
    })

    with caplog.at_level(logging.WARNING, logger="dealanalyser.optimizer"):
        result = adjust_to_max_purchase_price(duplex, lenient)

    assert result.purchase_price == 8
    assert "doublings" in caplog.text


def test_analyse_sale_price(duplex):
    result = analyse_sale_price(duplex)

    assert result.purchase_price == 372000
    assert not result.adjusted
    assert result.summary == evaluate(duplex, 372000)
    assert result.summary.down_payment == pytest.approx(74400)
    assert result.summary.loan_amount == pytest.approx(297600)


def test_adjusted_flag(duplex):
    result = adjust_to_max_purchase_price(duplex)
    assert result.adjusted == (result.purchase_price != 372000)
