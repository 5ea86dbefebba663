import logging

import pytest

from dealanalyser.returns import (
    IRRConvergenceError,
    calculate_irr,
    evaluate,
    initial_investment,
    irr_or_default,
)
from dealanalyser.schema import DealTerms


def test_irr_simple_series():
    assert calculate_irr([-1000, 1100]) == pytest.approx(0.10, abs=1e-4)


def test_irr_multi_period():
    # 1000 at 8% for two years, coupons paid yearly
    assert calculate_irr([-1000, 80, 1080]) == pytest.approx(0.08, abs=1e-4)


def test_irr_outside_bracket_raises():
    # root is negative, below the [0, 1] search range
    with pytest.raises(IRRConvergenceError):
        calculate_irr([-1000, 500])


def test_irr_or_default_falls_back_to_zero(caplog):
    with caplog.at_level(logging.DEBUG, logger="dealanalyser.returns"):
        irr, converged = irr_or_default([-1000, 500])

    assert irr == 0.0
    assert converged is False
    assert "did not converge" in caplog.text


def test_irr_or_default_passes_through():
    irr, converged = irr_or_default([-1000, 1100])
    assert irr == pytest.approx(0.10, abs=1e-4)
    assert converged is True


def test_initial_investment(duplex):
    assert initial_investment(duplex, 372000) == pytest.approx(74400 + 372000 * 0.032)


def test_cashflow_series(duplex):
    s = evaluate(duplex, 372000)
    gained = s.projection.gained_equity

    assert len(s.cashflows) == 6
    assert len(s.true_cashflows) == 5
    assert s.cashflows[0] == pytest.approx(-s.initial_investment)
    assert s.cashflows[1:5] == pytest.approx(s.true_cashflows[:4])
    assert s.cashflows[-1] == pytest.approx(s.true_cashflows[-1] + gained)
    assert s.avg_cashflow == pytest.approx(sum(s.true_cashflows) / 5)


def test_returns(duplex):
    s = evaluate(duplex, 372000)
    years = s.projection.closed_years

    for year, amount, yld in zip(years, s.amounts, s.yields):
        assert amount == pytest.approx(year.cash_flow + year.principal_paid + year.appreciation)
        assert yld == pytest.approx(amount / s.initial_investment)

    assert s.avg_yield == pytest.approx(sum(s.yields) / 5)
    assert s.avg_amount == pytest.approx(sum(s.amounts) / 5)
    assert s.avg_coc_roi == pytest.approx(s.avg_cashflow / s.initial_investment)
    assert s.total_principal_paid == pytest.approx(sum(s.principal_reductions))
    assert s.avg_appreciation == pytest.approx(sum(s.appreciations) / 5)


def test_irr_of_deal_discounts_series_to_zero(duplex):
    s = evaluate(duplex, 372000)

    assert s.irr_converged
    npv = sum(cf / (1 + s.irr) ** i for i, cf in enumerate(s.cashflows))
    assert npv == pytest.approx(0, abs=1e-3)


def test_evaluate_is_idempotent(duplex):
    assert evaluate(duplex, 372000) == evaluate(duplex, 372000)


def test_evaluate_reflects_price(duplex):
    cheap = evaluate(duplex, 300000)
    dear = evaluate(duplex, 450000)

    assert cheap.purchase_price == 300000
    assert cheap.avg_cashflow > dear.avg_cashflow
    assert cheap.avg_yield > dear.avg_yield


def test_evaluate_at_zero_price_does_not_raise(duplex):
    s = evaluate(duplex, 0)

    assert s.initial_investment == 0
    assert s.avg_yield == float("inf")


def test_evaluate_with_negative_loan(duplex):
    deal = duplex.model_copy(update={"closing_equity": 400000})
    s = evaluate(deal, 372000)

    assert s.loan_amount < 0
    assert s.monthly_mortgage_payment < 0


def test_evaluate_zero_rate_mortgage():
    deal = DealTerms(sale_price=200000, annual_mortgage_interest_rate=0, monthly_rent=1800)
    s = evaluate(deal, 200000)

    assert s.monthly_mortgage_payment == pytest.approx(160000 / 300)
    assert s.principal_reductions[0] == pytest.approx(160000 / 25)
