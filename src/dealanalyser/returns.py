import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np
import numpy_financial as npf

from dealanalyser.expenses import AnnualExpenses, annual_expenses, closing_costs
from dealanalyser.mortgage import down_payment, loan_amount, monthly_mortgage_payment
from dealanalyser.projection import Projection, project
from dealanalyser.schema import FINANCIAL_CONSTANTS, DealTerms, FinancialConstants

logger = logging.getLogger(__name__)

IRR_LOW = 0.0
IRR_HIGH = 1.0
IRR_DEFAULT = 0.0


class IRRConvergenceError(RuntimeError):
    pass


@dataclass(frozen=True)
class ReturnSummary:
    """Everything derived from (deal terms, purchase price).

    cashflows is the IRR series: -initial investment, then one entry per
    year with the gained equity added onto the last year. true_cashflows are
    the plain yearly cashflows.
    """

    purchase_price: float
    down_payment: float
    loan_amount: float
    monthly_mortgage_payment: float
    closing_costs: float
    initial_investment: float
    expenses: AnnualExpenses
    projection: Projection

    cashflows: Tuple[float, ...]
    true_cashflows: Tuple[float, ...]
    avg_cashflow: float

    amounts: Tuple[float, ...]
    yields: Tuple[float, ...]
    avg_amount: float
    avg_yield: float

    principal_reductions: Tuple[float, ...]
    avg_principal_reduction: float
    total_principal_paid: float

    appreciations: Tuple[float, ...]
    avg_appreciation: float

    avg_coc_roi: float
    irr: float
    irr_converged: bool


def _ratio(numerator, denominator):
    # Price 0 means a zero investment; ratios become inf/nan instead of raising
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.divide(np.asarray(numerator, dtype=float), float(denominator))


def _mean(values: Sequence[float]) -> float:
    with np.errstate(invalid="ignore"):
        return float(np.mean(values))


def initial_investment(terms: DealTerms, purchase_price: float,
                       constants: FinancialConstants = FINANCIAL_CONSTANTS) -> float:
    return closing_costs(purchase_price, constants) + down_payment(terms, purchase_price)


def build_cashflows(investment: float, projection: Projection) -> Tuple[np.ndarray, np.ndarray]:
    """Return (IRR series, true yearly cashflows)."""
    true_cashflows = np.array([m.cash_flow for m in projection.closed_years], dtype=float)
    cashflows = np.concatenate(([-investment], true_cashflows))
    cashflows[-1] += projection.gained_equity
    return cashflows, true_cashflows


def calculate_irr(
    cashflows: Sequence[float],
    tolerance: float = FINANCIAL_CONSTANTS.irr_tolerance,
    max_iterations: int = FINANCIAL_CONSTANTS.irr_max_iterations,
) -> float:
    """Find the rate in [0, 1] at which the NPV of `cashflows` is zero.

    Bisection on the rate: a negative NPV means the rate is too high. The
    first element is undiscounted (period 0).

    Raises:
        IRRConvergenceError: if no rate brings |NPV| under `tolerance` within
            `max_iterations` halvings, including when the root lies outside
            [0, 1].
    """
    values = np.asarray(cashflows, dtype=float)
    low, high = IRR_LOW, IRR_HIGH

    for _ in range(max_iterations):
        mid = (low + high) / 2
        npv = float(npf.npv(mid, values))

        if abs(npv) < tolerance:
            return mid
        if npv < 0:
            high = mid
        else:
            low = mid

    raise IRRConvergenceError(
        f"IRR did not converge within {max_iterations} iterations (last rate {mid:.6f})"
    )


def irr_or_default(cashflows: Sequence[float],
                   constants: FinancialConstants = FINANCIAL_CONSTANTS) -> Tuple[float, bool]:
    """IRR of `cashflows`, or (0.0, False) when the solver does not converge.

    0.0 is also a legitimate IRR, so callers that care must look at the
    returned flag rather than the value.
    """
    try:
        irr = calculate_irr(cashflows, constants.irr_tolerance, constants.irr_max_iterations)
    except IRRConvergenceError as e:
        logger.debug("%s; reporting IRR as %s", e, IRR_DEFAULT)
        return IRR_DEFAULT, False
    return irr, True


def evaluate(terms: DealTerms, purchase_price: float,
             constants: FinancialConstants = FINANCIAL_CONSTANTS) -> ReturnSummary:
    """Run the whole pipeline at one purchase price.

    Pure: the same inputs always give an identical summary and nothing is
    kept between calls.
    """
    payment = monthly_mortgage_payment(terms, purchase_price, constants)
    expenses = annual_expenses(terms, purchase_price, payment, constants)
    investment = initial_investment(terms, purchase_price, constants)
    projection = project(terms, purchase_price, constants)
    years = projection.closed_years

    cashflows, true_cashflows = build_cashflows(investment, projection)
    avg_cashflow = _mean(true_cashflows)

    amounts = np.array([m.cash_flow + m.principal_paid + m.appreciation for m in years], dtype=float)
    yields = _ratio(amounts, investment)

    principal_reductions = [m.principal_paid for m in years]
    appreciations = [m.appreciation for m in years]

    irr, converged = irr_or_default(cashflows, constants)

    return ReturnSummary(
        purchase_price=purchase_price,
        down_payment=down_payment(terms, purchase_price),
        loan_amount=loan_amount(terms, purchase_price),
        monthly_mortgage_payment=payment,
        closing_costs=closing_costs(purchase_price, constants),
        initial_investment=investment,
        expenses=expenses,
        projection=projection,
        cashflows=tuple(float(v) for v in cashflows),
        true_cashflows=tuple(float(v) for v in true_cashflows),
        avg_cashflow=avg_cashflow,
        amounts=tuple(float(v) for v in amounts),
        yields=tuple(float(v) for v in yields),
        avg_amount=_mean(amounts),
        avg_yield=_mean(yields),
        principal_reductions=tuple(principal_reductions),
        avg_principal_reduction=_mean(principal_reductions),
        total_principal_paid=years[-1].total_principal_paid,
        appreciations=tuple(appreciations),
        avg_appreciation=_mean(appreciations),
        avg_coc_roi=float(_ratio(avg_cashflow, investment)),
        irr=irr,
        irr_converged=converged,
    )
