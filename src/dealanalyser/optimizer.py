import logging
from dataclasses import dataclass
from enum import Enum

from dealanalyser.returns import ReturnSummary, evaluate
from dealanalyser.schema import FINANCIAL_CONSTANTS, DealTerms, FinancialConstants

logger = logging.getLogger(__name__)


class DealClassification(str, Enum):
    """How a purchase price fares against the investor thresholds."""

    TOO_LOW = "too_low"                # returns below at least one threshold: price is too high
    ACCEPTABLE = "acceptable"          # every threshold met
    EXACT_MINIMUM = "exact_minimum"    # met, with cashflow sitting right on its minimum


@dataclass(frozen=True)
class OptimizationResult:
    sale_price: float
    purchase_price: float
    classification: DealClassification
    summary: ReturnSummary
    evaluations: int = 1

    @property
    def adjusted(self) -> bool:
        return self.purchase_price != self.sale_price

    @property
    def solved(self) -> bool:
        return self.classification is not DealClassification.TOO_LOW


def minimum_annual_cashflow(terms: DealTerms, constants: FinancialConstants = FINANCIAL_CONSTANTS) -> float:
    return constants.minimum_monthly_cashflow_per_door * terms.unit_count * 12


def classify(summary: ReturnSummary, terms: DealTerms,
             constants: FinancialConstants = FINANCIAL_CONSTANTS) -> DealClassification:
    minimum_cashflow = minimum_annual_cashflow(terms, constants)

    if (
        summary.avg_yield >= constants.minimum_roi
        and summary.avg_cashflow >= minimum_cashflow
        and summary.avg_coc_roi >= constants.minimum_coc_roi
    ):
        if summary.avg_cashflow - minimum_cashflow < constants.exact_minimum_tolerance:
            return DealClassification.EXACT_MINIMUM
        return DealClassification.ACCEPTABLE

    return DealClassification.TOO_LOW


def classify_price(terms: DealTerms, purchase_price: float,
                   constants: FinancialConstants = FINANCIAL_CONSTANTS) -> DealClassification:
    classification = classify(evaluate(terms, purchase_price, constants), terms, constants)
    logger.debug("price %s -> %s", purchase_price, classification.value)
    return classification


def _check_irr(summary: ReturnSummary) -> None:
    if not summary.irr_converged:
        logger.warning("IRR did not converge at price %s; it is reported as %s", summary.purchase_price, summary.irr)


def analyse_sale_price(terms: DealTerms, constants: FinancialConstants = FINANCIAL_CONSTANTS) -> OptimizationResult:
    """Analyse the deal at its listed sale price, with no search."""
    summary = evaluate(terms, terms.sale_price, constants)
    _check_irr(summary)
    return OptimizationResult(
        sale_price=terms.sale_price,
        purchase_price=terms.sale_price,
        classification=classify(summary, terms, constants),
        summary=summary,
    )


def adjust_to_max_purchase_price(terms: DealTerms,
                                 constants: FinancialConstants = FINANCIAL_CONSTANTS) -> OptimizationResult:
    """Find the highest whole-dollar purchase price that still meets every threshold.

    Doubles the price from 1 until the deal fails to get an upper bound, then
    binary searches [0, upper bound]. Stops early on a price whose cashflow
    sits on the minimum, keeping that midpoint as the result, so the returned
    price is always one that was classified as passing. A deal that fails at
    every price comes back at price 0 classified TOO_LOW; this never raises.
    """
    evaluations = 0

    price = 1
    doublings = 0
    while True:
        evaluations += 1
        if classify_price(terms, price, constants) is DealClassification.TOO_LOW:
            break
        if doublings >= constants.max_bracket_doublings:
            logger.warning("Deal still meets thresholds at %s after %s doublings; searching below it",
                           price, doublings)
            break
        price *= 2
        doublings += 1

    left, right = 0, price
    while left <= right:
        middle = (left + right) // 2
        evaluations += 1
        result = classify_price(terms, middle, constants)

        if result is DealClassification.EXACT_MINIMUM:
            right = middle
            break
        if result is DealClassification.TOO_LOW:
            right = middle - 1
        else:
            left = middle + 1

    purchase_price = max(right, 0)
    summary = evaluate(terms, purchase_price, constants)
    evaluations += 1
    classification = classify(summary, terms, constants)
    _check_irr(summary)

    if classification is DealClassification.TOO_LOW:
        logger.warning("No purchase price meets the deal thresholds; reporting price 0")
    else:
        logger.info("Maximum purchase price %s (%s) after %s evaluations",
                    purchase_price, classification.value, evaluations)

    return OptimizationResult(
        sale_price=terms.sale_price,
        purchase_price=purchase_price,
        classification=classification,
        summary=summary,
        evaluations=evaluations,
    )
