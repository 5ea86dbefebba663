import logging

import numpy_financial as npf

from dealanalyser.schema import FINANCIAL_CONSTANTS, DealTerms, FinancialConstants

logger = logging.getLogger(__name__)

PMI_FREE_DOWNPAYMENT_PERCENTAGE = 20


def down_payment(terms: DealTerms, purchase_price: float) -> float:
    return purchase_price * (terms.downpayment_percentage / 100)


def loan_amount(terms: DealTerms, purchase_price: float) -> float:
    # Not clamped: closing equity larger than the financed part gives a negative loan
    closing_equity = terms.closing_equity or 0
    return purchase_price - down_payment(terms, purchase_price) - closing_equity


def monthly_pmi(terms: DealTerms, purchase_price: float,
                constants: FinancialConstants = FINANCIAL_CONSTANTS) -> float:
    if terms.downpayment_percentage >= PMI_FREE_DOWNPAYMENT_PERCENTAGE:
        return 0.0
    return purchase_price * constants.pmi_rate / 12


def monthly_mortgage_payment(terms: DealTerms, purchase_price: float,
                             constants: FinancialConstants = FINANCIAL_CONSTANTS) -> float:
    """Level monthly payment on a fixed-rate, fully amortizing loan plus PMI.

    PMI is charged while the down payment is under 20%. A zero interest rate
    spreads the principal evenly over the term. A zero-year term has no
    amortizing payment at all, only PMI.
    """
    pmi = monthly_pmi(terms, purchase_price, constants)
    nper = terms.mortgage_amortization * 12
    if nper == 0:
        logger.warning("Zero amortization term; mortgage payment is PMI only")
        return pmi

    rate = terms.annual_mortgage_interest_rate / 100 / 12
    pv = loan_amount(terms, purchase_price)

    # npf.pmt returns the payment as an outflow (negative for a positive loan)
    return pmi - float(npf.pmt(rate, nper, pv))
