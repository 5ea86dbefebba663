from dataclasses import asdict, dataclass
from typing import List, Tuple

import pandas as pd

from dealanalyser.appreciation import AppreciationModel, appreciation_model
from dealanalyser.expenses import annual_expenses
from dealanalyser.mortgage import loan_amount, monthly_mortgage_payment
from dealanalyser.schema import FINANCIAL_CONSTANTS, DealTerms, FinancialConstants


@dataclass(frozen=True)
class YearMetrics:
    annual_rent: float
    cash_flow: float
    principal_paid: float
    appreciation: float
    remaining_balance: float
    total_principal_paid: float
    total_appreciation: float


@dataclass(frozen=True)
class Projection:
    """Year-by-year trajectory over the horizon.

    years[0] is the state at purchase; years[k] closes year k.
    """

    years: Tuple[YearMetrics, ...]

    @property
    def horizon(self) -> int:
        return len(self.years) - 1

    @property
    def closed_years(self) -> Tuple[YearMetrics, ...]:
        return self.years[1:]

    @property
    def gained_equity(self) -> float:
        last = self.years[-1]
        return last.total_principal_paid + last.total_appreciation

    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame([asdict(m) for m in self.years])
        df.index = pd.RangeIndex(0, len(self.years), name="Year")
        df.columns = [
            "AnnualRent",
            "CashFlow",
            "PrincipalPaid",
            "Appreciation",
            "RemainingBalance",
            "TotalPrincipalPaid",
            "TotalAppreciation",
        ]
        return df


def initial_metrics(terms: DealTerms, purchase_price: float) -> YearMetrics:
    return YearMetrics(
        annual_rent=terms.monthly_rent * 12,
        cash_flow=0.0,
        principal_paid=0.0,
        appreciation=0.0,
        remaining_balance=loan_amount(terms, purchase_price),
        total_principal_paid=0.0,
        total_appreciation=0.0,
    )


def principal_reduction(terms: DealTerms, monthly_payment: float, remaining_balance: float) -> float:
    annual_interest = remaining_balance * (terms.annual_mortgage_interest_rate / 100)
    return monthly_payment * 12 - annual_interest


def next_year(
    year: int,
    prev: YearMetrics,
    terms: DealTerms,
    purchase_price: float,
    monthly_payment: float,
    appreciation: AppreciationModel,
    constants: FinancialConstants = FINANCIAL_CONSTANTS,
) -> YearMetrics:
    # Expenses are priced at the rent collected during the year being closed
    expenses = annual_expenses(
        terms, purchase_price, monthly_payment, constants, monthly_rent=prev.annual_rent / 12
    )
    cash_flow = prev.annual_rent - expenses.total
    principal_paid = principal_reduction(terms, monthly_payment, prev.remaining_balance)
    appreciated = appreciation.appreciation(year)

    return YearMetrics(
        annual_rent=prev.annual_rent * (1 + constants.appreciation_rates.rent),
        cash_flow=cash_flow,
        principal_paid=principal_paid,
        appreciation=appreciated,
        remaining_balance=prev.remaining_balance - principal_paid,
        total_principal_paid=prev.total_principal_paid + principal_paid,
        total_appreciation=prev.total_appreciation + appreciated,
    )


def project(terms: DealTerms, purchase_price: float,
            constants: FinancialConstants = FINANCIAL_CONSTANTS) -> Projection:
    """Simulate the holding period at a purchase price.

    The mortgage payment is fixed for the life of the loan; only rent and the
    rent-driven expenses change from year to year.
    """
    payment = monthly_mortgage_payment(terms, purchase_price, constants)
    appreciation = appreciation_model(terms, purchase_price, constants)

    years: List[YearMetrics] = [initial_metrics(terms, purchase_price)]
    for year in range(1, constants.investment_year_time_horizon + 1):
        years.append(next_year(year, years[-1], terms, purchase_price, payment, appreciation, constants))

    return Projection(tuple(years))
