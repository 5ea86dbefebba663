from dataclasses import dataclass, fields
from typing import Dict, Optional

from dealanalyser.schema import FINANCIAL_CONSTANTS, DealTerms, FinancialConstants


@dataclass(frozen=True)
class AnnualExpenses:
    """Itemised yearly operating expenses, debt service included."""

    annual_mortgage_payment: float
    annual_hoa_dues: float
    annual_utilities: float
    annual_property_management: float
    annual_capex: float
    annual_maintenance_costs: float
    annual_property_tax: float
    annual_property_insurance: float
    annual_vacancy_costs: float

    @property
    def total(self) -> float:
        return sum(self.itemized().values())

    def itemized(self) -> Dict[str, float]:
        """Expense items in report order, without the total."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


def closing_costs(purchase_price: float, constants: FinancialConstants = FINANCIAL_CONSTANTS) -> float:
    return constants.closing_cost_rate * purchase_price


def annual_capex(terms: DealTerms, purchase_price: float,
                 constants: FinancialConstants = FINANCIAL_CONSTANTS) -> float:
    # Major repairs are the HOA's problem in a condo
    if terms.monthly_hoa_dues > 0:
        return 0.0
    return purchase_price * constants.capex_rate


def annual_maintenance(terms: DealTerms, purchase_price: float,
                       constants: FinancialConstants = FINANCIAL_CONSTANTS) -> float:
    rates = constants.maintenance_rates
    rate = rates.new_construction if terms.new_construction else rates.existing_construction
    return purchase_price * rate


def annual_insurance(terms: DealTerms, purchase_price: float,
                     constants: FinancialConstants = FINANCIAL_CONSTANTS) -> float:
    if terms.monthly_hoa_dues > 0:
        return constants.condo_insurance_rate
    return purchase_price * constants.base_insurance_rate


def annual_management(terms: DealTerms, constants: FinancialConstants = FINANCIAL_CONSTANTS,
                      monthly_rent: Optional[float] = None) -> float:
    if not terms.needs_property_management:
        return 0.0

    rent = terms.monthly_rent if monthly_rent is None else monthly_rent
    rates = constants.management_rates
    rate = rates.multi_family if terms.unit_count > constants.multi_family_unit_threshold else rates.single_family
    return rent * 12 * rate


def annual_utilities(terms: DealTerms, constants: FinancialConstants = FINANCIAL_CONSTANTS) -> float:
    if not terms.landlord_paid_utilities:
        return 0.0
    return terms.unit_count * constants.unit_utility_cost * 12


def annual_expenses(
    terms: DealTerms,
    purchase_price: float,
    monthly_mortgage_payment: float,
    constants: FinancialConstants = FINANCIAL_CONSTANTS,
    monthly_rent: Optional[float] = None,
) -> AnnualExpenses:
    """Compute the yearly expense breakdown at a purchase price.

    monthly_rent overrides the deal's rent for the rent-driven items
    (management, vacancy); the projection uses it to price each year at that
    year's rent while the mortgage payment stays fixed.
    """
    rent = terms.monthly_rent if monthly_rent is None else monthly_rent

    return AnnualExpenses(
        annual_mortgage_payment=monthly_mortgage_payment * 12,
        annual_hoa_dues=terms.monthly_hoa_dues * 12,
        annual_utilities=annual_utilities(terms, constants),
        annual_property_management=annual_management(terms, constants, rent),
        annual_capex=annual_capex(terms, purchase_price, constants),
        annual_maintenance_costs=annual_maintenance(terms, purchase_price, constants),
        annual_property_tax=purchase_price * (terms.property_tax_rate / 100),
        annual_property_insurance=annual_insurance(terms, purchase_price, constants),
        annual_vacancy_costs=rent * 12 * (terms.vacancy_rate / 100),
    )
