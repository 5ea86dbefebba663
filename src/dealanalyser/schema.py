from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional


class DealTerms(BaseModel):

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    # Purchase terms

    sale_price: float = Field(0, ge = 0, description="Listed sale price ($)")
    closing_equity: Optional[float] = Field(None, description="Extra equity brought at closing ($)")

    # Financing terms

    downpayment_percentage: float = Field(20, ge = 0, le = 100, description="Down payment (% of purchase price)")
    annual_mortgage_interest_rate: float = Field(0, ge = 0, le = 100, description="Annual mortgage interest rate (%)")
    mortgage_amortization: int = Field(25, ge = 0, description="Amortization period (years)")

    # Operating terms

    property_tax_rate: float = Field(1, ge = 0, le = 100, description="Annual property tax (% of purchase price)")
    monthly_hoa_dues: float = Field(0, ge = 0, description="Monthly HOA / condo dues ($)")
    vacancy_rate: float = Field(2.5, ge = 0, le = 100, description="Vacancy rate (% of gross rent)")
    monthly_rent: float = Field(0, description="Gross monthly rent across all units ($)")
    landlord_paid_utilities: bool = Field(False, description="Landlord pays the utilities")
    needs_property_management: bool = Field(False, description="Property is managed by a third party")
    unit_count: int = Field(1, ge = 1, description="Number of rentable units")
    new_construction: bool = Field(False, description="Building is new construction")


class AppreciationRates(BaseModel):

    model_config = ConfigDict(frozen=True)

    sfh: float = Field(0.04, description="Historical home price appreciation (decimal)")
    rent: float = Field(0.025, description="Historical rent appreciation (decimal)")


class MaintenanceRates(BaseModel):

    model_config = ConfigDict(frozen=True)

    new_construction: float = Field(0.0015, ge = 0, description="Annual maintenance, new construction (decimal of price)")
    existing_construction: float = Field(0.0054, ge = 0, description="Annual maintenance, existing construction (decimal of price)")


class ManagementRates(BaseModel):

    model_config = ConfigDict(frozen=True)

    single_family: float = Field(0.10, ge = 0, le = 1, description="Management fee up to the unit threshold (decimal of rent)")
    multi_family: float = Field(0.08, ge = 0, le = 1, description="Management fee above the unit threshold (decimal of rent)")


class FinancialConstants(BaseModel):

    model_config = ConfigDict(frozen=True)

    # Acquisition

    closing_cost_rate: float = Field(0.032, ge = 0, le = 1, description="Closing costs (decimal of purchase price)")
    pmi_rate: float = Field(0.0098, ge = 0, le = 1, description="Annual PMI (decimal of purchase price)")

    investment_year_time_horizon: int = Field(5, gt = 0, description="Projection horizon (years)")

    appreciation_rates: AppreciationRates = Field(default_factory=AppreciationRates)
    maintenance_rates: MaintenanceRates = Field(default_factory=MaintenanceRates)
    management_rates: ManagementRates = Field(default_factory=ManagementRates)
    multi_family_unit_threshold: int = Field(4, ge = 1, description="Units above which the multi-family management rate applies")

    # Operating

    unit_utility_cost: float = Field(355, ge = 0, description="Monthly utilities per unit ($)")
    capex_rate: float = Field(0.01, ge = 0, le = 1, description="Annual CapEx reserve (decimal of purchase price)")
    base_insurance_rate: float = Field(0.0044, ge = 0, le = 1, description="Annual insurance (decimal of purchase price)")
    condo_insurance_rate: float = Field(450, ge = 0, description="Flat annual condo insurance ($)")

    # Investor thresholds

    minimum_monthly_cashflow_per_door: float = Field(100, description="Minimum monthly cashflow per unit ($)")
    minimum_roi: float = Field(0.25, description="Minimum average annual yield (decimal)")
    minimum_coc_roi: float = Field(0.05, description="Minimum average cash-on-cash ROI (decimal)")

    # Solver settings

    irr_tolerance: float = Field(1e-6, gt = 0, description="IRR bisection NPV tolerance ($)")
    irr_max_iterations: int = Field(1000, gt = 0, description="IRR bisection iteration cap")
    exact_minimum_tolerance: float = Field(1.0, ge = 0, description="Cashflow band above the minimum treated as an exact hit ($)")
    max_bracket_doublings: int = Field(64, gt = 0, description="Price doublings allowed while bracketing")


FINANCIAL_CONSTANTS = FinancialConstants()
