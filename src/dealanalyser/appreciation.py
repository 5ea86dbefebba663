from abc import ABC, abstractmethod
from dataclasses import dataclass

from dealanalyser.schema import FINANCIAL_CONSTANTS, DealTerms, FinancialConstants


@dataclass(frozen=True)
class AppreciationModel(ABC):
    purchase_price: float
    growth_rate: float

    def value(self, year: int) -> float:
        """Implied property value at the end of `year` (year 0 is the purchase)."""
        return self.purchase_price * (1 + self.growth_rate) ** year

    @abstractmethod
    def appreciation(self, year: int) -> float:
        ...


@dataclass(frozen=True)
class SingleUnitAppreciation(AppreciationModel):
    """Comparables approach: the price compounds at the home appreciation rate."""

    def appreciation(self, year: int) -> float:
        if year < 1:
            return 0.0
        return self.value(year) - self.value(year - 1)


@dataclass(frozen=True)
class MultiUnitAppreciation(AppreciationModel):
    """Income approach: value moves in proportion to rent.

    Rent compounds at the rent appreciation rate, so the value anchored on the
    purchase price scales by the ratio of year-k rent to today's rent.
    """

    def appreciation(self, year: int) -> float:
        if year < 1:
            return 0.0
        rent_ratio = (1 + self.growth_rate) ** year
        prev_rent_ratio = rent_ratio / (1 + self.growth_rate)
        prev_value = self.purchase_price * prev_rent_ratio
        return prev_value * rent_ratio / prev_rent_ratio - prev_value


def appreciation_model(terms: DealTerms, purchase_price: float,
                       constants: FinancialConstants = FINANCIAL_CONSTANTS) -> AppreciationModel:
    rates = constants.appreciation_rates
    if terms.unit_count > 1:
        return MultiUnitAppreciation(purchase_price, rates.rent)
    return SingleUnitAppreciation(purchase_price, rates.sfh)
