import pytest

from dealanalyser.schema import DealTerms


@pytest.fixture
def duplex() -> DealTerms:
    return DealTerms(
        sale_price=372000,
        downpayment_percentage=20,
        annual_mortgage_interest_rate=4.92,
        mortgage_amortization=25,
        property_tax_rate=1,
        monthly_hoa_dues=0,
        vacancy_rate=2.6,
        monthly_rent=4400,
        landlord_paid_utilities=True,
        needs_property_management=False,
        unit_count=2,
        new_construction=False,
    )


@pytest.fixture
def single_family() -> DealTerms:
    return DealTerms(
        sale_price=250000,
        downpayment_percentage=10,
        annual_mortgage_interest_rate=6.5,
        mortgage_amortization=30,
        monthly_rent=2300,
        needs_property_management=True,
    )


@pytest.fixture
def condo() -> DealTerms:
    return DealTerms(
        sale_price=300000,
        annual_mortgage_interest_rate=5.0,
        monthly_hoa_dues=350,
        monthly_rent=2100,
        new_construction=True,
    )
