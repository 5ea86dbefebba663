import sys, pathlib
root = pathlib.Path(__file__).resolve().parent
sys.path.insert(0, str(root / "src"))

from dealanalyser.config import configure_logging
from dealanalyser.optimizer import adjust_to_max_purchase_price
from dealanalyser.report import MarkdownRenderer, build_report
from dealanalyser.schema import DealTerms

configure_logging()

# Duplex used for smoke testing the price search
deal = DealTerms(
    sale_price=372000,
    downpayment_percentage=20,
    annual_mortgage_interest_rate=4.39,
    mortgage_amortization=25,
    property_tax_rate=1,
    monthly_hoa_dues=0,
    vacancy_rate=2.3,
    monthly_rent=4400,
    landlord_paid_utilities=True,
    needs_property_management=False,
    unit_count=2,
    new_construction=False,
)

result = adjust_to_max_purchase_price(deal)
print(MarkdownRenderer().render(build_report(result, deal)))
