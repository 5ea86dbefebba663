import sys, pathlib
from pathlib import Path
root = pathlib.Path(__file__).resolve().parent
sys.path.insert(0, str(root / "src"))

import argparse
import json as _json
from dealanalyser.config import configure_logging, load_constants
from dealanalyser.optimizer import adjust_to_max_purchase_price, analyse_sale_price
from dealanalyser.report import MarkdownRenderer, build_report
from dealanalyser.schema import DealTerms

parser = argparse.ArgumentParser(description="Analyse a deal and find its maximum purchase price")
parser.add_argument("scenario", nargs="?", default=str(Path("scenarios") / "sample_deal.json"))
parser.add_argument("--constants", help="JSON file overriding the financial constants")
parser.add_argument("--sale-price", action="store_true", help="Analyse at the sale price instead of searching")
parser.add_argument("--log-level", default=None)
args = parser.parse_args()

configure_logging(args.log_level)

scenario = Path(args.scenario)
if not scenario.exists():
    print("Scenario file not found:", scenario)
    raise SystemExit(1)

with scenario.open('r', encoding='utf-8') as fh:
    data = _json.load(fh)

# validate using pydantic v2 API (model_validate)
deal = DealTerms.model_validate(data)
constants = load_constants(args.constants)

if args.sale_price:
    result = analyse_sale_price(deal, constants)
else:
    result = adjust_to_max_purchase_price(deal, constants)

report = MarkdownRenderer().render(build_report(result, deal, constants))

out_dir = Path('outputs')
out_dir.mkdir(parents=True, exist_ok=True)

report_path = out_dir / 'report.md'
schedule_path = out_dir / 'projection.csv'
report_path.write_text(report, encoding='utf-8')
result.summary.projection.to_frame().to_csv(schedule_path, index=True)

print(report)
print("Wrote", report_path)
print("Wrote", schedule_path)
