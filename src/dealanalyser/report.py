import math
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from dealanalyser.optimizer import OptimizationResult
from dealanalyser.schema import FINANCIAL_CONSTANTS, DealTerms, FinancialConstants

FORMATTERS = ("currency", "percentage", "number", "compact", "text")

ACRONYMS = {
    "roi": "ROI",
    "rois": "ROIs",
    "coc": "CoC",
    "pmi": "PMI",
    "hoa": "HOA",
    "capex": "CapEx",
    "irr": "IRR",
    "yoy": "YoY",
}

COMPACT_UNITS = ((1, ""), (1e3, "K"), (1e6, "M"), (1e9, "B"), (1e12, "T"))

Value = Union[float, str, Sequence[float]]


class FormattingError(ValueError):
    pass


@dataclass(frozen=True)
class ReportField:
    value: Value
    formatter: Optional[str] = None
    note: Optional[str] = None
    highlight: bool = False


@dataclass(frozen=True)
class ReportSection:
    """One block of the report.

    headline maps a label to the figure shown next to it in the section
    heading; data holds the supporting figures.
    """

    headline: Dict[str, ReportField]
    data: Dict[str, ReportField]
    default_formatter: str = "currency"
    description: Optional[str] = None
    collapsed: bool = False


@dataclass(frozen=True)
class ReportData:
    purchase_price: float
    adjusted: bool
    sections: List[ReportSection] = field(default_factory=list)


def build_report(result: OptimizationResult, terms: DealTerms,
                 constants: FinancialConstants = FINANCIAL_CONSTANTS) -> ReportData:
    """Lay out the analysis of `result` as plain, unformatted report data."""
    s = result.summary
    horizon = constants.investment_year_time_horizon
    expenses = s.expenses

    irr_note = None if s.irr_converged else "IRR solver did not converge"

    sections = [
        ReportSection(
            headline={"Initial investment": ReportField(s.initial_investment, "currency")},
            data={
                "down_payment": ReportField(s.down_payment),
                "closing_costs": ReportField(s.closing_costs),
            },
        ),
        ReportSection(
            headline={"Annual Expenses": ReportField(expenses.total, "currency")},
            data={name: ReportField(value) for name, value in expenses.itemized().items()},
        ),
        ReportSection(
            headline={"Avg Cashflow": ReportField(s.avg_cashflow, "currency")},
            data={
                "annual_rent": ReportField(terms.monthly_rent * 12, note=f"from {terms.unit_count} unit(s)"),
                "annual_expenses": ReportField(expenses.total),
            },
        ),
        ReportSection(
            headline={"Avg CoC ROI": ReportField(s.avg_coc_roi, "percentage")},
            data={
                "cashflow": ReportField(s.avg_cashflow),
                "down_payment": ReportField(s.down_payment),
                "closing_costs": ReportField(s.closing_costs),
            },
        ),
        ReportSection(
            headline={"Avg Annual Return": ReportField(s.avg_amount, "currency")},
            data={
                "avg_cashflow": ReportField(s.avg_cashflow),
                "avg_principal_reduction": ReportField(s.avg_principal_reduction),
                "avg_appreciation": ReportField(s.avg_appreciation),
            },
        ),
        ReportSection(
            headline={
                f"{horizon} year Average (YoY) ROI": ReportField(s.avg_yield, "percentage"),
                f"{horizon} year IRR": ReportField(s.irr, "percentage", note=irr_note),
            },
            data={
                "annual_rois": ReportField(list(s.yields), "percentage"),
                "annual_returns": ReportField(list(s.amounts)),
                "annual_cashflows": ReportField(list(s.cashflows)),
            },
        ),
    ]

    return ReportData(purchase_price=result.purchase_price, adjusted=result.adjusted, sections=sections)


class FormattingConfig(BaseModel):

    model_config = ConfigDict(frozen=True)

    currency_symbol: str = Field("$", description="Symbol prefixed to currency values")
    percentage_digits: int = Field(2, ge = 0, description="Fraction digits for percentages")
    numbers_digits: int = Field(2, ge = 0, description="Fraction digits for plain numbers")
    suppress_trailing_zeros: bool = Field(True, description="Drop trailing zero cents from currency values")
    section_title_level: int = Field(2, ge = 1, le = 6, description="Markdown heading level of sections")
    format_title_case: bool = Field(True, description="Turn snake_case keys into title case labels")


class MarkdownRenderer:
    def __init__(self, config: Optional[FormattingConfig] = None):
        self.config = config or FormattingConfig()
        self._titles: Dict[str, str] = {}

    # -----------------------------
    # Value formatting
    # -----------------------------

    def format_currency(self, value: float) -> str:
        if not math.isfinite(value):
            return f"{self.config.currency_symbol}{value}"
        text = f"{abs(value):,.2f}"
        if self.config.suppress_trailing_zeros:
            text = text.rstrip("0").rstrip(".")
        sign = "-" if value < 0 and text.strip("0.,") else ""
        return f"{sign}{self.config.currency_symbol}{text}"

    def format_percentage(self, value: float) -> str:
        return f"{value * 100:,.{self.config.percentage_digits}f}%"

    def format_number(self, value: float) -> str:
        return f"{value:,.{self.config.numbers_digits}f}"

    def format_compact(self, value: float) -> str:
        if not math.isfinite(value):
            return str(value)

        unit = 0
        while unit + 1 < len(COMPACT_UNITS) and abs(value) >= COMPACT_UNITS[unit + 1][0]:
            unit += 1
        digits = self._compact_digits(value / COMPACT_UNITS[unit][0])
        # 999.6K rounds to 1000K; show it as 1M instead
        if abs(float(digits)) >= 1000 and unit + 1 < len(COMPACT_UNITS):
            unit += 1
            digits = self._compact_digits(value / COMPACT_UNITS[unit][0])
        return f"{digits}{COMPACT_UNITS[unit][1]}"

    @staticmethod
    def _compact_digits(scaled: float) -> str:
        # two significant digits, no trailing zeros; whole numbers from 10 up
        if abs(scaled) >= 9.95:
            return f"{scaled:.0f}"
        return f"{scaled:.1f}".rstrip("0").rstrip(".")

    def format_value(self, value: Value, formatter: Optional[str] = None) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, (list, tuple)):
            return ", ".join(self.format_value(v, formatter) for v in value)

        formatter = formatter or "text"
        if formatter not in FORMATTERS:
            raise FormattingError(f"Unknown formatter: {formatter!r}")
        if formatter == "text":
            return str(value)
        return getattr(self, f"format_{formatter}")(float(value))

    def format_title(self, key: str) -> str:
        if not self.config.format_title_case:
            return key
        if key not in self._titles:
            words = [w for w in re.split(r"[_\s]+", key) if w]
            self._titles[key] = " ".join(ACRONYMS.get(w.lower(), w[:1].upper() + w[1:]) for w in words)
        return self._titles[key]

    # -----------------------------
    # Markdown
    # -----------------------------

    def render_title(self, report: ReportData) -> str:
        price = self.format_currency(report.purchase_price)
        if report.adjusted:
            return f"Maximum Purchase Price Analysis @ {price}"
        return f"Sale Price Analysis @ {price}"

    def render_line(self, key: str, item: ReportField, default_formatter: Optional[str]) -> str:
        line = f"{self.format_title(key)}: {self.format_value(item.value, item.formatter or default_formatter)}"
        if item.note:
            line += f" _({item.note})_"
        if item.highlight:
            line = f"**{line}**"
        return f"- {line}"

    def render_section(self, section: ReportSection) -> str:
        heading = ", ".join(
            f"{label}: {self.format_value(item.value, item.formatter)}"
            + (f" _({item.note})_" if item.note else "")
            for label, item in section.headline.items()
        )
        lines = [self.render_line(k, v, section.default_formatter) for k, v in section.data.items()]

        output = [f"{'#' * self.config.section_title_level} {heading}", ""]
        if section.description:
            output += [section.description, ""]

        if section.collapsed:
            output += ["<details>", "<summary>Show details</summary>", "", *lines, "", "</details>"]
        else:
            output += lines
        return "\n".join(output)

    def render(self, report: ReportData) -> str:
        output = [f"# {self.render_title(report)}", ""]
        sections = [self.render_section(s) for s in report.sections]
        return "\n".join(output) + "\n" + "\n\n".join(sections) + "\n"
