# tests/unit/domain/services/report_validators/test_cross_report_consistency.py
from __future__ import annotations

from decimal import Decimal

from coopledger.domain.entities.line_items import AccountLine
from coopledger.domain.entities.report_payloads import (
    BalanceSheetPayload,
    CashFlowPayload,
    IncomeStatementPayload,
    NotesToFinancialPayload,
)
from coopledger.domain.enums.financial_report import ReportType, ViolationSeverity
from coopledger.domain.enums.line_items import AccountCategory, AccountSubcategory
from coopledger.domain.services.report_validators.cross_report import (
    cash_on_balance_sheet,
    check_cross_report_consistency,
    net_income_of,
    retained_earnings_on_balance_sheet,
)

D = Decimal


def _balance_sheet(*, cash: str = "1000000", retained: str = "400000") -> BalanceSheetPayload:
    return BalanceSheetPayload(
        accounts=(
            AccountLine("A100", "Kas", AccountCategory.ASSET, D(cash)),
            AccountLine("A110", "Kas di Bank", AccountCategory.ASSET, D("250000")),
            AccountLine("A120", "Piutang Kasbon", AccountCategory.ASSET, D("75000")),
            AccountLine(
                "A199", "Jumlah Kas", AccountCategory.ASSET, D("1250000"), is_subtotal=True
            ),
            AccountLine("L100", "Simpanan anggota", AccountCategory.LIABILITY, D("600000")),
            AccountLine("E100", "Laba Ditahan", AccountCategory.EQUITY, D(retained)),
        )
    )


def _cash_flow(ending: str) -> CashFlowPayload:
    return CashFlowPayload(
        beginning_cash_balance=D("1000000"),
        ending_cash_balance=D(ending),
        activities=(),
    )


def _income_statement(revenue: str = "900000", expense: str = "500000") -> IncomeStatementPayload:
    return IncomeStatementPayload(
        accounts=(
            AccountLine("R100", "Pendapatan jasa", AccountCategory.REVENUE, D(revenue)),
            AccountLine("R200", "Pendapatan lain", AccountCategory.OTHER_INCOME, D("50000")),
            AccountLine("X100", "Beban operasional", AccountCategory.EXPENSE, D(expense)),
            AccountLine("X200", "Beban lain", AccountCategory.OTHER_EXPENSE, D("50000")),
        )
    )


def _found(violations) -> list[tuple[str, str, ViolationSeverity]]:
    return [(v.field, v.code, v.severity) for v in violations]


# ---------------------------------------------------------------------------
# Extraction helpers
# ---------------------------------------------------------------------------


def test_cash_counts_named_cash_assets_but_not_subtotals_or_lookalikes() -> None:
    assert cash_on_balance_sheet(_balance_sheet()) == D("1250000")


def test_retained_earnings_by_name_or_subcategory() -> None:
    by_subcategory = BalanceSheetPayload(
        accounts=(
            AccountLine(
                "E200",
                "Saldo akumulasi",
                AccountCategory.EQUITY,
                D("300000"),
                subcategory=AccountSubcategory.RETAINED_EARNINGS,
            ),
        )
    )

    assert retained_earnings_on_balance_sheet(_balance_sheet()) == D("400000")
    assert retained_earnings_on_balance_sheet(by_subcategory) == D("300000")


def test_net_income_includes_other_income_and_expense() -> None:
    assert net_income_of(_income_statement()) == D("400000")


# ---------------------------------------------------------------------------
# Cash flow vs balance sheet
# ---------------------------------------------------------------------------


def test_cash_flow_matching_balance_sheet_cash_within_one_unit() -> None:
    related = {ReportType.BALANCE_SHEET: _balance_sheet()}

    assert check_cross_report_consistency(_cash_flow("1250001"), related) == []


def test_cash_flow_ending_balance_off_by_more_than_one_is_blocking() -> None:
    related = {ReportType.BALANCE_SHEET: _balance_sheet()}

    found = _found(check_cross_report_consistency(_cash_flow("1250002"), related))

    assert found == [
        ("ending_cash_balance", "CROSS_REPORT_CASH_MISMATCH", ViolationSeverity.BLOCKING)
    ]


def test_balance_sheet_is_checked_against_approved_cash_flow() -> None:
    related = {ReportType.CASH_FLOW: _cash_flow("900000")}

    found = _found(check_cross_report_consistency(_balance_sheet(), related))

    assert found == [("accounts", "CROSS_REPORT_CASH_MISMATCH", ViolationSeverity.BLOCKING)]


def test_balance_sheet_without_cash_accounts_skips_cash_rule() -> None:
    no_cash = BalanceSheetPayload(
        accounts=(AccountLine("A300", "Tanah", AccountCategory.ASSET, D("1000000")),)
    )

    related = {ReportType.BALANCE_SHEET: no_cash}

    assert check_cross_report_consistency(_cash_flow("5"), related) == []


# ---------------------------------------------------------------------------
# Balance sheet vs income statement
# ---------------------------------------------------------------------------


def test_retained_earnings_far_from_net_income_is_a_warning() -> None:
    related = {ReportType.INCOME_STATEMENT: _income_statement(revenue="3000000")}

    found = _found(check_cross_report_consistency(_balance_sheet(), related))

    assert found == [
        ("accounts", "CROSS_REPORT_RETAINED_EARNINGS", ViolationSeverity.WARNING)
    ]


def test_retained_earnings_within_a_million_of_net_income_passes() -> None:
    related = {ReportType.INCOME_STATEMENT: _income_statement(revenue="1000000")}

    # Net income 500,000 against retained earnings 400,000.
    assert check_cross_report_consistency(_balance_sheet(), related) == []


def test_income_statement_is_checked_against_approved_balance_sheet() -> None:
    related = {ReportType.BALANCE_SHEET: _balance_sheet(retained="5000000")}

    found = _found(check_cross_report_consistency(_income_statement(), related))

    assert found == [
        ("accounts", "CROSS_REPORT_RETAINED_EARNINGS", ViolationSeverity.WARNING)
    ]


def test_unrelated_report_kinds_have_no_cross_checks() -> None:
    related = {
        ReportType.BALANCE_SHEET: _balance_sheet(),
        ReportType.CASH_FLOW: _cash_flow("1"),
    }

    assert check_cross_report_consistency(NotesToFinancialPayload(sections=()), related) == []
