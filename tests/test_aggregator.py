"""
Unit tests for the AR aggregator.

Covers aging buckets, the paid/unpaid overview, supplier revenue ranking and
outstanding balances, including the reconciliation properties that must hold
for any invoice set.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
import pytest
from ar_dashboard.services.aggregator import (
    aging_bucket,
    compute_aging_buckets,
    compute_ar_overview,
    compute_ar_overview_by_currency,
    compute_outstanding_balance,
    compute_overdue_summary,
    compute_supplier_balances,
    compute_supplier_revenue,
    days_overdue,
    parse_window,
)
from ar_dashboard.services.ar_types import MalformedAmountError, MissingDueDateError, load_invoice

TODAY = date(2025, 6, 30)
LABELS = ["0-30 days", "31-60 days", "61-90 days", "90+ days"]


def inv(id, amount, days_ago, paid=False, supplier_id=1, currency="USD", number=None):
    """Invoice row due ``days_ago`` days before TODAY (negative = not yet due)"""
    return {
        "id": id,
        "supplierId": supplier_id,
        "invoiceNumber": number,
        "totalAmount": amount,
        "currency": currency,
        "dueDate": (TODAY - timedelta(days=days_ago)).isoformat(),
        "isPaid": paid,
    }


def supplier(id, name):
    return {"id": id, "name": name}


class TestAgingBuckets:
    """Tests for compute_aging_buckets"""

    def test_scenario_unpaid_bucketed_paid_ignored(self):
        invoices = [inv(1, 100, 10), inv(2, 50, 45), inv(3, 200, 5, paid=True)]

        buckets = compute_aging_buckets(invoices, TODAY)

        assert buckets == {
            "0-30 days": Decimal("100"),
            "31-60 days": Decimal("50"),
            "61-90 days": Decimal("0"),
            "90+ days": Decimal("0"),
        }

    def test_labels_always_present_in_display_order(self):
        assert list(compute_aging_buckets([inv(1, 10, 200)], TODAY)) == LABELS
        assert list(compute_aging_buckets([], TODAY)) == LABELS

    def test_empty_input_is_all_zero(self):
        buckets = compute_aging_buckets([], TODAY)
        assert all(value == 0 for value in buckets.values())

    @pytest.mark.parametrize(
        "days_ago,label",
        [
            (-15, "0-30 days"),
            (0, "0-30 days"),
            (30, "0-30 days"),
            (31, "31-60 days"),
            (60, "31-60 days"),
            (61, "61-90 days"),
            (90, "61-90 days"),
            (91, "90+ days"),
            (400, "90+ days"),
        ],
    )
    def test_bucket_boundaries(self, days_ago, label):
        buckets = compute_aging_buckets([inv(1, 75, days_ago)], TODAY)
        assert buckets[label] == Decimal("75")
        assert sum(buckets.values()) == Decimal("75")

    def test_uses_amount_not_total_when_both_present(self):
        row = {**inv(1, 100, 10), "amount": "40.00"}
        assert compute_aging_buckets([row], TODAY)["0-30 days"] == Decimal("40.00")

    def test_datetime_reference_is_compared_by_day(self):
        late_evening = datetime(2025, 6, 30, 23, 59)
        buckets = compute_aging_buckets([inv(1, 10, 30)], late_evening)
        assert buckets["0-30 days"] == Decimal("10")

    def test_defaults_to_today(self):
        row = {"totalAmount": "12.00", "dueDate": date.today().isoformat(), "isPaid": False}
        assert compute_aging_buckets([row])["0-30 days"] == Decimal("12.00")

    def test_aging_bucket_helper(self):
        assert aging_bucket(-1) == "0-30 days"
        assert aging_bucket(61) == "61-90 days"


class TestAROverview:
    """Tests for compute_ar_overview"""

    def test_scenario_overview(self):
        invoices = [inv(1, 100, 10), inv(2, 50, 45), inv(3, 200, 5, paid=True)]

        overview = compute_ar_overview(invoices)

        assert overview.total_ar == Decimal("350")
        assert overview.paid_ar == Decimal("200")
        assert overview.unpaid_ar == Decimal("150")

    def test_empty_input_is_zero(self):
        overview = compute_ar_overview([])
        assert (overview.total_ar, overview.paid_ar, overview.unpaid_ar) == (0, 0, 0)

    def test_float_amounts_do_not_drift(self):
        invoices = [inv(1, 0.1, 1), inv(2, 0.2, 1, paid=True), inv(3, 0.7, 1)]

        overview = compute_ar_overview(invoices)

        assert overview.total_ar == Decimal("1.00")
        assert overview.paid_ar + overview.unpaid_ar == overview.total_ar

    def test_json_serializes_numbers(self):
        overview = compute_ar_overview([inv(1, "120.50", 1), inv(2, "79.50", 1, paid=True)])
        assert overview.model_dump(mode="json") == {"total_ar": 200.0, "paid_ar": 79.5, "unpaid_ar": 120.5}

    def test_by_currency(self):
        invoices = [
            inv(1, 100, 1, currency="USD"),
            inv(2, 40, 1, currency="CAD", paid=True),
            inv(3, 60, 1, currency="CAD"),
        ]

        result = compute_ar_overview_by_currency(invoices)

        assert list(result) == ["USD", "CAD"]
        assert result["USD"].unpaid_ar == Decimal("100")
        assert result["CAD"].total_ar == Decimal("100")
        assert result["CAD"].paid_ar == Decimal("40")


class TestReconciliation:
    """Properties that hold for any invoice set"""

    INVOICE_SETS = [
        [],
        [inv(1, "19.99", 3)],
        [inv(1, "0.01", 100, paid=True), inv(2, "0.02", 31), inv(3, "1000000.33", -3)],
        [inv(i, f"{i}.{i % 100:02d}", i * 7, paid=i % 3 == 0) for i in range(1, 40)],
    ]

    @pytest.mark.parametrize("invoices", INVOICE_SETS)
    def test_paid_plus_unpaid_equals_total(self, invoices):
        overview = compute_ar_overview(invoices)
        assert overview.paid_ar + overview.unpaid_ar == overview.total_ar

    @pytest.mark.parametrize("invoices", INVOICE_SETS)
    def test_buckets_sum_to_unpaid(self, invoices):
        buckets = compute_aging_buckets(invoices, TODAY)
        assert sum(buckets.values()) == compute_ar_overview(invoices).unpaid_ar

    @pytest.mark.parametrize("invoices", INVOICE_SETS)
    def test_deterministic(self, invoices):
        suppliers = [supplier(1, "A")]
        assert compute_aging_buckets(invoices, TODAY) == compute_aging_buckets(invoices, TODAY)
        assert compute_ar_overview(invoices) == compute_ar_overview(invoices)
        assert compute_supplier_revenue(suppliers, invoices, 30, TODAY) == compute_supplier_revenue(
            suppliers, invoices, 30, TODAY
        )
        assert compute_outstanding_balance(1, invoices) == compute_outstanding_balance(1, invoices)

    def test_input_is_not_mutated(self):
        invoices = [inv(1, 100, 10)]
        before = [dict(row) for row in invoices]
        compute_aging_buckets(invoices, TODAY)
        compute_ar_overview(invoices)
        assert invoices == before


class TestSupplierRevenue:
    """Tests for compute_supplier_revenue"""

    def test_scenario_ranking(self):
        suppliers = [supplier(1, "A"), supplier(2, "B")]
        invoices = [
            inv(1, 100, 5, supplier_id=1),
            inv(2, 200, 10, supplier_id=1),
            inv(3, 500, 1, supplier_id=2),
        ]

        report = compute_supplier_revenue(suppliers, invoices, 30, TODAY)

        assert [(row.supplier.name, row.revenue) for row in report.suppliers] == [
            ("B", Decimal("500")),
            ("A", Decimal("300")),
        ]
        assert report.total == Decimal("800")

    def test_window_counts_back_from_now_against_due_date(self):
        suppliers = [supplier(1, "A")]
        invoices = [
            inv(1, 100, 30, supplier_id=1),   # due exactly 30 days ago: kept
            inv(2, 200, 31, supplier_id=1),   # due 31 days ago: dropped
            inv(3, 400, -60, supplier_id=1),  # not due for 60 days: kept
        ]

        report = compute_supplier_revenue(suppliers, invoices, 30, TODAY)

        assert report.suppliers[0].revenue == Decimal("500")
        assert report.total == Decimal("500")

    def test_all_window_keeps_everything(self):
        suppliers = [supplier(1, "A")]
        invoices = [inv(1, 100, 1000, supplier_id=1), inv(2, 1, 1, supplier_id=1, paid=True)]

        report = compute_supplier_revenue(suppliers, invoices, "all", TODAY)

        assert report.total == Decimal("101")
        assert report.window == "all"

    def test_ties_keep_supplier_input_order(self):
        suppliers = [supplier(3, "C"), supplier(1, "A"), supplier(2, "B")]
        invoices = [
            inv(1, 300, 1, supplier_id=1),
            inv(2, 300, 1, supplier_id=3),
            inv(3, 900, 1, supplier_id=2),
        ]

        report = compute_supplier_revenue(suppliers, invoices, "all", TODAY)

        assert [row.supplier.name for row in report.suppliers] == ["B", "C", "A"]

    def test_suppliers_without_revenue_and_orphans_are_left_out(self):
        suppliers = [supplier(1, "A"), supplier(2, "B")]
        invoices = [inv(1, 100, 1, supplier_id=1), inv(2, 999, 1, supplier_id=42)]

        report = compute_supplier_revenue(suppliers, invoices, 30, TODAY)

        assert [row.supplier.name for row in report.suppliers] == ["A"]
        assert report.total == Decimal("100")

    def test_empty_input(self):
        report = compute_supplier_revenue([supplier(1, "A")], [], 30, TODAY)
        assert report.suppliers == []
        assert report.total == 0

    def test_grand_total_equals_filtered_invoice_totals(self):
        suppliers = [supplier(1, "A"), supplier(2, "B")]
        invoices = [inv(i, f"{i}.25", i, supplier_id=1 + i % 2) for i in range(1, 60)]

        report = compute_supplier_revenue(suppliers, invoices, 45, TODAY)

        expected = sum(Decimal(f"{i}.25") for i in range(1, 46))
        assert report.total == expected

    @pytest.mark.parametrize("value,expected", [("30", 30), (14, 14), ("all", "all"), ("ALL", "all")])
    def test_parse_window(self, value, expected):
        assert parse_window(value) == expected

    @pytest.mark.parametrize("value", ["-1", "soon"])
    def test_parse_window_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            parse_window(value)


class TestOutstandingBalance:
    """Tests for compute_outstanding_balance and compute_supplier_balances"""

    def test_scenario_exact_cents(self):
        invoices = [
            inv(1, "120.50", 10, supplier_id=7),
            inv(2, "79.50", 40, supplier_id=7),
            inv(3, "200", 5, supplier_id=7, paid=True),
            inv(4, "55.55", 5, supplier_id=8),
        ]

        balance = compute_outstanding_balance(7, invoices)

        assert balance == Decimal("200.00")
        assert str(balance) == "200.00"

    def test_unknown_supplier_is_zero(self):
        assert compute_outstanding_balance(99, [inv(1, 10, 1)]) == 0

    def test_supplier_balances_sorted_descending(self):
        suppliers = [supplier(1, "A"), supplier(2, "B"), supplier(3, "C")]
        invoices = [inv(1, 10, 1, supplier_id=1), inv(2, 50, 1, supplier_id=2), inv(3, 99, 1, supplier_id=3, paid=True)]

        balances = compute_supplier_balances(suppliers, invoices)

        assert [(b.supplier.name, b.outstanding_amount) for b in balances] == [
            ("B", Decimal("50")),
            ("A", Decimal("10")),
            ("C", Decimal("0")),
        ]


class TestOverdueSummary:
    """Tests for compute_overdue_summary"""

    def test_counts_strictly_past_due_unpaid(self):
        invoices = [inv(1, 100, 0), inv(2, 50, 1), inv(3, 25, 10, paid=True), inv(4, 5, -3)]

        summary = compute_overdue_summary(invoices, TODAY)

        assert summary.count == 4
        assert summary.total == Decimal("180")
        assert summary.overdue == Decimal("50")
        assert summary.overdue_count == 1

    def test_days_overdue_negative_when_not_due(self):
        assert days_overdue(load_invoice(inv(1, 1, -5)), TODAY) == -5


class TestDataErrors:
    """Malformed rows surface as errors instead of counting as zero"""

    def test_malformed_amount(self):
        with pytest.raises(MalformedAmountError):
            compute_ar_overview([{"totalAmount": "twelve", "dueDate": "2025-01-01"}])

    def test_missing_due_date(self):
        with pytest.raises(MissingDueDateError):
            compute_aging_buckets([{"totalAmount": "10.00", "isPaid": False}], TODAY)
