import uuid
from datetime import timedelta
from decimal import Decimal

from stockview.sales import summarize
from stockview.schemas import Sale


def make_sale(product, quantity, unit_price="100", when=None):
    return Sale(
        id=uuid.uuid4().hex,
        product_id=product.id,
        quantity=quantity,
        unit_price=Decimal(unit_price),
        timestamp=when,
    )


class TestSummarize:
    def test_no_sales_has_zero_average(self, make_product, now):
        summary = summarize([], [make_product()], 30, now)

        assert summary.total_sales == 0
        assert summary.total_units == 0
        assert summary.total_revenue == 0
        assert summary.average_order_value == 0
        assert summary.top_products == []
        assert summary.period == "30 days"

    def test_three_sales_scenario(self, make_product, now):
        product = make_product(name="Steel Beam", sku="BEAM-01")
        sales = [
            make_sale(product, 2, when=now - timedelta(days=1)),
            make_sale(product, 3, when=now - timedelta(days=2)),
            make_sale(product, 5, when=now - timedelta(days=3)),
        ]

        summary = summarize(sales, [product], 30, now)

        assert summary.total_units == 10
        assert summary.total_revenue == Decimal("1000")
        assert summary.total_sales == 3
        assert abs(float(summary.average_order_value) - 333.33) < 0.01
        assert summary.top_products[0].name == "Steel Beam"
        assert summary.top_products[0].sku == "BEAM-01"
        assert summary.top_products[0].quantity == 10

    def test_sales_outside_period_are_ignored(self, make_product, now):
        product = make_product()
        sales = [
            make_sale(product, 1, when=now - timedelta(days=2)),
            make_sale(product, 9, when=now - timedelta(days=10)),
        ]

        assert summarize(sales, [product], 7, now).total_units == 1
        assert summarize(sales, [product], 30, now).total_units == 10

    def test_unit_price_is_taken_from_sale(self, make_product, now):
        product = make_product(price="999")
        sales = [make_sale(product, 2, unit_price="12.50", when=now)]
        assert summarize(sales, [product], 30, now).total_revenue == Decimal("25.00")

    def test_top_products_sorted_and_truncated(self, make_product, now):
        products = [make_product(name=f"P{i}") for i in range(8)]
        sales = [
            make_sale(p, quantity=i + 1, when=now - timedelta(hours=1))
            for i, p in enumerate(products)
        ]

        summary = summarize(sales, products, 30, now, top_n=5)

        assert len(summary.top_products) == 5
        quantities = [t.quantity for t in summary.top_products]
        assert quantities == sorted(quantities, reverse=True)
        assert quantities[0] == 8

    def test_ties_broken_by_revenue_then_first_appearance(self, make_product, now):
        a, b, c = make_product(name="A"), make_product(name="B"), make_product(name="C")
        sales = [
            make_sale(a, 4, unit_price="10", when=now),
            make_sale(b, 4, unit_price="10", when=now),
            make_sale(c, 4, unit_price="20", when=now),
        ]

        summary = summarize(sales, [a, b, c], 30, now)

        assert [t.name for t in summary.top_products] == ["C", "A", "B"]

    def test_groups_multiple_sales_per_product(self, make_product, now):
        a, b = make_product(name="A"), make_product(name="B")
        sales = [
            make_sale(a, 1, when=now),
            make_sale(b, 3, when=now),
            make_sale(a, 4, when=now),
        ]

        top = summarize(sales, [a, b], 30, now).top_products

        assert [(t.name, t.quantity, t.revenue) for t in top] == [
            ("A", 5, Decimal("500")),
            ("B", 3, Decimal("300")),
        ]

    def test_summary_is_recomputable(self, make_product, now):
        product = make_product()
        sales = [make_sale(product, 2, when=now)]
        assert summarize(sales, [product], 30, now) == summarize(sales, [product], 30, now)

    def test_equal_decimal_revenues_tie_exactly(self, make_product, now):
        a, b = make_product(name="A"), make_product(name="B")
        sales = [
            make_sale(b, 2, unit_price="0.15", when=now),
            make_sale(a, 1, unit_price="0.1", when=now),
            make_sale(a, 1, unit_price="0.2", when=now),
        ]

        top = summarize(sales, [a, b], 30, now).top_products

        assert [t.name for t in top] == ["B", "A"]
        assert top[0].revenue == top[1].revenue == Decimal("0.3")

    def test_total_revenue_keeps_sub_cent_precision(self, make_product, now):
        product = make_product()
        sales = [make_sale(product, 3, unit_price="0.333", when=now)]

        summary = summarize(sales, [product], 30, now)

        assert summary.total_revenue == Decimal("0.999")
        assert summary.average_order_value == Decimal("1.00")
