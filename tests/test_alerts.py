from stockview.alerts import (
    DeadStock,
    LowStock,
    OutOfStock,
    acknowledge_alert,
    active_alerts,
    count_by_type,
    evaluate_product,
    filter_alerts,
    generate_alerts,
)
from stockview.schemas import AlertCategory, AlertType, StockStatus
from stockview.store import InMemoryAcknowledgmentStore


class TestEvaluateProduct:
    def test_healthy_product_has_no_conditions(self, make_product, now):
        assert evaluate_product(make_product(quantity=50), now) == []

    def test_low_stock_carries_severity(self, make_product, now):
        assert evaluate_product(make_product(quantity=8), now) == [LowStock(StockStatus.LOW)]
        assert evaluate_product(make_product(quantity=3), now) == [
            LowStock(StockStatus.CRITICAL)
        ]

    def test_out_of_stock_and_dead_stock_combine(self, make_product, now):
        product = make_product(quantity=0, days_since_sale=None)
        assert evaluate_product(product, now) == [OutOfStock(), DeadStock("never")]


class TestGenerateAlerts:
    def test_low_stock_warning(self, make_product, now):
        product = make_product(name="PVC Pipe 4in", quantity=5, reorder_level=10)

        alerts = generate_alerts([product], now)

        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.type == AlertType.WARNING
        assert alert.category == AlertCategory.LOW_STOCK
        assert alert.title == "Low Stock"
        assert "5" in alert.message and "10" in alert.message
        assert alert.product_id == product.id
        assert alert.acknowledged is False

    def test_out_of_stock_is_critical(self, make_product, now):
        alerts = generate_alerts([make_product(quantity=0)], now)
        assert [(a.type, a.title) for a in alerts] == [(AlertType.CRITICAL, "Out of Stock")]

    def test_dead_stock_is_independent_warning(self, make_product, now):
        product = make_product(quantity=4, reorder_level=10, days_since_sale=40)

        alerts = generate_alerts([product], now)

        assert [a.category for a in alerts] == [
            AlertCategory.LOW_STOCK,
            AlertCategory.DEAD_STOCK,
        ]
        assert alerts[1].title == "Dead Stock"
        assert "40 days" in alerts[1].message

    def test_order_follows_products(self, make_product, now):
        warning_first = make_product(name="A", quantity=7)
        critical_second = make_product(name="B", quantity=0)

        alerts = generate_alerts([warning_first, critical_second], now)

        # no severity re-ordering
        assert [a.type for a in alerts] == [AlertType.WARNING, AlertType.CRITICAL]

    def test_ids_are_stable_across_runs(self, make_product, now):
        product = make_product(quantity=0)
        first = generate_alerts([product], now)
        second = generate_alerts([product], now)
        assert [a.id for a in first] == [a.id for a in second]
        assert first[0].id == f"{product.id}:out_of_stock"

    def test_generation_does_not_mutate_products(self, make_product, now):
        product = make_product(quantity=3)
        before = product.model_dump()
        generate_alerts([product], now)
        assert product.model_dump() == before


class TestAcknowledgment:
    def test_acknowledged_alert_is_suppressed(self, make_product, now):
        store = InMemoryAcknowledgmentStore()
        product = make_product(quantity=5, reorder_level=10)

        [alert] = active_alerts([product], store, now)
        acknowledge_alert(alert.id, store)

        assert active_alerts([product], store, now) == []
        assert product.quantity == 5

    def test_acknowledging_one_keeps_the_other(self, make_product, now):
        store = InMemoryAcknowledgmentStore()
        product = make_product(quantity=0, days_since_sale=None)

        acknowledge_alert(f"{product.id}:out_of_stock", store)

        remaining = active_alerts([product], store, now)
        assert [a.category for a in remaining] == [AlertCategory.DEAD_STOCK]

    def test_reset_restores_alerts(self, make_product, now):
        store = InMemoryAcknowledgmentStore()
        product = make_product(quantity=0)
        acknowledge_alert(f"{product.id}:out_of_stock", store)
        store.reset()
        assert len(active_alerts([product], store, now)) == 1


class TestFilters:
    def test_filter_and_count(self, make_product, now):
        alerts = generate_alerts(
            [make_product(quantity=0), make_product(quantity=6), make_product(quantity=9)],
            now,
        )

        assert len(filter_alerts(alerts, "all")) == 3
        assert len(filter_alerts(alerts, "critical")) == 1
        assert len(filter_alerts(alerts, "warning")) == 2
        assert count_by_type(alerts) == {"total": 3, "critical": 1, "warning": 2}
