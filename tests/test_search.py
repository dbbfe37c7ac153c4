import pytest
from pydantic import ValidationError

from stockview.classifier import classify_product
from stockview.schemas import ProductQuery, SortBy, StatusFilter, StockStatus
from stockview.search import query


@pytest.fixture
def catalog(make_product):
    return [
        make_product(name="Portland Cement", sku="CEM-50", quantity=40, price="450"),
        make_product(name="Ceramic Tile", sku="TIL-30", quantity=8, price="60"),
        make_product(name="Cement Board", sku="BRD-12", quantity=0, price="700"),
        make_product(name="copper wire", sku="WIR-CU", quantity=3, price="1100"),
        make_product(name="Sand Bag", sku="SND-25", quantity=40, price="90"),
    ]


class TestTextFilter:
    def test_empty_text_matches_all(self, catalog):
        assert len(query(catalog, ProductQuery())) == len(catalog)

    def test_matches_name_case_insensitively(self, catalog):
        names = [p.name for p in query(catalog, ProductQuery(text="CEMENT"))]
        assert names == ["Cement Board", "Portland Cement"]

    def test_matches_sku(self, catalog):
        assert [p.sku for p in query(catalog, ProductQuery(text="wir"))] == ["WIR-CU"]


class TestStatusFilter:
    def test_low_stock_is_low_or_critical(self, catalog):
        for text in ("", "c"):
            for sort_by in SortBy:
                result = query(catalog, ProductQuery(text=text, status="low-stock", sort_by=sort_by))
                expected = {
                    p.id
                    for p in catalog
                    if classify_product(p) in (StockStatus.LOW, StockStatus.CRITICAL)
                    and (text in p.name.lower() or text in p.sku.lower())
                }
                assert {p.id for p in result} == expected

    def test_out_of_stock(self, catalog):
        assert [p.name for p in query(catalog, ProductQuery(status=StatusFilter.OUT_OF_STOCK))] == [
            "Cement Board"
        ]

    def test_in_stock(self, catalog):
        result = query(catalog, ProductQuery(status="in-stock"))
        assert {p.name for p in result} == {"Portland Cement", "Sand Bag"}


class TestSort:
    def test_name_ascending(self, catalog):
        names = [p.name for p in query(catalog, ProductQuery(sort_by="name"))]
        assert names == ["Cement Board", "Ceramic Tile", "copper wire", "Portland Cement", "Sand Bag"]

    def test_quantity_orders_are_stable(self, catalog):
        asc = [p.name for p in query(catalog, ProductQuery(sort_by="quantity-asc"))]
        desc = [p.name for p in query(catalog, ProductQuery(sort_by="quantity-desc"))]
        assert asc == ["Cement Board", "copper wire", "Ceramic Tile", "Portland Cement", "Sand Bag"]
        # equal quantities (40) keep input order in both directions
        assert desc[:2] == ["Portland Cement", "Sand Bag"]

    def test_value_descending(self, catalog):
        result = query(catalog, ProductQuery(sort_by=SortBy.VALUE_DESC))
        assert [p.name for p in result][:2] == ["Portland Cement", "Sand Bag"]
        values = [p.stock_value for p in result]
        assert values == sorted(values, reverse=True)

    def test_input_not_mutated(self, catalog):
        before = [p.id for p in catalog]
        query(catalog, ProductQuery(sort_by="quantity-desc"))
        assert [p.id for p in catalog] == before


class TestProductQuery:
    def test_query_is_immutable(self):
        q = ProductQuery(text="tile")
        with pytest.raises(ValidationError):
            q.text = "cement"

    def test_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            ProductQuery(status="expired")

    def test_accepts_camel_case_alias(self):
        assert ProductQuery(sortBy="value-desc").sort_by == SortBy.VALUE_DESC
