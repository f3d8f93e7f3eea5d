"""
Variant Stock Ledger - Unit Tests

Tests for:
- Stock lookup and in-place updates
- Totals across overwrites
- Cascading removal by axis and by value
- Restricted copies and product reassignment
"""

import pytest

from tests.contracts.inventory.data_contract import InventoryTestDataFactory
from microservices.inventory_service.variant_ledger import VariantStockLedger

pytestmark = pytest.mark.unit

factory = InventoryTestDataFactory


@pytest.fixture
def ledger():
    return VariantStockLedger(factory.make_product_id())


class TestStockLookup:

    def test_unset_combination_is_zero(self, ledger):
        assert ledger.get_stock({"Talla": "M"}) == 0
        assert ledger.get_entry({"Talla": "M"}) is None

    def test_set_then_get(self, ledger):
        ledger.set_stock({"Talla": "S", "Color": "Rojo"}, 7)
        assert ledger.get_stock({"Talla": "S", "Color": "Rojo"}) == 7

    def test_lookup_ignores_key_order(self, ledger):
        ledger.set_stock({"Talla": "S", "Color": "Rojo"}, 4)
        assert ledger.get_stock({"Color": "Rojo", "Talla": "S"}) == 4

    def test_second_set_updates_in_place(self, ledger):
        first = ledger.set_stock({"Talla": "S"}, 3)
        second = ledger.set_stock({"Talla": "S"}, 9)

        assert len(ledger) == 1
        assert second.id == first.id
        assert ledger.get_stock({"Talla": "S"}) == 9

    def test_set_keeps_reserved(self):
        product_id = factory.make_product_id()
        seeded = factory.make_stock_entry(product_id, {"Talla": "S"}, stock=5, reserved=2)
        ledger = VariantStockLedger(product_id, [seeded])

        entry = ledger.set_stock({"Talla": "S"}, 8)

        assert entry.reserved == 2
        assert entry.id == seeded.id

    def test_new_entries_belong_to_the_product(self, ledger):
        entry = ledger.set_stock({"Talla": "S"}, 1)
        assert entry.product_id == ledger.product_id
        assert entry.reserved == 0

    def test_negative_stock_is_stored_as_given(self, ledger):
        ledger.set_stock({}, -3)
        assert ledger.get_stock({}) == -3

    def test_entries_returns_a_copy_of_the_list(self, ledger):
        ledger.set_stock({"Talla": "S"}, 1)
        ledger.entries.clear()
        assert len(ledger) == 1


class TestSeeding:

    def test_seed_does_not_alias_caller_entries(self):
        product_id = factory.make_product_id()
        seeded = factory.make_stock_entry(product_id, {"Talla": "S"}, stock=5)
        ledger = VariantStockLedger(product_id, [seeded])

        ledger.set_stock({"Talla": "S"}, 1)

        assert seeded.stock == 5

    def test_duplicate_seed_keeps_the_last(self):
        product_id = factory.make_product_id()
        ledger = VariantStockLedger(product_id, [
            factory.make_stock_entry(product_id, {"Talla": "S", "Color": "Rojo"}, stock=1),
            factory.make_stock_entry(product_id, {"Color": "Rojo", "Talla": "S"}, stock=6),
        ])

        assert len(ledger) == 1
        assert ledger.get_stock({"Talla": "S", "Color": "Rojo"}) == 6


class TestTotals:

    def test_empty_total_is_zero(self, ledger):
        assert ledger.total_stock() == 0

    def test_total_after_overwrites(self, ledger):
        ledger.set_stock({"Talla": "S"}, 3)
        ledger.set_stock({"Talla": "M"}, 5)
        ledger.set_stock({"Talla": "S"}, 10)
        ledger.set_stock({"Talla": "L"}, 0)

        assert ledger.total_stock() == 15
        assert ledger.total_stock() == sum(e.stock for e in ledger.entries)


class TestRemoval:

    def test_remove_axis_cascades(self, ledger):
        ledger.set_stock({"Talla": "S", "Color": "Rojo"}, 3)
        ledger.set_stock({"Talla": "M", "Color": "Azul"}, 5)
        ledger.set_stock({"Talla": "M"}, 2)

        removed = ledger.remove_axis("Color")

        assert removed == 2
        assert all("Color" not in e.variant_combination for e in ledger.entries)
        assert ledger.get_stock({"Talla": "M"}) == 2

    def test_remove_value_cascades(self, ledger):
        ledger.set_stock({"Talla": "S", "Color": "Rojo"}, 3)
        ledger.set_stock({"Talla": "M", "Color": "Rojo"}, 5)
        ledger.set_stock({"Talla": "M", "Color": "Azul"}, 1)

        removed = ledger.remove_value("Talla", "M")

        assert removed == 2
        assert ledger.total_stock() == 3

    def test_lookups_work_after_removal(self, ledger):
        ledger.set_stock({"Talla": "S"}, 3)
        ledger.set_stock({"Talla": "M"}, 5)
        ledger.remove_value("Talla", "S")

        ledger.set_stock({"Talla": "M"}, 6)

        assert len(ledger) == 1
        assert ledger.get_stock({"Talla": "M"}) == 6

    def test_remove_unknown_axis_is_noop(self, ledger):
        ledger.set_stock({"Talla": "S"}, 3)
        assert ledger.remove_axis("Material") == 0
        assert len(ledger) == 1


class TestRestriction:

    def test_restricted_copy_holds_only_given_combinations(self, ledger):
        ledger.set_stock({"Talla": "S"}, 3)
        ledger.set_stock({"Talla": "M"}, 5)
        ledger.set_stock({}, 40)

        live = ledger.restricted_to([{"Talla": "S"}, {"Talla": "M"}, {"Talla": "L"}])

        assert live.total_stock() == 8
        assert len(ledger) == 3

    def test_restricted_copy_is_independent(self, ledger):
        ledger.set_stock({"Talla": "S"}, 3)
        live = ledger.restricted_to([{"Talla": "S"}])

        live.set_stock({"Talla": "S"}, 100)

        assert ledger.get_stock({"Talla": "S"}) == 3

    def test_assign_product(self, ledger):
        ledger.set_stock({"Talla": "S"}, 3)
        ledger.assign_product("prod_real")

        assert ledger.product_id == "prod_real"
        assert all(e.product_id == "prod_real" for e in ledger.entries)
