"""
Tests for the customer, supplier and product repositories
"""
from decimal import Decimal

from orders_api.repositories import CustomerRepository, ProductRepository, SupplierRepository
from orders_api.services.query import PageRequest


class TestCustomerRepository:

    def test_default_order_is_last_then_first_name(self, db, factory):
        factory.customer(first_name="Zoe", last_name="Berg")
        factory.customer(first_name="Adam", last_name="Berg")
        factory.customer(first_name="Carl", last_name="Adams")

        page = CustomerRepository(db).find_all()

        assert [c.full_name for c in page.items] == ["Carl Adams", "Adam Berg", "Zoe Berg"]

    def test_country_and_city_filters(self, db, factory):
        factory.customer(country="Germany", city="Berlin")
        factory.customer(first_name="Ana", last_name="Trujillo", country="Mexico", city="México D.F.")

        repo = CustomerRepository(db)
        assert repo.find_all(country="germ").total_count == 1
        assert repo.find_all(city="berlin").items[0].last_name == "Anders"

    def test_has_orders_is_false_for_new_customer(self, db, factory):
        customer = factory.customer()

        assert CustomerRepository(db).exists(customer.id)
        assert not CustomerRepository(db).has_orders(customer.id)


class TestSupplierRepository:

    def test_search_is_capped(self, db, factory):
        for i in range(25):
            factory.supplier(company_name=f"Trader {i:02d}")

        results = SupplierRepository(db).search("trader")

        assert len(results) == 20
        assert results[0].company_name == "Trader 00"

    def test_listing_search_fields(self, db, factory):
        factory.supplier(company_name="Tokyo Traders", contact_name="Yoshi Nagase")
        factory.supplier(company_name="Pavlova, Ltd.", contact_name="Ian Devling")

        repo = SupplierRepository(db)
        assert [s.company_name for s in repo.find_all(search="yoshi").items] == ["Tokyo Traders"]

    def test_countries(self, db, factory):
        factory.supplier(country="UK")
        factory.supplier(company_name="Tokyo Traders", country="Japan")
        factory.supplier(company_name="Cooperativa", country="Spain", city="Oviedo")

        repo = SupplierRepository(db)
        assert repo.find_countries() == ["Japan", "Spain", "UK"]
        assert repo.find_cities("Spain") == ["Oviedo"]


class TestProductRepository:

    def test_find_by_id_includes_supplier_name(self, db, factory):
        product = factory.product(factory.supplier(company_name="Tokyo Traders"), product_name="Ikura")

        found = ProductRepository(db).find_by_id(product.id)

        assert found.supplier_name == "Tokyo Traders"
        assert found.to_dict()["unit_price"] == 18.0

    def test_search_matches_supplier_name(self, db, factory):
        tokyo = factory.supplier(company_name="Tokyo Traders")
        factory.product(tokyo, product_name="Ikura")
        factory.product(factory.supplier(), product_name="Chai")

        assert [p.product_name for p in ProductRepository(db).search("tokyo")] == ["Ikura"]

    def test_price_and_flag_filters(self, db, factory):
        supplier = factory.supplier()
        factory.product(supplier, product_name="Chai", unit_price="18.00")
        factory.product(supplier, product_name="Carnarvon Tigers", unit_price="62.50")
        factory.product(supplier, product_name="Alice Mutton", unit_price="39.00", is_discontinued=True)

        repo = ProductRepository(db)
        assert repo.find_all(max_price=Decimal("40")).total_count == 2
        assert [p.product_name for p in repo.find_all(is_discontinued=False).items] == [
            "Carnarvon Tigers", "Chai",
        ]
        page = repo.find_all(request=PageRequest(page=1, page_size=2))
        assert [p.product_name for p in page.items] == ["Alice Mutton", "Carnarvon Tigers"]

    def test_is_referenced_is_false_without_orders(self, db, factory):
        product = factory.product(factory.supplier())

        assert not ProductRepository(db).is_referenced(product.id)
