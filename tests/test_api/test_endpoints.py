"""
HTTP-level tests: routing, status codes, error bodies and pagination headers
"""


def seed_catalog(api_factory):
    supplier = api_factory.supplier()
    return {
        "supplier": supplier,
        "customer": api_factory.customer(),
        "chai": api_factory.product(supplier, product_name="Chai", unit_price="9.99"),
        "chang": api_factory.product(supplier, product_name="Chang", unit_price="5.00"),
        "syrup": api_factory.product(supplier, product_name="Aniseed Syrup", unit_price="10.00",
                                     is_discontinued=True),
    }


def create_order(client, catalog, *lines):
    return client.post("/api/v1/orders/", json={
        "customer_id": catalog["customer"].id,
        "items": [{"product_id": catalog[key].id, "quantity": qty} for key, qty in lines],
    })


class TestRootAndHealth:

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "online"

    def test_health_reports_database(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["database"]["status"] == "connected"


class TestCustomersApi:

    def test_create_then_get(self, client):
        created = client.post("/api/v1/customers/", json={"first_name": "Ana", "last_name": "Trujillo"})

        assert created.status_code == 201
        customer_id = created.json()["id"]
        body = client.get(f"/api/v1/customers/{customer_id}").json()
        assert body["full_name"] == "Ana Trujillo"

    def test_create_validates_shape(self, client):
        response = client.post("/api/v1/customers/", json={"first_name": "", "last_name": "X"})

        assert response.status_code == 422

    def test_listing_headers(self, client, api_factory):
        for i in range(12):
            api_factory.customer(first_name=f"F{i:02d}", last_name=f"L{i:02d}")

        response = client.get("/api/v1/customers/", params={"page": 2, "page_size": 5})

        assert response.status_code == 200
        assert len(response.json()) == 5
        assert response.headers["X-Total-Count"] == "12"
        assert response.headers["X-Page"] == "2"
        assert response.headers["X-Page-Size"] == "5"
        assert response.headers["X-Total-Pages"] == "3"

    def test_oversized_page_size_falls_back_to_default(self, client, api_factory):
        api_factory.customer()

        response = client.get("/api/v1/customers/", params={"page": 0, "page_size": 500})

        assert response.headers["X-Page"] == "1"
        assert response.headers["X-Page-Size"] == "10"

    def test_unknown_customer_is_404(self, client):
        response = client.get("/api/v1/customers/123")

        assert response.status_code == 404
        assert response.json() == {"message": "Customer with ID 123 not found."}

    def test_invalid_id_is_400(self, client):
        response = client.get("/api/v1/customers/0")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid customer ID."

    def test_delete_with_orders_is_400(self, client, api_factory):
        catalog = seed_catalog(api_factory)
        create_order(client, catalog, ("chai", 1))

        response = client.delete(f"/api/v1/customers/{catalog['customer'].id}")

        assert response.status_code == 400
        assert "existing orders" in response.json()["message"]

    def test_statistics(self, client, api_factory):
        api_factory.customer(country="Germany")

        body = client.get("/api/v1/customers/statistics").json()

        assert body["total_customers"] == 1
        assert body["top_countries"] == [{"category": "Germany", "count": 1}]


class TestProductsApi:

    def test_discontinue_and_reactivate(self, client, api_factory):
        catalog = seed_catalog(api_factory)
        url = f"/api/v1/products/{catalog['chai'].id}"

        assert client.patch(f"{url}/discontinue").status_code == 204
        assert client.get(url).json()["is_discontinued"] is True
        assert client.patch(f"{url}/discontinue").status_code == 400
        assert client.patch(f"{url}/reactivate").status_code == 204

    def test_price_change(self, client, api_factory):
        catalog = seed_catalog(api_factory)
        url = f"/api/v1/products/{catalog['chai'].id}"

        assert client.patch(f"{url}/price", json={"unit_price": "0"}).status_code == 400
        assert client.patch(f"{url}/price", json={"unit_price": "11.50"}).status_code == 204
        assert client.get(url).json()["unit_price"] == 11.5

    def test_search_needs_two_characters(self, client, api_factory):
        seed_catalog(api_factory)

        assert client.get("/api/v1/products/search/c").status_code == 400
        names = [p["product_name"] for p in client.get("/api/v1/products/search/ch").json()]
        assert names == ["Chai", "Chang"]

    def test_negative_price_filter_is_400(self, client):
        response = client.get("/api/v1/products/", params={"min_price": "-1"})

        assert response.status_code == 400

    def test_active_list(self, client, api_factory):
        seed_catalog(api_factory)

        names = [p["product_name"] for p in client.get("/api/v1/products/active").json()]

        assert names == ["Chai", "Chang"]


class TestOrdersApi:

    def test_create_order(self, client, api_factory):
        catalog = seed_catalog(api_factory)

        response = create_order(client, catalog, ("chai", 2), ("chang", 1))

        assert response.status_code == 201
        body = response.json()
        assert body["total_amount"] == 24.98
        assert body["item_count"] == 2
        assert body["customer_name"] == "Maria Anders"
        assert body["order_number"].startswith("ORD")

    def test_discontinued_product_is_400(self, client, api_factory):
        catalog = seed_catalog(api_factory)

        response = create_order(client, catalog, ("syrup", 1))

        assert response.status_code == 400
        assert "discontinued" in response.json()["message"]
        assert client.get("/api/v1/orders/").headers["X-Total-Count"] == "0"

    def test_unknown_product_is_404(self, client, api_factory):
        catalog = seed_catalog(api_factory)

        response = client.post("/api/v1/orders/", json={
            "customer_id": catalog["customer"].id,
            "items": [{"product_id": 999, "quantity": 1}],
        })

        assert response.status_code == 404

    def test_item_update_and_delete(self, client, api_factory):
        catalog = seed_catalog(api_factory)
        order = create_order(client, catalog, ("chai", 2), ("chang", 1)).json()
        first, second = (item["id"] for item in order["items"])

        assert client.put(f"/api/v1/order-items/{first}", json={"quantity": 5}).status_code == 204
        assert client.get(f"/api/v1/orders/{order['id']}").json()["total_amount"] == 54.95

        assert client.delete(f"/api/v1/order-items/{second}").status_code == 204
        last = client.delete(f"/api/v1/order-items/{first}")
        assert last.status_code == 400
        assert "last item" in last.json()["message"]

        assert client.delete(f"/api/v1/orders/{order['id']}").status_code == 204
        assert client.get(f"/api/v1/orders/{order['id']}").status_code == 404

    def test_lookup_routes(self, client, api_factory):
        catalog = seed_catalog(api_factory)
        order = create_order(client, catalog, ("chai", 1)).json()

        by_number = client.get(f"/api/v1/orders/number/{order['order_number']}")
        assert by_number.json()["id"] == order["id"]

        by_customer = client.get(f"/api/v1/orders/customer/{catalog['customer'].id}").json()
        assert [o["id"] for o in by_customer] == [order["id"]]

        items = client.get(f"/api/v1/order-items/order/{order['id']}").json()
        assert [i["product_name"] for i in items] == ["Chai"]

        assert len(client.get("/api/v1/orders/recent").json()) == 1
        assert client.get("/api/v1/orders/recent", params={"days": 400}).status_code == 400

    def test_revenue_by_period(self, client, api_factory):
        catalog = seed_catalog(api_factory)
        create_order(client, catalog, ("chai", 2))

        body = client.get("/api/v1/orders/revenue-by-period", params={"period": "month"}).json()

        assert body["unit"] == "month"
        assert [entry["revenue"] for entry in body["data"]] == [19.98]
        assert client.get("/api/v1/orders/revenue-by-period", params={"period": "year"}).status_code == 400

    def test_statistics_endpoints(self, client, api_factory):
        catalog = seed_catalog(api_factory)
        create_order(client, catalog, ("chai", 2))

        orders = client.get("/api/v1/orders/statistics").json()
        assert orders["overview"]["counts"]["total_orders"] == 1

        items = client.get("/api/v1/order-items/statistics").json()
        assert items["top_selling"][0]["name"] == "Chai"

        sales = client.get(f"/api/v1/order-items/product/{catalog['chai'].id}/sales").json()
        assert sales["total_quantity_sold"] == 2

        performance = client.get(f"/api/v1/suppliers/{catalog['supplier'].id}/performance").json()
        assert performance["sales_metrics"]["amounts"]["total_revenue"] == 19.98

        assert client.get("/api/v1/products/statistics").status_code == 200
        assert client.get("/api/v1/suppliers/statistics").status_code == 200
