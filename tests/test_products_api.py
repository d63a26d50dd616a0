import unittest

from tests.support import ApiTestMixin

LAPTOP = {"name": "Laptop", "price": 999.99, "quantity": 10}


class ProductsApiTest(ApiTestMixin, unittest.TestCase):
    def setUp(self):
        super().setUp()
        self.alice = self.auth(self.register_token("alice", "alice@example.com"))
        self.bob = self.auth(self.register_token("bob", "bob@example.com"))

    def create(self, headers=None, **fields):
        payload = dict(LAPTOP)
        payload.update(fields)
        response = self.client.post("/api/products", json=payload, headers=headers or self.alice)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["product"]

    def test_create_product(self):
        response = self.client.post("/api/products", json=LAPTOP, headers=self.alice)
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["status"], "success")
        self.assertEqual(body["message"], "Product created successfully")
        product = body["product"]
        self.assertEqual(product["name"], "Laptop")
        self.assertEqual(product["price"], 999.99)
        self.assertEqual(product["quantity"], 10)
        self.assertEqual(product["minQuantity"], 0)
        self.assertEqual(product["stockStatus"], "in-stock")
        self.assertEqual(product["profitMargin"], 0)
        self.assertTrue(product["isActive"])
        profile = self.client.get("/api/auth/profile", headers=self.alice).json()
        self.assertEqual(product["createdBy"], profile["user"]["id"])

    def test_create_with_full_payload(self):
        product = self.create(
            description="Ultrabook",
            sku="lap-001",
            category="Electronics",
            price=150,
            cost=100,
            minQuantity=2,
            maxQuantity=50,
            unit="pcs",
            supplier={"name": "Northwind", "contact": "sales@northwind.example.com"},
            location="A1",
        )
        self.assertEqual(product["sku"], "LAP-001")
        self.assertEqual(product["maxQuantity"], 50)
        self.assertEqual(product["supplier"], {"name": "Northwind", "contact": "sales@northwind.example.com"})
        self.assertEqual(product["profitMargin"], 50)

    def test_create_requires_auth(self):
        response = self.client.post("/api/products", json=LAPTOP)
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["status"], "error")

    def test_create_rejects_invalid_input(self):
        response = self.client.post(
            "/api/products",
            json={"name": "A", "price": -100, "quantity": -5},
            headers=self.alice,
        )
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["status"], "error")
        fields = {error["field"] for error in body["errors"]}
        self.assertEqual(fields, {"name", "price", "quantity"})

    def test_create_rejects_fractional_quantity_and_unknown_fields(self):
        response = self.client.post("/api/products", json=dict(LAPTOP, quantity=1.5), headers=self.alice)
        self.assertEqual(response.status_code, 400)
        response = self.client.post("/api/products", json=dict(LAPTOP, isActive=False), headers=self.alice)
        self.assertEqual(response.status_code, 400)

    def test_duplicate_sku_conflicts(self):
        self.create(sku="ABC-1")
        response = self.client.post("/api/products", json=dict(LAPTOP, sku="abc-1"), headers=self.bob)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["message"], "A product with this SKU already exists")

    def test_list_with_filters_and_pagination(self):
        for name, price, quantity in (("Laptop", 999.99, 10), ("Mouse", 29.99, 50), ("Keyboard", 89.99, 25)):
            self.create(name=name, price=price, quantity=quantity)

        response = self.client.get("/api/products", headers=self.alice)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["message"], "Products retrieved successfully")
        self.assertEqual(len(body["products"]), 3)
        self.assertEqual(body["products"][0]["name"], "Keyboard")

        response = self.client.get("/api/products?search=laptop", headers=self.alice)
        self.assertEqual([p["name"] for p in response.json()["products"]], ["Laptop"])

        response = self.client.get("/api/products?page=1&limit=2", headers=self.alice)
        body = response.json()
        self.assertEqual(len(body["products"]), 2)
        self.assertEqual(body["pagination"]["currentPage"], 1)
        self.assertEqual(body["pagination"]["totalPages"], 2)
        self.assertTrue(body["pagination"]["hasNextPage"])

        response = self.client.get(
            "/api/products?minPrice=50&sortBy=price&sortOrder=asc", headers=self.alice
        )
        self.assertEqual([p["name"] for p in response.json()["products"]], ["Keyboard", "Laptop"])

    def test_list_rejects_bad_query(self):
        for query in ("page=0", "limit=1000", "sortBy=password", "sortOrder=up", "stockStatus=plenty"):
            with self.subTest(query=query):
                response = self.client.get("/api/products?{}".format(query), headers=self.alice)
                self.assertEqual(response.status_code, 400)

    def test_products_are_private_to_owner(self):
        product = self.create()
        path = "/api/products/{}".format(product["id"])

        self.assertEqual(self.client.get("/api/products", headers=self.bob).json()["products"], [])
        self.assertEqual(self.client.get(path, headers=self.bob).status_code, 403)
        self.assertEqual(self.client.put(path, json={"name": "Mine"}, headers=self.bob).status_code, 403)
        self.assertEqual(self.client.delete(path, headers=self.bob).status_code, 403)
        response = self.client.patch(path + "/quantity", json={"quantity": 1}, headers=self.bob)
        self.assertEqual(response.status_code, 403)

        self.assertEqual(self.client.get("/api/products/999999", headers=self.bob).status_code, 404)
        self.assertEqual(self.client.get(path, headers=self.alice).json()["product"]["name"], "Laptop")

    def test_invalid_product_id(self):
        response = self.client.get("/api/products/not-an-id", headers=self.alice)
        self.assertEqual(response.status_code, 400)

    def test_update_product(self):
        product = self.create()
        path = "/api/products/{}".format(product["id"])
        response = self.client.put(path, json={"price": 899.99, "minQuantity": 10}, headers=self.alice)
        self.assertEqual(response.status_code, 200)
        updated = response.json()["product"]
        self.assertEqual(updated["price"], 899.99)
        self.assertEqual(updated["name"], "Laptop")
        self.assertEqual(updated["stockStatus"], "low-stock")

        response = self.client.put(path, json={"price": -1}, headers=self.alice)
        self.assertEqual(response.status_code, 400)
        response = self.client.put(path, json={"name": None}, headers=self.alice)
        self.assertEqual(response.status_code, 400)

    def test_soft_delete(self):
        product = self.create()
        path = "/api/products/{}".format(product["id"])
        response = self.client.delete(path, headers=self.alice)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["product"]["isActive"])

        self.assertEqual(self.client.get("/api/products", headers=self.alice).json()["products"], [])
        response = self.client.get(path, headers=self.alice)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["product"]["isActive"])

    def test_quantity_adjustments(self):
        product = self.create()
        path = "/api/products/{}/quantity".format(product["id"])

        response = self.client.patch(path, json={"quantity": 5, "operation": "add"}, headers=self.alice)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Product quantity updated successfully")
        self.assertEqual(response.json()["product"]["quantity"], 15)

        response = self.client.patch(path, json={"quantity": 3}, headers=self.alice)
        self.assertEqual(response.json()["product"]["quantity"], 3)

        response = self.client.patch(path, json={"quantity": 15, "operation": "subtract"}, headers=self.alice)
        self.assertEqual(response.json()["product"]["quantity"], 0)
        self.assertEqual(response.json()["product"]["stockStatus"], "out-of-stock")

    def test_subtract_from_ten_clamps_to_zero(self):
        product = self.create()
        path = "/api/products/{}/quantity".format(product["id"])
        response = self.client.patch(path, json={"quantity": 15, "operation": "subtract"}, headers=self.alice)
        self.assertEqual(response.json()["product"]["quantity"], 0)

    def test_quantity_adjustment_validation(self):
        product = self.create()
        path = "/api/products/{}/quantity".format(product["id"])
        payloads = (
            {"quantity": -1},
            {"quantity": "lots"},
            {"quantity": "5", "operation": "add"},
            {"quantity": True},
            {},
            {"quantity": 1, "operation": "divide"},
        )
        for payload in payloads:
            with self.subTest(payload=payload):
                response = self.client.patch(path, json=payload, headers=self.alice)
                self.assertEqual(response.status_code, 400)

        response = self.client.get("/api/products/{}".format(product["id"]), headers=self.alice)
        self.assertEqual(response.json()["product"]["quantity"], 10)

    def test_out_of_range_ids_and_pages(self):
        huge = "99999999999999999999"
        for method, path in (
            ("get", "/api/products/" + huge),
            ("delete", "/api/products/" + huge),
            ("get", "/api/products/0"),
            ("get", "/api/products?page=" + huge),
        ):
            with self.subTest(method=method, path=path):
                response = self.client.request(method, path, headers=self.alice)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["status"], "error")

        response = self.client.patch(
            "/api/products/{}/quantity".format(huge), json={"quantity": 1}, headers=self.alice
        )
        self.assertEqual(response.status_code, 400)

    def test_stats(self):
        response = self.client.get("/api/products/stats", headers=self.alice)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["stats"]["totalProducts"], 0)
        self.assertEqual(body["stats"]["totalValue"], 0)
        self.assertEqual(body["categoryStats"], [])

        self.create()
        self.create(headers=self.bob, name="Bob item", price=5, quantity=5)
        body = self.client.get("/api/products/stats", headers=self.alice).json()
        self.assertEqual(body["status"], "success")
        self.assertEqual(body["stats"]["totalProducts"], 1)
        self.assertEqual(body["stats"]["totalValue"], 9999.9)
        self.assertEqual(body["categoryStats"], [{"category": "uncategorized", "count": 1, "totalValue": 9999.9}])


if __name__ == "__main__":
    unittest.main()
