import unittest

from fastapi.testclient import TestClient

from garage.config import Settings
from garage.main import create_app
from garage.storage import MemoryKeyValueStore

API = "/api/v1"


class TestGarageManagementSystem(unittest.TestCase):

    def setUp(self):
        """Start the application on an in-memory store"""
        self.store = MemoryKeyValueStore()
        app = create_app(Settings(storage_backend="memory"), store=self.store)
        self.client = TestClient(app)
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)

    def create_customer(self, email="jane@example.com"):
        response = self.client.post(f"{API}/customers/", json={
            "first_name": "Jane",
            "last_name": "Doe",
            "email": email,
            "phone": "0600000000",
        })
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def create_vehicle(self, customer_id, plate="AB-123-CD"):
        response = self.client.post(f"{API}/vehicles/", json={
            "customer_id": customer_id,
            "brand": "Peugeot",
            "model": "208",
            "year": 2021,
            "license_plate": plate,
        })
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def test_1_health_check(self):
        """Test health check endpoint"""
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")
        print("✅ Health check passed")

    def test_2_customers(self):
        """Test customer CRUD"""
        customer = self.create_customer()
        self.assertIn("id", customer)

        response = self.client.get(f"{API}/customers/{customer['id']}")
        self.assertEqual(response.json()["email"], "jane@example.com")

        response = self.client.put(f"{API}/customers/{customer['id']}", json={"city": "Lyon"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["city"], "Lyon")

        response = self.client.get(f"{API}/customers/", params={"search": "doe"})
        self.assertEqual([c["id"] for c in response.json()], [customer["id"]])

        response = self.client.delete(f"{API}/customers/{customer['id']}")
        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.client.get(f"{API}/customers/{customer['id']}").status_code, 404)
        print("✅ Customers test passed")

    def test_3_validation_errors(self):
        """Test that store validation maps to 422"""
        self.create_customer()
        response = self.client.post(f"{API}/customers/", json={
            "first_name": "John",
            "last_name": "Doe",
            "email": "jane@example.com",
            "phone": "0611111111",
        })
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["detail"], ["This email is already used"])

        response = self.client.post(f"{API}/customers/", json={
            "first_name": "John",
            "last_name": "Doe",
            "email": "",
            "phone": "0611111111",
        })
        self.assertEqual(response.status_code, 422)
        self.assertIn("The field email is required", response.json()["detail"])
        print("✅ Validation test passed")

    def test_4_vehicles_and_repairs(self):
        """Test vehicles and repairs"""
        customer = self.create_customer()
        vehicle = self.create_vehicle(customer["id"])

        response = self.client.get(f"{API}/vehicles/plate/AB-123-CD")
        self.assertEqual(response.json()["id"], vehicle["id"])

        response = self.client.post(f"{API}/repairs/", json={
            "vehicle_id": "missing",
            "customer_id": customer["id"],
            "title": "Clutch",
            "description": "Replace clutch",
        })
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["detail"], ["The referenced vehicle does not exist"])

        response = self.client.post(f"{API}/repairs/", json={
            "vehicle_id": vehicle["id"],
            "customer_id": customer["id"],
            "title": "Clutch",
            "description": "Replace clutch",
            "status": "en_attente",
        })
        self.assertEqual(response.status_code, 201)
        repair = response.json()
        self.assertEqual(repair["status"], "pending")

        response = self.client.patch(f"{API}/repairs/{repair['id']}/status", json={"status": "completed"})
        self.assertEqual(response.json()["status"], "completed")
        self.assertIsNotNone(response.json()["end_date"])

        response = self.client.get(f"{API}/customers/{customer['id']}",
                                   params={"with_vehicles": True, "with_repairs": True})
        data = response.json()
        self.assertEqual([v["id"] for v in data["vehicles"]], [vehicle["id"]])
        self.assertEqual([r["id"] for r in data["repairs"]], [repair["id"]])
        print("✅ Vehicles and repairs test passed")

    def test_5_users(self):
        """Test users never expose passwords"""
        response = self.client.post(f"{API}/users/", json={
            "username": "admin",
            "email": "admin@garage.fr",
            "first_name": "Ada",
            "last_name": "Min",
            "password": "admin123",
            "role": "admin",
        })
        self.assertEqual(response.status_code, 201)
        self.assertNotIn("password", response.json())
        self.assertIn("users.delete", response.json()["permissions"])

        response = self.client.post(f"{API}/users/login", json={"username": "admin", "password": "admin123"})
        self.assertEqual(response.status_code, 200)
        response = self.client.post(f"{API}/users/login", json={"username": "admin", "password": "nope"})
        self.assertEqual(response.status_code, 401)
        print("✅ Users test passed")

    def test_6_invoices(self):
        """Test invoice lifecycle and payments"""
        customer = self.create_customer()
        response = self.client.post(f"{API}/invoices/", json={
            "customer_id": customer["id"],
            "date": "2024-05-01T00:00:00Z",
            "due_date": "2024-05-31T00:00:00Z",
            "tax_rate": 10,
            "items": [{"description": "Service", "quantity": 1, "unit_price": 100}],
        })
        self.assertEqual(response.status_code, 201, response.text)
        invoice = response.json()
        self.assertEqual(invoice["total"], 110)

        response = self.client.post(f"{API}/invoices/{invoice['id']}/status", json={"status": "paid"})
        self.assertEqual(response.status_code, 422)

        self.client.post(f"{API}/invoices/{invoice['id']}/status", json={"status": "sent"})
        response = self.client.post(f"{API}/invoices/{invoice['id']}/payments",
                                    json={"amount": 110, "method": "card"})
        self.assertEqual(response.status_code, 201)

        response = self.client.get(f"{API}/invoices/{invoice['id']}/balance")
        self.assertEqual(response.json()["balance"], 0)
        self.assertEqual(response.json()["status"], "paid")
        print("✅ Invoices test passed")

    def test_7_storage_unavailable(self):
        """Test that an unavailable store maps to 503"""
        customer = self.create_customer()
        self.store._ready = False
        response = self.client.get(f"{API}/customers/{customer['id']}")
        self.assertEqual(response.status_code, 503)
        self.assertEqual(self.client.get("/health").json()["status"], "unavailable")
        print("✅ Storage availability test passed")


if __name__ == "__main__":
    unittest.main()
