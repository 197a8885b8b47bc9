import unittest

from garage.persistence import EntityManager, build_default_registry
from garage.persistence.validator import matches_type
from garage.storage import MemoryKeyValueStore

NOW = "2024-05-01T09:30:00Z"


def customer(**overrides):
    doc = {
        "id": "c1",
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@example.com",
        "phone": "0600000000",
        "created_at": NOW,
        "updated_at": NOW,
    }
    doc.update(overrides)
    return doc


class TestTypeChecks(unittest.TestCase):

    def test_number_excludes_bool_and_nan(self):
        self.assertTrue(matches_type(3, "number"))
        self.assertTrue(matches_type(2.5, "number"))
        self.assertFalse(matches_type(True, "number"))
        self.assertFalse(matches_type(float("nan"), "number"))

    def test_dates(self):
        self.assertTrue(matches_type("2024-05-01T09:30:00Z", "date"))
        self.assertTrue(matches_type("2024-05-01", "date"))
        self.assertFalse(matches_type("yesterday", "date"))
        self.assertFalse(matches_type(12, "date"))

    def test_collections(self):
        self.assertTrue(matches_type([], "array"))
        self.assertFalse(matches_type({}, "array"))
        self.assertTrue(matches_type({}, "object"))


class TestEntityValidator(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.manager = EntityManager(MemoryKeyValueStore(), build_default_registry())

    async def test_valid_customer(self):
        result = await self.manager.validate("customers", customer())
        self.assertTrue(result.is_valid, result.errors)

    async def test_unknown_table(self):
        result = await self.manager.validate("spaceships", {})
        self.assertEqual(result.errors, ["No schema defined for table spaceships"])

    async def test_empty_string_counts_as_missing(self):
        result = await self.manager.validate("customers", customer(email=""))
        self.assertFalse(result.is_valid)
        self.assertIn("The field email is required", result.errors)
        # Constraints on an empty value are left to the required check
        self.assertNotIn("The email address is not valid", result.errors)

    async def test_errors_accumulate(self):
        result = await self.manager.validate("customers", customer(first_name="J", phone=None, email="nope"))
        self.assertEqual(result.errors, [
            "The field first_name must contain at least 2 characters",
            "The field phone is required",
            "The email address is not valid",
        ])

    async def test_type_mismatch(self):
        result = await self.manager.validate("customers", customer(last_name=42))
        self.assertEqual(result.errors, ["The field last_name must be of type string"])

    async def test_max_length(self):
        result = await self.manager.validate("customers", customer(postal_code="1" * 21))
        self.assertEqual(result.errors, ["The field postal_code cannot exceed 20 characters"])

    async def test_unique_ignores_own_row(self):
        saved = await self.manager.persist("customers", customer())
        same = await self.manager.validate("customers", dict(saved, phone="0611111111"))
        self.assertTrue(same.is_valid, same.errors)

        other = await self.manager.validate("customers", customer(id="c2"))
        self.assertEqual(other.errors, ["This email is already used"])

    async def test_foreign_key(self):
        vehicle = {
            "id": "v1",
            "customer_id": "ghost",
            "brand": "Renault",
            "model": "Clio",
            "year": 2019,
            "license_plate": "AB-123-CD",
            "created_at": NOW,
            "updated_at": NOW,
        }
        result = await self.manager.validate("vehicles", vehicle)
        self.assertEqual(result.errors, ["The referenced customer does not exist"])

        owner = await self.manager.persist("customers", customer())
        vehicle["customer_id"] = owner["id"]
        self.assertTrue((await self.manager.validate("vehicles", vehicle)).is_valid)


if __name__ == "__main__":
    unittest.main()
