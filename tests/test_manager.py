import unittest
from datetime import datetime, timezone

from garage.exceptions import EntityValidationError, StaleEntityError, StorageUnavailableError
from garage.persistence import EntityManager, build_default_registry, generate_id
from garage.persistence.manager import MIGRATIONS_KEY
from garage.storage import MemoryKeyValueStore


def customer_data(**overrides):
    data = {
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@example.com",
        "phone": "0600000000",
    }
    data.update(overrides)
    return data


class ManagerTestCase(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.store = MemoryKeyValueStore()
        self.manager = EntityManager(self.store, build_default_registry())

    async def add_vehicle(self, customer_id, plate="AB-123-CD", **overrides):
        data = {
            "customer_id": customer_id,
            "brand": "Renault",
            "model": "Clio",
            "year": 2019,
            "license_plate": plate,
        }
        data.update(overrides)
        return await self.manager.persist("vehicles", data)


class TestPersistAndFind(ManagerTestCase):

    async def test_round_trip(self):
        saved = await self.manager.persist("customers", customer_data())
        self.assertTrue(saved["id"])
        self.assertEqual(saved["created_at"], saved["updated_at"])

        loaded = await self.manager.find_by_id("customers", saved["id"])
        self.assertEqual(loaded, saved)

    async def test_client_id_and_timestamps_are_ignored(self):
        saved = await self.manager.persist("customers", customer_data(id="mine", created_at="1999-01-01"))
        self.assertNotEqual(saved["id"], "mine")
        self.assertNotEqual(saved["created_at"], "1999-01-01")

    async def test_row_layout(self):
        saved = await self.manager.persist("customers", customer_data())
        envelope = await self.store.get(f"entities_customers:{saved['id']}")
        self.assertEqual(envelope, {"revision": 1, "entity": saved})

    async def test_defaults_applied(self):
        owner = await self.manager.persist("customers", customer_data())
        vehicle = await self.add_vehicle(owner["id"])
        self.assertEqual(vehicle["mileage"], 0)
        self.assertEqual(vehicle["photos"], [])

    async def test_invalid_entity_is_not_written(self):
        with self.assertRaises(EntityValidationError) as ctx:
            await self.manager.persist("customers", customer_data(email=""))
        self.assertIn("The field email is required", ctx.exception.errors)
        self.assertEqual(await self.manager.count("customers"), 0)

    async def test_uniqueness(self):
        await self.manager.persist("customers", customer_data())
        with self.assertRaises(EntityValidationError) as ctx:
            await self.manager.persist("customers", customer_data(first_name="Janet"))
        self.assertEqual(ctx.exception.errors, ["This email is already used"])
        self.assertEqual(await self.manager.count("customers"), 1)

    async def test_find_by_and_find_all(self):
        first = await self.manager.persist("customers", customer_data())
        second = await self.manager.persist("customers", customer_data(email="john@example.com", first_name="John"))

        self.assertEqual([row["id"] for row in await self.manager.find_all("customers")], [first["id"], second["id"]])
        found = await self.manager.find_by("customers", {"first_name": "John", "last_name": "Doe"})
        self.assertEqual([row["id"] for row in found], [second["id"]])
        self.assertEqual(await self.manager.find_by("customers", {"first_name": "Nobody"}), [])

    async def test_pagination(self):
        for index in range(5):
            await self.manager.persist("customers", customer_data(email=f"c{index}@example.com"))
        page = await self.manager.find_with_pagination("customers", page=2, limit=2)
        self.assertEqual(len(page.data), 2)
        self.assertEqual(page.total, 5)
        self.assertEqual(page.total_pages, 3)

    async def test_pagination_clamps_page(self):
        for index in range(3):
            await self.manager.persist("customers", customer_data(email=f"c{index}@example.com"))
        first = await self.manager.find_with_pagination("customers", page=1, limit=2)
        for page in (0, -1):
            clamped = await self.manager.find_with_pagination("customers", page=page, limit=2)
            self.assertEqual(clamped.data, first.data)
            self.assertEqual(clamped.current_page, 1)

    async def test_storage_not_ready(self):
        manager = EntityManager(MemoryKeyValueStore(ready=False), build_default_registry())
        with self.assertRaises(StorageUnavailableError):
            await manager.persist("customers", customer_data())
        with self.assertRaises(StorageUnavailableError):
            await manager.find_all("customers")

    def test_generated_ids_are_unique(self):
        self.assertEqual(len({generate_id() for _ in range(200)}), 200)


class TestUpdateAndRemove(ManagerTestCase):

    async def test_noop_update_keeps_content(self):
        saved = await self.manager.persist("customers", customer_data())
        updated = await self.manager.update("customers", saved["id"], {})

        self.assertEqual({k: v for k, v in updated.items() if k != "updated_at"},
                         {k: v for k, v in saved.items() if k != "updated_at"})
        self.assertGreaterEqual(updated["updated_at"], saved["updated_at"])

    async def test_update_merges_and_revalidates(self):
        saved = await self.manager.persist("customers", customer_data())
        updated = await self.manager.update("customers", saved["id"], {"city": "Lyon", "id": "other"})
        self.assertEqual(updated["city"], "Lyon")
        self.assertEqual(updated["id"], saved["id"])
        self.assertEqual(updated["created_at"], saved["created_at"])

        with self.assertRaises(EntityValidationError):
            await self.manager.update("customers", saved["id"], {"last_name": ""})
        self.assertEqual((await self.manager.find_by_id("customers", saved["id"]))["last_name"], "Doe")

    async def test_update_into_taken_email(self):
        first = await self.manager.persist("customers", customer_data())
        second = await self.manager.persist("customers", customer_data(email="john@example.com"))

        with self.assertRaises(EntityValidationError) as ctx:
            await self.manager.update("customers", second["id"], {"email": first["email"]})
        self.assertEqual(ctx.exception.errors, ["This email is already used"])
        self.assertEqual(await self.manager.find_by_id("customers", second["id"]), second)

    async def test_update_missing(self):
        self.assertIsNone(await self.manager.update("customers", "ghost", {"city": "Lyon"}))

    async def test_delete_then_find(self):
        saved = await self.manager.persist("customers", customer_data())
        self.assertTrue(await self.manager.remove("customers", saved["id"]))
        self.assertIsNone(await self.manager.find_by_id("customers", saved["id"]))
        self.assertFalse(await self.manager.remove("customers", saved["id"]))

    async def test_expected_updated_at(self):
        saved = await self.manager.persist("customers", customer_data())
        await self.manager.update("customers", saved["id"], {"city": "Lyon"})

        with self.assertRaises(StaleEntityError):
            await self.manager.update("customers", saved["id"], {"city": "Nice"},
                                      expected_updated_at=saved["updated_at"])

        current = await self.manager.find_by_id("customers", saved["id"])
        updated = await self.manager.update("customers", saved["id"], {"city": "Nice"},
                                            expected_updated_at=current["updated_at"])
        self.assertEqual(updated["city"], "Nice")

    async def test_concurrent_write_detected(self):
        saved = await self.manager.persist("customers", customer_data())
        key = f"entities_customers:{saved['id']}"

        async def write_meanwhile(table, candidate):
            envelope = await self.store.get(key)
            envelope["revision"] += 1
            envelope["entity"]["city"] = "Paris"
            await self.store.set(key, envelope)

        self.manager._validate_or_raise = write_meanwhile
        with self.assertRaises(StaleEntityError):
            await self.manager.update("customers", saved["id"], {"city": "Lyon"})
        self.assertEqual((await self.manager.find_by_id("customers", saved["id"]))["city"], "Paris")


class TestRelations(ManagerTestCase):

    async def test_one_to_many_and_many_to_one(self):
        owner = await self.manager.persist("customers", customer_data())
        other = await self.manager.persist("customers", customer_data(email="other@example.com"))
        first = await self.add_vehicle(owner["id"], "AA-111-AA")
        second = await self.add_vehicle(owner["id"], "BB-222-BB")
        await self.add_vehicle(other["id"], "CC-333-CC")

        hydrated = await self.manager.find_with_relations("customers", owner["id"], ["vehicles", "unknown"])
        self.assertEqual([v["id"] for v in hydrated["vehicles"]], [first["id"], second["id"]])
        self.assertNotIn("unknown", hydrated)
        self.assertNotIn("vehicles", await self.manager.find_by_id("customers", owner["id"]))

        vehicle = await self.manager.find_with_relations("vehicles", first["id"], ["customer"])
        self.assertEqual(vehicle["customer"]["id"], owner["id"])

    async def test_missing_entity(self):
        self.assertIsNone(await self.manager.find_with_relations("customers", "ghost", ["vehicles"]))

    async def test_duplicate_license_plate(self):
        owner = await self.manager.persist("customers", customer_data())
        await self.add_vehicle(owner["id"])
        with self.assertRaises(EntityValidationError) as ctx:
            await self.add_vehicle(owner["id"])
        self.assertEqual(ctx.exception.errors, ["This license plate is already registered"])
        self.assertEqual(await self.manager.count("vehicles"), 1)

    async def test_repair_requires_existing_vehicle(self):
        owner = await self.manager.persist("customers", customer_data())
        with self.assertRaises(EntityValidationError) as ctx:
            await self.manager.persist("repairs", {
                "vehicle_id": "ghost",
                "customer_id": owner["id"],
                "title": "Brakes",
                "description": "Replace pads",
            })
        self.assertEqual(ctx.exception.errors, ["The referenced vehicle does not exist"])
        self.assertEqual(await self.manager.count("repairs"), 0)


class TestMaintenance(ManagerTestCase):

    async def test_export_import(self):
        owner = await self.manager.persist("customers", customer_data())
        exported = await self.manager.export_data()
        self.assertEqual(exported["customers"], [owner])

        target = EntityManager(MemoryKeyValueStore(), build_default_registry())
        counts = await target.import_data({**exported, "ghosts": [{"id": "x"}]})
        self.assertEqual(counts["customers"], 1)
        self.assertNotIn("ghosts", counts)
        self.assertEqual(await target.find_by_id("customers", owner["id"]), owner)

    async def test_import_fills_identity(self):
        await self.manager.import_data({"parts": [{"name": "Filter", "reference": "F-1"}]})
        (part,) = await self.manager.find_all("parts")
        self.assertTrue(part["id"])
        self.assertEqual(part["created_at"], part["updated_at"])

    async def test_clear(self):
        await self.manager.persist("customers", customer_data())
        self.assertEqual(await self.manager.clear("customers"), 1)
        self.assertEqual(await self.manager.count("customers"), 0)

    async def test_migration_runs_once(self):
        calls = []

        async def migration():
            calls.append(datetime.now(timezone.utc))

        self.assertTrue(await self.manager.run_migration("split_names", migration))
        self.assertFalse(await self.manager.run_migration("split_names", migration))
        self.assertEqual(len(calls), 1)
        self.assertEqual(await self.store.get(MIGRATIONS_KEY), ["split_names"])


if __name__ == "__main__":
    unittest.main()
