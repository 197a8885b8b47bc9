import unittest

from pydantic import ValidationError

from garage.exceptions import SchemaError
from garage.persistence import Constraint, FieldDefinition, Reference, Relation, SchemaRegistry, TableSchema
from garage.persistence.tables import ALL_TABLES, build_default_registry, is_email


class TestSchemaDefinitions(unittest.TestCase):

    def test_length_bounds_only_on_strings(self):
        with self.assertRaises(ValidationError):
            FieldDefinition(type="number", min_length=2)
        FieldDefinition(type="string", min_length=2, max_length=5)

    def test_constraint_shape(self):
        with self.assertRaises(ValidationError):
            Constraint(type="foreign_key", field="customer_id", message="x")
        with self.assertRaises(ValidationError):
            Constraint(type="check", field="amount", message="x")
        Constraint(type="foreign_key", field="customer_id", message="x", reference=Reference(table="customers"))

    def test_constraint_on_undeclared_field(self):
        with self.assertRaises(ValidationError):
            TableSchema(
                name="things",
                fields={"id": FieldDefinition(type="string")},
                constraints=[Constraint(type="unique", field="code", message="taken")],
            )

    def test_unique_flag_synthesizes_constraint(self):
        schema = TableSchema(name="things", fields={"code": FieldDefinition(type="string", unique=True)})
        self.assertEqual([(c.type, c.field) for c in schema.constraints], [("unique", "code")])

    def test_one_to_many_needs_mapped_by(self):
        with self.assertRaises(ValidationError):
            Relation(type="one_to_many", entity="vehicles", field="vehicles")

    def test_join_column_defaults_to_field_id(self):
        self.assertEqual(Relation(type="many_to_one", entity="customers", field="customer").join_column, "customer_id")
        relation = Relation(type="many_to_one", entity="customers", field="owner", foreign_key="customer_id")
        self.assertEqual(relation.join_column, "customer_id")


class TestSchemaRegistry(unittest.TestCase):

    def test_default_registry_covers_every_table(self):
        registry = build_default_registry()
        self.assertEqual(sorted(registry.tables), sorted(schema.name for schema in ALL_TABLES))
        for table in ("customers", "vehicles", "repairs", "users", "invoices", "payments",
                      "mechanics", "parts", "appointments"):
            self.assertTrue(registry.has_table(table))

    def test_relations_lookup(self):
        registry = build_default_registry()
        relation = registry.get_relation("customers", "vehicles")
        self.assertEqual(relation.mapped_by, "customer_id")
        self.assertIsNone(registry.get_relation("customers", "wheels"))

    def test_name_mismatch(self):
        registry = SchemaRegistry()
        with self.assertRaises(SchemaError):
            registry.define_table("cars", TableSchema(name="vehicles", fields={}))

    def test_require_unknown_table(self):
        with self.assertRaises(SchemaError):
            SchemaRegistry().require_table("ghosts")

    def test_integrity_detects_dangling_reference(self):
        registry = SchemaRegistry()
        registry.define_table("vehicles", TableSchema(
            name="vehicles",
            fields={"customer_id": FieldDefinition(type="string")},
            constraints=[Constraint(type="foreign_key", field="customer_id", message="missing",
                                    reference=Reference(table="customers"))],
        ))
        with self.assertRaises(SchemaError):
            registry.check_integrity()

    def test_email_check(self):
        self.assertTrue(is_email("jane.doe@example.com"))
        self.assertFalse(is_email("jane.doe"))


if __name__ == "__main__":
    unittest.main()
