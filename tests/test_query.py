import unittest
from datetime import datetime, timezone

from garage.exceptions import QueryError
from garage.persistence.query import Condition, QueryBuilder, evaluate_condition, matches

ROWS = [
    {"id": "1", "name": "Alice", "city": "Lyon", "age": 34, "joined": "2024-01-10T08:00:00+00:00"},
    {"id": "2", "name": "bob", "city": "Paris", "age": 27, "joined": "2024-03-02T08:00:00+00:00"},
    {"id": "3", "name": "Chloé", "city": "Lyon", "age": 41, "joined": "2023-11-20T08:00:00+00:00"},
    {"id": "4", "name": "David", "city": None, "age": None, "joined": None},
]


async def load(table):
    return [dict(row) for row in ROWS]


def query():
    return QueryBuilder("people", load)


def ids(rows):
    return [row["id"] for row in rows]


class TestConditions(unittest.TestCase):

    def test_operators(self):
        self.assertTrue(evaluate_condition(5, "=", 5))
        self.assertTrue(evaluate_condition(5, "!=", 6))
        self.assertTrue(evaluate_condition(5, ">", 4))
        self.assertTrue(evaluate_condition(5, "<=", 5))
        self.assertTrue(evaluate_condition("Renault Clio", "LIKE", "clio"))
        self.assertTrue(evaluate_condition("b", "IN", ["a", "b"]))
        self.assertFalse(evaluate_condition("b", "IN", "abc"))

    def test_in_with_unhashable_field(self):
        self.assertFalse(evaluate_condition(["a"], "IN", {"a"}))
        self.assertFalse(evaluate_condition({"a": 1}, "IN", frozenset({"a"})))
        self.assertTrue(evaluate_condition(["a"], "IN", [["a"], ["b"]]))

    def test_comparison_with_none_is_false(self):
        self.assertFalse(evaluate_condition(None, ">", 3))
        self.assertFalse(evaluate_condition(None, "LIKE", "x"))

    def test_datetime_against_iso_string(self):
        cutoff = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.assertTrue(evaluate_condition("2024-01-10T08:00:00Z", ">=", cutoff))
        self.assertFalse(evaluate_condition("2023-11-20T08:00:00Z", ">=", cutoff))

    def test_sequential_fold(self):
        a = Condition("city", "=", "Lyon", "AND")
        b_or = Condition("age", ">", 40, "OR")
        c = Condition("name", "=", "bob", "AND")
        bob = ROWS[1]

        # where(a).or_where(b).where(c) reads as (a AND b) OR c
        self.assertTrue(matches(bob, [a, b_or, c]))
        # or_where(a).where(c) reads as a OR c
        self.assertTrue(matches(bob, [Condition("city", "=", "Lyon", "OR"), c]))
        # where(a).or_where(c) reads as a AND c
        self.assertFalse(matches(bob, [a, Condition("name", "=", "bob", "OR")]))


class TestQueryBuilder(unittest.IsolatedAsyncioTestCase):

    async def test_where(self):
        self.assertEqual(ids(await query().where("city", "=", "Lyon").execute()), ["1", "3"])

    async def test_or_then_where(self):
        rows = await query().or_where("name", "LIKE", "ALI").where("city", "=", "Paris").execute()
        self.assertEqual(ids(rows), ["1", "2"])

    async def test_order_limit_offset(self):
        rows = await query().where("age", ">", 0).order_by("age", "DESC").offset(1).limit(1).execute()
        self.assertEqual(ids(rows), ["1"])

    async def test_order_keeps_none_in_place(self):
        rows = await query().order_by("age").execute()
        self.assertEqual(ids(rows)[-1], "4")

    async def test_select_projects(self):
        rows = await query().where("id", "=", "2").select(["name"]).execute()
        self.assertEqual(rows, [{"name": "bob"}])

    async def test_first_and_count(self):
        self.assertEqual((await query().where("city", "=", "Lyon").first())["id"], "1")
        self.assertIsNone(await query().where("city", "=", "Nice").first())
        self.assertEqual(await query().where("city", "=", "Lyon").count(), 2)
        self.assertEqual(await query().limit(3).count(), 3)

    async def test_dates(self):
        rows = await query().where("joined", ">=", datetime(2024, 1, 1, tzinfo=timezone.utc)).execute()
        self.assertEqual(ids(rows), ["1", "2"])

    async def test_joins_are_recorded_only(self):
        q = query().join("vehicles", "people.id = vehicles.customer_id").left_join("repairs", "x = y")
        self.assertEqual([join.type for join in q.joins], ["INNER", "LEFT"])
        self.assertEqual(len(await q.execute()), 4)

    async def test_in_over_list_field(self):
        rows = [{"id": "1", "tags": ["a"]}, {"id": "2", "tags": "a"}]

        async def load_tags(table):
            return rows

        q = QueryBuilder("tagged", load_tags).where("tags", "IN", {"a", "b"})
        self.assertEqual(ids(await q.execute()), ["2"])
        self.assertEqual(await q.count(), 1)

    async def test_unknown_operator(self):
        with self.assertRaises(QueryError):
            query().where("age", "~", 3)
        with self.assertRaises(QueryError):
            query().order_by("age", "sideways")


if __name__ == "__main__":
    unittest.main()
