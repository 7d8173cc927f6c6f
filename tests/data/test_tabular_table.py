"""Tests for ``tabular.data.table.TabularTable``."""

from __future__ import annotations

from typing import Any

import pytest

from tabular.core.errors import (
    CardinalityError,
    MissingKeyError,
    SchemaError,
    StatementError,
    VanishedRowError,
)
from tabular.data.context import OperationContext
from tabular.core.dialect import get_dialect
from tabular.data.table import TabularTable, create_table_sql, parse_key


class RecordingLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def _record(self, event: str, **kw: Any) -> None:
        self.events.append((event, kw))

    debug = info = warning = _record


class TestKeys:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("id", ["id"]), ("Edition, AD_alarmID", ["Edition", "AD_alarmID"]), (["a", "b"], ["a", "b"]), ("", [])],
    )
    def test_parse_key(self, raw, expected):
        assert parse_key(raw) == expected

    def test_resolution_order(self, db):
        table = TabularTable(db, "items", key="name")
        assert table.resolve_key("qty") == ["qty"]
        assert table.resolve_key() == ["name"]
        assert TabularTable(db, "items").resolve_key() == ["id"]

    def test_key_predicate_prefers_overrides(self, items):
        sql, params = items.key_predicate({"id": 1}, "id", {"id": 9})
        assert sql == '"id" = ?'
        assert params == (9,)

    def test_key_predicate_missing(self, items):
        with pytest.raises(MissingKeyError) as exc_info:
            items.key_predicate({"name": "A"}, "id")
        assert exc_info.value.column == "id"

    def test_table_names(self, db):
        assert TabularTable(db, "items").table_names() == ["items", "items_change_log"]
        assert TabularTable(db, "items", history=False).table_names() == ["items"]

    def test_suffixes_and_overrides(self, db):
        table = TabularTable(db, "items", history_table="audit", deleted_table="graveyard")
        assert table.history_table == "audit"
        assert table.deleted_table == "graveyard"
        table.history_key = "ref"
        assert table.history_key == "ref"


class TestInsert:
    def test_round_trip(self, items, ctx):
        row = {"id": 7, "name": "widget", "qty": 3}
        assert items.insert(row, ctx=ctx) == 7
        found = items.find_by_key(row, "id")
        assert {k: found[k] for k in row} == row

    def test_generated_id(self, items, ctx):
        first = items.insert({"name": "a"}, ctx=ctx)
        second = items.insert({"name": "b"}, ctx=ctx)
        assert second == first + 1

    def test_audit_columns(self, items, ctx):
        items.insert({"id": 1, "name": "A"}, ctx=ctx)
        row = items.find_by_key({"id": 1})
        assert row["Updated_By"] == "tester"
        assert row["Updated_On"] == "2024-03-01 12:30:45"

    def test_default_actor(self, items):
        items.insert({"id": 1, "name": "A"})
        assert items.find_by_key({"id": 1})["Updated_By"] == "TABULARadmin"

    def test_audit_disabled(self, db, ctx):
        table = TabularTable(db, "items", log_updated_by_on=False)
        table.insert({"id": 1, "name": "A"}, ctx=ctx)
        assert table.find_by_key({"id": 1})["Updated_By"] is None

    def test_writes_insert_ledger_row(self, items, ctx, history):
        items.insert({"id": 1, "name": "A"}, ctx=ctx)
        rows = history()
        assert len(rows) == 1
        assert rows[0]["Change_Type"] == "Insert"
        assert rows[0]["id"] == 1
        assert rows[0]["CRI"] == "CR-1"

    def test_generated_id_used_for_ledger_key(self, items, ctx, history):
        new_id = items.insert({"name": "A"}, ctx=ctx)
        assert history()[0]["id"] == new_id

    def test_history_disabled(self, db, ctx, history):
        TabularTable(db, "items", history=False).insert({"name": "A"}, ctx=ctx)
        assert history() == []

    def test_dry_run(self, db, ctx, history):
        table = TabularTable(db, "items", execute=False)
        assert table.insert({"name": "A"}, ctx=ctx) == 0
        assert table.last_query.startswith('INSERT INTO "items_change_log"')
        assert table.execute() == []
        assert history() == []

    def test_failure_keeps_detail(self, items, ctx):
        with pytest.raises(StatementError) as exc_info:
            items.insert({"no_such_column": 1}, ctx=ctx)
        assert "no_such_column" in exc_info.value.detail
        assert exc_info.value.context.table == "items"
        assert exc_info.value.context.operation == "insert"
        assert items.last_error == exc_info.value.detail

    def test_context_logger(self, items):
        log = RecordingLogger()
        items.insert({"name": "A"}, ctx=OperationContext(logger=log))
        assert "row_inserted" in [event for event, _ in log.events]


class TestUpdate:
    def test_only_update_columns_change(self, items, ctx):
        items.insert({"id": 1, "name": "A", "qty": 5}, ctx=ctx)
        affected = items.update({"id": 1, "name": "B", "qty": 99}, "id", ["name"], ctx=ctx)
        assert affected == 1
        row = items.find_by_key({"id": 1})
        assert row["name"] == "B"
        assert row["qty"] == 5

    def test_all_fields_by_default(self, items, ctx):
        items.insert({"id": 1, "name": "A", "qty": 5}, ctx=ctx)
        items.update({"id": 1, "name": "B", "qty": 6}, ctx=ctx)
        row = items.find_by_key({"id": 1})
        assert (row["name"], row["qty"]) == ("B", 6)

    def test_key_value_overrides_target_old_key(self, items, ctx):
        items.insert({"id": 1, "name": "A"}, ctx=ctx)
        items.update({"id": 10, "name": "A"}, "id", ["id"], key_values={"id": 1}, ctx=ctx)
        assert items.find_by_key({"id": 1}) is None
        assert items.find_by_key({"id": 10})["name"] == "A"

    def test_direct_update_is_not_ledgered(self, items, ctx, history):
        items.insert({"id": 1, "name": "A"}, ctx=ctx)
        items.update({"id": 1, "name": "B"}, ctx=ctx)
        assert [r["Change_Type"] for r in history()] == ["Insert"]

    def test_missing_key(self, items, ctx):
        with pytest.raises(MissingKeyError):
            items.update({"name": "B"}, "id", ctx=ctx)

    def test_limit_one(self, items, ctx):
        items.insert({"name": "same", "qty": 1}, ctx=ctx)
        items.insert({"name": "same", "qty": 1}, ctx=ctx)
        assert items.update({"name": "same", "qty": 2}, "name", ["qty"], ctx=ctx) == 1
        assert sorted(r["qty"] for r in items.execute()) == [1, 2]

    def test_without_limit(self, items, ctx):
        items.insert({"name": "same", "qty": 1}, ctx=ctx)
        items.insert({"name": "same", "qty": 1}, ctx=ctx)
        assert items.update({"name": "same", "qty": 2}, "name", ["qty"], limit_one=False, ctx=ctx) == 2

    def test_zero_rows_is_not_an_error(self, items, ctx):
        assert items.update({"id": 404, "name": "B"}, ctx=ctx) == 0

    def test_dry_run(self, db, ctx):
        TabularTable(db, "items", history=False).insert({"id": 1, "name": "A"}, ctx=ctx)
        dry = TabularTable(db, "items", execute=False)
        assert dry.update({"id": 1, "name": "B"}, ctx=ctx) == 0
        assert dry.find_by_key({"id": 1})["name"] == "A"

    def test_mysql_sql(self, mysql_db, recorder, ctx):
        table = TabularTable(mysql_db, "items")
        table.update({"id": 3, "name": "B"}, "id", ["name"], ctx=ctx)
        sql, params = recorder.statements[-1]
        assert sql == (
            "UPDATE `items` SET `name` = %s, `Updated_By` = %s, `Updated_On` = %s WHERE `id` = %s LIMIT 1"
        )
        assert params == ("B", "tester", "2024-03-01 12:30:45", 3)


class TestDelete:
    def test_shadow_copy_delete_and_ledger(self, db, items, ctx, history):
        items.insert({"id": 1, "name": "A", "qty": 2}, ctx=ctx)
        assert items.delete({"id": 1}, ctx=ctx) == 1
        assert items.find_by_key({"id": 1}) is None
        shadow = db.query("SELECT * FROM items_del")
        assert shadow[0]["id"] == 1
        assert shadow[0]["name"] == "A"
        assert [r["Change_Type"] for r in history()] == ["Insert", "Delete"]
        assert history()[1]["id"] == 1

    def test_vanished_row(self, db, items, ctx, history):
        items.insert({"id": 1, "name": "A"}, ctx=ctx)
        db.execute("DELETE FROM items WHERE id = ?", (1,))
        with pytest.raises(VanishedRowError):
            items.delete({"id": 1}, ctx=ctx)
        assert [r["Change_Type"] for r in history()] == ["Insert"]
        assert db.query("SELECT * FROM items_del") == []

    def test_missing_key(self, items, ctx):
        with pytest.raises(MissingKeyError):
            items.delete({"name": "A"}, ctx=ctx)

    def test_deletes_one_row_only(self, db, ctx):
        table = TabularTable(db, "items", history=False)
        table.insert({"name": "dup"}, ctx=ctx)
        table.insert({"name": "dup"}, ctx=ctx)
        assert table.delete({"name": "dup"}, "name", ctx=ctx) == 1
        assert len(table.execute()) == 1

    def test_mysql_statement_order(self, mysql_db, recorder, ctx):
        table = TabularTable(mysql_db, "items")
        recorder.queue([{"id": 3, "name": "A"}])
        table.delete({"id": 3}, ctx=ctx)
        statements = recorder.sql()
        assert statements[0] == "SELECT * FROM `items` WHERE `id` = %s"
        assert statements[1].startswith("INSERT INTO `items_del`")
        assert statements[2] == "DELETE FROM `items` WHERE `id` = %s LIMIT 1"
        assert statements[3].startswith("INSERT INTO `items_change_log`")

    def test_history_key_from_shadow_copy(self, mysql_db, recorder, ctx):
        table = TabularTable(mysql_db, "items", history_key="ref")
        recorder.queue([{"id": 3, "name": "A", "ref": 77}])
        table.delete({"id": 3}, ctx=ctx)
        sql, params = recorder.statements[-1]
        assert "`ref`" in sql
        assert 77 in params

    @pytest.mark.parametrize(("given", "stored"), [("abc", "ABC"), ("3", 3)])
    def test_ledger_key_comes_from_shadow_copy(self, mysql_db, recorder, ctx, given, stored):
        table = TabularTable(mysql_db, "alarms", key="code")
        recorder.queue([{"code": stored, "name": "A"}])
        table.delete({"code": given}, ctx=ctx)
        sql, params = recorder.statements[-1]
        assert sql.startswith("INSERT INTO `alarms_change_log` (`CRI`, `Change_Type`, `code`")
        assert params[:3] == ("CR-1", "Delete", stored)


class TestFindByKey:
    def test_not_found(self, items):
        assert items.find_by_key({"id": 1}) is None

    def test_cardinality_violation(self, items, ctx):
        items.insert({"name": "dup"}, ctx=ctx)
        items.insert({"name": "dup"}, ctx=ctx)
        with pytest.raises(CardinalityError) as exc_info:
            items.find_by_key({"name": "dup"}, "name")
        assert exc_info.value.count == 2

    def test_find_returns_all(self, items, ctx):
        items.insert({"name": "dup"}, ctx=ctx)
        items.insert({"name": "dup"}, ctx=ctx)
        assert len(items.find({"name": "dup"}, "name")) == 2


class TestDistinct:
    @pytest.fixture
    def cities(self, items, ctx):
        for name in ("New York", "Boston", "NewYork", "Boston", "New  York"):
            items.insert({"name": name, "qty": 1}, ctx=ctx, ledger=False)
        return items

    def test_ignores_spaces_keeping_first_spelling(self, cities):
        assert cities.order_by("name").distinct_values("name") == ["Boston", "New  York"]

    def test_keep_spaces(self, cities):
        values = cities.order_by("name").distinct_values("name", ignore_spaces=False)
        assert values == ["Boston", "New  York", "New York", "NewYork"]

    def test_with_counts(self, cities):
        rows = cities.order_by("name").distinct_values("name", with_counts=True)
        assert {r["name"]: r["count"] for r in rows}["Boston"] == 2

    def test_respects_filter(self, cities):
        assert cities.where("name LIKE ?", ("B%",)).distinct_values("name") == ["Boston"]


class TestOneToMany:
    def test_subrows_attached(self, db, items, ctx):
        db.execute("CREATE TABLE parts (id INTEGER, part TEXT)")
        parts = TabularTable(db, "parts", history=False)
        items.insert({"id": 1, "name": "A"}, ctx=ctx)
        items.insert({"id": 2, "name": "B"}, ctx=ctx)
        parts.insert_many([{"id": 1, "part": "bolt"}, {"id": 1, "part": "nut"}])
        items.one_to_many(parts, "id")
        rows = items.order_by("id").execute()
        assert [p["part"] for p in rows[0]["subrows"]] == ["bolt", "nut"]
        assert rows[1]["subrows"] == []


class TestLocks:
    def test_sqlite_tracks_state(self, items):
        items.lock("READ")
        assert items.locked
        assert items.lock_mode == "READ"
        items.unlock()
        assert not items.locked
        assert items.lock_mode is None

    def test_mysql_statements(self, mysql_db, recorder):
        table = TabularTable(mysql_db, "items")
        table.lock("WRITE", "lookup")
        table.unlock()
        table.unlock()
        assert recorder.sql() == [
            "LOCK TABLES `items` WRITE, `lookup` WRITE, `items_change_log` WRITE",
            "UNLOCK TABLES",
        ]

    def test_unlock_when_not_locked(self, mysql_db, recorder):
        TabularTable(mysql_db, "items").unlock()
        assert recorder.statements == []


class TestSchema:
    def test_create_statement_auto_id(self, mysql_db):
        table = TabularTable(mysql_db, "items")
        sql = table.generate_create_statement(
            {"name": {"maxlen": 40}, "qty": {"sqlType": "int(11) default NULL"}, "Updated_By": "Updated_By"}
        )
        assert sql == (
            "CREATE TABLE IF NOT EXISTS `items` ("
            "`id` int(10) unsigned NOT NULL auto_increment, "
            "`name` varchar(40) default NULL, "
            "`qty` int(11) default NULL, "
            "`Updated_By` char(32) default NULL, "
            "`Updated_On` datetime default NULL, "
            "PRIMARY KEY (`id`)"
            ") CHARACTER SET utf8 COLLATE utf8_general_ci ENGINE=InnoDB"
        )

    def test_create_statement_composite_key(self, mysql_db):
        table = TabularTable(mysql_db, "alarms")
        sql = table.generate_create_statement(["Edition", "AD_alarmID"], ["Edition", "AD_alarmID"], "MyISAM")
        assert "auto_increment" not in sql
        assert "PRIMARY KEY (`Edition`, `AD_alarmID`)" in sql
        assert sql.endswith("ENGINE=MyISAM")

    def test_create_table_sql_without_connection(self):
        sql = create_table_sql("alarms", ["Owner"], get_dialect("mysql"), key="AD_alarmID", charset="utf8")
        assert sql == (
            "CREATE TABLE IF NOT EXISTS `alarms` ("
            "`Owner` text, "
            "`Updated_By` char(32) default NULL, "
            "`Updated_On` datetime default NULL, "
            "PRIMARY KEY (`AD_alarmID`)"
            ") CHARACTER SET utf8 COLLATE utf8_general_ci ENGINE=InnoDB"
        )

    def test_create_table_sql_sqlite_has_no_options(self):
        sql = create_table_sql("t", {"a": {}}, get_dialect("sqlite"))
        assert sql.startswith('CREATE TABLE IF NOT EXISTS "t" ("id" INTEGER PRIMARY KEY AUTOINCREMENT, "a" text')
        assert sql.endswith('"Updated_On" datetime default NULL)')

    def test_check_columns_missing_table(self, db):
        with pytest.raises(SchemaError, match="widgets"):
            TabularTable(db, "widgets").check_columns(["name"])

    def test_check_columns_auto_create(self, db):
        widgets = TabularTable(db, "widgets", history=False)
        assert widgets.check_columns({"name": {"maxlen": 20}}, auto_create=True) == []
        assert list(widgets.describe_columns()) == ["id", "name", "Updated_By", "Updated_On"]
        widgets.insert({"name": "gear"})
        assert widgets.execute()[0]["id"] == 1

    def test_check_columns_reports_missing(self, items):
        assert items.check_columns(["name", "color", "QTY"]) == ["color"]

    def test_describe_columns_sqlite(self, items):
        columns = items.describe_columns()
        assert list(columns) == ["id", "name", "qty", "Updated_By", "Updated_On"]
        assert columns["id"]["ORDINAL_POSITION"] == 1
        assert columns["name"]["DATA_TYPE"] == "TEXT"

    def test_describe_columns_mysql(self, mysql_db, recorder):
        recorder.queue([{"COLUMN_NAME": "Edition", "CHARACTER_MAXIMUM_LENGTH": 33}])
        columns = TabularTable(mysql_db, "alarms").describe_columns()
        assert list(columns) == ["Edition"]
        assert recorder.statements[0][1] == ("syseng", "alarms")

    def test_column_defs_source(self, mysql_db, recorder):
        recorder.queue(
            [
                {"COLUMN_NAME": "Edition", "CHARACTER_MAXIMUM_LENGTH": 33},
                {"COLUMN_NAME": "Count", "CHARACTER_MAXIMUM_LENGTH": None},
            ]
        )
        source = TabularTable(mysql_db, "alarms").column_defs_source()
        assert source == (
            "column_defs = {\n"
            "    'Edition': {\n"
            "        'maxlen': 33,\n"
            "        'type': 'autocomplete',\n"
            "        'width': '25em',\n"
            "    },\n"
            "    'Count': {\n"
            "        'maxlen': 5,\n"
            "        'type': 'autocomplete',\n"
            "        'width': '5em',\n"
            "    },\n"
            "}\n"
        )


class TestBulk:
    def test_insert_many(self, items, history):
        assert items.insert_many([{"name": "a", "qty": 1}, {"name": "b", "qty": 2}]) == 2
        rows = items.execute()
        assert [r["name"] for r in rows] == ["a", "b"]
        assert rows[0]["Updated_By"] is None
        assert history() == []

    def test_insert_many_names_failing_row(self, items):
        with pytest.raises(StatementError, match="row 2"):
            items.insert_many([{"id": 1, "name": "a"}, {"id": 1, "name": "b"}])

    def test_save_row_inserts_then_updates(self, items, ctx, history):
        assert items.save_row({"name": "A"}, ctx=ctx) == 1
        row = items.execute_first()
        assert items.save_row({"id": row["id"], "name": "B"}, ctx=ctx) == 1
        assert [r["name"] for r in items.execute()] == ["B"]
        assert history() == []

    def test_save_rows_composite_key(self, items, ctx):
        count = items.save_rows([{"name": "A", "qty": 1}, {"name": "A", "qty": 1}], "name, qty", ctx=ctx)
        assert count == 2
        assert len(items.execute()) == 1

    def test_truncate(self, items, ctx):
        items.insert({"name": "A"}, ctx=ctx)
        items.truncate()
        assert items.execute() == []

    def test_truncate_mysql(self, mysql_db, recorder):
        TabularTable(mysql_db, "items").truncate()
        assert recorder.sql() == ["TRUNCATE TABLE `items`"]
