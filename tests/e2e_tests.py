"""
End-to-end tests: real database files (created with the sqlite3 module)
read through LiteReader and the command line entry points.
"""
import logging

import pytest

from .builders import create_sqlite_db
from .context import (LiteReader, UnknownCommand, run_command, parse_args_and_start, VirtualMachine,
                      UnsupportedQuery, TableNotFound, Pager, StateManager, Tree)


FRUIT_SCHEMA = [
    "CREATE TABLE apples (id integer primary key, name text, color text)",
    "CREATE TABLE oranges (id integer primary key, name text, description text)",
    "CREATE TABLE bananas (id integer primary key, name text)",
]


@pytest.fixture
def fruit_db(tmp_path):
    statements = list(FRUIT_SCHEMA)
    statements.extend(f"INSERT INTO apples (name, color) VALUES ('apple{i}', 'red')" for i in range(7))
    statements.append("INSERT INTO oranges (name, description) VALUES ('navel', 'sweet')")
    return create_sqlite_db(tmp_path / "fruit.db", statements, page_size=4096)


@pytest.mark.parametrize("page_size", [512, 1024, 4096, 65536])
def test_dbinfo(tmp_path, page_size):
    path = create_sqlite_db(tmp_path / "info.db", FRUIT_SCHEMA, page_size=page_size)
    db = LiteReader(path)
    resp = db.handle_input(".dbinfo")
    assert resp.success
    assert resp.body == [f"database page size: {page_size}", "number of tables: 3"]


def test_table_count_matches_tables(fruit_db):
    db = LiteReader(fruit_db)
    vm = db.virtual_machine
    assert vm.dbinfo().table_count == len(vm.tables()) == 3


def test_tables_in_catalog_order(fruit_db):
    db = LiteReader(fruit_db)
    resp = db.handle_input(".tables")
    assert resp.success
    assert resp.body == ["apples oranges bananas"]


def test_count_star(fruit_db):
    db = LiteReader(fruit_db)
    resp = db.handle_input("SELECT COUNT(*) FROM apples")
    assert resp.success
    assert resp.body == ["7"]
    assert db.handle_input("select count(*) from oranges;").body == ["1"]
    assert db.handle_input("select count(*) from bananas").body == ["0"]


def test_count_matches_sqlite(fruit_db):
    import sqlite3
    conn = sqlite3.connect(fruit_db)
    try:
        expected = conn.execute("select count(*) from apples").fetchone()[0]
    finally:
        conn.close()
    db = LiteReader(fruit_db)
    assert db.virtual_machine.count_rows("apples") == expected


def test_missing_table(fruit_db):
    db = LiteReader(fruit_db)
    resp = db.handle_input("SELECT COUNT(*) FROM missing_table")
    assert not resp.success
    assert isinstance(resp.status, TableNotFound)
    assert "missing_table" in resp.error_message

    db = LiteReader(fruit_db, raise_exception=True)
    with pytest.raises(TableNotFound):
        db.handle_input("SELECT COUNT(*) FROM missing_table")


def test_missing_table_with_unsupported_columns_is_not_found(fruit_db):
    db = LiteReader(fruit_db, raise_exception=True)
    with pytest.raises(TableNotFound):
        db.handle_input("select name from missing_table")


def test_select_star_returns_creation_sql(fruit_db):
    db = LiteReader(fruit_db)
    resp = db.handle_input("select * from apples")
    assert resp.success
    assert resp.body == [FRUIT_SCHEMA[0]]


def test_column_projection_is_unsupported(fruit_db):
    db = LiteReader(fruit_db, raise_exception=True)
    with pytest.raises(UnsupportedQuery):
        db.handle_input("select name from apples")


def test_unknown_commands(fruit_db):
    db = LiteReader(fruit_db)
    for command in [".foo", "update apples set name = 'x'", "select from apples"]:
        resp = db.handle_input(command)
        assert not resp.success
        assert isinstance(resp.status, UnknownCommand)


def test_help(fruit_db):
    resp = LiteReader(fruit_db).handle_input(".help")
    assert resp.success
    assert ".dbinfo" in resp.body[0]


def test_utf16_database(tmp_path):
    statements = [
        "CREATE TABLE pêches (id integer primary key, name text)",
        "INSERT INTO pêches (name) VALUES ('blanche')",
        "INSERT INTO pêches (name) VALUES ('jaune')",
    ]
    path = create_sqlite_db(tmp_path / "utf16.db", statements, encoding="UTF-16le")
    db = LiteReader(path)
    assert db.config.text_encoding == "utf-16-le"
    assert db.handle_input(".tables").body == ["pêches"]
    assert db.handle_input('select count(*) from "pêches"').body == ["2"]


def test_interior_root_counts_root_cells(tmp_path, caplog):
    statements = ["CREATE TABLE apples (id integer primary key, name text)"]
    statements.extend(f"INSERT INTO apples (name) VALUES ('{'apple' * 10}{i}')" for i in range(300))
    path = create_sqlite_db(tmp_path / "deep.db", statements, page_size=512)

    with Pager(path) as pager:
        tree = StateManager(pager).get_tree("apples")
        root_cells = tree.num_cells()
        assert not Tree.parse_page_header(pager.get_page(tree.root_page_num), 0).node_type.is_leaf

    db = LiteReader(path)
    with caplog.at_level(logging.WARNING):
        resp = db.handle_input("select count(*) from apples")
    assert resp.body == [str(root_cells)]
    assert root_cells < 300
    assert "root page only" in caplog.text


def test_leaf_index_root_counts_without_warning(tmp_path, caplog):
    statements = [
        "CREATE TABLE apples (id integer primary key, name text)",
        "CREATE INDEX apples_by_name ON apples (name)",
        "INSERT INTO apples (name) VALUES ('fuji')",
        "INSERT INTO apples (name) VALUES ('gala')",
    ]
    path = create_sqlite_db(tmp_path / "indexed.db", statements)
    db = LiteReader(path)
    with caplog.at_level(logging.WARNING):
        resp = db.handle_input("select count(*) from apples_by_name")
    assert resp.body == ["2"]
    assert "root page only" not in caplog.text


def test_virtual_machine_reused_across_commands(fruit_db):
    db = LiteReader(fruit_db)
    vm = db.virtual_machine
    assert isinstance(vm, VirtualMachine)
    db.handle_input(".tables")
    db.handle_input("select count(*) from apples")
    assert db.virtual_machine is vm
    assert vm.config.page_size == 4096


# section: command line

def test_run_command_prints_output(fruit_db, capsys):
    assert run_command(fruit_db, ".dbinfo") == 0
    out = capsys.readouterr().out
    assert out.splitlines() == ["database page size: 4096", "number of tables: 3"]


def test_run_command_missing_table(fruit_db, capsys):
    assert run_command(fruit_db, "SELECT COUNT(*) FROM missing_table") == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "missing_table" in captured.err


def test_unknown_meta_command_exit_code(fruit_db, capsys):
    assert run_command(fruit_db, ".foo") == 1
    assert capsys.readouterr().out == ""


def test_parse_args_joins_command(fruit_db, capsys):
    assert parse_args_and_start([fruit_db, "select", "count(*)", "from", "apples"]) == 0
    assert capsys.readouterr().out.strip() == "7"


def test_no_arguments(capsys):
    assert parse_args_and_start([]) == 1
    assert "Usage" in capsys.readouterr().err


def test_nonexistent_file(tmp_path, capsys):
    assert run_command(str(tmp_path / "nope.db"), ".tables") == 1
    assert "not found" in capsys.readouterr().err


def test_repl(fruit_db, monkeypatch, capsys):
    inputs = iter([".tables", "", "select count(*) from apples", ".quit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(inputs))
    assert parse_args_and_start([fruit_db]) == 0
    out = capsys.readouterr().out
    assert "apples oranges bananas" in out
    assert "7" in out.splitlines()
    assert "goodbye" in out
