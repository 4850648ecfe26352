"""
Unit tests for AbstractBaseRepository using doubles of the adapter, the
connection and the Sql factory. Builders are real so their state can be
inspected after each call.
"""
from unittest.mock import MagicMock

import pytest

from sqlrepository.db.adapter import Adapter, Connection, Statement, StatementResult
from sqlrepository.db.result_set import ResultSet
from sqlrepository.exceptions import InvalidArgumentError, RepositorySetupError
from sqlrepository.repositories.base import AbstractBaseRepository, BaseRepository
from sqlrepository.repositories.interface import BaseRepositoryInterface
from sqlrepository.sql import Delete, Insert, Join, Select, Sql, Update


class ConcreteRepository(AbstractBaseRepository):
    pass


@pytest.fixture()
def mock_connection():
    connection = MagicMock(spec=Connection)
    connection.get_last_generated_value.return_value = 10
    return connection


@pytest.fixture()
def mock_adapter(mock_connection):
    adapter = MagicMock(spec=Adapter)
    adapter.get_connection.return_value = mock_connection
    return adapter


@pytest.fixture()
def mock_statement():
    statement = MagicMock(spec=Statement)
    statement.execute.return_value = StatementResult(5, rows=[{"id": 1, "name": "bar"}])
    return statement


@pytest.fixture()
def prepared():
    """Builders passed to prepare_statement_for_sql_object, with their table at that moment."""
    return []


@pytest.fixture()
def mock_sql(mock_statement, prepared):
    sql = MagicMock(spec=Sql)
    sql.select.side_effect = lambda table=None: Select(table)
    sql.insert.side_effect = lambda table=None: Insert(table)
    sql.update.side_effect = lambda table=None: Update(table)
    sql.delete.side_effect = lambda table=None: Delete(table)

    def _prepare(sql_object):
        prepared.append((sql_object, sql_object.get_raw_state("table")))
        return mock_statement

    sql.prepare_statement_for_sql_object.side_effect = _prepare
    return sql


@pytest.fixture()
def repository(mock_adapter, mock_sql):
    repo = ConcreteRepository()
    repo._adapter = mock_adapter
    repo._sql = mock_sql
    return repo


def test_implements_interface(repository):
    assert isinstance(repository, BaseRepositoryInterface)


def test_get_adapter(repository, mock_adapter):
    assert repository.get_adapter() is mock_adapter


def test_get_sql(repository, mock_sql):
    assert repository.get_sql() is mock_sql


def test_get_connection(repository, mock_connection):
    assert repository.get_connection() is mock_connection


def test_get_columns_defaults_to_empty(repository):
    assert list(repository.get_columns()) == []


@pytest.mark.parametrize(
    "call",
    [
        lambda r: r.select("foo"),
        lambda r: r.insert("foo", {"name": "bar"}),
        lambda r: r.update("foo", {"name": "bar"}, "id = 2"),
        lambda r: r.delete("foo", "id = 2"),
        lambda r: r.select_with(Select("foo")),
        lambda r: r.insert_with(Insert("foo").values({"name": "bar"})),
        lambda r: r.update_with(Update("foo").set({"name": "bar"})),
        lambda r: r.delete_with(Delete("foo")),
    ],
)
def test_operations_without_adapter_raise_setup_error(call):
    repo = ConcreteRepository()
    with pytest.raises(RepositorySetupError, match="does not have an Adapter setup"):
        call(repo)


def test_initialize_creates_sql_once(mock_adapter):
    repo = ConcreteRepository()
    repo._adapter = mock_adapter

    assert repo.is_initialized() is False
    repo.initialize()
    sql = repo.get_sql()
    assert isinstance(sql, Sql)
    assert sql.get_adapter() is mock_adapter

    assert repo.initialize() is repo
    assert repo.get_sql() is sql
    assert repo.is_initialized() is True


def test_initialize_keeps_injected_sql(repository, mock_sql):
    repository.initialize()
    assert repository.get_sql() is mock_sql


def test_select_with_no_where(repository, prepared):
    result_set = repository.select("foo")

    assert isinstance(result_set, ResultSet)
    assert result_set.current() == {"id": 1, "name": "bar"}
    select, _ = prepared[0]
    assert select.get_raw_state("where") == []


def test_select_with_where_string(repository, prepared):
    repository.select("foo", "foo")

    select, _ = prepared[0]
    assert select.get_raw_state("where") == ["foo"]


def test_select_with_where_mapping(repository, prepared):
    repository.select("foo", {"id": 2})

    select, _ = prepared[0]
    assert select.get_raw_state("where") == [{"id": 2}]


def test_select_with_callable_customizer(repository, prepared):
    seen = []

    def customize(select):
        seen.append(select)
        select.where("id > 1").order("name DESC").limit(3)

    repository.select("foo", customize)

    select, _ = prepared[0]
    assert seen == [select]
    assert select.get_raw_state("where") == ["id > 1"]
    assert select.get_raw_state("limit") == 3


def test_select_with_result_set_prototype(repository):
    prototype = ResultSet(ResultSet.ARRAY)

    result_set = repository.select("foo", result_set_prototype=prototype)

    assert result_set is prototype
    assert type(result_set.current()) is dict


def test_select_with_aliased_table_is_passed_through(repository, prepared):
    repository.select_with(Select({"f": "foo"}))

    _, table_at_execution = prepared[0]
    assert table_at_execution == {"f": "foo"}


def test_wildcard_select_uses_configured_columns(repository, prepared):
    repository._columns = ["id", "name"]

    repository.select("foo")

    select, _ = prepared[0]
    assert select.get_raw_state("columns") == ["id", "name"]


def test_explicit_select_columns_are_kept(repository, prepared):
    repository._columns = ["id", "name"]

    repository.select_with(Select("foo").columns(["status"]))

    select, _ = prepared[0]
    assert select.get_raw_state("columns") == ["status"]


def test_insert(repository, prepared):
    affected_rows = repository.insert("foo", {"foo": "bar"})

    assert affected_rows == 5
    insert, table_at_execution = prepared[0]
    assert table_at_execution == "foo"
    assert insert.get_raw_state("columns") == ["foo"]
    assert insert.get_raw_state("values") == ["bar"]


def test_insert_records_last_insert_value(repository, mock_connection):
    assert repository.get_last_insert_value() is None

    repository.insert("foo", {"foo": "bar"})
    assert repository.get_last_insert_value() == 10

    mock_connection.get_last_generated_value.return_value = 11
    repository.insert("foo", {"foo": "baz"})
    assert repository.get_last_insert_value() == 11


def test_insert_with_aliased_table_unaliases_then_restores(repository, prepared):
    insert = Insert({"f": "foo"}).values({"foo": "bar"})

    repository.insert_with(insert)

    _, table_at_execution = prepared[0]
    assert table_at_execution == "foo"
    assert insert.get_raw_state("table") == {"f": "foo"}


def test_insert_restores_alias_when_execution_fails(repository, mock_statement):
    mock_statement.execute.side_effect = RuntimeError("constraint violated")
    insert = Insert({"f": "foo"}).values({"foo": "bar"})

    with pytest.raises(RuntimeError, match="constraint violated"):
        repository.insert_with(insert)

    assert insert.get_raw_state("table") == {"f": "foo"}
    assert repository.get_last_insert_value() is None


def test_update(repository, prepared):
    affected_rows = repository.update("foo", {"foo": "bar"}, "id = 2")

    assert affected_rows == 5
    update, _ = prepared[0]
    assert update.get_raw_state("set") == {"foo": "bar"}
    assert update.get_raw_state("where") == ["id = 2"]
    assert update.get_raw_state("joins") == []


def test_update_without_where(repository, prepared):
    repository.update("foo", {"foo": "bar"})

    update, _ = prepared[0]
    assert update.get_raw_state("where") == []


def test_update_with_join(repository, prepared):
    joins = [
        {
            "name": "baz",
            "on": "foo.fooId = baz.fooId",
            "type": Join.LEFT,
        },
    ]

    affected_rows = repository.update("foo", {"foo.field": "bar"}, "id = 2", joins)

    assert affected_rows == 5
    update, _ = prepared[0]
    assert update.get_raw_state("joins") == [
        {"name": "baz", "on": "foo.fooId = baz.fooId", "columns": [], "type": Join.LEFT}
    ]


def test_update_with_join_default_type(repository, prepared):
    joins = [{"name": "baz", "on": "foo.fooId = baz.fooId"}]

    repository.update("foo", {"foo.field": "bar"}, "id = 2", joins)

    update, _ = prepared[0]
    assert update.get_raw_state("joins")[0]["type"] == Join.INNER


def test_update_calls_join_with_descriptor_values(repository, mock_sql, mock_statement):
    update = MagicMock(spec=Update)
    update.get_raw_state.return_value = "foo"
    mock_sql.update.side_effect = None
    mock_sql.update.return_value = update
    mock_sql.prepare_statement_for_sql_object.side_effect = None
    mock_sql.prepare_statement_for_sql_object.return_value = mock_statement

    repository.update(
        "foo",
        {"foo.field": "bar"},
        "id = 2",
        [{"name": "baz", "on": "foo.fooId = baz.fooId", "type": Join.RIGHT}],
    )

    update.set.assert_called_once_with({"foo.field": "bar"})
    update.where.assert_called_once_with("id = 2")
    update.join.assert_called_once_with("baz", "foo.fooId = baz.fooId", Join.RIGHT)


def test_update_with_aliased_table_unaliases_then_restores(repository, prepared):
    update = Update({"f": "foo"}).set({"foo": "bar"})

    repository.update_with(update)

    _, table_at_execution = prepared[0]
    assert table_at_execution == "foo"
    assert update.get_raw_state("table") == {"f": "foo"}


def test_update_does_not_touch_last_insert_value(repository):
    repository.update("foo", {"foo": "bar"}, "id = 2")
    assert repository.get_last_insert_value() is None


def test_delete_with_where_string(repository, prepared):
    affected_rows = repository.delete("foo", "id = 2")

    assert affected_rows == 5
    delete, _ = prepared[0]
    assert delete.get_raw_state("where") == ["id = 2"]


def test_delete_requires_where(repository, prepared):
    with pytest.raises(InvalidArgumentError, match="Predicate cannot be null"):
        repository.delete("foo", None)

    assert prepared == []


def test_delete_with_callable_customizer(repository, prepared):
    repository.delete("foo", lambda delete: delete.where({"id": [1, 2]}))

    delete, _ = prepared[0]
    assert delete.get_raw_state("where") == [{"id": [1, 2]}]


def test_delete_with(repository, prepared):
    delete = Delete("foo").where("id = 2")

    assert repository.delete_with(delete) == 5
    assert prepared[0][0] is delete


@pytest.mark.parametrize("reported", [0, 1, 42, -1])
def test_affected_rows_are_passed_through(repository, mock_statement, reported):
    mock_statement.execute.return_value = StatementResult(reported)

    assert repository.insert("foo", {"foo": "bar"}) == reported
    assert repository.update("foo", {"foo": "bar"}) == reported
    assert repository.delete("foo", "id = 1") == reported


def test_base_repository_builds_sql_from_adapter(mock_adapter):
    repo = BaseRepository(mock_adapter)

    assert repo.is_initialized() is True
    assert repo.get_adapter() is mock_adapter
    assert isinstance(repo.get_sql(), Sql)
    assert repo.get_sql().get_adapter() is mock_adapter


def test_base_repository_uses_injected_sql(mock_adapter, mock_sql):
    repo = BaseRepository(mock_adapter, mock_sql)
    assert repo.get_sql() is mock_sql


def test_base_repository_requires_adapter():
    with pytest.raises(RepositorySetupError):
        BaseRepository(None)
