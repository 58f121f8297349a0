"""
======================================
Pytest suite for sql/query_builder.py
======================================

Test Coverage:
--------------
- build_where: plain and namespaced, NULLs, escaping, include/exclude skipping
- build_select_fields / build_fields: ordering, namespacing, excludes
- get_includes / get_excludes
- build_insert / build_update: formatting and escaping
- Statement builders: select, count, insert, update, delete

How to Execute:
---------------
All tests:          pytest tests/tests_sql/test_query_builder.py -v
By category:        pytest tests/tests_sql/test_query_builder.py -m unit
"""

from enum import Enum

import pytest

from models.metadata import QueryMetadata
from sql.query_builder import (
    build_fields,
    build_insert,
    build_select_fields,
    build_update,
    build_where,
    count_builder,
    delete_builder,
    get_excludes,
    get_includes,
    insert_builder,
    select_builder,
    update_builder,
)


@pytest.fixture
def three_field_metadata():
    """Metadata with fields test1, test2, testX in that order."""
    return QueryMetadata.from_dict(
        'test_table', 'test1',
        fields={
            'test1': {'type': 'string'},
            'test2': {'type': 'string'},
            'testX': {'type': 'string'},
        }
    )


# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_build_where_empty_query():
    assert build_where({}) == ""


@pytest.mark.unit
@pytest.mark.parametrize("query, expected", [
    ({"one": "two"}, "(`one` = 'two')"),
    ({"one": 2}, "(`one` = 2)"),
    ({"one": 2.123}, "(`one` = 2.123)"),
    ({"one": "two", "three": "four"}, "(`one` = 'two') AND (`three` = 'four')"),
    ({"one": "two", "three": None}, "(`one` = 'two') AND (`three` IS NULL)"),
])
def test_build_where_values(query, expected):
    assert build_where(query) == expected


@pytest.mark.unit
def test_build_where_escapes_field_names():
    query = {"on`=1; DROP TABLE countries": "two"}
    assert build_where(query) == "(`on=1; DROP TABLE countries` = 'two')"


@pytest.mark.unit
def test_build_where_escapes_string_values():
    query = {"one": "two'; DROP TABLE countries;"}
    assert build_where(query) == "(`one` = 'two\\'; DROP TABLE countries;')"


@pytest.mark.unit
def test_build_where_skips_include_and_exclude():
    query = {"one": 2, "include": "subdivisions", "exclude": "countries", "two": 3}
    assert build_where(query) == "(`one` = 2) AND (`two` = 3)"


@pytest.mark.unit
@pytest.mark.parametrize("namespace, query, expected", [
    ('a', {}, ""),
    ('b', {"one": "two"}, "(`b`.`one` = 'two')"),
    ('c', {"one": 2}, "(`c`.`one` = 2)"),
    ('e', {"one": "two", "three": "four"}, "(`e`.`one` = 'two') AND (`e`.`three` = 'four')"),
    ('f', {"one": "two", "three": None}, "(`f`.`one` = 'two') AND (`f`.`three` IS NULL)"),
    ('g', {"on`=1; DROP TABLE countries": "two"}, "(`g`.`on=1; DROP TABLE countries` = 'two')"),
    ('i', {"one": 2, "include": "x", "exclude": "y", "two": 3}, "(`i`.`one` = 2) AND (`i`.`two` = 3)"),
])
def test_build_where_namespaced(namespace, query, expected):
    assert build_where(query, namespace) == expected


@pytest.mark.unit
def test_build_select_fields():
    assert build_select_fields([]) == ""
    assert build_select_fields(['one', 'two']) == "`one`,`two`"
    assert build_select_fields(['one', 'two'], 'a') == "`a`.`one`,`a`.`two`"


@pytest.mark.unit
@pytest.mark.parametrize("query, expected", [
    ({}, "`test1`,`test2`,`testX`"),
    ({"exclude": None}, "`test1`,`test2`,`testX`"),
    ({"exclude": "test1"}, "`test2`,`testX`"),
    ({"exclude": "test1,testX"}, "`test2`"),
])
def test_build_fields(three_field_metadata, query, expected):
    assert build_fields(query, three_field_metadata) == expected


@pytest.mark.unit
def test_build_fields_namespaced(three_field_metadata):
    assert build_fields({}, three_field_metadata, 'a') == "`a`.`test1`,`a`.`test2`,`a`.`testX`"
    assert build_fields({"exclude": "test1,testX"}, three_field_metadata, 'd') == "`d`.`test2`"


@pytest.mark.unit
def test_get_includes():
    assert get_includes(None) == []
    assert get_includes({}) == []
    assert get_includes({"field2": "xxas"}) == []
    assert get_includes({"include": "test1"}) == ['test1']
    assert get_includes({"include": "test1,test2"}) == ['test1', 'test2']


@pytest.mark.unit
def test_get_excludes():
    assert get_excludes(None) == []
    assert get_excludes({}) == []
    assert get_excludes({"field2": "xxas"}) == []
    assert get_excludes({"exclude": "test1", "field2": "xxas"}) == ['test1']
    assert get_excludes({"exclude": "test1,test2"}) == ['test1', 'test2']


@pytest.mark.unit
def test_build_insert_basic():
    data = {"one": 1, "two": "2", "three": None}
    assert build_insert(data) == "(`one`, `two`, `three`) VALUES (1, '2', NULL)"


@pytest.mark.unit
def test_build_insert_escapes_names_and_values():
    data = {
        "one`; DROP TABLE test; -- ": 1,
        "two": "two",
        "three": "'; DROP TABLE test; --'",
    }
    assert build_insert(data) == (
        "(`one; DROP TABLE test; -- `, `two`, `three`) "
        "VALUES (1, 'two', '\\'; DROP TABLE test; --\\'')"
    )


@pytest.mark.unit
def test_build_update_basic():
    data = {"one": 1, "two": "two", "three": None}
    assert build_update(data) == "`one` = 1, `two` = 'two', `three` = NULL"


@pytest.mark.unit
def test_build_update_escapes_names_and_values():
    data = {
        "one`; DROP TABLE test; -- ": 1,
        "two": "2",
        "three": "'; DROP TABLE test; --'",
    }
    assert build_update(data) == (
        "`one; DROP TABLE test; -- ` = 1, `two` = '2', `three` = '\\'; DROP TABLE test; --\\''"
    )


@pytest.mark.unit
def test_statement_builders():
    where = build_where({"code": 2})
    assert select_builder('t', '`a`,`b`') == "SELECT `a`,`b` FROM `t`"
    assert select_builder('t', '`a`', where) == "SELECT `a` FROM `t` WHERE (`code` = 2)"
    assert count_builder('pktesttable', build_where({"id": 2002})) == (
        "SELECT COUNT(*) AS `c` FROM `pktesttable` WHERE (`id` = 2002)"
    )
    assert insert_builder('test_table', {"field_one": "one"}) == (
        "INSERT INTO `test_table` (`field_one`) VALUES ('one')"
    )
    assert update_builder('test_table', {"field_one": "two"}, where) == (
        "UPDATE `test_table` SET `field_one` = 'two' WHERE (`code` = 2)"
    )
    assert delete_builder('test_table', build_where({"code": "three"})) == (
        "DELETE FROM `test_table` WHERE (`code` = 'three')"
    )


# ===================
# 2. EDGE CASE TESTS
# ===================

@pytest.mark.edge_case
def test_update_and_delete_require_where():
    with pytest.raises(ValueError):
        update_builder('t', {"a": 1}, "")
    with pytest.raises(ValueError):
        delete_builder('t', "")


@pytest.mark.edge_case
def test_build_where_accepts_enum_keys():
    class Key(Enum):
        FIELD = 'field'

    assert build_where({Key.FIELD: 'test2'}) == "(`field` = 'test2')"


@pytest.mark.edge_case
def test_build_where_preserves_key_order():
    query = {"z": 1, "a": 2, "m": None}
    assert build_where(query) == "(`z` = 1) AND (`a` = 2) AND (`m` IS NULL)"


@pytest.mark.edge_case
def test_get_includes_drops_empty_segments():
    assert get_includes({"include": "a,,b,"}) == ['a', 'b']


@pytest.mark.edge_case
def test_build_where_backslash_quote_value_stays_quoted():
    assert build_where({"name": r"\' OR 1=1 -- "}) == r"(`name` = '\\\' OR 1=1 -- ')"
