"""
PesaDB Parser Tests
===================
SQL text -> plan. Verifies the plan shape for every statement kind, literal
coercion, and error reporting.
"""

import pytest

from pesadb.errors import ParseError
from pesadb.parser import parse, tokenize, clean_value
from pesadb.parser.ast_nodes import (
    QueryType, SelectStmt, InsertStmt, UpdateStmt, DeleteStmt, CreateTableStmt,
    DropTableStmt, DescribeStmt, ShowTablesStmt, SelectItem, WhereClause,
)
from pesadb.parser.tokenizer import TokenType
from pesadb.storage.types import DataType


class TestTokenizer:

    def test_keywords_case_insensitive(self):
        tokens = tokenize("select * from users")
        assert tokens[0].type == TokenType.SELECT
        assert tokens[2].type == TokenType.FROM
        assert tokens[-1].type == TokenType.EOF

    def test_string_escape(self):
        tokens = tokenize("'it''s'")
        assert tokens[0].type == TokenType.STRING_LIT
        assert tokens[0].value == "it's"

    def test_numbers(self):
        values = [t.value for t in tokenize("1 2.5 .5 1e3") if t.type == TokenType.NUMBER]
        assert values == ["1", "2.5", ".5", "1e3"]

    def test_neq_variants(self):
        assert tokenize("!=")[0].type == TokenType.NEQ
        assert tokenize("<>")[0].type == TokenType.NEQ

    def test_line_tracking(self):
        tokens = tokenize("SELECT *\nFROM users")
        from_tok = tokens[2]
        assert from_tok.line == 2
        assert from_tok.col == 1

    def test_unterminated_string(self):
        with pytest.raises(ParseError, match="Unterminated string"):
            tokenize("SELECT * FROM t WHERE name = 'oops")

    def test_unexpected_character(self):
        with pytest.raises(ParseError, match="Unexpected character"):
            tokenize("SELECT # FROM t")


class TestCleanValue:

    def test_quoted(self):
        assert clean_value("'hello'") == "hello"
        assert clean_value("'it''s'") == "it's"

    def test_booleans_and_null(self):
        assert clean_value("TRUE") is True
        assert clean_value("false") is False
        assert clean_value("NULL") is None

    def test_numbers(self):
        assert clean_value("42") == 42
        assert isinstance(clean_value("42"), int)
        assert clean_value("-7") == -7
        assert clean_value("2500.50") == 2500.5
        assert isinstance(clean_value("50.00"), float)

    def test_raw_text(self):
        assert clean_value("Alice") == "Alice"


class TestSelect:

    def test_select_star(self):
        plan = parse("SELECT * FROM users")
        assert isinstance(plan, SelectStmt)
        assert plan.query_type == QueryType.SELECT
        assert plan.table_name == "users"
        assert plan.columns is None
        assert plan.joins == []
        assert plan.where is None
        assert plan.order_by is None

    def test_select_columns(self):
        plan = parse("SELECT id, name FROM users")
        assert plan.column_names == ["id", "name"]

    def test_select_alias(self):
        plan = parse("SELECT name AS who, email contact FROM users")
        assert plan.columns == [SelectItem("name", "who"), SelectItem("email", "contact")]

    def test_select_where(self):
        plan = parse("SELECT * FROM users WHERE id = 1")
        assert plan.where == WhereClause("id", "=", 1)

    @pytest.mark.parametrize("op,expected", [
        ("=", "="), ("!=", "!="), ("<>", "!="), ("<", "<"), (">", ">"),
    ])
    def test_select_where_operators(self, op, expected):
        plan = parse(f"SELECT * FROM t WHERE amount {op} 100")
        assert plan.where.operator == expected

    def test_where_string_and_negative(self):
        assert parse("SELECT * FROM t WHERE name = 'Alice'").where.value == "Alice"
        assert parse("SELECT * FROM t WHERE n > -5").where.value == -5

    def test_order_by(self):
        plan = parse("SELECT * FROM users ORDER BY name DESC")
        assert plan.order_by.column == "name"
        assert plan.order_by.direction == "DESC"
        assert parse("SELECT * FROM users ORDER BY name").order_by.ascending

    def test_join(self):
        plan = parse(
            "SELECT users.name, transactions.amount FROM users "
            "JOIN transactions ON users.id = transactions.user_id "
            "WHERE transactions.amount > 100 ORDER BY transactions.amount DESC"
        )
        assert len(plan.joins) == 1
        join = plan.joins[0]
        assert join.table == "transactions"
        assert join.left == "users.id"
        assert join.right == "transactions.user_id"
        assert join.kind == "INNER"
        assert plan.where.column == "transactions.amount"
        assert plan.column_names == ["users.name", "transactions.amount"]

    def test_left_join(self):
        plan = parse("SELECT * FROM a LEFT JOIN b ON a.id = b.a_id")
        assert plan.joins[0].kind == "LEFT"

    def test_trailing_semicolon(self):
        assert parse("SELECT * FROM users;").table_name == "users"

    def test_garbage_after_statement(self):
        with pytest.raises(ParseError, match="Invalid SELECT syntax"):
            parse("SELECT * FROM users extra words")

    def test_unsupported_operator(self):
        with pytest.raises(ParseError, match="Unsupported operator"):
            parse("SELECT * FROM t WHERE a >= 1")

    def test_missing_operator(self):
        with pytest.raises(ParseError, match="Expected comparison operator"):
            parse("SELECT * FROM t WHERE a")

    def test_missing_from(self):
        with pytest.raises(ParseError, match="Expected FROM"):
            parse("SELECT *")


class TestInsert:

    def test_insert_with_columns(self):
        plan = parse("INSERT INTO users (id, name, email) VALUES (1, 'Alice Maina', 'alice@pesapal.com')")
        assert isinstance(plan, InsertStmt)
        assert plan.columns == ["id", "name", "email"]
        assert plan.values == [1, "Alice Maina", "alice@pesapal.com"]

    def test_insert_without_columns(self):
        plan = parse("INSERT INTO users VALUES (1, 'x', NULL, TRUE)")
        assert plan.columns is None
        assert plan.values == [1, "x", None, True]

    def test_insert_comma_inside_string(self):
        plan = parse("INSERT INTO t (a, b) VALUES ('x, y', 2)")
        assert plan.values == ["x, y", 2]

    def test_insert_count_mismatch(self):
        with pytest.raises(ParseError, match="2 columns but 1 values"):
            parse("INSERT INTO t (a, b) VALUES (1)")

    def test_insert_decimal(self):
        plan = parse("INSERT INTO t (amount) VALUES (2500.50)")
        assert plan.values == [2500.5]


class TestCreateTable:

    def test_columns_and_constraints(self):
        plan = parse("CREATE TABLE users (id INTEGER PRIMARY KEY, name STRING NOT NULL, "
                     "email STRING UNIQUE)")
        assert isinstance(plan, CreateTableStmt)
        id_col, name_col, email_col = plan.columns
        assert id_col.data_type == DataType.INTEGER
        assert id_col.primary_key
        assert not name_col.nullable
        assert email_col.unique
        assert email_col.nullable

    def test_type_synonyms(self):
        plan = parse("CREATE TABLE t (a INT, b TEXT, c VARCHAR(255), d BOOL, e DECIMAL(10, 2))")
        types = [c.data_type for c in plan.columns]
        assert types == [DataType.INTEGER, DataType.STRING, DataType.STRING,
                         DataType.BOOLEAN, DataType.DECIMAL]

    def test_case_insensitive_keywords(self):
        plan = parse("create table t (id integer primary key)")
        assert plan.table_name == "t"
        assert plan.columns[0].primary_key

    def test_unknown_type(self):
        with pytest.raises(ParseError, match="Unknown data type BLOB"):
            parse("CREATE TABLE t (a BLOB)")


class TestOtherStatements:

    def test_update(self):
        plan = parse("UPDATE users SET name = 'Alicia', email = 'x@y' WHERE id = 1")
        assert isinstance(plan, UpdateStmt)
        assert plan.updates == {"name": "Alicia", "email": "x@y"}
        assert plan.where == WhereClause("id", "=", 1)

    def test_update_without_where(self):
        assert parse("UPDATE users SET active = FALSE").where is None

    def test_update_rejects_non_equality(self):
        with pytest.raises(ParseError, match="Only '=' is supported"):
            parse("UPDATE users SET name = 'x' WHERE id > 1")

    def test_delete(self):
        plan = parse("DELETE FROM users WHERE id = 2")
        assert isinstance(plan, DeleteStmt)
        assert plan.where.value == 2
        assert parse("DELETE FROM users").where is None

    def test_delete_rejects_non_equality(self):
        with pytest.raises(ParseError):
            parse("DELETE FROM users WHERE id < 2")

    def test_drop_describe_show(self):
        assert isinstance(parse("DROP TABLE users"), DropTableStmt)
        describe = parse("DESCRIBE users")
        assert isinstance(describe, DescribeStmt)
        assert describe.table_name == "users"
        show = parse("SHOW TABLES")
        assert isinstance(show, ShowTablesStmt)
        assert show.query_type == QueryType.SHOW_TABLES

    def test_unsupported_query(self):
        with pytest.raises(ParseError, match="Unsupported query: GRANT ALL ON users"):
            parse("GRANT ALL ON users TO bob")

    def test_repr_round_trips_to_same_plan(self):
        sql = "SELECT name AS n FROM users WHERE id != 3 ORDER BY name DESC"
        plan = parse(sql)
        assert parse(repr(plan)) == plan
