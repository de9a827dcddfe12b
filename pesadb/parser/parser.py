"""
PesaDB SQL Parser
=================
Recursive-descent parser for the PesaDB statement subset.
Converts a stream of tokens into a typed plan (see ast_nodes).

Architecture:
- Input: Immutable list of Tokens (from Tokenizer)
- Output: Statement plan node
- Dispatch: leading keyword sequence, tried in a fixed order
- Lookahead: 1 token

Grammar:
  SELECT <items|*> FROM <t> [[INNER|LEFT] JOIN <t> ON <ref> = <ref>]
         [WHERE <ref> (=|!=|<>|<|>) <literal>] [ORDER BY <ref> [ASC|DESC]]
  INSERT INTO <t> [(<col>, ...)] VALUES (<literal>, ...)
  CREATE TABLE <t> (<col> <type> [PRIMARY KEY] [UNIQUE] [[NOT] NULL], ...)
  UPDATE <t> SET <col> = <literal>, ... [WHERE <ref> = <literal>]
  DELETE FROM <t> [WHERE <ref> = <literal>]
  DROP TABLE <t> | SHOW TABLES | DESCRIBE <t>
"""

import re
from typing import Callable, List, Optional, Tuple

from pesadb.errors import ParseError
from pesadb.parser.tokenizer import Token, TokenType
from pesadb.parser.ast_nodes import (
    Statement, SelectStmt, InsertStmt, UpdateStmt, DeleteStmt, CreateTableStmt,
    DropTableStmt, DescribeStmt, ShowTablesStmt,
    WhereClause, JoinClause, OrderBy, SelectItem,
)
from pesadb.storage.schema import ColumnDefinition
from pesadb.storage.types import DataType, Value


# Type keywords accepted in CREATE TABLE, normalized to the four column types
TYPE_NAMES = {
    "INTEGER": DataType.INTEGER,
    "INT": DataType.INTEGER,
    "STRING": DataType.STRING,
    "TEXT": DataType.STRING,
    "VARCHAR": DataType.STRING,
    "BOOLEAN": DataType.BOOLEAN,
    "BOOL": DataType.BOOLEAN,
    "DECIMAL": DataType.DECIMAL,
    "REAL": DataType.DECIMAL,
    "FLOAT": DataType.DECIMAL,
    "NUMERIC": DataType.DECIMAL,
}

# Keywords that may still be used as table/column names
SOFT_KEYWORDS = (
    TokenType.KEY, TokenType.TABLES, TokenType.SHOW, TokenType.DESCRIBE,
    TokenType.PRIMARY, TokenType.UNIQUE, TokenType.INNER,
)

COMPARISON_OPS = {
    TokenType.EQ: "=",
    TokenType.NEQ: "!=",
    TokenType.LT: "<",
    TokenType.GT: ">",
}

_INT_RE = re.compile(r'^[+-]?\d+$')
_NUMBER_RE = re.compile(r'^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$')


def clean_value(text: str) -> Value:
    """
    Coerce one raw literal. Order matters: quoted text, booleans, NULL,
    numbers, then the raw text itself. An unquoted token that reads as a
    number is always numeric.
    """
    if len(text) >= 2 and text.startswith("'") and text.endswith("'"):
        return text[1:-1].replace("''", "'")
    upper = text.upper()
    if upper == "TRUE":
        return True
    if upper == "FALSE":
        return False
    if upper == "NULL":
        return None
    if _INT_RE.match(text):
        return int(text)
    if _NUMBER_RE.match(text):
        return float(text)
    return text


class Parser:
    """
    Recursive-descent statement parser.
    Initialize with a list of tokens, call .parse() to get the plan.
    """

    def __init__(self, tokens: List[Token]):
        self._tokens = tokens
        self._pos = 0

    def _dispatch_table(self) -> List[Tuple[Tuple[TokenType, ...], str, Callable[[], Statement]]]:
        # (leading keywords, label, handler) in the order they are tried
        return [
            ((TokenType.SELECT,), "SELECT", self._parse_select),
            ((TokenType.INSERT, TokenType.INTO), "INSERT", self._parse_insert),
            ((TokenType.CREATE, TokenType.TABLE), "CREATE TABLE", self._parse_create_table),
            ((TokenType.UPDATE,), "UPDATE", self._parse_update),
            ((TokenType.DELETE, TokenType.FROM), "DELETE", self._parse_delete),
            ((TokenType.DROP, TokenType.TABLE), "DROP TABLE", self._parse_drop_table),
            ((TokenType.SHOW, TokenType.TABLES), "SHOW TABLES", ShowTablesStmt),
            ((TokenType.DESCRIBE,), "DESCRIBE", self._parse_describe),
        ]

    def parse(self, source: str = "") -> Statement:
        """Parse a single statement. An optional trailing ; is allowed."""
        for prefix, label, handler in self._dispatch_table():
            if not self._starts_with(prefix):
                continue
            self._pos = len(prefix)
            try:
                stmt = handler()
                self._match(TokenType.SEMICOLON)
                if not self._is_at_end():
                    raise ParseError("Unexpected token after statement", self._peek())
            except ParseError as e:
                raise ParseError(f"Invalid {label} syntax: {e}") from e
            return stmt

        snippet = source.strip()[:20] or self._peek().value
        raise ParseError(f"Unsupported query: {snippet}...")

    def _starts_with(self, prefix: Tuple[TokenType, ...]) -> bool:
        if len(self._tokens) < len(prefix):
            return False
        return all(self._tokens[i].type == t for i, t in enumerate(prefix))

    # ─── Statement Parsing ──────────────────────────────────────────

    def _parse_select(self) -> SelectStmt:
        columns = self._parse_select_list()
        self._consume(TokenType.FROM, "Expected FROM")
        table_name = self._parse_name("Expected table name")

        joins = []
        if self._check(TokenType.JOIN) or self._check(TokenType.INNER) or self._check(TokenType.LEFT):
            joins.append(self._parse_join())

        where = None
        if self._match(TokenType.WHERE):
            where = self._parse_where(equality_only=False)

        order_by = None
        if self._match(TokenType.ORDER):
            self._consume(TokenType.BY, "Expected BY after ORDER")
            column = self._parse_column_ref()
            direction = "ASC"
            if self._match(TokenType.DESC):
                direction = "DESC"
            else:
                self._match(TokenType.ASC)
            order_by = OrderBy(column, direction)

        return SelectStmt(
            table_name=table_name,
            columns=columns,
            joins=joins,
            where=where,
            order_by=order_by,
        )

    def _parse_select_list(self) -> Optional[List[SelectItem]]:
        if self._match(TokenType.STAR):
            return None

        items = []
        while True:
            column = self._parse_column_ref()
            alias = None
            if self._match(TokenType.AS):
                alias = self._parse_name("Expected alias after AS")
            elif self._check(TokenType.IDENTIFIER):
                # Bare alias; keywords never reach here as IDENTIFIER
                alias = self._advance().value
            items.append(SelectItem(column, alias))
            if not self._match(TokenType.COMMA):
                break
        return items

    def _parse_join(self) -> JoinClause:
        kind = "INNER"
        if self._match(TokenType.LEFT):
            kind = "LEFT"
        else:
            self._match(TokenType.INNER)
        self._consume(TokenType.JOIN, "Expected JOIN")
        table = self._parse_name("Expected table name after JOIN")
        self._consume(TokenType.ON, "Expected ON after join table")
        left = self._parse_column_ref()
        self._consume(TokenType.EQ, "Expected = in join condition")
        right = self._parse_column_ref()
        return JoinClause(table=table, left=left, right=right, kind=kind)

    def _parse_where(self, equality_only: bool) -> WhereClause:
        column = self._parse_column_ref()
        if self._is_at_end():
            raise ParseError("Expected comparison operator", self._peek())
        op_token = self._advance()
        if op_token.type not in COMPARISON_OPS:
            raise ParseError(f"Unsupported operator '{op_token.value}' in WHERE", op_token)
        operator = COMPARISON_OPS[op_token.type]
        if equality_only and operator != "=":
            raise ParseError(f"Only '=' is supported in this WHERE clause, got '{operator}'",
                             op_token)
        value = self._parse_literal()
        return WhereClause(column, operator, value)

    def _parse_insert(self) -> InsertStmt:
        table_name = self._parse_name("Expected table name")

        columns = None
        if self._match(TokenType.LPAREN):
            columns = []
            while True:
                columns.append(self._parse_name("Expected column name"))
                if not self._match(TokenType.COMMA):
                    break
            self._consume(TokenType.RPAREN, "Expected ) after column list")

        self._consume(TokenType.VALUES, "Expected VALUES")
        values_start = self._consume(TokenType.LPAREN, "Expected ( before values")

        values = []
        while True:
            values.append(self._parse_literal())
            if not self._match(TokenType.COMMA):
                break
        self._consume(TokenType.RPAREN, "Expected ) after values")

        if columns is not None and len(columns) != len(values):
            raise ParseError(
                f"{len(columns)} columns but {len(values)} values", values_start
            )
        return InsertStmt(table_name, columns, values)

    def _parse_create_table(self) -> CreateTableStmt:
        table_name = self._parse_name("Expected table name")
        self._consume(TokenType.LPAREN, "Expected ( after table name")

        columns = []
        while True:
            columns.append(self._parse_column_def())
            if not self._match(TokenType.COMMA):
                break

        self._consume(TokenType.RPAREN, "Expected ) after column definitions")
        return CreateTableStmt(table_name, columns)

    def _parse_column_def(self) -> ColumnDefinition:
        name = self._parse_name("Expected column name")
        type_token = self._advance()
        data_type = TYPE_NAMES.get(type_token.value.upper())
        if data_type is None:
            raise ParseError(f"Unknown data type {type_token.value or 'end of input'}",
                             type_token)

        # VARCHAR(255), DECIMAL(10, 2): length/precision is accepted and ignored
        if self._match(TokenType.LPAREN):
            self._consume(TokenType.NUMBER, "Expected length")
            if self._match(TokenType.COMMA):
                self._consume(TokenType.NUMBER, "Expected scale")
            self._consume(TokenType.RPAREN, "Expected )")

        column = ColumnDefinition(name=name, data_type=data_type)
        while True:
            if self._match(TokenType.PRIMARY):
                self._consume(TokenType.KEY, "Expected KEY after PRIMARY")
                column.primary_key = True
            elif self._match(TokenType.UNIQUE):
                column.unique = True
            elif self._match(TokenType.NOT):
                self._consume(TokenType.NULL, "Expected NULL after NOT")
                column.nullable = False
            elif self._match(TokenType.NULL):
                column.nullable = True
            else:
                break
        return column

    def _parse_update(self) -> UpdateStmt:
        table_name = self._parse_name("Expected table name")
        self._consume(TokenType.SET, "Expected SET after table name")

        updates = {}
        while True:
            column = self._parse_name("Expected column name")
            self._consume(TokenType.EQ, "Expected = in assignment")
            updates[column] = self._parse_literal()
            if not self._match(TokenType.COMMA):
                break

        where = None
        if self._match(TokenType.WHERE):
            where = self._parse_where(equality_only=True)
        return UpdateStmt(table_name, updates, where)

    def _parse_delete(self) -> DeleteStmt:
        table_name = self._parse_name("Expected table name")
        where = None
        if self._match(TokenType.WHERE):
            where = self._parse_where(equality_only=True)
        return DeleteStmt(table_name, where)

    def _parse_drop_table(self) -> DropTableStmt:
        return DropTableStmt(self._parse_name("Expected table name"))

    def _parse_describe(self) -> DescribeStmt:
        return DescribeStmt(self._parse_name("Expected table name"))

    # ─── Terminals ──────────────────────────────────────────────────

    def _parse_name(self, message: str) -> str:
        if self._check(TokenType.IDENTIFIER) or self._peek().type in SOFT_KEYWORDS:
            return self._advance().value
        raise ParseError(message, self._peek())

    def _parse_column_ref(self) -> str:
        """column or table.column"""
        parts = [self._parse_name("Expected column name")]
        while self._match(TokenType.DOT):
            parts.append(self._parse_name("Expected identifier after dot"))
        return ".".join(parts)

    def _parse_literal(self) -> Value:
        if self._match(TokenType.STRING_LIT):
            return self._previous().value
        if self._match(TokenType.TRUE):
            return True
        if self._match(TokenType.FALSE):
            return False
        if self._match(TokenType.NULL):
            return None

        sign = ""
        if self._match(TokenType.MINUS, TokenType.PLUS):
            sign = self._previous().value
            if not self._check(TokenType.NUMBER):
                raise ParseError("Expected number after sign", self._peek())
        if self._match(TokenType.NUMBER):
            return clean_value(sign + self._previous().value)

        # Unquoted word: kept as raw text
        if self._check(TokenType.IDENTIFIER):
            return clean_value(self._parse_column_ref())

        if self._is_at_end():
            raise ParseError("Unexpected end of input, expected value", self._peek())
        raise ParseError(f"Unexpected token {self._peek().value}, expected value", self._peek())

    # ─── Core Parser Logic ──────────────────────────────────────────

    def _peek(self) -> Token:
        if self._pos >= len(self._tokens):
            return self._tokens[-1]  # EOF
        return self._tokens[self._pos]

    def _previous(self) -> Token:
        return self._tokens[self._pos - 1]

    def _is_at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _check(self, type: TokenType) -> bool:
        if self._is_at_end() and type != TokenType.EOF:
            return False
        return self._peek().type == type

    def _advance(self) -> Token:
        if not self._is_at_end():
            self._pos += 1
            return self._previous()
        return self._peek()

    def _match(self, *types: TokenType) -> bool:
        for type in types:
            if self._check(type):
                self._advance()
                return True
        return False

    def _consume(self, type: TokenType, message: str) -> Token:
        if self._check(type):
            return self._advance()
        raise ParseError(message, self._peek())
