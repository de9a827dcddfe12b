"""
PesaDB SQL Tokenizer
====================
Converts raw SQL strings into a stream of typed tokens.

Features:
- Case-insensitive keywords (SELECT = select)
- Quoted identifiers ("My Table")
- String literals ('hello world', '' escapes a quote)
- Numeric literals (integers, decimals, exponents)
- Comparison operators and punctuation
- Line/column tracking for error reporting
- EOF sentinel token
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import List

from pesadb.errors import ParseError


class TokenType(Enum):
    # Keywords
    SELECT = auto()
    FROM = auto()
    WHERE = auto()
    INSERT = auto()
    INTO = auto()
    VALUES = auto()
    DELETE = auto()
    UPDATE = auto()
    SET = auto()
    CREATE = auto()
    TABLE = auto()
    DROP = auto()
    SHOW = auto()
    TABLES = auto()
    DESCRIBE = auto()
    JOIN = auto()
    INNER = auto()
    LEFT = auto()
    ON = auto()
    ORDER = auto()
    BY = auto()
    ASC = auto()
    DESC = auto()
    AS = auto()
    PRIMARY = auto()
    KEY = auto()
    UNIQUE = auto()
    NOT = auto()
    NULL = auto()
    TRUE = auto()
    FALSE = auto()

    # Literals
    NUMBER = auto()      # 123, 3.14, 1e3
    STRING_LIT = auto()  # 'hello'
    IDENTIFIER = auto()  # table_name, "Quoted Name"

    # Operators
    EQ = auto()          # =
    NEQ = auto()         # != or <>
    LT = auto()          # <
    GT = auto()          # >
    LTE = auto()         # <= (tokenized so the parser can reject it by name)
    GTE = auto()         # >=
    PLUS = auto()        # +
    MINUS = auto()       # -
    STAR = auto()        # *

    # Punctuation
    LPAREN = auto()      # (
    RPAREN = auto()      # )
    COMMA = auto()       # ,
    DOT = auto()         # .
    SEMICOLON = auto()   # ;

    # Special
    EOF = auto()


@dataclass(frozen=True)
class Token:
    """Immutable token with position info."""
    type: TokenType
    value: str
    line: int
    col: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, '{self.value}', {self.line}:{self.col})"


class Tokenizer:
    """
    Lexer for SQL. Call .tokenize(sql) to get a list of tokens.
    """

    KEYWORDS = {
        "SELECT": TokenType.SELECT,
        "FROM": TokenType.FROM,
        "WHERE": TokenType.WHERE,
        "INSERT": TokenType.INSERT,
        "INTO": TokenType.INTO,
        "VALUES": TokenType.VALUES,
        "DELETE": TokenType.DELETE,
        "UPDATE": TokenType.UPDATE,
        "SET": TokenType.SET,
        "CREATE": TokenType.CREATE,
        "TABLE": TokenType.TABLE,
        "DROP": TokenType.DROP,
        "SHOW": TokenType.SHOW,
        "TABLES": TokenType.TABLES,
        "DESCRIBE": TokenType.DESCRIBE,
        "JOIN": TokenType.JOIN,
        "INNER": TokenType.INNER,
        "LEFT": TokenType.LEFT,
        "ON": TokenType.ON,
        "ORDER": TokenType.ORDER,
        "BY": TokenType.BY,
        "ASC": TokenType.ASC,
        "DESC": TokenType.DESC,
        "AS": TokenType.AS,
        "PRIMARY": TokenType.PRIMARY,
        "KEY": TokenType.KEY,
        "UNIQUE": TokenType.UNIQUE,
        "NOT": TokenType.NOT,
        "NULL": TokenType.NULL,
        "TRUE": TokenType.TRUE,
        "FALSE": TokenType.FALSE,
    }

    # Note: order matters!
    PATTERNS = [
        # Whitespace (skip)
        (re.compile(r'\s+'), None),

        # Operators (multi-char first)
        (re.compile(r'>='), TokenType.GTE),
        (re.compile(r'<='), TokenType.LTE),
        (re.compile(r'!='), TokenType.NEQ),
        (re.compile(r'<>'), TokenType.NEQ),
        (re.compile(r'='), TokenType.EQ),
        (re.compile(r'<'), TokenType.LT),
        (re.compile(r'>'), TokenType.GT),
        (re.compile(r'\+'), TokenType.PLUS),
        (re.compile(r'-'), TokenType.MINUS),
        (re.compile(r'\*'), TokenType.STAR),

        # Punctuation
        (re.compile(r'\('), TokenType.LPAREN),
        (re.compile(r'\)'), TokenType.RPAREN),
        (re.compile(r','), TokenType.COMMA),
        (re.compile(r';'), TokenType.SEMICOLON),

        # Literals
        # String: 'hello' (supports escaped single quote via '')
        (re.compile(r"'((?:''|[^'])*)'"), TokenType.STRING_LIT),
        # Number: 123, 123.45, .5, 1e3, 2.5E-2
        (re.compile(r'(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?'), TokenType.NUMBER),

        # Dot after numbers so ".5" lexes as a number
        (re.compile(r'\.'), TokenType.DOT),

        # Identifiers / Keywords
        # Quoted identifier: "My Table"
        (re.compile(r'"([^"]+)"'), TokenType.IDENTIFIER),
        # Unquoted word: my_table (could be keyword)
        (re.compile(r'[a-zA-Z_][a-zA-Z0-9_]*'), TokenType.IDENTIFIER),
    ]

    def tokenize(self, sql: str) -> List[Token]:
        """Tokenize SQL string into a list of Tokens."""
        tokens = []
        pos = 0
        line = 1
        col_start = 0  # position of start of current line in string

        while pos < len(sql):
            match = None

            for pattern, token_type in self.PATTERNS:
                regex_match = pattern.match(sql, pos)
                if regex_match:
                    text = regex_match.group(0)

                    if token_type:  # If not skipped (whitespace)
                        if token_type == TokenType.IDENTIFIER and not text.startswith('"'):
                            upper_text = text.upper()
                            if upper_text in self.KEYWORDS:
                                token_type = self.KEYWORDS[upper_text]

                        value = text
                        if token_type == TokenType.STRING_LIT:
                            # Unescape '' -> '
                            value = regex_match.group(1).replace("''", "'")
                        elif token_type == TokenType.IDENTIFIER and text.startswith('"'):
                            value = regex_match.group(1)

                        col = pos - col_start + 1
                        tokens.append(Token(token_type, value, line, col))

                    pos += len(text)

                    newlines = text.count('\n')
                    if newlines > 0:
                        line += newlines
                        col_start = pos - (len(text) - text.rfind('\n') - 1)

                    match = regex_match
                    break

            if not match:
                col = pos - col_start + 1
                char = sql[pos]
                if char == "'":
                    raise ParseError(f"Unterminated string literal at line {line}:{col}")
                raise ParseError(f"Unexpected character '{char}' at line {line}:{col}")

        tokens.append(Token(TokenType.EOF, "", line, pos - col_start + 1))
        return tokens
