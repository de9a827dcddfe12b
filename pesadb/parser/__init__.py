"""
PesaDB SQL Parser
=================
Public API for the statement parser.

Usage:
    from pesadb.parser import parse, ParseError

    plan = parse("SELECT * FROM users")
    print(plan.query_type, plan)
"""

from pesadb.errors import ParseError
from pesadb.parser.parser import Parser, clean_value
from pesadb.parser.tokenizer import Tokenizer, Token, TokenType
from pesadb.parser.ast_nodes import QueryType, Statement


def parse(sql: str) -> Statement:
    """
    Parse one SQL string into a plan Statement.
    Raises ParseError if syntax is invalid.
    """
    tokens = Tokenizer().tokenize(sql.strip())
    return Parser(tokens).parse(sql)


def tokenize(sql: str) -> list[Token]:
    """Tokenize SQL string (for debugging)."""
    return Tokenizer().tokenize(sql)


__all__ = [
    "parse", "tokenize", "clean_value", "Parser", "ParseError",
    "Tokenizer", "Token", "TokenType", "QueryType", "Statement",
]
