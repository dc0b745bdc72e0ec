"""Find ``CREATE FUNCTION ... LANGUAGE c`` declarations in an SQL script.

Only the shape of the declaration matters, so the scanner is a single
left-to-right walk over the token stream rather than a parser:

    SEEKING_CREATE -> SEEKING_FUNCTION -> SEEKING_NAME
        -> SEEKING_LANGUAGE -> SEEKING_LANGUAGE_NAME -> SEEKING_CREATE

A candidate name is dropped when its statement ends before ``LANGUAGE c``.
The language name may be quoted, as in ``LANGUAGE 'c'``.
"""

import enum
import logging
import re
from collections.abc import Iterable

import sqlglot
from sqlglot.errors import SqlglotError
from sqlglot.tokens import Token, TokenType

from pgext_install.errors import ScanFailed
from pgext_install.models import Declaration

logger = logging.getLogger(__name__)

NATIVE_LANGUAGE = "c"

_DIALECT = "postgres"
_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")

# Token types whose text must never be read as a keyword.
_LITERAL_TYPES = frozenset(
    {
        TokenType.STRING,
        TokenType.NATIONAL_STRING,
        TokenType.RAW_STRING,
        TokenType.HEREDOC_STRING,
        TokenType.BIT_STRING,
        TokenType.HEX_STRING,
        TokenType.BYTE_STRING,
        TokenType.NUMBER,
        TokenType.IDENTIFIER,
    }
)


class _State(enum.Enum):
    SEEKING_CREATE = "seeking-create"
    SEEKING_FUNCTION = "seeking-function"
    SEEKING_NAME = "seeking-name"
    SEEKING_LANGUAGE = "seeking-language"
    SEEKING_LANGUAGE_NAME = "seeking-language-name"


def tokenize(sql: str) -> list[Token]:
    try:
        return sqlglot.tokenize(sql, read=_DIALECT)
    except SqlglotError as exc:
        raise ScanFailed(f"Invalid SQL syntax: {exc}") from exc


def _is_keyword(token: Token, word: str) -> bool:
    return token.token_type not in _LITERAL_TYPES and token.text.upper() == word


def _is_name(token: Token) -> bool:
    if token.token_type == TokenType.IDENTIFIER:
        return True
    return token.token_type not in _LITERAL_TYPES and bool(_NAME_RE.match(token.text))


def _is_language_name(token: Token) -> bool:
    if token.token_type == TokenType.STRING:
        return True
    return _is_name(token)


def _is_separator(token: Token) -> bool:
    return token.token_type == TokenType.SEMICOLON


def _walk(tokens: list[Token]) -> Iterable[Declaration]:
    state = _State.SEEKING_CREATE
    candidate: Token | None = None
    index = 0

    while index < len(tokens):
        token = tokens[index]
        index += 1

        if state is _State.SEEKING_CREATE:
            if _is_keyword(token, "CREATE"):
                state = _State.SEEKING_FUNCTION

        elif state is _State.SEEKING_FUNCTION:
            if _is_keyword(token, "FUNCTION"):
                state = _State.SEEKING_NAME
            elif _is_keyword(token, "OR") or _is_keyword(token, "REPLACE"):
                pass
            else:
                state = _State.SEEKING_CREATE

        elif state is _State.SEEKING_NAME:
            if not _is_name(token):
                state = _State.SEEKING_CREATE
                continue
            candidate = token
            # schema.function: the function part is the registered symbol
            while (
                index + 1 < len(tokens)
                and tokens[index].token_type == TokenType.DOT
                and _is_name(tokens[index + 1])
            ):
                candidate = tokens[index + 1]
                index += 2
            state = _State.SEEKING_LANGUAGE

        elif state is _State.SEEKING_LANGUAGE:
            if _is_separator(token):
                candidate = None
                state = _State.SEEKING_CREATE
            elif _is_keyword(token, "LANGUAGE"):
                state = _State.SEEKING_LANGUAGE_NAME

        elif state is _State.SEEKING_LANGUAGE_NAME:
            if candidate is not None and _is_language_name(token) and token.text.lower() == NATIVE_LANGUAGE:
                yield Declaration(function_name=candidate.text, line=candidate.line)
            candidate = None
            state = _State.SEEKING_CREATE


def scan_declarations(sql: str) -> list[Declaration]:
    """Return native-language function declarations in order of appearance.

    Duplicates are kept. Raises ``ScanFailed`` when the text does not tokenize.
    """
    declarations = list(_walk(tokenize(sql)))
    logger.info("Found %d native function declaration(s)", len(declarations))
    return declarations


def native_function_names(sql: str) -> list[str]:
    return [d.function_name for d in scan_declarations(sql)]
