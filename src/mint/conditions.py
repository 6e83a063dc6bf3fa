"""Condition expressions used by template filters and question ``when`` clauses.

Expressions are parsed into a small typed AST instead of being handed to
``eval``. The grammar accepts both JavaScript-style and Python-style boolean
operators so descriptors written for the original Node tooling keep working:

    needTests
    !lint && transporter === "NATS"
    not lint or (answers.mode == 'api')

A name that is missing from the context evaluates to ``UNDEFINED``, which is
falsy and never raises.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, List, Mapping, Tuple, Union

from .errors import InvalidExpression


class _Undefined:
    """Marker for a name or attribute that does not exist in the context."""

    _instance = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "undefined"


UNDEFINED = _Undefined()


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Name:
    name: str


@dataclass(frozen=True)
class Attribute:
    value: "Node"
    attr: str


@dataclass(frozen=True)
class Not:
    operand: "Node"


@dataclass(frozen=True)
class BoolOp:
    op: str  # "and" | "or"
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class Compare:
    op: str  # one of COMPARISON_OPS
    left: "Node"
    right: "Node"


Node = Union[Literal, Name, Attribute, Not, BoolOp, Compare]

COMPARISON_OPS = ("===", "!==", "==", "!=", "<=", ">=", "<", ">")

_KEYWORD_LITERALS = {
    "true": True,
    "True": True,
    "false": False,
    "False": False,
    "null": None,
    "None": None,
    "undefined": UNDEFINED,
}

_TOKEN_RE = re.compile(
    r"""
    \s*(?:
        (?P<number>\d+(?:\.\d+)?)
      | (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
      | (?P<op>===|!==|==|!=|<=|>=|&&|\|\||[<>!().])
      | (?P<name>[A-Za-z_$][A-Za-z0-9_$]*)
    )
    """,
    re.VERBOSE,
)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}

Token = Tuple[str, str]


def _unquote(raw: str) -> str:
    body = raw[1:-1]
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), body)


def tokenize(expression: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    end = len(expression.rstrip())
    while pos < end:
        match = _TOKEN_RE.match(expression, pos)
        if match is None or match.end() == pos:
            raise InvalidExpression(
                expression, f"unexpected character {expression[pos:].strip()[:1]!r}"
            )
        kind = match.lastgroup
        assert kind is not None
        value = match.group(kind)
        if kind == "name" and value in ("and", "or", "not"):
            kind = "op"
        tokens.append((kind, value))
        pos = match.end()
    return tokens


class _Parser:
    def __init__(self, expression: str) -> None:
        self.expression = expression
        self.tokens = tokenize(expression)
        self.pos = 0

    def _peek(self) -> Token:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return ("eof", "")

    def _next(self) -> Token:
        token = self._peek()
        self.pos += 1
        return token

    def _error(self, reason: str) -> InvalidExpression:
        return InvalidExpression(self.expression, reason)

    def parse(self) -> Node:
        if not self.tokens:
            raise self._error("empty expression")
        node = self._or()
        kind, value = self._peek()
        if kind != "eof":
            raise self._error(f"unexpected token {value!r}")
        return node

    def _or(self) -> Node:
        node = self._and()
        while self._peek() in (("op", "||"), ("op", "or")):
            self._next()
            node = BoolOp("or", node, self._and())
        return node

    def _and(self) -> Node:
        node = self._not()
        while self._peek() in (("op", "&&"), ("op", "and")):
            self._next()
            node = BoolOp("and", node, self._not())
        return node

    def _not(self) -> Node:
        if self._peek() in (("op", "!"), ("op", "not")):
            self._next()
            return Not(self._not())
        return self._comparison()

    def _comparison(self) -> Node:
        node = self._primary()
        while self._peek()[0] == "op" and self._peek()[1] in COMPARISON_OPS:
            op = self._next()[1]
            node = Compare(op, node, self._primary())
        return node

    def _primary(self) -> Node:
        kind, value = self._next()
        if kind == "number":
            return Literal(float(value) if "." in value else int(value))
        if kind == "string":
            return Literal(_unquote(value))
        if kind == "name":
            if value in _KEYWORD_LITERALS:
                return Literal(_KEYWORD_LITERALS[value])
            node: Node = Name(value)
            while self._peek() == ("op", "."):
                self._next()
                attr_kind, attr = self._next()
                if attr_kind != "name":
                    raise self._error(f"expected attribute name after '.', got {attr!r}")
                node = Attribute(node, attr)
            return node
        if (kind, value) == ("op", "("):
            node = self._or()
            if self._next() != ("op", ")"):
                raise self._error("missing closing parenthesis")
            return node
        if kind == "eof":
            raise self._error("unexpected end of expression")
        raise self._error(f"unexpected token {value!r}")


@lru_cache(maxsize=256)
def parse(expression: str) -> Node:
    """Parse a condition expression into its AST."""
    return _Parser(expression).parse()


def is_truthy(value: Any) -> bool:
    if value is UNDEFINED or value is None:
        return False
    return bool(value)


def strict_equal(a: Any, b: Any) -> bool:
    """Equality that also requires both operands to share a type (JS ``===``).

    ``int`` and ``float`` count as one number type; ``bool`` stays separate.
    """
    if _is_number(a) and _is_number(b):
        return a == b
    return type(a) is type(b) and a == b


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def loose_equal(a: Any, b: Any) -> bool:
    nullish = (None, UNDEFINED)
    if a in nullish or b in nullish:
        return a in nullish and b in nullish
    return a == b


def _order(op: str, a: Any, b: Any) -> bool:
    if a is UNDEFINED or b is UNDEFINED:
        return False
    try:
        if op == "<":
            return a < b
        if op == "<=":
            return a <= b
        if op == ">":
            return a > b
        return a >= b
    except TypeError:
        return False


def _lookup(value: Any, attr: str) -> Any:
    if value is UNDEFINED or value is None:
        return UNDEFINED
    if isinstance(value, Mapping):
        return value.get(attr, UNDEFINED)
    return getattr(value, attr, UNDEFINED)


def evaluate_node(node: Node, context: Mapping[str, Any]) -> Any:
    """Evaluate an AST node, returning the raw (not coerced) value."""
    if isinstance(node, Literal):
        return node.value
    if isinstance(node, Name):
        return context.get(node.name, UNDEFINED)
    if isinstance(node, Attribute):
        return _lookup(evaluate_node(node.value, context), node.attr)
    if isinstance(node, Not):
        return not is_truthy(evaluate_node(node.operand, context))
    if isinstance(node, BoolOp):
        left = evaluate_node(node.left, context)
        if node.op == "and":
            return evaluate_node(node.right, context) if is_truthy(left) else left
        return left if is_truthy(left) else evaluate_node(node.right, context)
    if isinstance(node, Compare):
        left = evaluate_node(node.left, context)
        right = evaluate_node(node.right, context)
        if node.op == "===":
            return strict_equal(left, right)
        if node.op == "!==":
            return not strict_equal(left, right)
        if node.op == "==":
            return loose_equal(left, right)
        if node.op == "!=":
            return not loose_equal(left, right)
        return _order(node.op, left, right)
    raise TypeError(f"Unknown expression node: {node!r}")


Condition = Union[str, bool, None, Callable[[Mapping[str, Any]], Any]]


def evaluate(expression: Condition, context: Mapping[str, Any]) -> bool:
    """Evaluate a condition against ``context`` and return a plain bool."""
    if expression is None:
        return False
    if isinstance(expression, bool):
        return expression
    if callable(expression):
        return is_truthy(expression(context))
    if not isinstance(expression, str):
        raise InvalidExpression(expression, "expected a string, bool or callable")
    return is_truthy(evaluate_node(parse(expression), context))
