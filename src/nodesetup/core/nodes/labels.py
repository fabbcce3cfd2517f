"""
Label expression matching.

Setup items carry a selector such as `linux && (jdk11 || jdk17) && !arm`.
A selector matches a node when the expression evaluates to true against the
node's labels. An empty selector matches every node.

Grammar:
    expr    := or
    or      := and ("||" and)*
    and     := unary ("&&" unary)*
    unary   := "!" unary | primary
    primary := "(" expr ")" | ATOM
    ATOM    := bare word or double-quoted string
"""

import re
from collections.abc import Callable, Iterable

from nodesetup.core.errors import ConfigError

LabelMatcher = Callable[[str, frozenset[str]], bool]

_TOKEN_RE = re.compile(
    r"""
    \s*(?:
        (?P<op>&&|\|\||!|\(|\))
      | "(?P<quoted>[^"]*)"
      | (?P<atom>[^\s()!&|"]+)
    )
    """,
    re.VERBOSE,
)


def _tokenize(expression: str) -> list[tuple[str, str]]:
    tokens: list[tuple[str, str]] = []
    pos = 0
    text = expression.rstrip()
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None or match.end() == pos:
            raise ConfigError(
                f"Invalid label expression {expression!r} at position {pos}",
                expression=expression,
            )
        if match.group("op") is not None:
            tokens.append(("op", match.group("op")))
        elif match.group("quoted") is not None:
            tokens.append(("atom", match.group("quoted")))
        else:
            tokens.append(("atom", match.group("atom")))
        pos = match.end()
    return tokens


class _Parser:
    """Recursive-descent evaluator over a token list."""

    def __init__(self, expression: str, labels: frozenset[str]) -> None:
        self.expression = expression
        self.tokens = _tokenize(expression)
        self.labels = labels
        self.pos = 0

    def _peek(self) -> tuple[str, str] | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _accept(self, op: str) -> bool:
        if self._peek() == ("op", op):
            self.pos += 1
            return True
        return False

    def _error(self, problem: str) -> ConfigError:
        return ConfigError(
            f"Invalid label expression {self.expression!r}: {problem}",
            expression=self.expression,
        )

    def parse(self) -> bool:
        result = self._or()
        if self._peek() is not None:
            raise self._error(f"unexpected {self._peek()[1]!r}")  # type: ignore[index]
        return result

    def _or(self) -> bool:
        result = self._and()
        while self._accept("||"):
            # No short-circuit: the right side must still be parsed
            rhs = self._and()
            result = result or rhs
        return result

    def _and(self) -> bool:
        result = self._unary()
        while self._accept("&&"):
            rhs = self._unary()
            result = result and rhs
        return result

    def _unary(self) -> bool:
        if self._accept("!"):
            return not self._unary()
        return self._primary()

    def _primary(self) -> bool:
        if self._accept("("):
            result = self._or()
            if not self._accept(")"):
                raise self._error("missing ')'")
            return result
        token = self._peek()
        if token is None:
            raise self._error("unexpected end of expression")
        kind, value = token
        if kind != "atom":
            raise self._error(f"unexpected {value!r}")
        self.pos += 1
        return value in self.labels


def match_labels(expression: str | None, labels: Iterable[str]) -> bool:
    """
    Evaluate a label expression against a node's labels.

    Args:
        expression: Selector expression; None or blank matches everything
        labels: Labels of the node

    Returns:
        True if the node is selected

    Raises:
        ConfigError: If the expression is malformed

    Example:
        >>> match_labels("linux && !arm", {"linux", "x86"})
        True
        >>> match_labels("windows || mac", {"linux"})
        False
    """
    if expression is None or not expression.strip():
        return True
    return _Parser(expression, frozenset(labels)).parse()


def validate_expression(expression: str) -> None:
    """
    Check an expression for syntax errors without a node.

    Raises:
        ConfigError: If the expression is malformed
    """
    match_labels(expression, ())
