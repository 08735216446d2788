"""Recursive expression parser.

Text is scanned left to right, one token at a time, and the tree is built as
the tokens arrive:

- values (numbers, variables, function calls, parenthesised groups) go into
  the currently open operand slot;
- an operator is resolved as prefix, infix or postfix from whether the
  previous token was a value and from what follows it;
- a new infix/postfix node is spliced into the tree at the depth its
  precedence calls for, using the stack of operator nodes created so far.

Parenthesised groups and function arguments are handed to a fresh parser over
the exact substring. Each parser knows the full source text and the offset of
its substring within it, so errors always point into the original input.
"""

from __future__ import annotations

import logging

from exprtree.core.errors import (
    ArityMismatch,
    ExpectedInfixOperator,
    ExpectedOperatorBetweenValues,
    ExpectedPostfixOperator,
    ExpectedPrefixOperator,
    MalformedNumberLiteral,
    MismatchedParentheses,
    MissingArgumentList,
    MissingOperand,
    NestingTooDeep,
    ParseError,
    UndefinedFunction,
    UnrecognizedToken,
)
from exprtree.core.nodes import Empty, Function, Node, Number, Variable
from exprtree.core.registry import Fixity, OperatorSpec, ParserSettings

log = logging.getLogger(__name__)

DIGITS = "0123456789"
OPENING = "(["
CLOSING = ")]"


def _is_digit(ch: str) -> bool:
    return len(ch) == 1 and ch in DIGITS


def _is_name_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


class ExpressionParser:
    """Parses one expression (or one nested substring of it).

    Usage:
        parser = ExpressionParser(ParserSettings(default_registry()))
        tree = parser.parse("2 * (x + 1)")
    """

    def __init__(
        self,
        settings: ParserSettings,
        source: str | None = None,
        shift: int = 0,
        depth: int = 0,
    ):
        self.settings = settings
        self.registry = settings.registry
        self._nested = source is not None
        self._source = source or ""
        self._shift = shift
        self._depth = depth

    # ── Entry point ──────────────────────────────────────────────────

    def parse(self, text: str) -> Node | None:
        """Parse `text`; None when it holds nothing but whitespace."""
        if not self._nested:
            self._source = text
            log.debug("Parsing %r", text)
        if self._depth > self.settings.max_depth:
            raise NestingTooDeep(
                f"Expression nested deeper than {self.settings.max_depth} levels",
                self._source, self._shift,
            )
        if all(ch in self.settings.whitespace for ch in text):
            return None

        self._text = text
        self._pos = 0
        self._root: Node = Empty()
        self._parents: list[Function] = []
        self._prev_is_value = False
        self._last_op = 0
        self._nesting = 0

        while self._pos < len(text):
            self._next_token()
        if not self._prev_is_value:
            self._error(MissingOperand, "Right operand for operator not found", self._last_op)

        root = self._root
        if not self._nested:
            if root.depth() > self.settings.max_tree_depth:
                raise NestingTooDeep(
                    f"Expression tree deeper than {self.settings.max_tree_depth} levels",
                    self._source, 0,
                )
            if self.settings.canonicalize:
                root.canonicalize()
            if log.isEnabledFor(logging.DEBUG):
                log.debug("Parsed %r as %s", text, root.to_sexpr())
        return root

    # ── Token dispatch ───────────────────────────────────────────────

    def _next_token(self) -> None:
        ch = self._text[self._pos]
        if self._is_whitespace(self._pos):
            self._pos += 1
        elif not self._prev_is_value and self._is_constant(self._pos):
            self._parse_number()
        elif self.registry.find_operator(self._text, self._pos) is not None:
            self._last_op = self._pos
            self._parse_operator()
        elif self._is_function(self._pos):
            self._parse_function()
        elif ch in OPENING:
            self._parse_group()
        elif ch in CLOSING:
            self._error(MismatchedParentheses, "Mismatched parentheses", self._pos)
        elif _is_name_char(ch):
            self._parse_variable()
        else:
            self._error(UnrecognizedToken, "Unrecognised token", self._pos)

    # ── Values ───────────────────────────────────────────────────────

    def _parse_number(self) -> None:
        start = self._pos
        if self._text[self._pos] == "-":
            self._pos += 1
        found_dot = False
        while self._pos < len(self._text) and (
            _is_digit(self._text[self._pos]) or self._text[self._pos] == "."
        ):
            if self._text[self._pos] == ".":
                if found_dot:
                    self._error(MalformedNumberLiteral, "Found second dot in a number", self._pos)
                found_dot = True
            self._pos += 1
        self._fill(Number(float(self._text[start:self._pos])), start)

    def _parse_variable(self) -> None:
        start = self._pos
        self._expect_operand(start)
        while self._pos < len(self._text) and _is_name_char(self._text[self._pos]):
            self._pos += 1
        name = self._text[start:self._pos]
        self.settings.add_variable(name)
        self._fill(Variable(name), start)

    def _parse_group(self) -> None:
        start = self._pos
        self._expect_operand(start)
        end = self._find_closing(start)
        node = self._subparse(start + 1, end)
        if node is None:
            self._error(MissingOperand, "Empty parentheses", start)
        self._fill(node, start)
        self._pos = end + 1

    def _parse_function(self) -> None:
        start = self._pos
        self._expect_operand(start)
        spec = self.registry.find_function(self._text, start)
        if spec is None:
            self._error(UndefinedFunction, "Undefined function", start)
        cid = self._skip_whitespace(start + len(spec.name))
        if cid >= len(self._text) or self._text[cid] != "(":
            self._error(MissingArgumentList, "Expected list of arguments after the function name", cid)
        end = self._find_closing(cid)

        args: list[Node] = []
        if not all(self._is_whitespace(i) for i in range(cid + 1, end)):
            for arg_start, arg_end in self._split_arguments(cid + 1, end):
                arg = self._subparse(arg_start, arg_end)
                if arg is None:
                    self._error(MissingOperand, "Missing function argument", arg_start)
                args.append(arg)
        if len(args) != spec.arity:
            self._error(
                ArityMismatch,
                f"Function {spec.name!r} takes {spec.arity} argument(s), got {len(args)}",
                end,
            )
        self._fill(Function(spec, args), start)
        self._pos = end + 1

    def _split_arguments(self, start: int, end: int) -> list[tuple[int, int]]:
        """Spans of the comma-separated arguments in text[start:end]."""
        spans = []
        level = 0
        arg_start = start
        for i in range(start, end):
            ch = self._text[i]
            if ch in OPENING:
                level += 1
            elif ch in CLOSING:
                level -= 1
            elif ch == "," and level == 0:
                spans.append((arg_start, i))
                arg_start = i + 1
        spans.append((arg_start, end))
        return spans

    def _subparse(self, start: int, end: int) -> Node | None:
        parser = ExpressionParser(
            self.settings, self._source, self._shift + start, self._depth + self._nesting + 1
        )
        return parser.parse(self._text[start:end])

    # ── Operators ────────────────────────────────────────────────────

    def _parse_operator(self) -> None:
        start = self._pos
        if not self._prev_is_value:
            self._parse_prefix(start)
            return

        # A value precedes the operator: infix when another value follows,
        # postfix otherwise.
        infix = self.registry.find_operator(self._text, start, Fixity.INFIX)
        postfix = self.registry.find_operator(self._text, start, Fixity.POSTFIX)
        if infix is not None:
            after = self._skip_whitespace(start + len(infix.name))
            if after < len(self._text) and self._starts_value(after):
                spec = infix
            elif postfix is not None:
                spec = postfix
            elif after >= len(self._text):
                self._error(MissingOperand, "Right operand for operator not found", start)
            else:
                spec = infix
        elif postfix is not None:
            spec = postfix
        else:
            any_op = self.registry.find_operator(self._text, start)
            after = self._skip_whitespace(start + len(any_op.name))
            if after < len(self._text) and self._starts_value(after):
                self._error(ExpectedInfixOperator, "Expected infix operator", start)
            self._error(ExpectedPostfixOperator, "Expected postfix operator", start)

        self._pos = start + len(spec.name)
        self._splice(spec)
        self._prev_is_value = spec.fixity == Fixity.POSTFIX

    def _parse_prefix(self, start: int) -> None:
        spec = self.registry.find_operator(self._text, start, Fixity.PREFIX)
        if spec is None:
            self._error(ExpectedPrefixOperator, "Expected prefix operator", start)
        node = Function(spec, [Empty()])
        self._place(node)
        self._parents.append(node)

        self._pos = self._skip_whitespace(start + len(spec.name))
        if self._pos >= len(self._text):
            self._error(MissingOperand, "Operand for prefix operator not found", start)
        self._nesting += 1
        if self._depth + self._nesting > self.settings.max_depth:
            self._error(
                NestingTooDeep, f"Expression nested deeper than {self.settings.max_depth} levels", start
            )
        self._next_token()
        self._nesting -= 1
        self._prev_is_value = True

    def _splice(self, spec: OperatorSpec) -> None:
        """Insert a new infix/postfix node above the value just completed.

        Operators on the stack that bind at least as tightly as `spec` are
        closed off; the new node takes over the right-hand slot of the first
        looser one, or becomes the root.
        """
        while self._parents and self._parents[-1].spec.precedence >= spec.precedence:
            self._parents.pop()
        if self._parents:
            host = self._parents[-1]
            node = Function(spec, [host.args[-1]])
            host.args[-1] = node
        else:
            node = Function(spec, [self._root])
            self._root = node
        if spec.fixity == Fixity.INFIX:
            node.args.append(Empty())
        self._parents.append(node)

    # ── Slots ────────────────────────────────────────────────────────

    def _place(self, node: Node) -> None:
        # the open slot is the last operand of the innermost pending operator
        if self._parents:
            self._parents[-1].args[-1] = node
        else:
            self._root = node

    def _fill(self, node: Node, start: int) -> None:
        self._expect_operand(start)
        self._place(node)
        self._prev_is_value = True

    def _expect_operand(self, pos: int) -> None:
        if self._prev_is_value:
            self._error(ExpectedOperatorBetweenValues, "Expected operator between two values", pos)

    # ── Character classes ────────────────────────────────────────────

    def _is_whitespace(self, pos: int) -> bool:
        return self._text[pos] in self.settings.whitespace

    def _skip_whitespace(self, pos: int) -> int:
        while pos < len(self._text) and self._is_whitespace(pos):
            pos += 1
        return pos

    def _is_constant(self, pos: int) -> bool:
        text = self._text
        if _is_digit(text[pos]):
            return True
        return text[pos] == "-" and pos + 1 < len(text) and _is_digit(text[pos + 1])

    def _is_function(self, pos: int) -> bool:
        """A run of letters/digits followed (after whitespace) by '('."""
        end = pos
        while end < len(self._text) and self._text[end].isalnum():
            end += 1
        if end == pos:
            return False
        end = self._skip_whitespace(end)
        return end < len(self._text) and self._text[end] == "("

    def _starts_value(self, pos: int) -> bool:
        ch = self._text[pos]
        return (
            self._is_constant(pos)
            or self._is_function(pos)
            or ch in OPENING
            or _is_name_char(ch)
            or self.registry.find_operator(self._text, pos, Fixity.PREFIX) is not None
        )

    def _find_closing(self, start: int) -> int:
        level = 0
        for i in range(start, len(self._text)):
            if self._text[i] in OPENING:
                level += 1
            elif self._text[i] in CLOSING:
                level -= 1
                if level == 0:
                    return i
        self._error(MismatchedParentheses, "Mismatched parentheses", start)

    def _error(self, kind: type[ParseError], message: str, pos: int):
        raise kind(message, self._source, self._shift + pos)


def parse(text: str, settings: ParserSettings | None = None) -> Node | None:
    """Parse `text` into a canonicalized expression tree.

    Returns None for empty input. Variables met along the way are appended to
    `settings.variables`.
    """
    if settings is None:
        from exprtree.library.builtins import default_settings

        settings = default_settings()
    return ExpressionParser(settings).parse(text)
