"""
SRCINFO / flattened PKGBUILD Tokenizer.

Scans the literal variable-assignment subset of shell syntax emitted when a
PKGBUILD is flattened (``key=value``, ``key='value'``,
``key=([0]="a" [1]="b")``) without running a shell. The scanner is a state
machine: each state is a method that consumes input, may emit a token, and
returns the next state. Tokens are produced lazily, one at a time, so the
consumer drives the pace.

Anything that is not an assignment to a known metadata key (comments,
function bodies, unknown variables) is skipped line by line. A variable name
containing a character outside the identifier charset emits a single ERROR
token and ends the stream.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType

from pkgbuild_parser.core.errors import TokenizeError
from pkgbuild_parser.models.package import Arch

logger = logging.getLogger(__name__)

EOF = ""


class TokenKind(Enum):
    """Kinds of tokens produced by the lexer."""

    ERROR = auto()
    EOF = auto()
    END_SPLIT = auto()  # empty line between two package sections
    VALUE = auto()  # scalar value
    ARRAY_VALUE = auto()  # one array element
    ARRAY_END = auto()

    # metadata variables
    PKGNAME = auto()
    PKGVER = auto()
    PKGREL = auto()
    PKGDIR = auto()
    EPOCH = auto()
    PKGBASE = auto()
    PKGDESC = auto()
    ARCH = auto()
    URL = auto()
    LICENSE = auto()
    GROUPS = auto()
    DEPENDS = auto()
    OPTDEPENDS = auto()
    MAKEDEPENDS = auto()
    CHECKDEPENDS = auto()
    PROVIDES = auto()
    CONFLICTS = auto()
    REPLACES = auto()
    BACKUP = auto()
    OPTIONS = auto()
    INSTALL = auto()
    CHANGELOG = auto()
    SOURCE = auto()
    NOEXTRACT = auto()
    MD5SUMS = auto()
    SHA1SUMS = auto()
    SHA224SUMS = auto()
    SHA256SUMS = auto()
    SHA384SUMS = auto()
    SHA512SUMS = auto()
    VALIDPGPKEYS = auto()

    @property
    def is_variable(self) -> bool:
        return self not in _STRUCTURAL


_STRUCTURAL = frozenset(
    {
        TokenKind.ERROR,
        TokenKind.EOF,
        TokenKind.END_SPLIT,
        TokenKind.VALUE,
        TokenKind.ARRAY_VALUE,
        TokenKind.ARRAY_END,
    }
)

VARIABLES: MappingProxyType[str, TokenKind] = MappingProxyType(
    {kind.name.lower(): kind for kind in TokenKind if kind.is_variable}
)

# Keys that may carry an architecture suffix, e.g. source_x86_64
ARCH_SCOPED = frozenset(
    {
        TokenKind.SOURCE,
        TokenKind.MD5SUMS,
        TokenKind.SHA1SUMS,
        TokenKind.SHA224SUMS,
        TokenKind.SHA256SUMS,
        TokenKind.SHA384SUMS,
        TokenKind.SHA512SUMS,
        TokenKind.DEPENDS,
        TokenKind.MAKEDEPENDS,
        TokenKind.CHECKDEPENDS,
        TokenKind.OPTDEPENDS,
        TokenKind.PROVIDES,
        TokenKind.CONFLICTS,
        TokenKind.REPLACES,
    }
)

ARCH_LITERALS = frozenset(arch.value for arch in Arch)

_DOUBLE_QUOTE_ESCAPES = '"\\$`'


def lookup_variable(name: str) -> TokenKind | None:
    """Map an assignment name to its token kind, honoring ``<key>_<arch>``."""
    kind = VARIABLES.get(name)
    if kind is not None:
        return kind
    key, sep, arch = name.partition("_")
    if not sep:
        return None
    kind = VARIABLES.get(key)
    if kind in ARCH_SCOPED and arch in ARCH_LITERALS:
        return kind
    return None


def is_identifier_char(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


def _unescape_double_quoted(raw: str) -> str:
    out = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch == "\\" and i + 1 < len(raw) and raw[i + 1] in _DOUBLE_QUOTE_ESCAPES:
            out.append(raw[i + 1])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


@dataclass(frozen=True)
class Token:
    """A lexed token; for ERROR tokens ``value`` is the message."""

    kind: TokenKind
    value: str
    position: int

    @property
    def arch_scoped(self) -> bool:
        """True for a variable token written as ``<key>_<arch>``."""
        return self.kind in ARCH_SCOPED and self.value != self.kind.name.lower()

    def __str__(self):
        if self.kind is TokenKind.EOF:
            return "EOF"
        if self.kind is TokenKind.ERROR:
            return self.value
        if len(self.value) > 10:
            return f"{self.value[:10]!r}..."
        return repr(self.value)


StateFn = Callable[[], "StateFn | None"]


class Lexer:
    """
    Single-pass scanner over one input text.

    Iterating a Lexer yields its tokens; a Lexer cannot be iterated twice.
    """

    def __init__(self, text: str):
        self.text = text
        self.start = 0  # start of the pending token
        self.pos = 0  # current read position
        self._width = 0
        self._quote = ""
        self._pending: deque[Token] = deque()
        self._consumed = False

    def __iter__(self) -> Iterator[Token]:
        if self._consumed:
            raise TokenizeError("lexer already consumed; create a new one per input")
        self._consumed = True
        return self._run()

    def _run(self) -> Iterator[Token]:
        state: StateFn | None = self._lex_line
        while state is not None:
            state = state()
            while self._pending:
                yield self._pending.popleft()

    # ──────────────────────────────────────────────
    # Scanner primitives
    # ──────────────────────────────────────────────

    def _next(self) -> str:
        if self.pos >= len(self.text):
            self._width = 0
            return EOF
        ch = self.text[self.pos]
        self._width = 1
        self.pos += 1
        return ch

    def _peek(self) -> str:
        ch = self._next()
        self._backup()
        return ch

    def _backup(self) -> None:
        self.pos -= self._width

    def _ignore(self) -> None:
        self.start = self.pos

    def _emit(self, kind: TokenKind, value: str | None = None) -> None:
        if value is None:
            value = self.text[self.start : self.pos]
        self._pending.append(Token(kind, value, self.start))
        self.start = self.pos

    def _error(self, message: str) -> None:
        self._pending.append(Token(TokenKind.ERROR, message, self.start))
        return None

    # ──────────────────────────────────────────────
    # States
    # ──────────────────────────────────────────────

    def _lex_line(self) -> StateFn | None:
        """Scanning for an assignment at the start of a line."""
        ch = self._next()
        if ch == EOF:
            self._emit(TokenKind.EOF, "")
            return None
        if ch == "\n":
            self._emit(TokenKind.END_SPLIT, "")
            return self._lex_line
        if is_identifier_char(ch):
            self._backup()
            return self._lex_variable
        return self._skip_line

    def _lex_variable(self) -> StateFn | None:
        """Reading a variable name up to '='."""
        while True:
            ch = self._next()
            if is_identifier_char(ch):
                continue
            if ch == "=":
                self._backup()
                name = self.text[self.start : self.pos]
                kind = lookup_variable(name)
                if kind is None:
                    logger.debug(f"[LEXER] Skipping unknown variable {name!r}")
                    return self._skip_line
                self._emit(kind)
                self._next()
                self._ignore()
                return self._lex_value_kind
            if ch in (" ", "\t", "("):
                # function definition or command, not an assignment
                return self._skip_line
            if ch in ("\n", EOF):
                self._backup()
                return self._skip_line
            return self._error(f"invalid character {ch!r} in variable name")

    def _lex_value_kind(self) -> StateFn:
        """Deciding between an array and a scalar value."""
        ch = self._next()
        if ch == "(":
            self._ignore()
            return self._lex_array
        if ch in ("'", '"'):
            self._quote = ch
            self._ignore()
        else:
            self._quote = ""
            self._backup()
        return self._lex_scalar

    def _lex_scalar(self) -> StateFn:
        """
        Reading a scalar to end of line.

        A quoted scalar ends at a closing quote that is immediately followed
        by end of line or end of input; any other quote is part of the value.
        """
        while True:
            ch = self._next()
            if ch == EOF or (ch == "\n" and not self._quote):
                self._backup()
                break
            if ch == "\n" and self.pos - 2 >= self.start and self.text[self.pos - 2] == self._quote:
                self._backup()
                break

        raw = self.text[self.start : self.pos]
        if self._quote and raw.endswith(self._quote):
            raw = raw[:-1]
        if self._quote == '"':
            value = _unescape_double_quoted(raw)
        else:
            value = raw.replace("'\\''", "'")
        self._emit(TokenKind.VALUE, value)
        return self._skip_line

    def _lex_array(self) -> StateFn | None:
        """Reading array elements until ')'."""
        while True:
            ch = self._next()
            if ch == EOF:
                return self._error("unterminated array")
            if ch in (" ", "\t", "\n"):
                self._ignore()
                continue
            if ch == ")":
                self._emit(TokenKind.ARRAY_END, "")
                return self._skip_line
            if ch == "[":
                # index prefix: [0]=
                while (ch := self._next()) not in ("]", EOF):
                    pass
                if ch == EOF:
                    return self._error("unterminated array index")
                if self._peek() == "=":
                    self._next()
                self._ignore()
                continue
            if ch in ("'", '"'):
                self._quote = ch
                self._ignore()
            else:
                self._quote = ""
                self._backup()
                self._ignore()
            return self._lex_array_element

    def _lex_array_element(self) -> StateFn | None:
        """Reading one element: up to the first unescaped closing quote, or a bare word."""
        while True:
            ch = self._next()
            if ch == EOF:
                if not self._quote:
                    self._emit(TokenKind.ARRAY_VALUE)
                    return self._lex_array
                return self._error("unterminated array element")
            if not self._quote:
                if ch in (" ", "\t", "\n", ")"):
                    self._backup()
                    self._emit(TokenKind.ARRAY_VALUE)
                    return self._lex_array
                continue
            if ch == "\\" and self._quote == '"':
                self._next()
                continue
            if ch == self._quote:
                self._backup()
                raw = self.text[self.start : self.pos]
                value = _unescape_double_quoted(raw) if self._quote == '"' else raw
                self._emit(TokenKind.ARRAY_VALUE, value)
                self._next()
                self._ignore()
                return self._lex_array

    def _skip_line(self) -> StateFn:
        """Skipping everything up to and including the next newline."""
        while True:
            ch = self._next()
            if ch == "\n":
                self._ignore()
                return self._lex_line
            if ch == EOF:
                self._backup()
                self._ignore()
                return self._lex_line


def tokenize(text: str) -> Iterator[Token]:
    """Lazily tokenize ``text``. The returned iterator is single-use."""
    return iter(Lexer(text))


class TokenStream:
    """
    Pull reader over a token iterator.

    Turns ERROR tokens into TokenizeError and knows how to read a value as a
    scalar or as a list regardless of how it was written.
    """

    def __init__(self, tokens: Iterator[Token]):
        self._tokens = iter(tokens)

    def next(self) -> Token:
        token = next(self._tokens, None)
        if token is None:
            raise TokenizeError("unexpected end of token stream")
        if token.kind is TokenKind.ERROR:
            raise TokenizeError(token.value, token.position)
        return token

    def scalar(self) -> str:
        """
        Read the value of the assignment just named.

        An array assignment yields its first element; the rest are discarded.
        """
        token = self.next()
        match token.kind:
            case TokenKind.VALUE:
                return token.value
            case TokenKind.ARRAY_END:
                return ""
            case TokenKind.ARRAY_VALUE:
                while self.next().kind is not TokenKind.ARRAY_END:
                    pass
                return token.value
        raise TokenizeError(f"expected a value, got {token.kind.name}", token.position)

    def values(self) -> list[str]:
        """Read the value of the assignment just named as a list."""
        token = self.next()
        match token.kind:
            case TokenKind.VALUE:
                return [token.value] if token.value else []
            case TokenKind.ARRAY_END:
                return []
            case TokenKind.ARRAY_VALUE:
                values = [token.value]
                while (token := self.next()).kind is not TokenKind.ARRAY_END:
                    values.append(token.value)
                return values
        raise TokenizeError(f"expected a value, got {token.kind.name}", token.position)

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next()
            yield token
            if token.kind is TokenKind.EOF:
                return
