"""
Lexer for Sign

Tokenizes Sign source code into a flat stream of tokens.

Features:
- Single-pass tokenization
- Leading tabs captured as INDENT tokens (blocks are resolved by layout)
- Position tracking (line, column, offset)
- Backtick strings, backslash characters, radix-prefixed numbers
- Whitespace-sensitive `|`: logical or vs absolute-value delimiters
"""

import logging
import string
from typing import List, Optional, Tuple

from .errors import LexError
from .token_types import TT, Tok

logger = logging.getLogger(__name__)

DIGITS = frozenset(string.digits)
IDENT_START = frozenset(string.ascii_letters + "_")
IDENT_CHARS = IDENT_START | DIGITS
WHITESPACE = frozenset(" \t\r\n")
OPENERS = frozenset("([{")
CLOSERS = frozenset(")]}")

RADIX_DIGITS = {
    "x": ("hexadecimal", frozenset(string.hexdigits)),
    "o": ("octal", frozenset(string.octdigits)),
    "b": ("binary", frozenset("01")),
}

# ============================================================================
# Lexer Implementation
# ============================================================================


class Lexer:
    """
    Sign lexer.

    Indentation is only captured here: a run of leading tabs becomes one
    INDENT token and every line terminator one NEWLINE token. Turning those
    into brackets is the job of the layout stage.
    """

    # Longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        "<=",
        ">=",
        "!=",
        "==",
        # Single-character operators
        ":",
        "?",
        ",",
        "~",
        ";",
        "&",
        "!",
        "<",
        "=",
        ">",
        "+",
        "-",
        "*",
        "/",
        "%",
        "^",
        "'",
        "#",
        "@",
        "$",
    ]

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []
        self.at_line_start = True

        # Explicit bracket depth, and the depth each open |...| group started at
        self.depth = 0
        self.abs_stack: List[int] = []

        # (offset, line, column) of the token being scanned
        self.start: Tuple[int, int, int] = (0, 1, 1)

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        self.mark()
        self.emit(TT.EOF, "")
        logger.debug("scanned %d tokens over %d lines", len(self.tokens), self.line)
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        if self.at_line_start:
            self.handle_indentation()
            return

        # Spaces and tabs inside a line only separate tokens
        if self.skip_whitespace():
            return

        self.mark()
        ch = self.peek()

        if ch in ("\n", "\r"):
            self.scan_newline()
            return

        if ch == "`":
            self.scan_string()
            return

        if ch == "\\":
            self.scan_char()
            return

        if ch in DIGITS:
            self.scan_number()
            return

        if ch in IDENT_START:
            self.scan_identifier()
            return

        if ch in OPENERS:
            self.advance()
            self.depth += 1
            self.emit(TT.OPEN, ch)
            return

        if ch in CLOSERS:
            self.advance()
            self.depth = max(0, self.depth - 1)
            # |...| groups opened inside the closed bracket can no longer close
            while self.abs_stack and self.abs_stack[-1] > self.depth:
                self.abs_stack.pop()
            self.emit(TT.CLOSE, ch)
            return

        if ch == "|":
            self.scan_pipe()
            return

        self.scan_operator()

    # ========================================================================
    # Indentation Handling
    # ========================================================================

    def handle_indentation(self):
        """
        Handle indentation at start of line.
        Emit one INDENT token carrying the leading tabs.
        """
        self.at_line_start = False
        self.mark()

        tabs = ""
        while self.peek() == "\t":
            tabs += self.advance()

        self.skip_whitespace()

        # Blank lines carry no indentation
        if self.at_end() or self.peek() in ("\n", "\r"):
            return

        # A backtick as first non-whitespace character starts a comment
        if self.peek() == "`":
            self.skip_comment()
            return

        if tabs:
            self.emit(TT.INDENT, tabs)

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_newline(self):
        """Scan newline: \\n, \\r\\n or \\r"""
        if self.peek() == "\r" and self.peek(1) == "\n":
            text = self.advance(2)
        else:
            text = self.advance()

        self.emit(TT.NEWLINE, text)
        self.new_line()
        self.at_line_start = True

    def scan_string(self):
        """Scan string literal: `...` on a single line"""
        self.advance()  # opening backtick

        while not self.at_end() and self.peek() not in ("`", "\n", "\r"):
            self.advance()

        if self.peek() != "`":
            raise self.error("Unterminated string literal")

        self.advance()  # closing backtick
        self.emit(TT.STRING, self.lexeme())

    def scan_char(self):
        """Scan character literal: backslash followed by exactly one character"""
        self.advance()  # backslash

        if self.at_end():
            raise self.error("Dangling backslash: character literal needs a character")

        ch = self.advance()

        # The terminator belongs to the literal, so the line keeps going
        if ch == "\n" or (ch == "\r" and self.peek() != "\n"):
            self.new_line()

        self.emit(TT.CHAR, self.lexeme())

    def scan_number(self):
        """Scan number literal"""
        if self.peek() == "0" and self.peek(1) in RADIX_DIGITS:
            name, digits = RADIX_DIGITS[self.peek(1)]
            self.advance(2)

            count = 0
            while self.peek() in digits:
                self.advance()
                count += 1

            if not count:
                raise self.error(f"Malformed {name} literal: no digits after prefix")

            self.check_number_suffix()
            self.emit(TT.NUMBER, self.lexeme())
            return

        # Integer part
        while self.peek() in DIGITS:
            self.advance()

        # Decimal part
        if self.peek() == "." and self.peek(1) in DIGITS:
            self.advance()
            while self.peek() in DIGITS:
                self.advance()

        # Exponent: e123 or e-123
        if self.peek() == "e":
            if self.peek(1) in DIGITS:
                self.advance()
            elif self.peek(1) == "-" and self.peek(2) in DIGITS:
                self.advance(2)

            while self.peek() in DIGITS:
                self.advance()

        self.check_number_suffix()
        self.emit(TT.NUMBER, self.lexeme())

    def check_number_suffix(self):
        if self.peek() in IDENT_CHARS:
            raise self.error("Invalid number suffix", self.lexeme() + self.peek())

    def scan_identifier(self):
        """Scan identifier or unit"""
        while self.peek() in IDENT_CHARS:
            self.advance()

        value = self.lexeme()
        self.emit(TT.UNIT if value == "_" else TT.IDENT, value)

    def scan_pipe(self):
        """
        Scan `|`.

        Whitespace (or a bracket boundary) on both sides makes it the logical
        or operator. Otherwise it closes the innermost |...| group opened at
        this bracket depth, or opens a new one.
        """
        prev = self.source[self.pos - 1] if self.pos > 0 else ""
        nxt = self.peek(1)
        space_before = prev == "" or prev in WHITESPACE
        left_free = space_before or prev in OPENERS
        right_free = nxt == "" or nxt in WHITESPACE or nxt in CLOSERS

        self.advance()

        if left_free and right_free:
            self.emit(TT.OPERATOR, "|")
            return

        last = self.tokens[-1] if self.tokens else None
        after_opener = last is not None and last.type == TT.OPEN and last.end == self.start[0]
        can_close = bool(self.abs_stack) and self.abs_stack[-1] == self.depth

        if not space_before and not after_opener and can_close:
            self.abs_stack.pop()
            self.emit(TT.CLOSE, "|")
        elif not right_free:
            self.abs_stack.append(self.depth)
            self.emit(TT.OPEN, "|")
        else:
            raise self.error("Stray '|': neither an operator nor an absolute-value delimiter")

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(TT.OPERATOR, op_str)
                return

        raise self.error(f"Unexpected character {self.peek()!r}")

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character, '' past the end"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return ""

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        result = self.source[self.pos:self.pos + n]
        self.pos += len(result)
        self.column += len(result)
        return result

    def new_line(self):
        self.line += 1
        self.column = 1

    def skip_whitespace(self) -> bool:
        """Skip spaces and tabs (not newlines), return True if any skipped"""
        skipped = False
        while self.peek() in (" ", "\t"):
            self.advance()
            skipped = True
        return skipped

    def skip_comment(self):
        """Skip comment until end of line"""
        while not self.at_end() and self.peek() not in ("\n", "\r"):
            self.advance()

    def mark(self):
        """Remember where the next token starts"""
        self.start = (self.pos, self.line, self.column)

    def lexeme(self) -> str:
        return self.source[self.start[0]:self.pos]

    def emit(self, token_type: TT, value: str):
        """Emit a token at the marked start position"""
        offset, line, column = self.start
        self.tokens.append(Tok(token_type, value, line, column, offset))

    def error(self, message: str, lexeme: Optional[str] = None) -> LexError:
        offset, line, column = self.start
        if lexeme is None:
            lexeme = self.lexeme() or self.peek() or None
        return LexError(message, line, column, lexeme)


def scan(source: str) -> List[Tok]:
    """Convenience function to tokenize source"""
    return Lexer(source).tokenize()
