"""
Metakernel parser: the text side of kernel management.

A metakernel is a SPICE text kernel whose data section names the kernels to
furnish plus arbitrary variables:

    \\begindata
      PATH_SYMBOLS    = ( 'KERNELS' )
      PATH_VALUES     = ( '/data/kernels' )
      KERNELS_TO_LOAD = ( '$KERNELS/lsk/naif0012.tls'
                          '$KERNELS/spk/de440s.bsp' )
    \\begintext

Parsing is a small hand-written lexer rather than a stack of regular
expressions, so single-quoted strings may safely contain whitespace, `=`,
`(` and `)`:

    extract  ->  normalize  ->  split lines  ->  assignments  ->  resolve paths

Strings are single-quoted with no escapes. Bare tokens are numbers when they
parse fully as a numeric literal (SPICE's Fortran-style `D` exponent
included), otherwise symbols kept as strings. Quoting always wins.
"""
from __future__ import annotations

from typing import Iterator, List, Optional, Union

from .errors import MalformedMetakernelError
from .schema import FieldTable, FieldValue, Number, ParsedMetakernel, Scalar

BEGIN_DATA = "\\begindata"
SECTION_MARKER = "\\"

KERNELS_TO_LOAD = "KERNELS_TO_LOAD"
PATH_SYMBOLS = "PATH_SYMBOLS"
PATH_VALUES = "PATH_VALUES"

_DIGITS = "0123456789"
_LINE_BREAKS = "\r\n"
_QUOTE = "'"
_ARRAY_SEPARATORS = ","
_NAME_STOPS = "'(),=+"


# =============================================================================
# Lexing
# =============================================================================


def extract_data_section(text: str) -> Optional[str]:
    """Return the text between `\\begindata` and the next backslash.

    Returns None when there is no data section. A section with no closing
    marker runs to the end of the text.
    """
    start = text.find(BEGIN_DATA)
    if start == -1:
        return None
    start += len(BEGIN_DATA)
    end = text.find(SECTION_MARKER, start)
    if end == -1:
        end = len(text)
    return text[start:end]


def _starts_assignment(section: str, i: int) -> bool:
    """True if the next non-blank text from i opens a `NAME =` or `NAME +=`."""
    n = len(section)
    while i < n and section[i].isspace():
        i += 1
    start = i
    while i < n and not section[i].isspace() and section[i] not in _NAME_STOPS:
        i += 1
    if i == start:
        return False
    while i < n and section[i] in " \t":
        i += 1
    if i < n and section[i] == "+":
        i += 1
    return i < n and section[i] == "="


def _count_line_breaks(text: str) -> int:
    return text.count("\n") + text.count("\r") - text.count("\r\n")


def _fold(section: str) -> tuple[str, List[int]]:
    # Returns the folded text and, for each of its lines, the source line it
    # starts on. Line 0 is the remainder of the \begindata line itself.
    out: List[str] = []
    starts = [0]
    source_line = 0
    in_quote = False
    depth = 0
    i = 0
    n = len(section)
    while i < n:
        ch = section[i]
        i += 1
        if ch in _LINE_BREAKS:
            if ch == "\r" and i < n and section[i] == "\n":
                ch = "\r\n"
                i += 1
            source_line += 1
            if depth and not _starts_assignment(section, i):
                out.append(" ")
                continue
            # An unclosed array ends where the next assignment begins
            depth = 0
            in_quote = False
            out.append(ch)
            starts.append(source_line)
        elif in_quote:
            if ch == _QUOTE:
                in_quote = False
            out.append(ch)
        elif ch == _QUOTE:
            in_quote = True
            out.append(ch)
        elif ch == "(":
            depth += 1
            out.append(ch)
        elif ch == ")":
            depth = max(depth - 1, 0)
            out.append(ch)
        elif ch == "=" and not depth:
            out.append("= ")
            skip_start = i
            while i < n and section[i].isspace():
                i += 1
            source_line += _count_line_breaks(section[skip_start:i])
        else:
            out.append(ch)
    return "".join(out), starts


def normalize_data_section(section: str) -> str:
    """Fold every assignment onto a single logical line.

    Whitespace after an `=` collapses to one space, and line breaks inside a
    parenthesized array become spaces. An array still open when the next
    line starts a new `NAME =` assignment ends at that line break. Quoted
    text is copied verbatim; outside an array a line break also closes an
    unterminated quote. Normalizing an already normalized section returns it
    unchanged.
    """
    return _fold(section)[0]


def split_array_tokens(body: str) -> List[str]:
    """Split the inside of an array literal into raw element tokens.

    Elements are separated by whitespace or commas; a single-quoted substring
    is atomic and keeps its quotes so parse_scalar still sees it as a string.
    """
    tokens: List[str] = []
    current: List[str] = []
    in_quote = False
    for ch in body:
        if in_quote:
            current.append(ch)
            if ch == _QUOTE:
                in_quote = False
        elif ch == _QUOTE:
            current.append(ch)
            in_quote = True
        elif ch.isspace() or ch in _ARRAY_SEPARATORS:
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(ch)
    if current:
        tokens.append("".join(current))
    return tokens


def _logical_lines(section: str) -> Iterator[tuple[int, str]]:
    # Numbered by the source line each logical line starts on
    folded, starts = _fold(section)
    lines = folded.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    for number, line in zip(starts, lines):
        if line.strip():
            yield number, line


# =============================================================================
# Values
# =============================================================================


def _scan_digits(token: str, i: int) -> int:
    while i < len(token) and token[i] in _DIGITS:
        i += 1
    return i


def parse_number(token: str) -> Optional[Number]:
    """Parse a complete numeric literal, or return None.

    Grammar: [+-] (digits [. [digits]] | . digits) [(e|E|d|D) [+-] digits].
    Literals without a fraction or exponent are ints.
    """
    n = len(token)
    i = 0
    if i < n and token[i] in "+-":
        i += 1
    int_end = _scan_digits(token, i)
    has_digits = int_end > i
    i = int_end
    is_float = False
    if i < n and token[i] == ".":
        is_float = True
        frac_end = _scan_digits(token, i + 1)
        has_digits = has_digits or frac_end > i + 1
        i = frac_end
    if not has_digits:
        return None
    if i < n and token[i] in "eEdD":
        is_float = True
        i += 1
        if i < n and token[i] in "+-":
            i += 1
        exp_end = _scan_digits(token, i)
        if exp_end == i:
            return None
        i = exp_end
    if i != n:
        return None
    if is_float:
        return float(token.replace("d", "e").replace("D", "e"))
    return int(token)


def parse_scalar(token: str) -> Scalar:
    """Classify one value token.

    A quoted token is a string with its quotes stripped, whatever it
    contains. A bare token is a number if it parses as one, otherwise the
    raw token is kept as a symbol string.
    """
    if len(token) >= 2 and token[0] == _QUOTE and token[-1] == _QUOTE:
        return token[1:-1]
    number = parse_number(token)
    if number is None:
        return token
    return number


def parse_value(token: str) -> FieldValue:
    """Parse the right-hand side of an assignment (scalar or array)."""
    if token.startswith("("):
        body = token[1:]
        if body.endswith(")"):
            body = body[:-1]
        return [parse_scalar(element) for element in split_array_tokens(body)]
    return parse_scalar(token)


def _as_list(value: FieldValue) -> List[Scalar]:
    if isinstance(value, list):
        return list(value)
    return [value]


def _as_text(value: Scalar) -> str:
    if isinstance(value, str):
        return value
    return str(value)


# =============================================================================
# Assignments
# =============================================================================


def parse_data_section(section: str) -> FieldTable:
    """Parse a raw data section into its field table.

    `NAME = VALUE` assigns (last assignment wins); `NAME += VALUE` appends to
    the existing value. Raises MalformedMetakernelError for a line that is
    not an assignment.
    """
    fields: FieldTable = {}
    for number, line in _logical_lines(section):
        name, sep, token = line.partition("=")
        name = name.strip()
        append = name.endswith("+")
        if append:
            name = name[:-1].rstrip()
        if not sep or not name:
            raise MalformedMetakernelError(number, line)

        value = parse_value(token.strip())
        if append and name in fields:
            fields[name] = _as_list(fields[name]) + _as_list(value)
        else:
            fields[name] = value
    return fields


def resolve_kernel_paths(fields: FieldTable) -> Optional[List[str]]:
    """Resolve `$SYMBOL` placeholders in KERNELS_TO_LOAD.

    Each PATH_SYMBOLS/PATH_VALUES pair is applied in array order, replacing
    every occurrence of `$SYMBOL` in every path. Without both symbol arrays
    the paths are returned verbatim; without KERNELS_TO_LOAD, None.
    """
    kernels = fields.get(KERNELS_TO_LOAD)
    if kernels is None:
        return None
    paths = [_as_text(path) for path in _as_list(kernels)]

    symbols = fields.get(PATH_SYMBOLS)
    values = fields.get(PATH_VALUES)
    if symbols is None or values is None:
        return paths

    pairs = [
        ("$" + _as_text(symbol), _as_text(value))
        for symbol, value in zip(_as_list(symbols), _as_list(values))
    ]
    resolved = []
    for path in paths:
        for placeholder, value in pairs:
            path = path.replace(placeholder, value)
        resolved.append(path)
    return resolved


def parse_metakernel(
    text: Union[str, bytes, bytearray, memoryview],
) -> Optional[ParsedMetakernel]:
    """Parse metakernel text (or UTF-8 bytes).

    Returns None when the input has no `\\begindata` section, so callers can
    fall back to treating the buffer as a binary kernel.
    """
    if isinstance(text, memoryview):
        text = text.tobytes()
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8", errors="replace")

    section = extract_data_section(text)
    if section is None:
        return None

    fields = parse_data_section(section)
    return ParsedMetakernel(paths=resolve_kernel_paths(fields), fields=fields)
