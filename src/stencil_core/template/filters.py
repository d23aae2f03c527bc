"""Built-in template filters.

Every filter takes the input value and a parameter value (nil when the
template gives none) and returns a new value. Filters never touch the
execution context; string filters coerce their input with ``to_str()``.
"""

import datetime
import json
import math
import random
import re
from typing import TYPE_CHECKING
from urllib.parse import quote_plus

from stencil_core.errors import create_error

from .value import Value

if TYPE_CHECKING:
    from .registry import FilterFunction, FilterRegistry


def filter_escape(value: Value, param: Value) -> Value:
    """Replace the HTML special characters ``& < > " '`` with entities."""
    output = value.to_str().replace("&", "&amp;")
    output = output.replace(">", "&gt;").replace("<", "&lt;")
    output = output.replace('"', "&quot;").replace("'", "&#39;")
    return Value(output)


def filter_safe(value: Value, param: Value) -> Value:
    """Mark a value as safe. Output is never auto-escaped, so this is the identity."""
    return value


def filter_escapejs(value: Value, param: Value) -> Value:
    """Escape a string for use inside JavaScript string literals.

    Letters, spaces and ``/`` are kept; everything else becomes ``\\uXXXX``.
    The two-character sequences ``\\r``, ``\\n`` and ``\\'`` in the input
    are escaped as the character they stand for.
    """
    text = value.to_str()
    out: list[str] = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\" and i + 1 < len(text) and text[i + 1] in "rn'":
            out.append("\\u%04X" % ord({"r": "\r", "n": "\n", "'": "'"}[text[i + 1]]))
            i += 2
            continue
        if char.isascii() and (char.isalpha() or char in " /"):
            out.append(char)
        else:
            out.append("\\u%04X" % ord(char))
        i += 1
    return Value("".join(out))


def filter_add(value: Value, param: Value) -> Value:
    """Add numbers (float if either side is a float), otherwise concatenate strings."""
    if value.is_number() and param.is_number():
        if value.is_float() or param.is_float():
            return Value(value.to_float() + param.to_float())
        return Value(value.to_int() + param.to_int())
    return Value(value.to_str() + param.to_str())


def filter_addslashes(value: Value, param: Value) -> Value:
    output = value.to_str().replace("\\", "\\\\")
    output = output.replace('"', '\\"').replace("'", "\\'")
    return Value(output)


def filter_capfirst(value: Value, param: Value) -> Value:
    if value.length() <= 0:
        return Value("")
    text = value.to_str()
    return Value(text[0].upper() + text[1:])


def filter_center(value: Value, param: Value) -> Value:
    """Center in a field of ``param`` characters; extra padding goes to the left."""
    width = param.to_int()
    size = value.length()
    if width <= size:
        return value
    spaces = width - size
    left = spaces // 2 + spaces % 2
    right = spaces // 2
    return Value(" " * left + value.to_str() + " " * right)


def filter_cut(value: Value, param: Value) -> Value:
    return Value(value.to_str().replace(param.to_str(), ""))


def _format_temporal(name: str, value: Value, param: Value, types: tuple[type, ...]) -> Value:
    moment = value.raw
    if not isinstance(moment, types):
        raise create_error(
            "FILTER_TYPE_MISMATCH",
            filter_name=name,
            expected=" or ".join(t.__name__ for t in types),
            detail=f"Got {value.kind.value}",
        )
    fmt = param.to_str()
    if not fmt:
        return Value(moment.isoformat())
    return Value(moment.strftime(fmt))


def filter_date(value: Value, param: Value) -> Value:
    """Format a date or datetime with a ``strftime`` pattern.

    Args:
        value: ``datetime.date`` or ``datetime.datetime``
        param: strftime format; ISO 8601 when omitted

    Returns:
        Formatted string

    Raises:
        StencilError(FILTER_TYPE_MISMATCH): If the input is not a date
    """
    return _format_temporal("date", value, param, (datetime.date,))


def filter_time(value: Value, param: Value) -> Value:
    """Format a time or datetime with a ``strftime`` pattern (ISO 8601 when omitted)."""
    return _format_temporal("time", value, param, (datetime.time, datetime.datetime))


def filter_default(value: Value, param: Value) -> Value:
    """Return ``param`` if the value is falsy."""
    return value if value.is_true() else param


def filter_default_if_none(value: Value, param: Value) -> Value:
    """Return ``param`` only if the value is nil."""
    return param if value.is_nil() else value


def filter_divisibleby(value: Value, param: Value) -> Value:
    divisor = param.to_int()
    if divisor == 0:
        return Value(False)
    return Value(value.to_int() % divisor == 0)


def filter_first(value: Value, param: Value) -> Value:
    if value.can_slice() and value.length() > 0:
        return value.index(0)
    return Value("")


def filter_last(value: Value, param: Value) -> Value:
    if value.can_slice() and value.length() > 0:
        return value.index(value.length() - 1)
    return Value("")


def filter_floatformat(value: Value, param: Value) -> Value:
    """Round to ``param`` decimal places.

    Without a parameter (or with a non-positive one) trailing zeros are
    dropped: whole numbers render as integers, others with ``abs(param)``
    places (one place by default).

    Args:
        value: Number (or numeric string)
        param: Decimal places; negative means "at most, trim if whole"

    Returns:
        Formatted string, or an integer for trimmed whole numbers
    """
    number = value.to_float()
    decimals = -1 if param.is_nil() else param.to_int()
    trim = not param.is_number()
    if decimals <= 0:
        decimals = -decimals
        trim = True

    if trim and math.isfinite(number) and number == int(number):
        return Value(int(number))
    return Value("%.*f" % (decimals, number))


def filter_get_digit(value: Value, param: Value) -> Value:
    """Digit at position ``param`` counted from the right (1 is the last digit)."""
    position = param.to_int()
    text = value.to_str()
    if position <= 0 or position > len(text):
        return value
    digit = text[len(text) - position]
    if not digit.isdigit():
        return value
    return Value(int(digit))


IRI_SAFE_CHARS = "/#%[]=:;$&()+,!?*@'~"


def filter_iriencode(value: Value, param: Value) -> Value:
    """Percent-encode everything except the characters allowed in IRIs."""
    return Value(
        "".join(c if c in IRI_SAFE_CHARS else quote_plus(c) for c in value.to_str())
    )


def filter_join(value: Value, param: Value) -> Value:
    if not value.can_slice():
        return value
    items = (value.index(i).to_str() for i in range(value.length()))
    return Value(param.to_str().join(items))


def filter_json(value: Value, param: Value) -> Value:
    """Serialize value to JSON string.

    Args:
        value: Value to serialize
        param: Optional indent width

    Returns:
        JSON string representation (unknown host types use ``str()``)
    """
    indent = param.to_int() if param.is_number() else None
    return Value(json.dumps(value.raw, indent=indent, default=str))


def filter_length(value: Value, param: Value) -> Value:
    """Length of a string, sequence or mapping; 0 for anything else."""
    return Value(value.length())


def filter_length_is(value: Value, param: Value) -> Value:
    return Value(value.length() == param.to_int())


def filter_linebreaks(value: Value, param: Value) -> Value:
    """Single newlines become ``<br />``, blank lines separate ``<p>`` paragraphs."""
    if value.length() == 0:
        return value

    lines = value.to_str().split("\n")
    out: list[str] = []
    opened = False
    for idx, line in enumerate(lines):
        if not opened:
            out.append("<p>")
            opened = True
        out.append(line)
        if idx < len(lines) - 1 and line.strip():
            if not lines[idx + 1].strip():
                out.append("</p>")
                opened = False
            else:
                out.append("<br />")
    if opened:
        out.append("</p>")
    return Value("".join(out))


def filter_linebreaksbr(value: Value, param: Value) -> Value:
    return Value(value.to_str().replace("\n", "<br />"))


def filter_linenumbers(value: Value, param: Value) -> Value:
    lines = value.to_str().split("\n")
    return Value("\n".join(f"{idx}. {line}" for idx, line in enumerate(lines, start=1)))


def filter_ljust(value: Value, param: Value) -> Value:
    return Value(value.to_str().ljust(param.to_int()))


def filter_rjust(value: Value, param: Value) -> Value:
    return Value(value.to_str().rjust(param.to_int()))


def filter_lower(value: Value, param: Value) -> Value:
    return Value(value.to_str().lower())


def filter_upper(value: Value, param: Value) -> Value:
    return Value(value.to_str().upper())


def filter_make_list(value: Value, param: Value) -> Value:
    return Value(list(value.to_str()))


PHONE_KEYPAD = {
    **dict.fromkeys("abc", "2"),
    **dict.fromkeys("def", "3"),
    **dict.fromkeys("ghi", "4"),
    **dict.fromkeys("jkl", "5"),
    **dict.fromkeys("mno", "6"),
    **dict.fromkeys("pqrs", "7"),
    **dict.fromkeys("tuv", "8"),
    **dict.fromkeys("wxyz", "9"),
}


def filter_phone2numeric(value: Value, param: Value) -> Value:
    """Translate phone-word letters to keypad digits (1-800-COLLECT → 1-800-2655328)."""
    return Value("".join(PHONE_KEYPAD.get(c.lower(), c) for c in value.to_str()))


def filter_pluralize(value: Value, param: Value) -> Value:
    """Plural suffix for a number.

    ``param`` is empty (suffix "s"), a plural suffix ("es") or a
    "singular,plural" pair ("y,ies").

    Raises:
        StencilError(FILTER_TYPE_MISMATCH): If the input is not a number
        StencilError(FILTER_ARGUMENT): On more than two suffixes
    """
    if not value.is_number():
        raise create_error(
            "FILTER_TYPE_MISMATCH", filter_name="pluralize", expected="number"
        )

    plural = value.to_int() != 1
    if param.length() == 0:
        return Value("s" if plural else "")

    endings = param.to_str().split(",")
    if len(endings) > 2:
        raise create_error(
            "FILTER_ARGUMENT",
            filter_name="pluralize",
            detail="You cannot pass more than 2 arguments to filter 'pluralize'",
        )
    if len(endings) == 1:
        return Value(endings[0] if plural else "")
    return Value(endings[1] if plural else endings[0])


def filter_random(value: Value, param: Value) -> Value:
    if not value.can_slice() or value.length() <= 0:
        return value
    return value.index(random.randrange(value.length()))


def filter_removetags(value: Value, param: Value) -> Value:
    """Remove the comma-separated list of tag names (opening and closing tags)."""
    text = value.to_str()
    for tag in param.to_str().split(","):
        tag = tag.strip()
        if tag:
            text = re.sub(rf"</?{re.escape(tag)}(?:\s[^>]*)?/?>", "", text)
    return Value(text.strip())


_TAG_RE = re.compile(r"<[^>]*?>")


def filter_striptags(value: Value, param: Value) -> Value:
    return Value(_TAG_RE.sub("", value.to_str()).strip())


def filter_slice(value: Value, param: Value) -> Value:
    """Slice with a ``"from:to"`` parameter; either bound may be omitted.

    Raises:
        StencilError(FILTER_ARGUMENT): If the parameter has no ':'
    """
    bounds = param.to_str().split(":")
    if len(bounds) != 2:
        raise create_error(
            "FILTER_ARGUMENT",
            filter_name="slice",
            detail="Slice string must have the format 'from:to' "
            "[from/to can be omitted, but the ':' is required]",
        )
    if not value.can_slice():
        return value

    size = value.length()
    start = min(Value(bounds[0]).to_int(), size)
    stop = size
    requested = Value(bounds[1]).to_int()
    if bounds[1].strip() and start <= requested <= size:
        stop = requested
    return value.slice(max(start, 0), stop)


def filter_stringformat(value: Value, param: Value) -> Value:
    """printf-style formatting: ``{{ 3.14159|stringformat:"%.2f" }}``.

    Raises:
        StencilError(FILTER_ARGUMENT): If the format does not fit the value
    """
    try:
        return Value(param.to_str() % (value.raw,))
    except (TypeError, ValueError) as e:
        raise create_error("FILTER_ARGUMENT", filter_name="stringformat", detail=str(e)) from e


def filter_title(value: Value, param: Value) -> Value:
    if not value.is_string():
        return Value("")
    return Value(value.to_str().lower().title())


def filter_truncatechars(value: Value, param: Value) -> Value:
    """Cut to ``param`` characters including a trailing "..."."""
    text = value.to_str()
    size = param.to_int()
    if size >= len(text):
        return value
    if size >= 3:
        return Value(text[: size - 3] + "...")
    return Value(text[: max(size, 0)])


def filter_truncatewords(value: Value, param: Value) -> Value:
    words = value.to_str().split()
    count = param.to_int()
    if count <= 0:
        return Value("")
    out = words[:count]
    if count < len(words):
        out.append("...")
    return Value(" ".join(out))


def filter_urlencode(value: Value, param: Value) -> Value:
    return Value(quote_plus(value.to_str()))


_URLIZE_RE = re.compile(
    r"(?P<url>(?:https?://|www\.|\w+\.(?:com|net|org|info|biz|de)/)[^\s<>\"]*)"
    r"|(?P<email>\w[\w.+-]*@\w+(?:\.\w+)*\.\w{2,4})"
)


def _urlize(text: str, autoescape: bool, limit: int) -> str:
    def shorten(title: str) -> str:
        if limit > 3 and len(title) > limit:
            return title[: limit - 3] + "..."
        return title

    def replace(match: re.Match[str]) -> str:
        email = match.group("email")
        if email:
            return f'<a href="mailto:{email}">{shorten(email)}</a>'

        raw = match.group("url")
        href = filter_iriencode(Value(raw), Value()).to_str()
        if not href.startswith("http"):
            href = f"http://{href}"
        title = shorten(raw)
        if autoescape:
            title = filter_escape(Value(title), Value()).to_str()
        return f'<a href="{href}" rel="nofollow">{title}</a>'

    return _URLIZE_RE.sub(replace, text)


def filter_urlize(value: Value, param: Value) -> Value:
    """Turn URLs and e-mail addresses into links.

    A boolean ``param`` switches escaping of the link text (on by default).
    """
    autoescape = param.raw if param.is_bool() else True
    return Value(_urlize(value.to_str(), autoescape, -1))


def filter_urlizetrunc(value: Value, param: Value) -> Value:
    """Like ``urlize`` but link texts longer than ``param`` are shortened."""
    return Value(_urlize(value.to_str(), True, param.to_int()))


def filter_wordcount(value: Value, param: Value) -> Value:
    return Value(len(value.to_str().split()))


def filter_wordwrap(value: Value, param: Value) -> Value:
    """Put every ``param`` words on their own line."""
    words = value.to_str().split()
    width = param.to_int()
    if width <= 0:
        return value
    lines = [" ".join(words[i : i + width]) for i in range(0, len(words), width)]
    return Value("\n".join(lines))


def filter_yesno(value: Value, param: Value) -> Value:
    """Map true/false/nil to "yes"/"no"/"maybe" or to custom choices.

    Args:
        value: Value to test
        param: Optional "yes,no[,maybe]" choices

    Returns:
        The chosen string

    Raises:
        StencilError(FILTER_ARGUMENT): On fewer than 2 or more than 3 choices
    """
    choices = ["yes", "no", "maybe"]
    custom = param.to_str()
    if custom:
        parts = custom.split(",")
        if not 2 <= len(parts) <= 3:
            raise create_error(
                "FILTER_ARGUMENT",
                filter_name="yesno",
                detail=f"Expected 2 or 3 comma-separated options (got: '{custom}')",
            )
        choices[: len(parts)] = parts

    if value.is_nil():
        return Value(choices[2])
    return Value(choices[0] if value.is_true() else choices[1])


def filter_float(value: Value, param: Value) -> Value:
    return Value(value.to_float())


def filter_integer(value: Value, param: Value) -> Value:
    return Value(value.to_int())


# Registry of available filters
FILTERS: dict[str, "FilterFunction"] = {
    "escape": filter_escape,
    "safe": filter_safe,
    "escapejs": filter_escapejs,
    "add": filter_add,
    "addslashes": filter_addslashes,
    "capfirst": filter_capfirst,
    "center": filter_center,
    "cut": filter_cut,
    "date": filter_date,
    "default": filter_default,
    "default_if_none": filter_default_if_none,
    "divisibleby": filter_divisibleby,
    "first": filter_first,
    "floatformat": filter_floatformat,
    "get_digit": filter_get_digit,
    "iriencode": filter_iriencode,
    "join": filter_join,
    "json": filter_json,
    "last": filter_last,
    "length": filter_length,
    "length_is": filter_length_is,
    "linebreaks": filter_linebreaks,
    "linebreaksbr": filter_linebreaksbr,
    "linenumbers": filter_linenumbers,
    "ljust": filter_ljust,
    "lower": filter_lower,
    "make_list": filter_make_list,
    "phone2numeric": filter_phone2numeric,
    "pluralize": filter_pluralize,
    "random": filter_random,
    "removetags": filter_removetags,
    "rjust": filter_rjust,
    "slice": filter_slice,
    "stringformat": filter_stringformat,
    "striptags": filter_striptags,
    "time": filter_time,
    "title": filter_title,
    "truncatechars": filter_truncatechars,
    "truncatewords": filter_truncatewords,
    "upper": filter_upper,
    "urlencode": filter_urlencode,
    "urlize": filter_urlize,
    "urlizetrunc": filter_urlizetrunc,
    "wordcount": filter_wordcount,
    "wordwrap": filter_wordwrap,
    "yesno": filter_yesno,
    "float": filter_float,
    "integer": filter_integer,
}


def register_builtin_filters(registry: "FilterRegistry") -> None:
    """Register every built-in filter."""
    for name, function in FILTERS.items():
        registry.register(name, function)
