"""Unit tests for built-in filters."""

import datetime
import json

import pytest

from stencil_core.errors import StencilError
from stencil_core.template import FILTERS, Value


def apply(name: str, value: object, param: object = None) -> object:
    """Call a built-in filter directly and unwrap the result."""
    return FILTERS[name](Value(value), Value(param)).raw


class TestStringFilters:
    """Tests for text transforming filters."""

    @pytest.mark.parametrize(
        "name,value,param,expected",
        [
            ("upper", "abc", None, "ABC"),
            ("lower", "ABC", None, "abc"),
            ("capfirst", "hello world", None, "Hello world"),
            ("capfirst", "", None, ""),
            ("title", "hELLO wORLD", None, "Hello World"),
            ("title", 5, None, ""),
            ("cut", "a b c", " ", "abc"),
            ("addslashes", "it's \"x\"", None, "it\\'s \\\"x\\\""),
            ("center", "ab", 6, "  ab  "),
            ("center", "ab", 5, "  ab "),
            ("center", "abc", 2, "abc"),
            ("ljust", "ab", 4, "ab  "),
            ("rjust", "ab", 4, "  ab"),
            ("make_list", "abc", None, ["a", "b", "c"]),
            ("phone2numeric", "1-800-COLLECT", None, "1-800-2655328"),
            ("wordcount", "one two  three", None, 3),
            ("linebreaksbr", "a\nb", None, "a<br />b"),
            ("linenumbers", "a\nb", None, "1. a\n2. b"),
            ("striptags", " <b>bold</b> text ", None, "bold text"),
            ("removetags", "<b>x</b><i>y</i>", "b", "x<i>y</i>"),
            ("truncatechars", "Hello world", 8, "Hello..."),
            ("truncatechars", "Hello", 10, "Hello"),
            ("truncatechars", "Hello", 2, "He"),
            ("truncatewords", "a b c d", 2, "a b ..."),
            ("truncatewords", "a b", 5, "a b"),
            ("wordwrap", "a b c d e", 2, "a b\nc d\ne"),
        ],
    )
    def test_transform(self, name, value, param, expected):
        """Test each filter against a known input."""
        assert apply(name, value, param) == expected

    def test_escape(self):
        """Test HTML special characters become entities."""
        assert apply("escape", "<a href=\"x\">'&'</a>") == (
            "&lt;a href=&quot;x&quot;&gt;&#39;&amp;&#39;&lt;/a&gt;"
        )

    def test_safe_is_identity(self):
        """Test safe returns its input."""
        assert apply("safe", "<b>") == "<b>"

    def test_escapejs(self):
        """Test non-letters become unicode escapes."""
        assert apply("escapejs", "a b/c\n<") == "a b/c\\u000A\\u003C"
        assert apply("escapejs", "\\n") == "\\u000A"

    def test_linebreaks(self):
        """Test paragraphs and line breaks."""
        assert apply("linebreaks", "a\nb\n\nc") == "<p>a<br />b</p><p>c</p>"
        assert apply("linebreaks", "") == ""

    def test_stringformat(self):
        """Test printf-style formatting and bad formats."""
        assert apply("stringformat", 3.14159, "%.2f") == "3.14"
        assert apply("stringformat", 7, "%03d") == "007"
        with pytest.raises(StencilError) as exc_info:
            apply("stringformat", "x", "%d")
        assert exc_info.value.code == "FILTER_ARGUMENT"


class TestNumericFilters:
    """Tests for number filters."""

    def test_add(self):
        """Test numeric addition and string concatenation."""
        assert apply("add", 1, 2) == 3
        assert apply("add", 1, 2.5) == 3.5
        assert apply("add", "a", "b") == "ab"
        assert apply("add", "a", 1) == "a1"

    def test_divisibleby(self):
        """Test divisibility, with zero never dividing."""
        assert apply("divisibleby", 21, 7) is True
        assert apply("divisibleby", 20, 7) is False
        assert apply("divisibleby", 5, 0) is False

    @pytest.mark.parametrize(
        "value,param,expected",
        [
            (34.23234, None, "34.2"),
            (34.0, None, 34),
            (34.26, 3, "34.260"),
            (34.0, 3, "34.000"),
            (34.23234, -3, "34.232"),
            (34.0, -3, 34),
            ("34.5", None, "34.5"),
        ],
    )
    def test_floatformat(self, value, param, expected):
        """Test rounding and trimming of whole numbers."""
        assert apply("floatformat", value, param) == expected

    def test_get_digit(self):
        """Test digits are counted from the right."""
        assert apply("get_digit", 123456789, 2) == 8
        assert apply("get_digit", 123, 0) == 123
        assert apply("get_digit", 123, 9) == 123

    def test_conversions(self):
        """Test float and integer coercion filters."""
        assert apply("float", "2.5") == 2.5
        assert apply("integer", "7") == 7
        assert apply("integer", "x") == 0

    def test_pluralize(self):
        """Test suffixes for singular and plural counts."""
        assert apply("pluralize", 1) == ""
        assert apply("pluralize", 2) == "s"
        assert apply("pluralize", 2, "es") == "es"
        assert apply("pluralize", 1, "y,ies") == "y"
        assert apply("pluralize", 0, "y,ies") == "ies"

    def test_pluralize_errors(self):
        """Test non-numbers and too many suffixes are rejected."""
        with pytest.raises(StencilError) as exc_info:
            apply("pluralize", "two")
        assert exc_info.value.code == "FILTER_TYPE_MISMATCH"
        with pytest.raises(StencilError) as exc_info:
            apply("pluralize", 2, "a,b,c")
        assert exc_info.value.code == "FILTER_ARGUMENT"


class TestContainerFilters:
    """Tests for sequence and mapping filters."""

    def test_first_last(self):
        """Test first/last of sequences and strings, empty string otherwise."""
        assert apply("first", [1, 2, 3]) == 1
        assert apply("last", "abc") == "c"
        assert apply("first", []) == ""
        assert apply("last", 5) == ""

    def test_join(self):
        """Test items are stringified and joined."""
        assert apply("join", [1, "a", None], "-") == "1-a-"
        assert apply("join", 5, ",") == 5

    def test_length(self):
        """Test lengths."""
        assert apply("length", [1, 2]) == 2
        assert apply("length", {"a": 1}) == 1
        assert apply("length", 12) == 0
        assert apply("length_is", "abc", 3) is True

    @pytest.mark.parametrize(
        "value,param,expected",
        [
            ("hello", "1:3", "el"),
            ("hello", ":2", "he"),
            ("hello", "2:", "llo"),
            ([1, 2, 3, 4], "1:", [2, 3, 4]),
            ([1, 2], "0:9", [1, 2]),
        ],
    )
    def test_slice(self, value, param, expected):
        """Test from:to slicing with omitted bounds."""
        assert apply("slice", value, param) == expected

    def test_slice_requires_colon(self):
        """Test a parameter without ':' is rejected."""
        with pytest.raises(StencilError) as exc_info:
            apply("slice", "hello", "2")
        assert exc_info.value.code == "FILTER_ARGUMENT"

    def test_random(self):
        """Test a random element is drawn from the input."""
        assert apply("random", [1, 2, 3]) in (1, 2, 3)
        assert apply("random", []) == []

    def test_json(self):
        """Test JSON serialization with optional indent."""
        assert json.loads(apply("json", {"a": [1, None]})) == {"a": [1, None]}
        assert apply("json", [1], 2) == "[\n  1\n]"
        assert apply("json", datetime.date(2024, 1, 2)) == '"2024-01-02"'


class TestDefaultFilters:
    """Tests for default / default_if_none / yesno."""

    def test_default(self):
        """Test falsy values are replaced."""
        assert apply("default", "", "x") == "x"
        assert apply("default", 0, "x") == "x"
        assert apply("default", "v", "x") == "v"

    def test_default_if_none(self):
        """Test only nil is replaced."""
        assert apply("default_if_none", None, "x") == "x"
        assert apply("default_if_none", "", "x") == ""

    def test_yesno(self):
        """Test default and custom choices."""
        assert apply("yesno", True) == "yes"
        assert apply("yesno", 0) == "no"
        assert apply("yesno", None) == "maybe"
        assert apply("yesno", None, "y,n") == "maybe"
        assert apply("yesno", None, "y,n,m") == "m"
        assert apply("yesno", False, "y,n") == "n"

    def test_yesno_bad_choices(self):
        """Test 1 or 4 choices are rejected."""
        for choices in ("one", "a,b,c,d"):
            with pytest.raises(StencilError) as exc_info:
                apply("yesno", True, choices)
            assert exc_info.value.code == "FILTER_ARGUMENT"


class TestDateFilters:
    """Tests for date and time."""

    def test_date(self):
        """Test strftime formatting and the ISO default."""
        day = datetime.date(2024, 3, 9)
        assert apply("date", day, "%d.%m.%Y") == "09.03.2024"
        assert apply("date", day) == "2024-03-09"
        assert apply("date", datetime.datetime(2024, 3, 9, 8, 5), "%H:%M") == "08:05"

    def test_time(self):
        """Test times and datetimes are accepted."""
        assert apply("time", datetime.time(14, 30), "%H:%M") == "14:30"
        assert apply("time", datetime.time(14, 30)) == "14:30:00"

    def test_type_mismatch(self):
        """Test non-temporal input is rejected."""
        with pytest.raises(StencilError) as exc_info:
            apply("date", "2024-03-09", "%Y")
        assert exc_info.value.code == "FILTER_TYPE_MISMATCH"
        with pytest.raises(StencilError):
            apply("time", datetime.date(2024, 3, 9))


class TestUrlFilters:
    """Tests for URL filters."""

    def test_urlencode(self):
        """Test query-string encoding."""
        assert apply("urlencode", "a b&c/d") == "a+b%26c%2Fd"

    def test_iriencode(self):
        """Test IRI-safe characters are kept."""
        assert apply("iriencode", "/path?q=a b") == "/path?q=a+b"

    def test_urlize(self):
        """Test URLs and e-mail addresses become links."""
        assert apply("urlize", "see http://example.com now") == (
            'see <a href="http://example.com" rel="nofollow">http://example.com</a> now'
        )
        assert apply("urlize", "www.example.com") == (
            '<a href="http://www.example.com" rel="nofollow">www.example.com</a>'
        )
        assert apply("urlize", "mail a@b.org") == 'mail <a href="mailto:a@b.org">a@b.org</a>'

    def test_urlizetrunc(self):
        """Test long link texts are shortened."""
        assert apply("urlizetrunc", "http://example.com/long/path", 15) == (
            '<a href="http://example.com/long/path" rel="nofollow">http://examp...</a>'
        )


class TestFiltersInTemplates:
    """Tests for filters applied through templates."""

    def test_chain(self, render):
        """Test a realistic chain."""
        assert render('{{ names|join:", "|upper }}', names=["ada", "bob"]) == "ADA, BOB"

    def test_default_with_missing_variable(self, render):
        """Test default covers unbound names."""
        assert render('{{ missing|default:"n/a" }}') == "n/a"

    def test_escape_output(self, render):
        """Test output is only escaped on request."""
        assert render("{{ html }}|{{ html|escape }}", html="<b>") == "<b>|&lt;b&gt;"

    def test_type_mismatch_is_located(self, render):
        """Test filter type errors carry the template position."""
        with pytest.raises(StencilError) as exc_info:
            render("line\n{{ x|date:'%Y' }}", x="nope")
        error = exc_info.value
        assert error.code == "FILTER_TYPE_MISMATCH"
        assert (error.template, error.line, error.column) == ("<string>", 2, 6)
