"""
Tests for label sanitization, global flattening and variable substitution.

Focus Areas:
1. Sanitization idempotence and empty names
2. Flattening of nested global trees into dotted paths
3. Substitution of local and global tokens, fail-soft on everything else
"""

import pytest

from flowcanvas.templates.variables import (
    MISSING,
    find_variable_tokens,
    flatten_globals,
    format_primitive,
    get_global_variable_names,
    lookup_path,
    sanitize_label,
    substitute_variables,
)


class TestSanitizeLabel:
    """Test deriving variable names from labels."""

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("Concept", "Concept"),
            ("My Label 2", "MyLabel2"),
            ("snake_case-name!", "snakecasename"),
            ("héllo", "hllo"),
            ("!!! ---", ""),
            ("", ""),
        ],
    )
    def test_strips_non_alphanumerics(self, label, expected):
        assert sanitize_label(label) == expected

    @pytest.mark.parametrize("label", ["a b-c", "Already", "__", "x.y.z 9"])
    def test_idempotent(self, label):
        assert sanitize_label(sanitize_label(label)) == sanitize_label(label)


class TestFlattenGlobals:
    """Test flattening global trees."""

    def test_nested_objects(self):
        paths = flatten_globals({"user": {"name": "Alex"}, "apiKey": "k"})
        assert sorted(paths) == ["apiKey", "user.name"]

    def test_prefixed_names(self):
        names = get_global_variable_names({"user": {"name": "Alex"}, "apiKey": "k"})
        assert sorted(names) == ["global.apiKey", "global.user.name"]

    def test_arrays_and_nulls_are_leaves(self):
        paths = flatten_globals({"items": [{"a": 1}], "nothing": None})
        assert sorted(paths) == ["items", "nothing"]

    def test_empty_objects_contribute_nothing(self):
        assert flatten_globals({"empty": {}, "deep": {"er": {}}}) == []

    def test_non_object_root(self):
        assert flatten_globals([1, 2]) == []
        assert flatten_globals(None) == []


class TestLookupPath:
    """Test safe nested lookup."""

    def test_nested_value(self):
        assert lookup_path({"a": {"b": {"c": 3}}}, "a.b.c") == 3

    def test_missing_segment(self):
        assert lookup_path({"a": {}}, "a.b") is MISSING

    def test_traversing_into_scalar(self):
        assert lookup_path({"a": "text"}, "a.length") is MISSING

    def test_list_index(self):
        assert lookup_path({"items": ["x", "y"]}, "items.1") == "y"
        assert lookup_path({"items": ["x"]}, "items.5") is MISSING

    def test_empty_path(self):
        assert lookup_path({"a": 1}, "") is MISSING

    def test_falsy_values_found(self):
        store = {"zero": 0, "no": False, "blank": ""}
        assert lookup_path(store, "zero") == 0
        assert lookup_path(store, "no") is False
        assert lookup_path(store, "blank") == ""

    def test_dotted_key_as_whole_path(self):
        assert lookup_path({"a.b": "x"}, "a.b") == "x"

    def test_whole_key_wins_over_nested_walk(self):
        store = {"a.b": "whole", "a": {"b": "nested"}}
        assert lookup_path(store, "a.b") == "whole"

    def test_dotted_key_below_top_level(self):
        store = {"user": {"first.name": "Ann"}, "items": [{"x.y": 1}]}
        assert lookup_path(store, "user.first.name") == "Ann"
        assert lookup_path(store, "items.0.x.y") == 1

    def test_falls_back_when_longer_key_dead_ends(self):
        store = {"a.b": {}, "a": {"b": {"c": 3}}}
        assert lookup_path(store, "a.b.c") == 3


class TestFormatPrimitive:
    @pytest.mark.parametrize(
        "value,expected",
        [("s", "s"), (1, "1"), (1.5, "1.5"), (2.0, "2"), (True, "true"), (False, "false")],
    )
    def test_primitives(self, value, expected):
        assert format_primitive(value) == expected

    @pytest.mark.parametrize("value", [None, [1], {"a": 1}, MISSING])
    def test_non_primitives(self, value):
        assert format_primitive(value) is None

    @pytest.mark.parametrize(
        "value,expected",
        [
            (1e-7, "1e-7"),
            (1.5e-10, "1.5e-10"),
            (1e-5, "0.00001"),
            (1.5e-5, "0.000015"),
            (1e-6, "0.000001"),
            (1e21, "1e+21"),
            (1.5e300, "1.5e+300"),
            (1e20, "100000000000000000000"),
            (-2.5e-8, "-2.5e-8"),
        ],
    )
    def test_floats_read_as_json_numbers(self, value, expected):
        assert format_primitive(value) == expected


class TestSubstituteVariables:
    """Test the substitution engine."""

    def test_empty_text(self):
        assert substitute_variables("", {"a": "b"}, {"x": 1}) == ""

    @pytest.mark.parametrize(
        "text", ["plain text", "cost: 5 $", "$ alone", "price $-1", "line\nbreaks"]
    )
    def test_no_tokens_is_noop(self, text):
        assert substitute_variables(text, {"a": "b"}, {"a": "b"}) == text

    def test_unknown_local_unchanged(self):
        assert substitute_variables("$Foo", {}, {}) == "$Foo"

    def test_local_substitution(self):
        result = substitute_variables(
            "Combine $Concept and $Audience",
            {"Concept": "Explain X", "Audience": "Simple"},
            {},
        )
        assert result == "Combine Explain X and Simple"

    def test_repeated_token(self):
        assert substitute_variables("$A-$A", {"A": "x"}, {}) == "x-x"

    def test_global_object_leaf_unchanged(self):
        assert substitute_variables("$global.a", {}, {"a": {"b": 1}}) == "$global.a"

    def test_global_primitive_leaf(self):
        assert substitute_variables("$global.a.b", {}, {"a": {"b": 1}}) == "1"

    def test_global_missing_unchanged(self):
        assert substitute_variables("$global.missingKey", {}, {}) == "$global.missingKey"

    def test_global_array_unchanged(self):
        assert substitute_variables("$global.items", {}, {"items": [1, 2]}) == "$global.items"

    def test_global_boolean_and_string(self):
        store = {"flag": True, "user": {"name": "Alex"}}
        assert (
            substitute_variables("$global.user.name: $global.flag", {}, store)
            == "Alex: true"
        )

    def test_global_not_read_from_locals(self):
        """A ``global.`` token resolves only against the global store."""
        result = substitute_variables("$global.x", {"global.x": "local"}, {})
        assert result == "$global.x"

    def test_trailing_dot_is_part_of_token(self):
        """``[\\w.]`` includes dots, so a sentence-ending period joins the token."""
        assert substitute_variables("Hi $Name.", {"Name": "Ann"}, {}) == "Hi $Name."
        assert substitute_variables("Hi $Name!", {"Name": "Ann"}, {}) == "Hi Ann!"

    def test_empty_local_value_substitutes(self):
        assert substitute_variables("[$Empty]", {"Empty": ""}, {}) == "[]"

    def test_values_not_rescanned(self):
        result = substitute_variables("$A", {"A": "$B", "B": "nope"}, {})
        assert result == "$B"

    def test_every_listed_global_substitutes(self):
        """Each path offered for hinting resolves when used in text."""
        store = {"a.b": "x", "user": {"first.name": "Ann", "age": 30}}
        for name in get_global_variable_names(store):
            assert substitute_variables(f"${name}", {}, store) != f"${name}"
        assert substitute_variables("$global.a.b", {}, store) == "x"


class TestFindVariableTokens:
    def test_tokens_in_order(self):
        assert find_variable_tokens("$a and $global.b.c, $a") == ["a", "global.b.c", "a"]

    def test_empty(self):
        assert find_variable_tokens("") == []
