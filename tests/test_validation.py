"""
Tests for validation functions.

Run with: pytest tests/test_validation.py -v
"""
import pytest

from giaycung_api.core.errors import ValidationError
from giaycung_api.core.validation import (
    clean_string_list,
    default_if_blank,
    is_flag_set,
    parse_json_list,
    require_fields,
    safe_trim,
    to_number,
    validate_choice,
)


class TestToNumber:
    """Tests for loose number coercion."""

    def test_plain_numbers(self):
        assert to_number(3) == 3
        assert to_number(3.5) == 3.5
        assert to_number(" 12 ") == 12

    def test_integral_values_are_ints(self):
        """Integral floats come back as int so cells don't get a trailing .0"""
        assert isinstance(to_number(50000.0), int)
        assert isinstance(to_number("7"), int)

    def test_currency_noise_is_stripped(self):
        assert to_number("50000đ") == 50000
        assert to_number("-2.5 kg") == -2.5

    def test_unparseable_falls_back_to_default(self):
        assert to_number("") == 0
        assert to_number(None) == 0
        assert to_number("abc") == 0
        assert to_number("1.2.3") == 0
        assert to_number("-", default=7) == 7

    def test_bool_and_non_finite(self):
        assert to_number(True) == 0
        assert to_number(float("nan")) == 0
        assert to_number(float("inf"), default=1) == 1


class TestRequireFields:
    """Tests for required-field checks."""

    def test_all_present(self):
        require_fields({"name": "a", "phone": "1"}, ["name", "phone"])

    def test_lists_every_missing_field(self):
        with pytest.raises(ValidationError) as exc:
            require_fields({"name": "  ", "email": "x"}, ["name", "phone", "email"])
        assert exc.value.status_code == 400
        assert exc.value.fields == ["name", "phone"]
        assert exc.value.message == "Missing required fields: name, phone"

    def test_zero_is_present(self):
        require_fields({"quantity": 0}, ["quantity"])


class TestValidateChoice:
    def test_allowed(self):
        assert validate_choice("status", " pending ", ["pending", "completed"]) == "pending"

    def test_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_choice("status", "done", ["pending", "completed"])
        assert exc.value.fields == ["status"]
        assert "pending, completed" in exc.value.message

    def test_case_sensitive(self):
        with pytest.raises(ValidationError):
            validate_choice("status", "Pending", ["pending"])


class TestJsonCells:
    """Tests for JSON array cells (images, shoesJson)."""

    def test_parse_json_list(self):
        assert parse_json_list('[1, "a"]') == [1, "a"]
        assert parse_json_list(["x"]) == ["x"]

    @pytest.mark.parametrize("raw", ["", None, "not json", '{"a": 1}', "42", "[1,"])
    def test_parse_json_list_never_raises(self, raw):
        assert parse_json_list(raw) == []

    def test_clean_string_list(self):
        assert clean_string_list('[" a.jpg ", "", null, "b.jpg"]') == ["a.jpg", "b.jpg"]
        assert clean_string_list(["x", "  "]) == ["x"]
        assert clean_string_list("") == []


class TestSmallHelpers:
    def test_safe_trim(self):
        assert safe_trim(None) == ""
        assert safe_trim("  a ") == "a"
        assert safe_trim(5) == "5"

    def test_default_if_blank(self):
        assert default_if_blank("", "pending") == "pending"
        assert default_if_blank(" done ", "pending") == "done"

    @pytest.mark.parametrize("raw", ["1", "TRUE", "true", "yes", "Y", " 1 "])
    def test_flag_set(self, raw):
        assert is_flag_set(raw)

    @pytest.mark.parametrize("raw", ["", "0", "false", "no", None, "2"])
    def test_flag_not_set(self, raw):
        assert not is_flag_set(raw)
