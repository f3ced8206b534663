"""Unit tests for the rule catalog.

Tests cover:
- Each catalog constructor's pass/fail behaviour and message
- Rule codes and names
- RuleSet construction, lookup and immutability
"""

import pytest

from formengine.errors import UnknownFieldError
from formengine.rules import (
    Rule,
    RuleSet,
    email,
    is_absolute_url,
    max_length,
    min_length,
    password,
    phone,
    required,
    url,
)
from formengine.types import FieldName, RuleCode


class TestRequired:
    """Test the required rule."""

    def test_empty_value_fails(self):
        """Should reject the empty string."""
        assert required("First name").validate("") is False

    def test_whitespace_only_fails(self):
        """Should reject values that are blank after trimming."""
        assert required("First name").validate("   \t") is False

    def test_non_blank_passes(self):
        """Should accept any value with a non-space character."""
        assert required("First name").validate(" x ") is True

    def test_message_uses_label(self):
        """Should name the field in its message."""
        rule = required("Phone number")
        assert rule.message == "Phone number is required"
        assert rule.code == RuleCode.REQUIRED
        assert rule.name == "required"


class TestLengthBounds:
    """Test min_length and max_length."""

    def test_min_length_boundary(self):
        """Should accept exactly n characters and reject n - 1."""
        rule = min_length(2, "First name")
        assert rule.validate("Jo") is True
        assert rule.validate("J") is False

    def test_min_length_counts_whitespace(self):
        """Should count raw characters, not trimmed ones."""
        assert min_length(2).validate("  ") is True

    def test_min_length_message(self):
        """Should include the bound and label, defaulting label to Field."""
        assert min_length(2, "Last name").message == "Last name must be at least 2 characters long"
        assert min_length(3).message == "Field must be at least 3 characters long"
        assert min_length(3).code == RuleCode.TOO_SHORT

    def test_max_length_boundary(self):
        """Should accept exactly n characters and reject n + 1."""
        rule = max_length(3)
        assert rule.validate("abc") is True
        assert rule.validate("abcd") is False

    def test_max_length_message(self):
        """Should include the bound in its message."""
        rule = max_length(50, "Email")
        assert rule.message == "Email must be no more than 50 characters long"
        assert rule.code == RuleCode.TOO_LONG


class TestEmail:
    """Test the email rule."""

    @pytest.mark.parametrize("value", ["a@b.com", "first.last@sub.example.org", "x+y@d.io"])
    def test_valid_addresses(self, value):
        """Should accept a single @ with a dotted domain."""
        assert email().validate(value) is True

    @pytest.mark.parametrize(
        "value",
        ["", "plain", "a@b", "a@@b.com", "a b@c.com", "@b.com", "a@.", "a@b.com "],
    )
    def test_invalid_addresses(self, value):
        """Should reject missing parts, spaces and extra @ signs."""
        assert email().validate(value) is False

    def test_message(self):
        """Should use the fixed email message."""
        assert email().message == "Please enter a valid email address"


class TestPassword:
    """Test the strict password rule."""

    def test_lowercase_and_digits_only_fails(self):
        """Should reject a password with no uppercase and no special character."""
        assert password().validate("abc12345") is False

    def test_compliant_password_passes(self):
        """Should accept a password meeting every constraint."""
        assert password().validate("Abc123!@") is True

    @pytest.mark.parametrize(
        "value",
        [
            "Abc12!@",     # too short
            "ABC123!@",    # no lowercase
            "abc123!@",    # no uppercase
            "Abcdef!@",    # no digit
            "Abc12345",    # no special
            "Abc123!@#",   # '#' outside the allowed set
            "Abc 123!@",   # space outside the allowed set
        ],
    )
    def test_each_missing_constraint_fails(self, value):
        """Should reject a password that breaks any single constraint."""
        assert password().validate(value) is False

    def test_non_ascii_digits_rejected(self):
        """Should only treat ASCII 0-9 as digits."""
        assert password().validate("\u0661\u0662\u0663\u0664\u0665\u0666\u0667\u0668\u0669\u0660") is False

    def test_message(self):
        """Should describe all requirements."""
        assert "at least 8 characters" in password().message


class TestPhone:
    """Test the phone rule."""

    @pytest.mark.parametrize("value", ["1234567890", "+1 (555) 123-4567", "555-555-5555"])
    def test_valid_numbers(self, value):
        """Should accept ten or more digits, spaces, hyphens or parentheses."""
        assert phone().validate(value) is True

    @pytest.mark.parametrize("value", ["", "12345", "+123456789", "12345abcde", "++1234567890"])
    def test_invalid_numbers(self, value):
        """Should reject short values, letters and repeated plus signs."""
        assert phone().validate(value) is False

    def test_unicode_whitespace_separators(self):
        """Should accept non-breaking spaces between digit groups."""
        assert phone().validate("123\u00a0456\u00a07890") is True

    def test_non_ascii_digits_rejected(self):
        """Should only count ASCII digits."""
        assert phone().validate("\u0661\u0662\u0663\u0664\u0665\u0666\u0667\u0668\u0669\u0660") is False


class TestUrl:
    """Test the url rule."""

    def test_empty_is_valid(self):
        """Should treat an empty value as valid (optional field)."""
        assert url().validate("") is True

    def test_plain_text_is_invalid(self):
        """Should reject text without a scheme."""
        assert url().validate("not a url") is False

    def test_https_url_is_valid(self):
        """Should accept an absolute https URL."""
        assert url().validate("https://example.com") is True

    @pytest.mark.parametrize(
        "value",
        [
            "http://localhost:8080/path?q=1#frag",
            "ftp://files.example.com/pub",
            "mailto:someone@example.com",
            "  https://example.com  ",
        ],
    )
    def test_other_absolute_urls(self, value):
        """Should accept other well-formed absolute URLs."""
        assert is_absolute_url(value) is True

    @pytest.mark.parametrize(
        "value",
        [
            "example.com",
            "http://",
            "https://exa mple.com",
            "http://example.com:99999",
            "http://example.com:port",
            "1http://example.com",
            "http://[::1",
        ],
    )
    def test_malformed_urls(self, value):
        """Should reject missing schemes and hosts, bad ports and bad hosts."""
        assert is_absolute_url(value) is False

    @pytest.mark.parametrize(
        "value",
        [
            "http:example.com",
            "https:/example.com/path",
            "http://user:pw@example.com",
            "http://[::1]:8080/",
            "http://example.com:",
        ],
    )
    def test_host_after_scheme(self, value):
        """Should take the host from the text after the scheme, slashes optional."""
        assert is_absolute_url(value) is True

    @pytest.mark.parametrize(
        "value",
        [
            "https://exa<mple.com",
            "https://exa>mple.com",
            "https://exa^mple.com",
            "https://exa|mple.com",
            "https://exa%mple.com",
            "http://exa\tmple.com",
            "http:",
        ],
    )
    def test_forbidden_host_characters(self, value):
        """Should reject hosts containing forbidden code points or no host at all."""
        assert is_absolute_url(value) is False


class TestRuleSet:
    """Test RuleSet construction and lookup."""

    def test_lookup_by_enum_and_string(self):
        """Should resolve both FieldName members and wire names."""
        rules = RuleSet({FieldName.EMAIL: [required("Email"), email()]})
        assert rules.rules_for("email") == rules.rules_for(FieldName.EMAIL)
        assert [r.name for r in rules.rules_for("email")] == ["required", "email"]

    def test_missing_field_has_no_rules(self):
        """Should return an empty tuple for fields without rules."""
        assert RuleSet().rules_for(FieldName.WEBSITE) == ()

    def test_unknown_field_rejected_at_construction(self):
        """Should fail fast on keys outside the field set."""
        with pytest.raises(UnknownFieldError):
            RuleSet({"middleName": [required("Middle name")]})

    def test_unknown_field_rejected_on_lookup(self):
        """Should fail fast when looking up an unknown field."""
        with pytest.raises(UnknownFieldError):
            RuleSet().rules_for("middleName")

    def test_source_mutation_does_not_leak(self):
        """Should copy rule lists so later edits to the source have no effect."""
        source = [required("Email")]
        rules = RuleSet({"email": source})
        source.append(email())
        assert len(rules.rules_for("email")) == 1

    def test_fields_and_contains(self):
        """Should report configured fields in field order."""
        rules = RuleSet({"website": [url()], "firstName": [required("First name")]})
        assert rules.fields == (FieldName.FIRST_NAME, FieldName.WEBSITE)
        assert "website" in rules
        assert FieldName.PHONE not in rules

    def test_custom_rule(self):
        """Should accept hand-built rules alongside catalog ones."""
        no_digits = Rule(validate=lambda v: not any(c.isdigit() for c in v), message="No digits")
        rules = RuleSet({"firstName": [no_digits]})
        assert rules.rules_for("firstName")[0].name == "custom"
