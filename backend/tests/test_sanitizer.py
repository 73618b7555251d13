"""
Quillpost Backend — Body Sanitizer Unit Tests
===============================================

What we test:
    ✅ Sensitive keys redacted at any mapping depth, whatever the value type
    ✅ Non-sensitive data and key order untouched, input never mutated
    ✅ Lists passed through verbatim (including mappings inside them)
    ✅ Self-references replaced by the circular marker
    ✅ Serialization fallback string for values JSON cannot encode
"""

import json

from quillpost.sanitizer import (
    REDACTED,
    UNSERIALIZABLE_BODY,
    sanitize_body,
    serialize_for_log,
)


class TestRedaction:

    def test_password_redacted(self):
        result = sanitize_body({"username": "ada", "password": "secret123"})
        assert result == {"username": "ada", "password": REDACTED}

    def test_all_sensitive_keys_redacted(self):
        body = {
            "password": "p",
            "token": "t",
            "secret": "s",
            "authorization": "Bearer x",
            "creditCard": "4111111111111111",
            "cvv": 123,
            "name": "kept",
        }
        result = sanitize_body(body)
        for key in ("password", "token", "secret", "authorization", "creditCard", "cvv"):
            assert result[key] == REDACTED
        assert result["name"] == "kept"

    def test_match_is_case_sensitive(self):
        """Only the exact key names are sensitive."""
        result = sanitize_body({"Password": "a", "creditcard": "b", "TOKEN": "c"})
        assert result == {"Password": "a", "creditcard": "b", "TOKEN": "c"}

    def test_redacted_regardless_of_value_type(self):
        """Falsy values and nested mappings under a sensitive key are still replaced."""
        result = sanitize_body({"password": "", "token": None, "secret": {"inner": "x"}})
        assert result == {"password": REDACTED, "token": REDACTED, "secret": REDACTED}

    def test_nested_password_redacted_at_any_depth(self):
        body = {"user": {"profile": {"auth": {"password": "deep-secret", "hint": "pet"}}}}
        result = sanitize_body(body)
        assert result["user"]["profile"]["auth"] == {"password": REDACTED, "hint": "pet"}
        assert "deep-secret" not in json.dumps(result)

    def test_input_not_mutated(self):
        body = {"password": "p", "nested": {"token": "t"}}
        sanitize_body(body)
        assert body == {"password": "p", "nested": {"token": "t"}}

    def test_scalars_pass_through(self):
        assert sanitize_body("plain") == "plain"
        assert sanitize_body(42) == 42
        assert sanitize_body(None) is None


class TestListPassthrough:
    """Lists are deliberately not walked (see DESIGN.md)."""

    def test_list_value_unchanged(self):
        body = {"tags": ["a", "b"], "ids": [1, 2, 3]}
        assert sanitize_body(body) == body

    def test_mappings_inside_lists_keep_sensitive_keys(self):
        body = {"users": [{"name": "ada", "password": "leaked"}]}
        result = sanitize_body(body)
        assert result["users"] == [{"name": "ada", "password": "leaked"}]
        assert result["users"] is body["users"]

    def test_top_level_list_unchanged(self):
        body = [{"password": "x"}]
        assert sanitize_body(body) is body


class TestCircularReferences:

    def test_self_reference_replaced_by_marker(self):
        body = {"name": "loop"}
        body["self"] = body
        result = sanitize_body(body)
        assert result == {"name": "loop", "self": {"[Circular]": True}}

    def test_indirect_cycle_terminates(self):
        parent = {"name": "parent"}
        child = {"name": "child", "parent": parent}
        parent["child"] = child
        result = sanitize_body(parent)
        assert result["child"]["parent"] == {"[Circular]": True}
        assert result["child"]["name"] == "child"

    def test_shared_sibling_mapping_is_not_circular(self):
        shared = {"value": 1}
        result = sanitize_body({"a": shared, "b": shared})
        assert result == {"a": {"value": 1}, "b": {"value": 1}}


class TestSerializeForLog:

    def test_serializes_sanitized_body(self):
        line = serialize_for_log({"email": "a@b.c", "password": "p"})
        assert json.loads(line) == {"email": "a@b.c", "password": REDACTED}

    def test_circular_mapping_serializes_with_marker(self):
        body = {}
        body["me"] = body
        assert "[Circular]" in serialize_for_log(body)

    def test_unencodable_value_falls_back(self):
        assert serialize_for_log({"blob": object()}) == UNSERIALIZABLE_BODY

    def test_self_referencing_list_falls_back(self):
        """Lists are not walked, so their cycles reach json and fail there."""
        items = []
        items.append(items)
        assert serialize_for_log({"items": items}) == UNSERIALIZABLE_BODY
