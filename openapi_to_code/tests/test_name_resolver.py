#!/usr/bin/env python3

import pytest

from openapi_to_code.pipeline.analyzer.errors import NameExhaustionError
from openapi_to_code.pipeline.analyzer.name_resolver import NameRegistry
from openapi_to_code.pipeline.config import GeneratorConfig, NameStyle


class TestCanonicalize:
    """Raw name -> identifier conversion"""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("user_status", "UserStatus"),
            ("USER_STATUS", "UserStatus"),
            ("user-status", "UserStatus"),
            ("user.status", "UserStatus"),
            ("user status", "UserStatus"),
            ("userStatus", "UserStatus"),
            ("myAPIResponse", "MyAPIResponse"),
            ("123invalid", "_123invalid"),
            ("200", "_200"),
            ("-1", "Minus1"),
            ("+1", "Plus1"),
            ("a/b", "Ab"),
            ("", "Unknown"),
            ("   ", "Unknown"),
        ],
    )
    def test_pascal_case(self, raw, expected):
        assert NameRegistry().canonicalize(raw) == expected

    def test_none_uses_fallback(self):
        assert NameRegistry().canonicalize(None, fallback="Item") == "Item"

    def test_camel_case(self):
        registry = NameRegistry(style=NameStyle.CAMEL)
        assert registry.canonicalize("user_status") == "userStatus"
        assert registry.canonicalize("UserStatus") == "userStatus"

    def test_snake_case(self):
        registry = NameRegistry(style=NameStyle.SNAKE)
        assert registry.canonicalize("UserStatus") == "user_status"
        assert registry.canonicalize("user-status") == "user_status"

    def test_reserved_words_are_escaped(self):
        registry = NameRegistry(style=NameStyle.CAMEL)
        assert registry.canonicalize("class") == "@class"
        assert registry.canonicalize("string") == "@string"

    def test_pascal_case_never_hits_lowercase_keywords(self):
        assert NameRegistry().canonicalize("class") == "Class"

    def test_custom_reserved_words(self):
        registry = NameRegistry(reserved_words=["Type"])
        assert registry.canonicalize("type") == "@Type"

    @pytest.mark.parametrize(
        "raw",
        ["user_status", "myAPIResponse", "aB", "123invalid", "X", "__init__", "a.b-c d", "HTTPServer", "-5"],
    )
    @pytest.mark.parametrize("style", list(NameStyle))
    def test_idempotent(self, raw, style):
        registry = NameRegistry(style=style)
        canonical = registry.canonicalize(raw)
        assert registry.canonicalize(canonical) == canonical


class TestNaturalnessScore:
    """Scores used to pick the raw name that keeps the canonical identifier"""

    @pytest.mark.parametrize(
        "raw, canonical, expected",
        [
            ("Status", "Status", 0),
            ("status", "Status", 1),
            ("STATUS", "Status", 1),
            ("id", "Id", 1),
            ("_id", "Id", 11),
            ("user-id", "UserId", 11),
            ("__meta__", "Meta", 14),
            ("user id", "UserId", 11),
        ],
    )
    def test_scores(self, raw, canonical, expected):
        assert NameRegistry.naturalness_score(raw, canonical) == expected

    def test_special_characters_score_at_least_eleven(self):
        assert NameRegistry.naturalness_score("_id", "Id") >= 11


class TestDetectNamingStyle:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("user_name", "SnakeCase"),
            ("user-name", "KebabCase"),
            ("user.name", "DotNotation"),
            ("userName", "CamelCase"),
            ("UserName", "PascalCase"),
            ("username", "Lowercase"),
            ("USERNAME", "Uppercase"),
            ("", None),
        ],
    )
    def test_detect(self, raw, expected):
        assert NameRegistry.detect_naming_style(raw) == expected


class TestCollisions:
    """Collision groups and differentiated names"""

    def test_case_only_collision(self):
        registry = NameRegistry()
        assert registry.allocate(["status", "Status"]) == ["StatusLowercase", "Status"]

    def test_first_wins_ties(self):
        registry = NameRegistry()
        assert registry.allocate(["status", "status", "status"]) == ["Status", "StatusLowercase", "Status2"]

    def test_leading_symbol_expansion(self):
        registry = NameRegistry()
        assert registry.allocate(["_id", "id"]) == ["UnderscoreId", "Id"]

    def test_full_symbol_expansion(self):
        registry = NameRegistry()
        assert registry.allocate(["my_string", "myString"]) == ["MyUnderscoreString", "MyString"]

    def test_style_suffix(self):
        registry = NameRegistry()
        assert registry.allocate(["Status", "STATUS"]) == ["Status", "StatusUppercase"]

    def test_numeric_suffix_after_other_strategies(self):
        registry = NameRegistry()
        registry.reserve("Foo")
        registry.reserve("FooPascalCase")
        assert registry.allocate_one("Foo") == "Foo2"

    def test_numeric_suffix_skips_taken_numbers(self):
        registry = NameRegistry()
        for name in ("Foo", "FooPascalCase", "Foo2", "Foo3"):
            registry.reserve(name)
        assert registry.allocate_one("Foo") == "Foo4"

    def test_exhaustion_raises(self):
        registry = NameRegistry(max_numeric_suffix=2)
        for name in ("Foo", "FooPascalCase", "Foo2"):
            registry.reserve(name)
        with pytest.raises(NameExhaustionError) as excinfo:
            registry.allocate_one("Foo")
        assert excinfo.value.raw_name == "Foo"
        assert excinfo.value.canonical_name == "Foo"

    def test_differentiated_name_never_steals_a_natural_name(self):
        # "Status2" must stay free for the schema literally named Status2
        registry = NameRegistry()
        names = registry.allocate(["status", "status", "status", "Status2", "Status"])
        assert names[3] == "Status2"
        assert names[4] == "Status"
        assert len(set(names)) == len(names)

    def test_resolve_collision_reports_winner_and_others(self):
        registry = NameRegistry()
        resolution = registry.resolve_collision(["_id", "id", "ID"])
        assert resolution.canonical == "Id"
        assert resolution.winner == "id"
        assert resolution.names == ["UnderscoreId", "Id", "IdUppercase"]
        assert resolution.others == [("_id", "UnderscoreId"), ("ID", "IdUppercase")]
        assert registry.origin("Id") == "id"

    def test_resolve_collision_with_taken_canonical(self):
        registry = NameRegistry()
        registry.reserve("Id")
        resolution = registry.resolve_collision(["id"])
        assert resolution.winner is None
        assert resolution.names == ["IdLowercase"]

    def test_determinism(self):
        raws = ["user_name", "userName", "UserName", "USER_NAME", "user-name"]
        first = NameRegistry().allocate(raws)
        second = NameRegistry().allocate(raws)
        assert first == second
        assert first[2] == "UserName"
        assert len(set(first)) == len(first)

    def test_snake_style_suffixes_use_separator(self):
        registry = NameRegistry(style=NameStyle.SNAKE)
        assert registry.allocate(["status", "Status"]) == ["status", "status_pascal_case"]


class TestScopes:
    def test_scope_is_independent(self):
        registry = NameRegistry()
        registry.allocate_one("Order")
        scope = registry.scope()
        assert scope.allocate_one("order") == "Order"
        assert scope.origin("Order") == "order"
        assert registry.origin("Order") == "Order"
        assert not scope.is_allocated("Missing")

    def test_member_named_like_enclosing_type_gets_value_suffix(self):
        scope = NameRegistry().scope(enclosing_name="Name")
        assert scope.allocate(["name", "id"]) == ["NameValue", "Id"]

    def test_scope_keeps_settings(self):
        registry = NameRegistry(style=NameStyle.SNAKE, reserved_words=["type"])
        scope = registry.scope("owner")
        assert scope.canonicalize("Type") == "@type"
        assert scope.allocate_one("owner") == "owner_value"

    def test_reserved_names_collide(self):
        scope = NameRegistry().scope("Dog")
        scope.reserve("Name")
        assert scope.allocate_one("Name") == "NamePascalCase"

    def test_from_config(self):
        config = GeneratorConfig(name_style=NameStyle.CAMEL, reserved_words=["foo"])
        registry = NameRegistry.from_config(config)
        assert registry.canonicalize("foo") == "@foo"
        assert registry.canonicalize("Bar_baz") == "barBaz"


if __name__ == "__main__":
    pytest.main([__file__])
