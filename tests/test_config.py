"""Tests for the declaration variants in config."""

import pytest

from config import (
    ExplicitResource,
    InlineStack,
    LiteralContext,
    TupleResource,
    UrlStack,
    display_name,
    resource_declaration,
    stack_declaration,
)


class TestDisplayName:
    def test_plain_string_unchanged(self) -> None:
        assert display_name("Bucket") == "Bucket"

    def test_keyword_colon_is_dropped(self) -> None:
        assert display_name(":prod") == "prod"

    def test_no_case_or_whitespace_changes(self) -> None:
        assert display_name(" My Stack ") == " My Stack "

    def test_non_string_is_coerced(self) -> None:
        assert display_name(42) == "42"


class TestStackDeclaration:
    def test_sequence_is_url_stack(self) -> None:
        declaration = stack_declaration(["https://example.com/t.yaml", {"Capabilities": ["CAPABILITY_IAM"]}])
        assert declaration == UrlStack(
            url="https://example.com/t.yaml",
            options={"Capabilities": ["CAPABILITY_IAM"]},
        )

    def test_url_stack_without_options(self) -> None:
        assert stack_declaration(["https://example.com/t.yaml"]) == UrlStack(
            url="https://example.com/t.yaml", options={}
        )
        assert stack_declaration(["https://example.com/t.yaml", None]).options == {}

    def test_non_mapping_options_are_kept(self) -> None:
        assert stack_declaration(["https://example.com/t.yaml", "oops"]).options == "oops"
        assert stack_declaration(["https://example.com/t.yaml", [1, 2]]).options == [1, 2]

    def test_mapping_is_inline_stack(self) -> None:
        options = {"Resources": {}}
        assert stack_declaration(options) == InlineStack(options=options)

    def test_unrecognised_shape_falls_through_to_inline(self) -> None:
        assert stack_declaration("not a template") == InlineStack(options="not a template")


class TestResourceDeclaration:
    def test_sequence_is_tuple_resource(self) -> None:
        assert resource_declaration(["S3.Bucket", {"BucketName": "x"}]) == TupleResource(
            type_key="S3.Bucket", properties={"BucketName": "x"}
        )

    def test_tuple_without_properties(self) -> None:
        assert resource_declaration(["SNS.Topic"]) == TupleResource(type_key="SNS.Topic", properties=None)

    def test_mapping_is_explicit_resource(self) -> None:
        value = {"Type": "AWS::S3::Bucket", "Properties": {}}
        assert resource_declaration(value) == ExplicitResource(declaration=value)

    def test_scalar_is_passed_through_as_explicit(self) -> None:
        assert resource_declaration("oops") == ExplicitResource(declaration="oops")


class TestLiteralContext:
    def test_parameters_are_read_only(self) -> None:
        context = LiteralContext(environment=":prod", parameters={"a": 1})
        with pytest.raises(TypeError):
            context.parameters["a"] = 2

    def test_parameters_are_copied(self) -> None:
        params = {"a": 1}
        context = LiteralContext(environment=3, parameters=params)
        params["a"] = 2
        assert context.parameters["a"] == 1
        assert context.environment == 3

    def test_default_parameters_empty(self) -> None:
        assert dict(LiteralContext(environment="dev").parameters) == {}
