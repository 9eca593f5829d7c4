"""
Unit tests for the DynamoDB expression building blocks.

Covers filter and projection expression synthesis and the pruning done by
ExpressionBuilder.finalize().
"""

import pytest

from accelerator.dal.expressions import (
    ExpressionBuilder,
    FilterParams,
    ProjectionParams,
    build_filter_expression,
    build_projection_expression,
)
from accelerator.handlers.utils.errors import ConfigurationError


class TestBuildFilterExpression:
    """Test cases for equality filter synthesis."""

    def test_single_attribute_single_value(self):
        """A lone attribute gets no outer group."""
        params = build_filter_expression({"status": ["active"]})

        assert params.filter_expression == "(#status = :status0)"
        assert params.expression_attribute_names == {"#status": "status"}
        assert params.expression_attribute_values == {":status0": "active"}

    def test_single_attribute_values_are_ored(self):
        """Values of one attribute are OR'ed with indexed aliases."""
        params = build_filter_expression({"status": ["active", "pending"]})

        assert params.filter_expression == "(#status = :status0 OR #status = :status1)"
        assert params.expression_attribute_values == {":status0": "active", ":status1": "pending"}

    def test_multiple_attributes_are_anded_and_grouped(self):
        """Several attributes are AND'ed and wrapped in one outer group."""
        params = build_filter_expression({"status": ["active", "pending"], "type": ["a"]})

        assert params.filter_expression == "((#status = :status0 OR #status = :status1) AND (#type = :type0))"
        assert params.expression_attribute_names == {"#status": "status", "#type": "type"}
        assert params.expression_attribute_values == {
            ":status0": "active",
            ":status1": "pending",
            ":type0": "a",
        }

    def test_value_prefix_is_applied_to_value_aliases_only(self):
        """A value prefix keeps negated values apart from positive ones."""
        params = build_filter_expression({"deleted": [True]}, value_prefix="not_")

        assert params.filter_expression == "(#deleted = :not_deleted0)"
        assert params.expression_attribute_names == {"#deleted": "deleted"}
        assert params.expression_attribute_values == {":not_deleted0": True}

    def test_scalar_value_is_treated_as_one_value(self):
        """A single value does not need to be wrapped in a list."""
        params = build_filter_expression({"status": "active"})

        assert params.filter_expression == "(#status = :status0)"
        assert params.expression_attribute_values == {":status0": "active"}

    def test_reserved_word_attribute_is_aliased(self):
        """Reserved words never appear raw in the expression."""
        params = build_filter_expression({"name": ["x"]})

        assert "#name" in params.filter_expression
        assert " name " not in f" {params.filter_expression} "

    def test_value_aliases_never_collide(self):
        """An attribute ending in a digit cannot take another attribute's value alias."""
        params = build_filter_expression({"a": list(range(11)), "a1": ["x"]})

        assert len(params.expression_attribute_values) == 12
        assert params.expression_attribute_values[":a10"] == 10
        assert params.expression_attribute_values[":a10_"] == "x"
        assert params.filter_expression.endswith("AND (#a1 = :a10_))")

    def test_empty_value_list_raises(self):
        """An attribute without values cannot form a clause."""
        with pytest.raises(ConfigurationError):
            build_filter_expression({"status": []})

    def test_no_filters(self):
        """No filters yields an empty expression."""
        params = build_filter_expression({})

        assert params.filter_expression == ""
        assert params.expression_attribute_names == {}
        assert params.expression_attribute_values == {}


class TestBuildProjectionExpression:
    """Test cases for projection synthesis."""

    def test_keys_are_appended(self):
        """The partition and sort keys are always projected."""
        params = build_projection_expression(["name"], ["pk", "sk"])

        assert params.projection_expression == "#name,#pk,#sk"
        assert params.expression_attribute_names == {"#name": "name", "#pk": "pk", "#sk": "sk"}

    def test_keys_already_present_are_not_repeated(self):
        """A key the caller asked for is not appended again."""
        params = build_projection_expression(["pk", "name"], ["pk", "sk"])

        assert params.projection_expression == "#pk,#name,#sk"

    def test_duplicate_fields_are_removed(self):
        """Repeated fields appear once."""
        params = build_projection_expression(["name", "name"], ["pk"])

        assert params.projection_expression == "#name,#pk"

    def test_missing_sort_key_is_skipped(self):
        """A table without sort key only forces the partition key."""
        params = build_projection_expression(["name"], ["pk", None])

        assert params.projection_expression == "#name,#pk"

    def test_caller_list_is_not_mutated(self):
        """Repeated calls with the same list give the same result."""
        fields = ["name"]

        first = build_projection_expression(fields, ["pk", "sk"])
        second = build_projection_expression(fields, ["pk", "sk"])

        assert fields == ["name"]
        assert first == second


class TestExpressionBuilder:
    """Test cases for ExpressionBuilder."""

    def test_finalize_prunes_empty_parts(self):
        """Nothing empty is ever sent to DynamoDB."""
        assert ExpressionBuilder().finalize() == {}

    def test_finalize_includes_filter_and_maps(self):
        """A filter brings its names and values along."""
        builder = ExpressionBuilder().add_filter(build_filter_expression({"status": ["active"]}))

        assert builder.finalize() == {
            "FilterExpression": "(#status = :status0)",
            "ExpressionAttributeNames": {"#status": "status"},
            "ExpressionAttributeValues": {":status0": "active"},
        }

    def test_negation_alone_has_no_parentheses(self):
        """Without a positive clause the NOT clause stands alone."""
        builder = ExpressionBuilder().add_negation_filter(
            FilterParams("(#deleted = :not_deleted0)", {"#deleted": "deleted"}, {":not_deleted0": True})
        )

        assert builder.filter_expression == "NOT (#deleted = :not_deleted0)"

    def test_negation_after_positive_is_grouped(self):
        """After a positive clause the NOT clause is AND'ed in its own group."""
        builder = ExpressionBuilder()
        builder.add_filter(build_filter_expression({"status": ["active"]}))
        builder.add_negation_filter(build_filter_expression({"status": ["deleted"]}, value_prefix="not_"))

        params = builder.finalize()

        assert params["FilterExpression"] == "(#status = :status0) AND (NOT (#status = :not_status0))"
        assert params["ExpressionAttributeValues"] == {":status0": "active", ":not_status0": "deleted"}

    def test_projection_only_adds_names(self):
        """A projection has no values."""
        builder = ExpressionBuilder().add_projection(ProjectionParams("#a,#pk", {"#a": "a", "#pk": "pk"}))

        params = builder.finalize()

        assert params == {
            "ProjectionExpression": "#a,#pk",
            "ExpressionAttributeNames": {"#a": "a", "#pk": "pk"},
        }

    def test_placeholder_bound_twice_raises(self):
        """A placeholder never silently changes meaning."""
        builder = ExpressionBuilder().add_filter(build_filter_expression({"not_status": ["active"]}))

        with pytest.raises(ConfigurationError):
            builder.add_negation_filter(build_filter_expression({"status": ["deleted"]}, value_prefix="not_"))

    def test_same_placeholder_and_value_is_accepted(self):
        """Projection and filter may share a name alias."""
        builder = ExpressionBuilder()
        builder.add_filter(build_filter_expression({"pk": ["TENANT#abcdef"]}))
        builder.add_projection(ProjectionParams("#pk", {"#pk": "pk"}))

        assert builder.finalize()["ExpressionAttributeNames"] == {"#pk": "pk"}
