"""
Tests for the property search query parser.
"""

import pytest
from decimal import Decimal

from homelyhub.models.property import Amenity, PropertyType
from homelyhub.utils.exceptions import ValidationError
from homelyhub.utils.query_filters import (
    Comparison,
    FilterOperator,
    SortKey,
    build_pagination,
    parse_filter,
    parse_property_query,
    parse_select,
    parse_sort,
    project,
)


class TestParseFilter:
    """Filter key grammar and value coercion."""

    def test_plain_key_is_equality(self):
        assert parse_filter("bedrooms", ["3"]) == Comparison("bedrooms", FilterOperator.EQ, 3)

    @pytest.mark.parametrize("op", ["gt", "gte", "lt", "lte"])
    def test_range_operators_on_numbers(self, op):
        comparison = parse_filter(f"price[{op}]", ["5000"])
        assert comparison.operator == FilterOperator(op)
        assert comparison.value == Decimal("5000")

    def test_in_splits_on_commas_and_repeats(self):
        comparison = parse_filter("amenities[in]", ["wifi,pool", "gym"])
        assert comparison.operator == FilterOperator.IN
        assert comparison.value == [Amenity.WIFI, Amenity.POOL, Amenity.GYM]

    def test_nested_location_field(self):
        assert parse_filter("location.city", ["Goa"]) == Comparison("location.city", FilterOperator.EQ, "Goa")

    def test_enum_values_are_coerced(self):
        assert parse_filter("type", ["villa"]).value == PropertyType.VILLA

    def test_operator_word_in_value_is_a_literal(self):
        comparison = parse_filter("title", ["gte"])
        assert comparison == Comparison("title", FilterOperator.EQ, "gte")

    def test_operator_word_as_numeric_value_is_rejected(self):
        with pytest.raises(ValidationError, match="Invalid value for 'price'"):
            parse_filter("price", ["gte"])

    def test_mongo_style_value_is_not_interpreted(self):
        comparison = parse_filter("location.city", ['{"$gt": ""}'])
        assert comparison.operator == FilterOperator.EQ
        assert comparison.value == '{"$gt": ""}'

    @pytest.mark.parametrize("key", ["price[$gte]", "price[gte][lt]", "price]gte[", "PRICE", "price[]"])
    def test_malformed_keys_are_rejected(self, key):
        with pytest.raises(ValidationError):
            parse_filter(key, ["1"])

    def test_unknown_operator_is_rejected(self):
        with pytest.raises(ValidationError, match="Unsupported filter operator 'ne'"):
            parse_filter("price[ne]", ["1"])

    def test_explicit_eq_is_rejected(self):
        with pytest.raises(ValidationError):
            parse_filter("price[eq]", ["1"])

    def test_unknown_field_is_rejected(self):
        with pytest.raises(ValidationError, match="Filtering on 'hashed_password' is not supported"):
            parse_filter("hashed_password", ["x"])

    def test_range_operator_on_text_field_is_rejected(self):
        with pytest.raises(ValidationError, match="cannot be used with 'title'"):
            parse_filter("title[gt]", ["a"])

    def test_boolean_accepts_only_equality(self):
        assert parse_filter("is_active", ["false"]).value is False
        with pytest.raises(ValidationError):
            parse_filter("is_active[in]", ["true,false"])

    def test_repeated_scalar_key_is_rejected(self):
        with pytest.raises(ValidationError, match="only one value"):
            parse_filter("bedrooms", ["2", "3"])

    def test_host_requires_object_id(self):
        with pytest.raises(ValidationError):
            parse_filter("host", ["not-an-id"])

    def test_unknown_amenity_is_rejected(self):
        with pytest.raises(ValidationError, match="is not one of"):
            parse_filter("amenities", ["helipad"])

    @pytest.mark.parametrize("key", ["bedrooms", "max_guests[gte]", "rating.count[lt]"])
    def test_out_of_range_integers_are_rejected(self, key):
        with pytest.raises(ValidationError, match="out of range"):
            parse_filter(key, ["99999999999999999999"])

    def test_largest_integer_is_accepted(self):
        assert parse_filter("bedrooms[lte]", ["2147483647"]).value == 2147483647

    @pytest.mark.parametrize("raw", ["NaN", "Infinity", "1e", ""])
    def test_non_finite_numbers_are_rejected(self, raw):
        with pytest.raises(ValidationError):
            parse_filter("price[lte]", [raw])


class TestSortAndSelect:

    def test_default_sort_is_newest_first(self):
        assert parse_sort(None) == [SortKey("created_at", descending=True)]

    def test_multiple_sort_keys(self):
        assert parse_sort("-price,bedrooms") == [
            SortKey("price", descending=True),
            SortKey("bedrooms", descending=False),
        ]

    def test_unknown_sort_field(self):
        with pytest.raises(ValidationError, match="Cannot sort by 'hashed_password'"):
            parse_sort("hashed_password")

    def test_select_drops_id(self):
        assert parse_select("id,title,price") == ["title", "price"]

    def test_select_unknown_field(self):
        with pytest.raises(ValidationError, match="Cannot select unknown fields"):
            parse_select("title,secret")

    def test_project_keeps_id(self):
        document = {"id": "a" * 24, "title": "Villa", "price": 10.0, "bedrooms": 2}
        assert project(document, ["title"]) == {"id": "a" * 24, "title": "Villa"}
        assert project(document, None) is document


class TestParsePropertyQuery:

    def test_reserved_keys_are_not_filters(self):
        query = parse_property_query([
            ("select", "title"),
            ("sort", "price"),
            ("page", "2"),
            ("limit", "5"),
            ("search", " goa "),
            ("price[lte]", "5000"),
        ])
        assert query.filters == [Comparison("price", FilterOperator.LTE, Decimal("5000"))]
        assert query.search == "goa"
        assert query.sort == [SortKey("price")]
        assert query.select == ["title"]
        assert (query.page, query.limit, query.skip) == (2, 5, 5)

    def test_defaults(self):
        query = parse_property_query([])
        assert query.page == 1
        assert query.limit == 12
        assert query.filters == []
        assert query.search is None
        assert query.select is None

    @pytest.mark.parametrize("params", [
        [("page", "0")],
        [("page", "abc")],
        [("limit", "0")],
        [("limit", "101")],
        [("limit", "-5")],
        [("page", "99999999999999999999")],
        [("page", "2147483648")],
    ])
    def test_bad_paging_is_rejected(self, params):
        with pytest.raises(ValidationError):
            parse_property_query(params)

    def test_has_filter(self):
        query = parse_property_query([("is_active", "false")])
        assert query.has_filter("is_active")
        assert not query.has_filter("price")


class TestBuildPagination:

    def test_first_of_three_pages(self):
        assert build_pagination(1, 12, 25) == {"next": {"page": 2, "limit": 12}}

    def test_middle_page(self):
        assert build_pagination(2, 12, 25) == {
            "next": {"page": 3, "limit": 12},
            "prev": {"page": 1, "limit": 12},
        }

    def test_last_page(self):
        assert build_pagination(3, 12, 25) == {"prev": {"page": 2, "limit": 12}}

    def test_exact_fit_has_no_next(self):
        assert build_pagination(1, 12, 12) == {}

    def test_empty_result(self):
        assert build_pagination(1, 12, 0) == {}
