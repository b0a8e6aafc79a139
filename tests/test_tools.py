"""
Tests for the Open Food Facts tools, driven through the dispatcher against
a fake remote service.
"""

import json

import httpx
import pytest

from openfoodfacts_mcp.base import (
    ErrorCategory,
    InternalToolError,
    InvalidArgumentError,
    NetworkToolError,
    NotFoundError,
)
from openfoodfacts_mcp.registry import dispatch
from openfoodfacts_mcp.tools.common import clamp_page_size

from conftest import NUTELLA, OAT_DRINK, listing


def payload(result):
    """Parse the single text item of a result envelope."""
    assert len(result.content) == 1
    item = result.content[0]
    assert item["type"] == "text"
    return json.loads(item["text"])


# ========== Pagination ==========

class TestPagination:

    @pytest.mark.parametrize("given,expected", [(500, 100), (101, 100), (100, 100), (20, 20), (1, 1), (0, 1), (-7, 1)])
    def test_clamp_page_size(self, given, expected):
        assert clamp_page_size(given) == expected

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tool_name,arguments,path", [
        ("search_products", {"query": "nutella"}, "/search.json"),
        ("get_products_by_category", {"category": "spreads"}, "/category/spreads.json"),
        ("get_products_by_brand", {"brand": "ferrero"}, "/brand/ferrero.json"),
        ("search_by_nutriments", {}, "/search.json"),
    ])
    @pytest.mark.parametrize("page_size,sent", [(250, "100"), (0, "1"), (-3, "1")])
    async def test_page_size_clamped_before_sending(self, fake_off, client, tool_name, arguments, path, page_size, sent):
        fake_off.add(path, listing([]))

        await dispatch(tool_name, {**arguments, "page_size": page_size}, client)

        assert fake_off.params()["page_size"] == sent


# ========== search_products ==========

class TestSearchProducts:

    @pytest.mark.asyncio
    async def test_defaults(self, fake_off, client):
        fake_off.add("/search.json", listing([NUTELLA], count=1))

        result = await dispatch("search_products", {"query": "nutella"}, client)

        assert fake_off.params() == {
            "search_terms": "nutella",
            "page": "1",
            "page_size": "20",
            "sort_by": "popularity",
            "json": "1",
        }
        data = payload(result)
        assert data["query"] == "nutella"
        assert data["total_products"] == 1
        assert data["products"][0]["barcode"] == "3017620422003"
        assert data["products"][0]["basic_nutrition"]["fat_100g"] == 30.9

    @pytest.mark.asyncio
    async def test_sort_and_page(self, fake_off, client):
        fake_off.add("/search.json", listing([], page=3))

        await dispatch("search_products", {"query": "oat", "page": 3, "sort_by": "last_modified_t"}, client)

        params = fake_off.params()
        assert params["page"] == "3"
        assert params["sort_by"] == "last_modified_t"

    @pytest.mark.asyncio
    async def test_invalid_sort(self, fake_off, client):
        with pytest.raises(InvalidArgumentError):
            await dispatch("search_products", {"query": "oat", "sort_by": "price"}, client)
        assert fake_off.requests == []

    @pytest.mark.asyncio
    async def test_missing_query(self, fake_off, client):
        with pytest.raises(InvalidArgumentError, match="query"):
            await dispatch("search_products", {}, client)
        assert fake_off.requests == []

    @pytest.mark.asyncio
    async def test_output_is_pretty_printed(self, fake_off, client):
        fake_off.add("/search.json", listing([]))

        result = await dispatch("search_products", {"query": "x"}, client)

        assert result.content[0]["text"].startswith('{\n  "query": "x"')


# ========== Barcode lookups ==========

BARCODE_TOOLS = ["get_product_by_barcode", "get_nutrition_facts", "get_allergen_info"]


class TestBarcodeTools:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tool_name", BARCODE_TOOLS)
    async def test_not_found(self, fake_off, client, tool_name):
        fake_off.add_missing("0000000000000")

        with pytest.raises(NotFoundError) as exc_info:
            await dispatch(tool_name, {"barcode": "0000000000000"}, client)

        assert exc_info.value.category == ErrorCategory.NOT_FOUND
        assert "0000000000000" in exc_info.value.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tool_name", BARCODE_TOOLS)
    async def test_found_payload_contains_barcode(self, fake_off, client, tool_name):
        fake_off.add_product(NUTELLA)

        result = await dispatch(tool_name, {"barcode": "3017620422003"}, client)

        assert payload(result)["barcode"] == "3017620422003"
        assert fake_off.paths == ["/api/v0/product/3017620422003.json"]
        assert fake_off.params() == {}

    @pytest.mark.asyncio
    async def test_product_round_trip(self, fake_off, client):
        fake_off.add("/api/v0/product/3017620422003.json", {
            "status": 1,
            "product": {"code": "3017620422003", "product_name": "Nutella", "nutriments": {"fat_100g": 30.9}},
        })

        result = await dispatch("get_product_by_barcode", {"barcode": "3017620422003"}, client)

        data = payload(result)
        assert data["barcode"] == "3017620422003"
        assert data["name"] == "Nutella"
        assert data["nutrition_per_100g"]["fat_100g"] == 30.9
        assert data["allergens"] == "No allergen information"
        assert data["image_url"] is None

    @pytest.mark.asyncio
    async def test_numeric_barcode_is_accepted(self, fake_off, client):
        fake_off.add_product(NUTELLA)

        result = await dispatch("get_nutrition_facts", {"barcode": 3017620422003}, client)

        data = payload(result)
        assert data["product_name"] == "Nutella"
        assert data["nutrition_per_100g"]["sugars_100g"] == 56.3

    @pytest.mark.asyncio
    async def test_allergen_info(self, fake_off, client):
        fake_off.add_product(NUTELLA)

        result = await dispatch("get_allergen_info", {"barcode": "3017620422003"}, client)

        data = payload(result)
        assert data["allergens"] == "en:milk,en:nuts,en:soybeans"
        assert data["traces"] == "No trace information available"

    @pytest.mark.asyncio
    async def test_network_error_passes_through(self, fake_off, client):
        fake_off.add("/api/v0/product/1.json", httpx.Response(502, text="Bad Gateway"))

        with pytest.raises(NetworkToolError) as exc_info:
            await dispatch("get_product_by_barcode", {"barcode": "1"}, client)

        assert exc_info.value.category == ErrorCategory.NETWORK_ERROR
        assert exc_info.value.tool_name == "get_product_by_barcode"

    @pytest.mark.asyncio
    async def test_blank_barcode(self, fake_off, client):
        with pytest.raises(InvalidArgumentError):
            await dispatch("get_product_by_barcode", {"barcode": "   "}, client)
        assert fake_off.requests == []


# ========== Listings ==========

class TestListings:

    @pytest.mark.asyncio
    async def test_category(self, fake_off, client):
        fake_off.add("/category/breakfast-cereals.json", listing([OAT_DRINK], count=1200))

        result = await dispatch("get_products_by_category", {"category": "breakfast-cereals", "page": 2}, client)

        assert fake_off.params() == {"page": "2", "page_size": "20", "json": "1"}
        data = payload(result)
        assert data["category"] == "breakfast-cereals"
        assert data["total_products"] == 1200
        assert data["products"][0]["categories"] == "Unknown"

    @pytest.mark.asyncio
    async def test_brand_is_url_quoted(self, fake_off, client):
        fake_off.add("/brand/Nestlé.json", listing([]))

        result = await dispatch("get_products_by_brand", {"brand": "Nestlé"}, client)

        assert fake_off.requests[0].url.raw_path.startswith(b"/brand/Nestl%C3%A9.json")
        assert payload(result)["brand"] == "Nestlé"

    @pytest.mark.asyncio
    async def test_unexpected_listing_shape(self, fake_off, client):
        fake_off.add("/brand/x.json", ["not", "an", "object"])

        with pytest.raises(InternalToolError) as exc_info:
            await dispatch("get_products_by_brand", {"brand": "x"}, client)

        assert exc_info.value.category == ErrorCategory.INTERNAL_ERROR


# ========== compare_products ==========

class TestCompareProducts:

    @pytest.mark.asyncio
    async def test_two_resolvable(self, fake_off, client):
        fake_off.add_product(NUTELLA)
        fake_off.add_product(OAT_DRINK)

        result = await dispatch("compare_products", {"barcodes": ["7394376616037", "3017620422003"]}, client)

        comparison = payload(result)["comparison"]
        assert [c["barcode"] for c in comparison] == ["7394376616037", "3017620422003"]
        assert comparison[0]["nutrition_per_100g"]["fiber"] == 0.8
        assert comparison[1]["nutrition_per_100g"]["fat"] == 30.9

    @pytest.mark.asyncio
    async def test_failures_are_dropped(self, fake_off, client):
        fake_off.add_product(NUTELLA)
        fake_off.add_missing("111")
        fake_off.add("/api/v0/product/222.json", httpx.ConnectError("unreachable"))
        fake_off.add_product(OAT_DRINK)

        result = await dispatch(
            "compare_products",
            {"barcodes": ["3017620422003", "111", "222", "7394376616037"]},
            client,
        )

        comparison = payload(result)["comparison"]
        assert [c["product_name"] for c in comparison] == ["Nutella", "Oat Drink"]
        assert len(fake_off.requests) == 4

    @pytest.mark.asyncio
    async def test_four_of_five_unresolvable(self, fake_off, client):
        fake_off.add_product(NUTELLA)
        fake_off.add_missing("111")
        fake_off.add("/api/v0/product/222.json", httpx.ConnectError("unreachable"))
        fake_off.add("/api/v0/product/333.json", httpx.Response(500, text="oops"))
        fake_off.add("/api/v0/product/444.json", httpx.Response(200, text="not json"))

        with pytest.raises(InvalidArgumentError, match="At least 2 valid products"):
            await dispatch(
                "compare_products",
                {"barcodes": ["3017620422003", "111", "222", "333", "444"]},
                client,
            )

        assert len(fake_off.requests) == 5

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, 1, 6])
    async def test_bad_count_fails_before_network(self, fake_off, client, count):
        barcodes = [str(1000 + i) for i in range(count)]

        with pytest.raises(InvalidArgumentError):
            await dispatch("compare_products", {"barcodes": barcodes}, client)

        assert fake_off.requests == []

    @pytest.mark.asyncio
    async def test_barcodes_must_be_a_list(self, fake_off, client):
        with pytest.raises(InvalidArgumentError, match="array"):
            await dispatch("compare_products", {"barcodes": "3017620422003,7394376616037"}, client)


# ========== search_by_nutriments ==========

class TestSearchByNutriments:

    @pytest.mark.asyncio
    async def test_only_supplied_filters_are_sent(self, fake_off, client):
        fake_off.add("/search.json", listing([]))

        result = await dispatch("search_by_nutriments", {"min_protein": 10}, client)

        params = fake_off.params()
        assert params == {
            "json": "1",
            "page": "1",
            "page_size": "20",
            "nutriment_proteins_100g_min": "10",
        }
        assert "nutriment_fat_100g_max" not in params
        assert payload(result)["search_criteria"] == {"min_protein": 10, "page": 1, "page_size": 20}

    @pytest.mark.asyncio
    async def test_all_filters(self, fake_off, client):
        fake_off.add("/search.json", listing([OAT_DRINK]))

        await dispatch("search_by_nutriments", {
            "max_fat": 3,
            "max_sugar": 5.5,
            "max_salt": 0.3,
            "min_fiber": 2,
            "min_protein": "4",
            "nutriscore_grade": "B",
        }, client)

        params = fake_off.params()
        assert params["nutriment_fat_100g_max"] == "3"
        assert params["nutriment_sugars_100g_max"] == "5.5"
        assert params["nutriment_salt_100g_max"] == "0.3"
        assert params["nutriment_fiber_100g_min"] == "2"
        assert params["nutriment_proteins_100g_min"] == "4"
        assert params["nutriscore_grade"] == "b"

    @pytest.mark.asyncio
    async def test_grade_is_case_insensitive(self, fake_off, client):
        fake_off.add("/search.json", listing([]))

        result = await dispatch("search_by_nutriments", {"nutriscore_grade": "a"}, client)

        assert fake_off.params()["nutriscore_grade"] == "a"
        assert payload(result)["search_criteria"]["nutriscore_grade"] == "A"

    @pytest.mark.asyncio
    async def test_invalid_grade(self, fake_off, client):
        with pytest.raises(InvalidArgumentError):
            await dispatch("search_by_nutriments", {"nutriscore_grade": "F"}, client)
        assert fake_off.requests == []

    @pytest.mark.asyncio
    async def test_non_numeric_threshold(self, fake_off, client):
        with pytest.raises(InvalidArgumentError, match="max_fat"):
            await dispatch("search_by_nutriments", {"max_fat": "low"}, client)

    @pytest.mark.asyncio
    async def test_blank_grade_is_ignored(self, fake_off, client):
        fake_off.add("/search.json", listing([]))

        await dispatch("search_by_nutriments", {"nutriscore_grade": "", "max_salt": 1}, client)

        assert "nutriscore_grade" not in fake_off.params()


class TestArgumentCoercion:

    @pytest.mark.asyncio
    async def test_oversized_page_size_is_invalid(self, fake_off, client):
        with pytest.raises(InvalidArgumentError, match="page_size"):
            await dispatch("search_products", {"query": "x", "page_size": 10 ** 400}, client)
        assert fake_off.requests == []

    @pytest.mark.asyncio
    async def test_integral_float_barcode(self, fake_off, client):
        fake_off.add_product(NUTELLA)

        result = await dispatch("get_product_by_barcode", {"barcode": 3017620422003.0}, client)

        assert fake_off.paths == ["/api/v0/product/3017620422003.json"]
        assert payload(result)["barcode"] == "3017620422003"
