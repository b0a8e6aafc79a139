"""
Product Lookup Tools

Free-text search, barcode lookup and category/brand listings against the
Open Food Facts API.
"""

from typing import Any, Dict, List
from urllib.parse import quote

from ..base import ToolName, ToolParameter
from ..client import OpenFoodFactsClient
from ..formatters import format_product_details, format_search_page
from .common import (
    ProductTool,
    barcode_parameter,
    clamp_page,
    clamp_page_size,
    pagination_parameters,
)


SORT_OPTIONS = ("popularity", "product_name", "created_t", "last_modified_t")


class SearchProductsTool(ProductTool):
    """Full-text product search."""

    @property
    def name(self) -> str:
        return ToolName.SEARCH_PRODUCTS.value

    @property
    def description(self) -> str:
        return "Search for food products by name, brand, or category"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter(
                name="query",
                type="string",
                description="Search query (product name, brand, or category)",
                required=True,
            ),
            *pagination_parameters(),
            ToolParameter(
                name="sort_by",
                type="string",
                description="Sort results by: " + ", ".join(SORT_OPTIONS),
                required=False,
                default="popularity",
                enum=SORT_OPTIONS,
            ),
        ]

    async def execute(
        self,
        client: OpenFoodFactsClient,
        query: str,
        page: int = 1,
        page_size: int = 20,
        sort_by: str = "popularity",
    ) -> Dict[str, Any]:
        params = {
            "search_terms": query,
            "page": clamp_page(page),
            "page_size": clamp_page_size(page_size),
            "sort_by": sort_by,
            "json": 1,
        }
        data = await self.fetch_listing(client, "/search.json", params)
        return format_search_page("query", query, data)


class GetProductByBarcodeTool(ProductTool):
    """Detailed view of a single product."""

    @property
    def name(self) -> str:
        return ToolName.GET_PRODUCT_BY_BARCODE.value

    @property
    def description(self) -> str:
        return "Get detailed product information by barcode/EAN"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [barcode_parameter("Product barcode/EAN (e.g., 3017620422003)")]

    async def execute(self, client: OpenFoodFactsClient, barcode: str) -> Dict[str, Any]:
        product = await self.require_product(client, barcode)
        return format_product_details(product, barcode)


class _ListingTool(ProductTool):
    """Paginated listing under /<facet>/<value>.json"""

    facet: str = ""
    facet_description: str = ""

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter(
                name=self.facet,
                type="string",
                description=self.facet_description,
                required=True,
            ),
            *pagination_parameters(),
        ]

    async def execute(self, client: OpenFoodFactsClient, page: int = 1, page_size: int = 20, **kwargs) -> Dict[str, Any]:
        value = kwargs[self.facet]
        params = {
            "page": clamp_page(page),
            "page_size": clamp_page_size(page_size),
            "json": 1,
        }
        path = f"/{self.facet}/{quote(value, safe='')}.json"
        data = await self.fetch_listing(client, path, params)
        return format_search_page(self.facet, value, data)


class GetProductsByCategoryTool(_ListingTool):
    facet = "category"
    facet_description = 'Category name (e.g., "breakfast-cereals", "yogurts", "beverages")'

    @property
    def name(self) -> str:
        return ToolName.GET_PRODUCTS_BY_CATEGORY.value

    @property
    def description(self) -> str:
        return "Get products from a specific category"


class GetProductsByBrandTool(_ListingTool):
    facet = "brand"
    facet_description = 'Brand name (e.g., "Nestlé", "Coca-Cola", "Danone")'

    @property
    def name(self) -> str:
        return ToolName.GET_PRODUCTS_BY_BRAND.value

    @property
    def description(self) -> str:
        return "Get products from a specific brand"
