"""
Nutrition Tools

Nutrition facts, allergen information, side-by-side comparison and
nutrient-threshold search.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..base import InvalidArgumentError, ToolName, ToolParameter
from ..client import OpenFoodFactsClient
from ..formatters import (
    format_allergen_info,
    format_comparison_entry,
    format_nutrition_facts,
    format_search_page,
)
from .common import (
    ProductTool,
    barcode_parameter,
    clamp_page,
    clamp_page_size,
    fetch_product,
    pagination_parameters,
)

logger = logging.getLogger(__name__)

MIN_COMPARE = 2
MAX_COMPARE = 5

NUTRISCORE_GRADES = ("A", "B", "C", "D", "E")

# argument name -> (query parameter, description)
NUTRIMENT_FILTERS = {
    "max_fat": ("nutriment_fat_100g_max", "Maximum fat content per 100g"),
    "max_sugar": ("nutriment_sugars_100g_max", "Maximum sugar content per 100g"),
    "max_salt": ("nutriment_salt_100g_max", "Maximum salt content per 100g"),
    "min_fiber": ("nutriment_fiber_100g_min", "Minimum fiber content per 100g"),
    "min_protein": ("nutriment_proteins_100g_min", "Minimum protein content per 100g"),
}


class GetNutritionFactsTool(ProductTool):
    """Full nutriments mapping plus the three grades."""

    @property
    def name(self) -> str:
        return ToolName.GET_NUTRITION_FACTS.value

    @property
    def description(self) -> str:
        return "Get detailed nutrition facts for a product by barcode"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [barcode_parameter()]

    async def execute(self, client: OpenFoodFactsClient, barcode: str) -> Dict[str, Any]:
        product = await self.require_product(client, barcode)
        return format_nutrition_facts(product, barcode)


class GetAllergenInfoTool(ProductTool):

    @property
    def name(self) -> str:
        return ToolName.GET_ALLERGEN_INFO.value

    @property
    def description(self) -> str:
        return "Get allergen information for a product"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [barcode_parameter()]

    async def execute(self, client: OpenFoodFactsClient, barcode: str) -> Dict[str, Any]:
        product = await self.require_product(client, barcode)
        return format_allergen_info(product, barcode)


class CompareProductsTool(ProductTool):
    """
    Compare the nutrition of 2-5 products.

    All lookups start together; a barcode whose lookup fails for any reason
    is left out of the comparison. Output follows the input order.
    """

    @property
    def name(self) -> str:
        return ToolName.COMPARE_PRODUCTS.value

    @property
    def description(self) -> str:
        return "Compare nutrition facts between multiple products"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter(
                name="barcodes",
                type="array",
                description="Array of product barcodes to compare",
                required=True,
                items_type="string",
                min_items=MIN_COMPARE,
                max_items=MAX_COMPARE,
            )
        ]

    async def execute(self, client: OpenFoodFactsClient, barcodes: List[str]) -> Dict[str, Any]:
        # validate() already enforces the bounds; guard direct callers too
        if not MIN_COMPARE <= len(barcodes) <= MAX_COMPARE:
            raise InvalidArgumentError(
                f"Between {MIN_COMPARE} and {MAX_COMPARE} barcodes are required",
                tool_name=self.name,
            )

        results = await asyncio.gather(
            *(fetch_product(client, barcode) for barcode in barcodes),
            return_exceptions=True,
        )

        comparison = []
        for barcode, result in zip(barcodes, results):
            if isinstance(result, BaseException):
                logger.debug(f"compare_products: dropping {barcode}: {result}")
                continue
            if result is None:
                logger.debug(f"compare_products: dropping {barcode}: not found")
                continue
            comparison.append(format_comparison_entry(result, barcode))

        if len(comparison) < MIN_COMPARE:
            raise InvalidArgumentError(
                "At least 2 valid products required for comparison",
                tool_name=self.name,
                details={"requested": list(barcodes), "resolved": len(comparison)},
            )

        return {"comparison": comparison}


class SearchByNutrimentsTool(ProductTool):
    """
    Search by nutrient thresholds.

    Only the filters that were supplied are sent; json, page and page_size
    are always sent.
    """

    @property
    def name(self) -> str:
        return ToolName.SEARCH_BY_NUTRIMENTS.value

    @property
    def description(self) -> str:
        return "Search products by nutritional criteria"

    @property
    def parameters(self) -> List[ToolParameter]:
        filters = [
            ToolParameter(name=arg, type="number", description=description, required=False)
            for arg, (_, description) in NUTRIMENT_FILTERS.items()
        ]
        return [
            *filters,
            ToolParameter(
                name="nutriscore_grade",
                type="string",
                description="Nutri-Score grade (A, B, C, D, E)",
                required=False,
                enum=NUTRISCORE_GRADES,
            ),
            *pagination_parameters(),
        ]

    async def execute(
        self,
        client: OpenFoodFactsClient,
        page: int = 1,
        page_size: int = 20,
        nutriscore_grade: Optional[str] = None,
        **filters: Any,
    ) -> Dict[str, Any]:
        page = clamp_page(page)
        page_size = clamp_page_size(page_size)

        params: Dict[str, Any] = {"json": 1, "page": page, "page_size": page_size}
        criteria: Dict[str, Any] = {}
        for arg, (query_key, _) in NUTRIMENT_FILTERS.items():
            value = filters.get(arg)
            if value is None:
                continue
            params[query_key] = value
            criteria[arg] = value

        if nutriscore_grade:
            params["nutriscore_grade"] = nutriscore_grade.lower()
            criteria["nutriscore_grade"] = nutriscore_grade

        criteria["page"] = page
        criteria["page_size"] = page_size

        data = await self.fetch_listing(client, "/search.json", params)
        return format_search_page("search_criteria", criteria, data)
