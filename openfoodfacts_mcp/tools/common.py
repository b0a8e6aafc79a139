"""
Shared helpers for Open Food Facts tools: pagination and barcode lookups.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from ..base import InternalToolError, MCPTool, NotFoundError, ToolParameter
from ..client import OpenFoodFactsClient
from ..types import ProductEnvelope, ProductRecord, SearchEnvelope

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20


def clamp_page_size(page_size: Any) -> int:
    """Clamp a page size into [1, MAX_PAGE_SIZE]."""
    return max(1, min(int(page_size), MAX_PAGE_SIZE))


def clamp_page(page: Any) -> int:
    return max(1, int(page))


def product_path(barcode: str) -> str:
    return f"/api/v0/product/{quote(barcode, safe='')}.json"


def pagination_parameters() -> List[ToolParameter]:
    return [
        ToolParameter(
            name="page",
            type="number",
            description="Page number for pagination (default: 1)",
            required=False,
            default=1,
        ),
        ToolParameter(
            name="page_size",
            type="number",
            description=f"Number of results per page (default: {DEFAULT_PAGE_SIZE}, max: {MAX_PAGE_SIZE})",
            required=False,
            default=DEFAULT_PAGE_SIZE,
        ),
    ]


def barcode_parameter(description: str = "Product barcode/EAN") -> ToolParameter:
    return ToolParameter(
        name="barcode",
        type="string",
        description=description,
        required=True,
    )


async def fetch_product(client: OpenFoodFactsClient, barcode: str) -> Optional[ProductRecord]:
    """
    Look up one product. Returns None when the API reports status 0
    or the envelope carries no product object.
    """
    data: ProductEnvelope = await client.get(product_path(barcode))
    if not isinstance(data, dict) or data.get("status") != 1:
        logger.debug(f"Product {barcode} not found")
        return None
    product = data.get("product")
    return product if isinstance(product, dict) else None


class ProductTool(MCPTool):
    """Base for tools backed by the Open Food Facts API."""

    @property
    def category(self) -> str:
        return "openfoodfacts"

    async def require_product(self, client: OpenFoodFactsClient, barcode: str) -> ProductRecord:
        """Fetch a product or raise NotFoundError naming the barcode."""
        product = await fetch_product(client, barcode)
        if product is None:
            raise NotFoundError(
                f"Product with barcode {barcode} not found",
                tool_name=self.name,
                details={"barcode": barcode},
            )
        return product

    async def fetch_listing(
        self,
        client: OpenFoodFactsClient,
        path: str,
        params: Dict[str, Any],
    ) -> SearchEnvelope:
        """GET a listing endpoint (search, category, brand)."""
        data: SearchEnvelope = await client.get(path, params)
        if not isinstance(data, dict):
            raise InternalToolError(
                f"Unexpected listing response type: {type(data).__name__}",
                tool_name=self.name,
            )
        return data
