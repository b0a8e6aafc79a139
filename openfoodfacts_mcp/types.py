"""
Type definitions for Open Food Facts records and tool payloads.
"""

from typing import Any, Dict, List, Optional, TypedDict


# Remote Record Types

class ProductRecord(TypedDict, total=False):
    """Product object as returned by the Open Food Facts API. Every key may be absent."""
    code: str  # Barcode/EAN
    product_name: str
    brands: str  # Comma-separated
    categories: str  # Comma-separated
    nutriscore_grade: str  # a-e
    nova_group: int  # 1-4
    ecoscore_grade: str
    nutriments: Dict[str, Any]  # Keyed by "<nutrient>_<unit>", e.g. "fat_100g"
    ingredients_text: str
    allergens: str
    traces: str
    labels: str
    packaging: str
    stores: str
    countries: str
    image_url: str
    image_nutrition_url: str
    image_ingredients_url: str


class ProductEnvelope(TypedDict, total=False):
    """Response of GET /api/v0/product/{barcode}.json"""
    code: str
    status: int  # 1 = found, 0 = not found
    status_verbose: str
    product: ProductRecord


class SearchEnvelope(TypedDict, total=False):
    """Response of the search, category and brand listing endpoints."""
    count: int
    page: int
    page_count: int
    page_size: int
    products: List[ProductRecord]


# Formatted Output Types

class BasicNutrition(TypedDict):
    energy_kcal_100g: float
    fat_100g: float
    sugars_100g: float
    salt_100g: float
    proteins_100g: float


class ProductSummary(TypedDict):
    """Compact product view used by all listing tools."""
    barcode: str
    name: str
    brands: str
    categories: str
    nutriscore_grade: str
    nova_group: Any  # Group number, or "Unknown"
    basic_nutrition: BasicNutrition


class ProductDetails(TypedDict):
    """Full product view returned by get_product_by_barcode."""
    barcode: str
    name: str
    brands: str
    categories: str
    nutriscore_grade: str
    nova_group: Any
    ecoscore_grade: str
    nutrition_per_100g: Dict[str, Any]
    ingredients: str
    allergens: str
    traces: str
    labels: str
    packaging: str
    stores: str
    countries: str
    image_url: Optional[str]
    image_nutrition_url: Optional[str]
    image_ingredients_url: Optional[str]
