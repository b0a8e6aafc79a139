"""
Formatting utilities for Open Food Facts product records.

Remote records are partially trusted: any field may be missing, null or
empty, so every accessor below carries an explicit fallback.
"""

from typing import Any, Dict, List, Mapping, Optional

from .types import BasicNutrition, ProductDetails, ProductRecord, ProductSummary

UNKNOWN = "Unknown"

# Detail-view placeholders, one wording per field
DETAIL_PLACEHOLDERS: Dict[str, str] = {
    "ingredients": "No ingredient information",
    "allergens": "No allergen information",
    "traces": "No trace information",
    "labels": "No label information",
    "packaging": "No packaging information",
    "stores": "No store information",
    "countries": "No country information",
}

# get_allergen_info uses the longer wording
ALLERGEN_PLACEHOLDERS: Dict[str, str] = {
    "allergens": "No allergen information available",
    "traces": "No trace information available",
    "ingredients": "No ingredient information available",
}

# (output key, nutriments key) pairs for compare_products
COMPARISON_NUTRIENTS = (
    ("energy_kcal", "energy-kcal_100g"),
    ("fat", "fat_100g"),
    ("saturated_fat", "saturated-fat_100g"),
    ("sugars", "sugars_100g"),
    ("salt", "salt_100g"),
    ("fiber", "fiber_100g"),
    ("protein", "proteins_100g"),
    ("carbohydrates", "carbohydrates_100g"),
)


def _text(product: Mapping[str, Any], key: str, placeholder: str = UNKNOWN) -> Any:
    """Return product[key], or placeholder when missing or empty."""
    value = product.get(key)
    if value is None or value == "":
        return placeholder
    return value


def _nutriments(product: Mapping[str, Any]) -> Dict[str, Any]:
    nutriments = product.get("nutriments")
    return nutriments if isinstance(nutriments, dict) else {}


def _number(nutriments: Mapping[str, Any], key: str) -> Any:
    """Return a nutrient value, or 0 when missing, null or zero-like."""
    return nutriments.get(key) or 0


def _basic_nutrition(product: Mapping[str, Any]) -> BasicNutrition:
    nutriments = _nutriments(product)
    return {
        "energy_kcal_100g": _number(nutriments, "energy-kcal_100g"),
        "fat_100g": _number(nutriments, "fat_100g"),
        "sugars_100g": _number(nutriments, "sugars_100g"),
        "salt_100g": _number(nutriments, "salt_100g"),
        "proteins_100g": _number(nutriments, "proteins_100g"),
    }


def product_barcode(product: Mapping[str, Any], fallback: Optional[str] = None) -> str:
    """Barcode of a record, falling back to the barcode that was requested."""
    return _text(product, "code", fallback or UNKNOWN)


def format_product_summary(product: ProductRecord) -> ProductSummary:
    """
    Build the compact view used by search and listing tools.

    Text fields fall back to "Unknown", nutrient values to 0.
    """
    return {
        "barcode": product_barcode(product),
        "name": _text(product, "product_name"),
        "brands": _text(product, "brands"),
        "categories": _text(product, "categories"),
        "nutriscore_grade": _text(product, "nutriscore_grade"),
        "nova_group": _text(product, "nova_group"),
        "basic_nutrition": _basic_nutrition(product),
    }


def format_product_details(product: ProductRecord, barcode: Optional[str] = None) -> ProductDetails:
    """
    Build the full view of a single product.

    Image URLs are passed through unchanged and may be None.
    """
    details: Dict[str, Any] = {
        "barcode": product_barcode(product, barcode),
        "name": _text(product, "product_name"),
        "brands": _text(product, "brands"),
        "categories": _text(product, "categories"),
        "nutriscore_grade": _text(product, "nutriscore_grade"),
        "nova_group": _text(product, "nova_group"),
        "ecoscore_grade": _text(product, "ecoscore_grade"),
        "nutrition_per_100g": _nutriments(product),
        "ingredients": _text(product, "ingredients_text", DETAIL_PLACEHOLDERS["ingredients"]),
    }
    for key in ("allergens", "traces", "labels", "packaging", "stores", "countries"):
        details[key] = _text(product, key, DETAIL_PLACEHOLDERS[key])

    details["image_url"] = product.get("image_url")
    details["image_nutrition_url"] = product.get("image_nutrition_url")
    details["image_ingredients_url"] = product.get("image_ingredients_url")
    return details  # type: ignore[return-value]


def format_nutrition_facts(product: ProductRecord, barcode: Optional[str] = None) -> Dict[str, Any]:
    return {
        "product_name": _text(product, "product_name"),
        "barcode": product_barcode(product, barcode),
        "nutrition_per_100g": _nutriments(product),
        "nutriscore_grade": _text(product, "nutriscore_grade"),
        "nova_group": _text(product, "nova_group"),
        "ecoscore_grade": _text(product, "ecoscore_grade"),
    }


def format_allergen_info(product: ProductRecord, barcode: Optional[str] = None) -> Dict[str, Any]:
    return {
        "product_name": _text(product, "product_name"),
        "barcode": product_barcode(product, barcode),
        "allergens": _text(product, "allergens", ALLERGEN_PLACEHOLDERS["allergens"]),
        "traces": _text(product, "traces", ALLERGEN_PLACEHOLDERS["traces"]),
        "ingredients": _text(product, "ingredients_text", ALLERGEN_PLACEHOLDERS["ingredients"]),
    }


def format_comparison_entry(product: ProductRecord, barcode: Optional[str] = None) -> Dict[str, Any]:
    nutriments = _nutriments(product)
    return {
        "product_name": _text(product, "product_name"),
        "barcode": product_barcode(product, barcode),
        "nutriscore_grade": _text(product, "nutriscore_grade"),
        "nutrition_per_100g": {
            out_key: _number(nutriments, source_key)
            for out_key, source_key in COMPARISON_NUTRIENTS
        },
    }


def format_search_page(label: str, value: Any, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Wrap one page of a listing response.

    Args:
        label: Key echoing the request ("query", "category", "brand", ...)
        value: The value requested under that key
        data: Raw listing envelope (count, page, page_count, products)
    """
    products: List[Any] = data.get("products") or []
    return {
        label: value,
        "total_products": data.get("count", 0),
        "page": data.get("page"),
        "total_pages": data.get("page_count"),
        "products": [
            format_product_summary(p) for p in products if isinstance(p, dict)
        ],
    }
