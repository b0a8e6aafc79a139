"""
Shared fixtures: an in-process stand-in for the Open Food Facts API.
"""

import json
from typing import Any, Callable, Dict, List, Optional, Union

import httpx
import pytest

from openfoodfacts_mcp.client import OpenFoodFactsClient

BASE_URL = "https://off.test"

NUTELLA = {
    "code": "3017620422003",
    "product_name": "Nutella",
    "brands": "Ferrero",
    "categories": "Spreads, Sweet spreads",
    "nutriscore_grade": "e",
    "nova_group": 4,
    "nutriments": {
        "energy-kcal_100g": 539,
        "fat_100g": 30.9,
        "saturated-fat_100g": 10.6,
        "sugars_100g": 56.3,
        "salt_100g": 0.107,
        "proteins_100g": 6.3,
        "carbohydrates_100g": 57.5,
    },
    "allergens": "en:milk,en:nuts,en:soybeans",
    "ingredients_text": "Sugar, palm oil, hazelnuts 13%, skimmed milk powder 8.7%",
}

OAT_DRINK = {
    "code": "7394376616037",
    "product_name": "Oat Drink",
    "brands": "Oatly",
    "nutriscore_grade": "b",
    "nutriments": {"energy-kcal_100g": 46, "fat_100g": 1.5, "sugars_100g": 4, "fiber_100g": 0.8},
}

Route = Union[Dict[str, Any], List[Any], httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


def found(product: Dict[str, Any]) -> Dict[str, Any]:
    return {"code": product.get("code"), "status": 1, "status_verbose": "product found", "product": product}


def not_found(barcode: str) -> Dict[str, Any]:
    return {"code": barcode, "status": 0, "status_verbose": "product not found"}


def listing(products: List[Dict[str, Any]], page: int = 1, count: Optional[int] = None) -> Dict[str, Any]:
    return {
        "count": len(products) if count is None else count,
        "page": page,
        "page_count": 1,
        "page_size": 20,
        "products": products,
    }


class FakeOpenFoodFacts:
    """Routes requests by URL path to canned responses and records them."""

    def __init__(self):
        self.routes: Dict[str, Route] = {}
        self.requests: List[httpx.Request] = []

    def add(self, path: str, response: Route) -> None:
        self.routes[path] = response

    def add_product(self, product: Dict[str, Any]) -> None:
        self.add(f"/api/v0/product/{product['code']}.json", found(product))

    def add_missing(self, barcode: str) -> None:
        self.add(f"/api/v0/product/{barcode}.json", not_found(barcode))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, text="Page not found")
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return route
        if callable(route):
            return route(request)
        return httpx.Response(200, content=json.dumps(route).encode(), headers={"Content-Type": "application/json"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def params(self, index: int = -1) -> Dict[str, str]:
        return dict(self.requests[index].url.params)

    @property
    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def fake_off() -> FakeOpenFoodFacts:
    return FakeOpenFoodFacts()


@pytest.fixture
def client(fake_off) -> OpenFoodFactsClient:
    return OpenFoodFactsClient(base_url=BASE_URL, transport=fake_off.transport())
