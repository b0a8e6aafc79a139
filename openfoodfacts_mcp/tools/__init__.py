"""
MCP Tools Package

TOOL_CLASSES lists every tool in advertised order. registry.py builds the
registry from it and checks it against ToolName.
"""

from .nutrition import (
    CompareProductsTool,
    GetAllergenInfoTool,
    GetNutritionFactsTool,
    SearchByNutrimentsTool,
)
from .products import (
    GetProductByBarcodeTool,
    GetProductsByBrandTool,
    GetProductsByCategoryTool,
    SearchProductsTool,
)

TOOL_CLASSES = (
    SearchProductsTool,
    GetProductByBarcodeTool,
    GetProductsByCategoryTool,
    GetProductsByBrandTool,
    GetNutritionFactsTool,
    CompareProductsTool,
    GetAllergenInfoTool,
    SearchByNutrimentsTool,
)

__all__ = [cls.__name__ for cls in TOOL_CLASSES] + ["TOOL_CLASSES"]
