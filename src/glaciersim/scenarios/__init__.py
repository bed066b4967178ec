"""
Built-in glacier scenarios.
"""

from glaciersim.scenarios.glaciers import (
    GLACIERS,
    get_glacier,
    list_glaciers,
)

__all__ = [
    "GLACIERS",
    "get_glacier",
    "list_glaciers",
]
