"""
Static region and category tree: region root -> category group -> leaf category.
"""

from dataclasses import dataclass, field
from typing import Any

COMPOSITE_REGION = "Total"
ROOT_NODE = "total"

# Two concrete regions; generation profile mirrors store footprint per region.
REGION_PROFILES: dict[str, dict[str, Any]] = {
    "SH": {"name": "Shanghai Region", "store_base": 80, "store_jitter": 2, "base_rate": 40.0},
    "JS": {"name": "Jiangsu Region", "store_base": 20, "store_jitter": 1, "base_rate": 35.0},
}
COMPOSITE_NAME = "Network (store-weighted)"

HIERARCHY_CONFIG: list[dict[str, Any]] = [
    {
        "id": "fresh_dept",
        "name": "Fresh",
        "children": ["Bakery", "Dairy & Eggs", "Chilled", "Meat", "Produce"],
    },
    {
        "id": "standard_dept",
        "name": "Ambient & Frozen",
        "children": [
            "Frozen",
            "Beverages & Spirits",
            "Breakfast",
            "Rice, Noodles & Oils",
            "Water & Soft Drinks",
            "Snacks",
            "Personal Care",
            "Household Cleaning",
        ],
    },
]


def row_id(region: str, node: str) -> str:
    return f"{region}_{node}"


@dataclass(frozen=True)
class CategoryGroup:
    id: str
    name: str
    children: tuple[str, ...]


@dataclass(frozen=True)
class Hierarchy:
    groups: tuple[CategoryGroup, ...]
    region_names: dict[str, str] = field(
        default_factory=lambda: {code: p["name"] for code, p in REGION_PROFILES.items()}
    )
    composite_name: str = COMPOSITE_NAME

    @property
    def concrete_regions(self) -> tuple[str, ...]:
        return tuple(self.region_names)

    @property
    def regions(self) -> tuple[str, ...]:
        # Composite first: consumers render the network view on top.
        return (COMPOSITE_REGION, *self.concrete_regions)

    @property
    def leaves(self) -> tuple[str, ...]:
        return tuple(leaf for group in self.groups for leaf in group.children)

    def nodes(self) -> list[str]:
        """Every node key, parents before children."""
        keys = [ROOT_NODE]
        for group in self.groups:
            keys.append(group.id)
            keys.extend(group.children)
        return keys

    def parent_node(self, node: str) -> str | None:
        if node == ROOT_NODE:
            return None
        for group in self.groups:
            if node == group.id:
                return ROOT_NODE
            if node in group.children:
                return group.id
        raise KeyError(node)

    def group(self, group_id: str) -> CategoryGroup | None:
        for group in self.groups:
            if group.id == group_id:
                return group
        return None

    def region_name(self, region: str) -> str:
        if region == COMPOSITE_REGION:
            return self.composite_name
        return self.region_names[region]


def default_hierarchy() -> Hierarchy:
    if len(REGION_PROFILES) != 2:
        raise ValueError("The weighted network view needs exactly two concrete regions.")
    return Hierarchy(
        groups=tuple(
            CategoryGroup(id=g["id"], name=g["name"], children=tuple(g["children"]))
            for g in HIERARCHY_CONFIG
        )
    )
