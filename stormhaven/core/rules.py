"""Supply advisory rules - Pure functions.

This module maps a hurricane category and its distance from the user to an
ordered list of recommended actions and supplies. The rules live in a
declarative table; evaluation is a lookup with no side effects.
"""

from dataclasses import dataclass

from stormhaven.core.errors import InvalidCategoryError


@dataclass(frozen=True)
class SupplyContext:
    """Input to a supply advisory.

    Attributes:
        distance_miles: Distance between the user and the storm
        category: Saffir-Simpson category, 1-5
    """
    distance_miles: float
    category: int


@dataclass(frozen=True)
class DistanceBand:
    """A half-open distance interval and its recommendation set.

    Attributes:
        max_distance_miles: Exclusive upper bound, None for unbounded
        recommendations: Ordered actions and supplies for this band
    """
    max_distance_miles: float | None
    recommendations: tuple[str, ...]

    def contains(self, distance_miles: float) -> bool:
        """Check if a distance falls below this band's upper bound."""
        return self.max_distance_miles is None or distance_miles < self.max_distance_miles


# Bands are ordered nearest first; the last band of every category is unbounded.
ADVISORY_TABLE: dict[int, tuple[DistanceBand, ...]] = {
    5: (
        DistanceBand(None, (
            "Immediate evacuation required",
            "Emergency contacts",
            "Important documents",
            "First-aid kit",
            "Water for 5 days",
            "Non-perishable food for 5 days",
            "Flashlight",
            "Batteries",
            "Weather radio",
        )),
    ),
    4: (
        DistanceBand(50, (
            "Evacuation highly recommended",
            "First-aid kit",
            "Water for 4 days",
            "Non-perishable food for 4 days",
            "Important documents",
            "Flashlight",
            "Batteries",
            "Weather radio",
        )),
        DistanceBand(100, (
            "Prepare to evacuate",
            "First-aid kit",
            "Water for 3 days",
            "Non-perishable food for 3 days",
            "Flashlight",
            "Batteries",
        )),
        DistanceBand(None, (
            "Monitor the situation closely",
            "Basic first-aid kit",
            "Water",
            "Food",
            "Keep extra batteries",
        )),
    ),
    3: (
        DistanceBand(50, (
            "Possible evacuation",
            "First-aid kit",
            "Water for 3 days",
            "Non-perishable food for 3 days",
            "Flashlight",
            "Batteries",
        )),
        DistanceBand(100, (
            "Prepare for the storm",
            "Canned food",
            "Water",
            "Basic first-aid kit",
            "Portable phone charger",
        )),
        DistanceBand(None, (
            "Monitor the storm",
            "Basic emergency kit",
            "Extra batteries",
            "Canned food",
            "Water",
        )),
    ),
    2: (
        DistanceBand(50, (
            "Stay prepared for potential evacuation",
            "Water",
            "Food",
            "First-aid kit",
            "Flashlight",
        )),
        DistanceBand(None, (
            "Monitor the news",
            "Basic supplies",
            "Batteries",
            "Flashlight",
        )),
    ),
    1: (
        DistanceBand(50, (
            "Prepare for strong winds",
            "Flashlight",
            "First-aid kit",
            "Water",
            "Batteries",
        )),
        DistanceBand(None, (
            "Stay alert but no immediate action",
            "Monitor the news",
            "Basic emergency supplies",
        )),
    ),
}


def is_valid_category(category: object) -> bool:
    """Check if a category has an entry in the advisory table.

    Pure function.
    """
    return (
        isinstance(category, int)
        and not isinstance(category, bool)
        and category in ADVISORY_TABLE
    )


def find_band(category: int, distance_miles: float) -> DistanceBand:
    """Find the distance band that applies to a valid category.

    Pure function. A distance that matches no bounded band (including NaN)
    lands in the category's unbounded band.
    """
    bands = ADVISORY_TABLE[category]
    for band in bands:
        if band.contains(distance_miles):
            return band
    return bands[-1]


def recommend(category: int, distance_miles: float) -> list[str]:
    """Recommend actions and supplies for a storm.

    Pure function. Total over its inputs: an unknown category yields a
    single message instead of an exception.

    Args:
        category: Hurricane category, 1-5
        distance_miles: Distance between the user and the storm

    Returns:
        Ordered recommendation strings
    """
    if not is_valid_category(category):
        return [InvalidCategoryError.message]

    return list(find_band(category, distance_miles).recommendations)


def evaluate(context: SupplyContext) -> list[str]:
    """Recommend actions and supplies for a SupplyContext.

    Pure function.
    """
    return recommend(context.category, context.distance_miles)
