"""Per-week baby development content with local caching."""
from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Tuple

from pydantic import ValidationError

from .local_store import LocalDataStore
from .schemas import BabyDevelopmentRecord, DevelopmentInput

logger = logging.getLogger(__name__)

# week -> (size comparison, image)
BABY_SIZE_COMPARISONS: Dict[int, Tuple[str, str]] = {
    1: ("Poppy seed", "🌱"),
    2: ("Poppy seed", "🌱"),
    3: ("Poppy seed", "🌱"),
    4: ("Poppyseed", "🌱"),
    5: ("Apple seed", "🍎"),
    6: ("Sweet pea", "🥜"),
    7: ("Blueberry", "🫐"),
    8: ("Kidney bean", "🧫"),
    9: ("Grape", "🍇"),
    10: ("Strawberry", "🍓"),
    11: ("Lime", "🍈"),
    12: ("Plum", "🍑"),
    13: ("Peach", "🍑"),
    14: ("Lemon", "🍋"),
    15: ("Apple", "🍎"),
    16: ("Avocado", "🥑"),
    17: ("Pear", "🍐"),
    18: ("Bell pepper", "🫑"),
    19: ("Tomato", "🍅"),
    20: ("Banana", "🍌"),
    21: ("Carrot", "🥕"),
    22: ("Coconut", "🥥"),
    23: ("Grapefruit", "🍊"),
    24: ("Corn", "🌽"),
    25: ("Cauliflower", "🥦"),
    26: ("Lettuce", "🥬"),
    27: ("Rutabaga", "🥔"),
    28: ("Eggplant", "🍆"),
    29: ("Butternut squash", "🎃"),
    30: ("Cabbage", "🥬"),
    31: ("Coconut", "🥥"),
    32: ("Squash", "🎃"),
    33: ("Pineapple", "🍍"),
    34: ("Cantaloupe", "🍈"),
    35: ("Honeydew melon", "🍈"),
    36: ("Romaine lettuce", "🥬"),
    37: ("Winter melon", "🍈"),
    38: ("Pumpkin", "🎃"),
    39: ("Watermelon", "🍉"),
    40: ("Watermelon", "🍉"),
}

FALLBACK_DESCRIPTION = (
    "Your baby is continuing to grow and develop this week. "
    "Check back soon for more specific information."
)
FALLBACK_FUN_FACT = (
    "Every baby develops at their own pace, and the information provided is a general guideline."
)

DevelopmentFetcher = Callable[[int], DevelopmentInput]


def size_for_week(week: int) -> Tuple[str, str]:
    return BABY_SIZE_COMPARISONS.get(week, BABY_SIZE_COMPARISONS[1])


def fallback_development(week: int) -> BabyDevelopmentRecord:
    size, _ = size_for_week(week)
    return BabyDevelopmentRecord(
        week=week,
        description=FALLBACK_DESCRIPTION,
        key_developments=[],
        fun_fact=FALLBACK_FUN_FACT,
        size=size,
    )


def resolve_baby_development(
    store: LocalDataStore,
    week: int,
    fetch: Optional[DevelopmentFetcher] = None,
) -> BabyDevelopmentRecord:
    """Return development content for a week: cache, then fetch, then fallback.

    Fetched content is cached locally; the generic fallback never is, so a
    later call can still pick up real content once the source recovers.
    """
    cached = store.get_baby_development_data(week)
    if cached is not None:
        return cached
    if fetch is None:
        return fallback_development(week)

    try:
        fetched = fetch(week)
        record = (
            fetched.model_copy(update={"week": week})
            if isinstance(fetched, BabyDevelopmentRecord)
            else BabyDevelopmentRecord.model_validate({**fetched, "week": week})
        )
    except ValidationError as exc:
        logger.warning("Development content for week %s was malformed", week, exc_info=exc)
        return fallback_development(week)
    except Exception as exc:
        logger.exception("Failed to fetch development content for week %s", week, exc_info=exc)
        return fallback_development(week)

    if record.size is None:
        record = record.model_copy(update={"size": size_for_week(week)[0]})
    if not store.save_baby_development_data(week, record):
        logger.info("Development content for week %s not cached locally", week)
    return record
