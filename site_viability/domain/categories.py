"""Business categories, verdicts and the ticket-bucket signal"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class BusinessCategory(str, Enum):
    CAFE = "CAFE"
    BAR = "BAR"
    RESTAURANT = "RESTAURANT"
    KIOSK = "KIOSK"
    GYM = "GYM"
    HAIR_SALON = "HAIR_SALON"
    PHARMACY = "PHARMACY"
    PET_SHOP = "PET_SHOP"
    LAUNDRY = "LAUNDRY"
    ELECTRONICS_REPAIR = "ELECTRONICS_REPAIR"
    BEAUTY_SALON = "BEAUTY_SALON"
    DENTIST = "DENTIST"
    SUPERMARKET = "SUPERMARKET"
    CLOTHING = "CLOTHING"
    BOOKSTORE = "BOOKSTORE"
    CO_WORKING = "CO_WORKING"


class Verdict(str, Enum):
    DO_NOT_OPEN = "DO_NOT_OPEN"
    OPEN_WITH_CONDITIONS = "OPEN_WITH_CONDITIONS"
    OPEN = "OPEN"


class TicketBucket(str, Enum):
    LOW = "low"
    MID = "mid"
    HIGH = "high"


class RecommendationAngle(str, Enum):
    SPECIALTY = "specialty"
    TAKE_AWAY = "take-away"
    HOURS = "hours"
    PRICING = "pricing"
    NICHE_AUDIENCE = "niche-audience"


@dataclass(frozen=True)
class CategoryConfig:
    """Provider search parameters for a business category"""

    primary_types: Tuple[str, ...]
    keyword: Optional[str] = None
    is_food: bool = False


CATEGORY_CONFIG: Dict[BusinessCategory, CategoryConfig] = {
    BusinessCategory.CAFE: CategoryConfig(("cafe", "bakery", "meal_takeaway"), keyword="cafeteria", is_food=True),
    BusinessCategory.BAR: CategoryConfig(("bar",), is_food=True),
    BusinessCategory.RESTAURANT: CategoryConfig(("restaurant",), is_food=True),
    BusinessCategory.KIOSK: CategoryConfig(("convenience_store",), keyword="kiosco"),
    BusinessCategory.GYM: CategoryConfig(("gym",)),
    BusinessCategory.HAIR_SALON: CategoryConfig(("hair_salon",)),
    BusinessCategory.PHARMACY: CategoryConfig(("pharmacy",)),
    BusinessCategory.PET_SHOP: CategoryConfig(("pet_store",)),
    BusinessCategory.LAUNDRY: CategoryConfig(("laundry",)),
    BusinessCategory.ELECTRONICS_REPAIR: CategoryConfig(("electronics_store",), keyword="repair service"),
    BusinessCategory.BEAUTY_SALON: CategoryConfig(("beauty_salon",)),
    BusinessCategory.DENTIST: CategoryConfig(("dentist",)),
    BusinessCategory.SUPERMARKET: CategoryConfig(("supermarket",)),
    BusinessCategory.CLOTHING: CategoryConfig(("clothing_store",)),
    BusinessCategory.BOOKSTORE: CategoryConfig(("book_store",)),
    BusinessCategory.CO_WORKING: CategoryConfig(("establishment",), keyword="coworking"),
}

# Average-ticket breakpoints (local currency units)
LOW_TICKET_MAX = 7_000
MID_TICKET_MAX = 15_000


def normalize_ticket_bucket(avg_ticket: str | int | float | None) -> TicketBucket | None:
    """
    Derive the ticket bucket from an average-ticket signal.

    Numbers use fixed breakpoints (<=7000 low, <=15000 mid, else high).
    Strings are accepted only when they already name a bucket.
    """
    if avg_ticket is None or isinstance(avg_ticket, bool):
        return None

    if isinstance(avg_ticket, str):
        normalized = avg_ticket.strip().lower()
        try:
            return TicketBucket(normalized)
        except ValueError:
            return None

    if avg_ticket <= LOW_TICKET_MAX:
        return TicketBucket.LOW
    if avg_ticket <= MID_TICKET_MAX:
        return TicketBucket.MID
    return TicketBucket.HIGH
