"""Unit tests for category configuration and ticket bucketing"""

import pytest

from site_viability.domain.categories import (
    CATEGORY_CONFIG,
    BusinessCategory,
    TicketBucket,
    normalize_ticket_bucket,
)


@pytest.mark.parametrize(
    "avg_ticket, expected",
    [
        (0, TicketBucket.LOW),
        (7000, TicketBucket.LOW),
        (7000.5, TicketBucket.MID),
        (15000, TicketBucket.MID),
        (15001, TicketBucket.HIGH),
        ("low", TicketBucket.LOW),
        (" MID ", TicketBucket.MID),
        ("High", TicketBucket.HIGH),
        ("cheap", None),
        (None, None),
        (True, None),
    ],
)
def test_normalize_ticket_bucket(avg_ticket, expected):
    """Test numeric breakpoints and bucket names"""
    assert normalize_ticket_bucket(avg_ticket) == expected


def test_every_category_has_search_config():
    """Test no category is missing provider search parameters"""
    assert set(CATEGORY_CONFIG) == set(BusinessCategory)
    assert all(config.primary_types for config in CATEGORY_CONFIG.values())


def test_food_categories():
    """Test food/drink flag is set only for food categories"""
    food = {category for category, config in CATEGORY_CONFIG.items() if config.is_food}

    assert food == {BusinessCategory.CAFE, BusinessCategory.BAR, BusinessCategory.RESTAURANT}


def test_cafe_searches_multiple_types_and_keyword():
    """Test cafe discovery covers bakeries and take-away plus a keyword query"""
    config = CATEGORY_CONFIG[BusinessCategory.CAFE]

    assert config.primary_types == ("cafe", "bakery", "meal_takeaway")
    assert config.keyword == "cafeteria"
