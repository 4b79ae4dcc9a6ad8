"""Fixed marketplace vocabularies: categories, conditions, roles, statuses and geography."""

from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    SELLER = "SELLER"
    USER = "USER"


class Condition(str, Enum):
    NEW = "New"
    LIKE_NEW = "Like New"
    USED = "Used"
    DEFECTIVE = "For Parts"


class ListingStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SOLD = "sold"
    REJECTED = "rejected"


CATEGORY_ALL = "All"

CATEGORIES = [
    "Electronics",
    "Fashion",
    "Home & Living",
    "Vehicles",
    "Hobbies",
    "Property",
    "Services",
    "Other",
]

# region -> province -> cities
PH_LOCATIONS = {
    "NCR": {
        "Metro Manila": ["Manila", "Quezon City", "Makati", "Taguig", "Pasig"],
    },
    "Region VII (Central Visayas)": {
        "Cebu": ["Cebu City", "Mandaue", "Lapu-Lapu", "Talisay"],
        "Bohol": ["Tagbilaran"],
    },
    "Region XI (Davao Region)": {
        "Davao del Sur": ["Davao City", "Digos"],
    },
}


def is_known_location(region: str | None, province: str | None, city: str | None) -> bool:
    provinces = PH_LOCATIONS.get(region or "")
    if not provinces:
        return False
    return (city or "") in provinces.get(province or "", [])
