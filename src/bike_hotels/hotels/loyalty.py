"""Brand name to loyalty-program lookup."""
from __future__ import annotations

from typing import Optional

OTHER_PROGRAM = "Other"

BRAND_TO_LOYALTY: dict[str, str] = {
    # Accor
    "Accor Live Limitless (ALL)": "Accor Le Club",
    # Best Western
    "Best Western": "Best Western Rewards",
    "Best Western Plus": "Best Western Rewards",
    "Best Western Rewards": "Best Western Rewards",
    # Choice
    "Cambria Hotels": "Choice Privileges",
    "Choice Privileges": "Choice Privileges",
    "Choice Priviliges": "Choice Privileges",  # misspelt upstream
    # Hilton
    "DoubleTree by Hilton": "Hilton Honors",
    "Hampton by Hilton": "Hilton Honors",
    "Hampton Inn & Suites": "Hilton Honors",
    "Hilton": "Hilton Honors",
    "Hilton Garden Inn": "Hilton Honors",
    "Hilton Honors": "Hilton Honors",
    "Hilton Tempo": "Hilton Honors",
    "Home2 Suites": "Hilton Honors",
    "Homewood Suites": "Hilton Honors",
    "Tapestry Collection": "Hilton Honors",
    "Tru by Hilton": "Hilton Honors",
    # IHG
    "Holiday Inn": "IHG Rewards Club",
    "Kimpton": "IHG Rewards Club",
    "IHG Rewards": "IHG Rewards Club",
    # Marriott
    "AC Hotel": "Marriott Bonvoy",
    "Courtyard Marriott": "Marriott Bonvoy",
    "Delta Hotel": "Marriott Bonvoy",
    "Le Meridien": "Marriott Bonvoy",
    "Marriott": "Marriott Bonvoy",
    "Marriott Bonvoy": "Marriott Bonvoy",
    "Renaissance": "Marriott Bonvoy",
    "Residence Inn": "Marriott Bonvoy",
    "Ritz-Carlton": "Marriott Bonvoy",
    "St. Regis": "Marriott Bonvoy",
    "Tribute Portfolio": "Marriott Bonvoy",
    "Westin": "Marriott Bonvoy",
    # Radisson
    "Radisson Rewards": "Radisson Rewards",
    # Hyatt
    "Destination Hotels": "World of Hyatt",
    "World of Hyatt": "World of Hyatt",
    # Wyndham
    "La Quinta": "Wyndham Rewards",
    "Wyndham Rewards": "Wyndham Rewards",
}

LOYALTY_PROGRAMS: frozenset[str] = frozenset(BRAND_TO_LOYALTY.values())

_LOWERCASE_BRANDS = {brand.lower(): program for brand, program in BRAND_TO_LOYALTY.items()}


def loyalty_program_for(brand_name: Optional[str]) -> str:
    if not brand_name:
        return OTHER_PROGRAM
    return _LOWERCASE_BRANDS.get(brand_name.strip().lower(), OTHER_PROGRAM)
