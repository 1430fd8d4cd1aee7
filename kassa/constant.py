"""Editable bundled menu and category configuration."""

from __future__ import annotations

# Built-in catalog consumed by kassa.data when every other menu source fails.
DEFAULT_MENU_DOCUMENT: dict[str, list[dict[str, object]]] = {
    "items": [
        {"id": 1, "name": "Espresso", "price": 120, "category": "drinks", "show": True},
        {"id": 2, "name": "Americano", "price": 150, "category": "drinks", "show": True},
        {"id": 3, "name": "Cappuccino", "price": 190, "category": "drinks", "show": True},
        {"id": 4, "name": "Latte", "price": 210, "category": "drinks", "show": True},
        {"id": 5, "name": "Flat White", "price": 230, "category": "drinks", "show": True},
        {"id": 6, "name": "Raf", "price": 250, "category": "drinks", "show": False},
        {"id": 7, "name": "Black Tea", "price": 100, "category": "drinks", "show": True},
        {"id": 8, "name": "Cocoa", "price": 180, "category": "drinks", "show": True},
        {"id": 9, "name": "Croissant", "price": 140, "category": "food", "show": True},
        {"id": 10, "name": "Cheesecake", "price": 260, "category": "food", "show": True},
        {"id": 11, "name": "Sandwich", "price": 280, "category": "food", "show": True},
        {"id": 12, "name": "Cookie", "price": 70, "category": "food", "show": True},
        {"id": 13, "name": "Mulled Wine", "price": 320, "category": "alcohol", "show": False},
        {"id": 14, "name": "Beer", "price": 250, "category": "alcohol", "show": True},
        {"id": 15, "name": "Syrup", "price": 40, "category": "other", "show": True},
        {"id": 16, "name": "Plant Milk", "price": 60, "category": "other", "show": True},
    ],
}

CATEGORY_ORDER: list[str] = ["drinks", "food", "alcohol", "other"]

CATEGORY_LABELS: dict[str, str] = {
    "drinks": "Drinks",
    "food": "Food",
    "alcohol": "Alcohol",
    "other": "Other",
}

# Raw category spellings seen in shared menus, mapped onto CATEGORY_ORDER slugs.
CATEGORY_ALIASES: dict[str, str] = {
    "drink": "drinks",
    "drinks": "drinks",
    "напитки": "drinks",
    "food": "food",
    "еда": "food",
    "alcohol": "alcohol",
    "alcoholic": "alcohol",
    "алкоголь": "alcohol",
    "other": "other",
    "misc": "other",
    "остальное": "other",
    "другое": "other",
}

# Word stems that mark a line as a barista order in the fulfilment view.
COFFEE_KEYWORDS: list[str] = [
    "coffee",
    "espresso",
    "americano",
    "cappuccino",
    "latte",
    "flat",
    "raf",
    "macchiato",
    "коф",
    "капуч",
    "америк",
    "эспресс",
    "латт",
    "раф",
    "макиато",
]

# Short badge per drink; the first matching stem wins.
COFFEE_LETTERS: list[tuple[str, str]] = [
    ("cappuccino", "C"),
    ("americano", "A"),
    ("espresso", "E"),
    ("latte", "L"),
    ("flat", "F"),
    ("raf", "R"),
    ("macchiato", "M"),
    ("капуч", "К"),
    ("амер", "А"),
    ("эспресс", "Э"),
    ("латт", "Л"),
    ("раф", "Р"),
    ("макиато", "М"),
]
