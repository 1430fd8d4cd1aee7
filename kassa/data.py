"""Static menu data."""

from __future__ import annotations

from kassa.constant import CATEGORY_LABELS, DEFAULT_MENU_DOCUMENT
from kassa.models import MenuSnapshot
from kassa.normalizer import normalize

# Last fallback tier: validated once at import, so it cannot fail later.
BUNDLED_MENU: MenuSnapshot = normalize(DEFAULT_MENU_DOCUMENT)


def label_for_category(slug: str) -> str:
    """Get display label for a category slug."""
    return CATEGORY_LABELS.get(slug, slug.title())
