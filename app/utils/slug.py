"""
Slug generation utility
"""
import re
import unicodedata
from typing import Iterable


def generate_slug(text: str) -> str:
    """
    Generate a URL-friendly slug from text

    Args:
        text: Text to convert to slug

    Returns:
        URL-friendly slug ("Home & Kitchen" -> "home-kitchen")
    """
    text = unicodedata.normalize("NFKD", text.lower())
    text = text.encode("ascii", "ignore").decode("ascii")

    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[-\s_]+", "-", text)

    return text.strip("-") or "category"


def make_unique_slug(base_slug: str, existing_slugs: Iterable[str], max_length: int = 255) -> str:
    """
    Make a slug unique by appending -1, -2, ... until it no longer collides
    """
    taken = set(existing_slugs)
    slug = base_slug[:max_length]
    counter = 1

    while slug in taken:
        suffix = f"-{counter}"
        slug = f"{base_slug[:max_length - len(suffix)]}{suffix}"
        counter += 1

    return slug
