"""Heuristic enrichment from a record's own fields.

Title generation, department inference and item-type inference read only
the record being enriched. Nothing here consults lookup tables or rules.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from ..config.schemas import DEFAULT_RECOMMENDED_FIELDS, DepartmentDefaults
from ..models.enrichment import Confidence, EnrichmentSuggestion
from ..utils.text_normalization import capitalize_words, collapse_whitespace, is_missing, to_text


DEPARTMENT_LABELS = {
    "womens": "Women's",
    "mens": "Men's",
    "girls": "Girls'",
    "boys": "Boys'",
    "baby-girls": "Baby Girls'",
    "baby-boys": "Baby Boys'",
    "unisex-adult": "Unisex Adult",
    "unisex-child": "Unisex Child",
}

# Clothing keyword -> marketplace item_type keywords, most specific first.
ITEM_TYPE_KEYWORDS: dict[str, list[str]] = {
    # Tops
    "shirt": ["shirts", "tops"],
    "blouse": ["blouses", "tops"],
    "t-shirt": ["t-shirts", "tops"],
    "tee": ["t-shirts", "tops"],
    "tank": ["tank-tops", "tops"],
    "sweater": ["sweaters", "tops"],
    "cardigan": ["cardigans", "sweaters", "tops"],
    "hoodie": ["hoodies", "sweatshirts", "tops"],
    "sweatshirt": ["sweatshirts", "tops"],
    "polo": ["polo-shirts", "shirts", "tops"],
    "tunic": ["tunics", "tops"],
    # Bottoms
    "pants": ["pants", "bottoms"],
    "jeans": ["jeans", "pants", "bottoms"],
    "trousers": ["trousers", "pants", "bottoms"],
    "shorts": ["shorts", "bottoms"],
    "skirt": ["skirts", "bottoms"],
    "leggings": ["leggings", "pants", "bottoms"],
    # Dresses
    "dress": ["dresses"],
    "gown": ["gowns", "dresses"],
    # Outerwear
    "jacket": ["jackets", "outerwear"],
    "coat": ["coats", "outerwear"],
    "blazer": ["blazers", "jackets", "outerwear"],
    "vest": ["vests", "outerwear"],
    "parka": ["parkas", "coats", "outerwear"],
    # Activewear
    "athletic": ["activewear", "athletic-apparel"],
    "sports": ["activewear", "athletic-apparel"],
    "yoga": ["yoga-apparel", "activewear"],
    "running": ["running-apparel", "activewear"],
    # Sleepwear
    "pajama": ["pajamas", "sleepwear"],
    "nightgown": ["nightgowns", "sleepwear"],
    "robe": ["robes", "sleepwear"],
    # Underwear
    "underwear": ["underwear"],
    "bra": ["bras", "underwear"],
    "panties": ["panties", "underwear"],
    "boxers": ["boxers", "underwear"],
    "briefs": ["briefs", "underwear"],
    # Swimwear
    "swimsuit": ["swimwear", "swimsuits"],
    "bikini": ["bikinis", "swimwear"],
    "swim": ["swimwear"],
    # Accessories
    "scarf": ["scarves", "accessories"],
    "hat": ["hats", "accessories"],
    "gloves": ["gloves", "accessories"],
    "belt": ["belts", "accessories"],
    "tie": ["ties", "accessories"],
    # Suits
    "suit": ["suits"],
    "tuxedo": ["tuxedos", "suits"],
}


def _word_pattern(words: Iterable[str]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(word) for word in sorted(words, key=len, reverse=True))
    return re.compile(rf"(?<![a-z0-9])(?:{alternatives})(?![a-z0-9])")


UNISEX_WORDS = _word_pattern(["unisex", "gender neutral", "all gender"])
KIDS_WORDS = _word_pattern(["kids", "child", "children", "youth", "junior"])
BABY_WORDS = _word_pattern(["baby", "infant", "newborn", "onesie", "bodysuit", "romper"])
BABY_GIRL_HINTS = _word_pattern(["girl", "girls", "pink", "princess", "dress"])
BABY_BOY_HINTS = _word_pattern(["boy", "boys", "blue"])
KIDS_GIRL_HINTS = _word_pattern(["girl", "girls", "pink", "princess", "dress", "skirt"])
KIDS_BOY_HINTS = _word_pattern(["boy", "boys"])
WOMENS_WORDS = _word_pattern(["women", "womens", "women's", "ladies", "female"])
MENS_WORDS = _word_pattern(["men", "mens", "men's", "male", "gentleman"])
WOMENS_CLOTHING = _word_pattern(["dress", "blouse", "skirt", "leggings", "tunic"])
MENS_CLOTHING = _word_pattern(["suit", "tie", "tuxedo"])

CHILD_SIZE_TOKENS = frozenset({"2t", "3t", "4t", "5t", "6", "7", "8", "10", "12", "14", "16"})

_SENTENCE_END = re.compile(r"[.!?]")
_SIZE_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")


def _field_text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if is_missing(value) else to_text(value).strip()


def _department_label(department: str) -> str:
    return DEPARTMENT_LABELS.get(department.lower().strip()) or capitalize_words(department)


def _key_feature(data: Mapping[str, Any], word_count: int) -> str:
    candidates = [_field_text(data, "bullet_point1")]
    description = _field_text(data, "product_description")
    if description:
        candidates.append(_SENTENCE_END.split(description)[0])

    for text in candidates:
        if not text:
            continue
        feature = " ".join(text.split()[:word_count])
        if 3 < len(feature) < 50:
            return capitalize_words(feature)
    return ""


def generate_title(data: Mapping[str, Any], key_feature_words: int = 4) -> str:
    """Build a title as brand, department, product type, key feature, color, size.

    Missing parts are skipped. Only the first character of the result is
    forced to upper case.

    Examples:
        >>> generate_title({"brand_name": "CECE", "department_name": "womens",
        ...                 "clothing_type": "wrap dress", "color_name": "navy",
        ...                 "size_name": "XL"})
        "CECE Women's Wrap Dress Navy XL"
    """
    department = _field_text(data, "department_name")
    product_type = _field_text(data, "clothing_type") or _field_text(data, "item_type")
    parts = [
        _field_text(data, "brand_name"),
        _department_label(department) if department else "",
        capitalize_words(product_type),
        _key_feature(data, key_feature_words),
        capitalize_words(_field_text(data, "color_name")),
        _field_text(data, "size_name"),
    ]
    title = collapse_whitespace(" ".join(part for part in parts if part))
    if not title:
        return ""
    return title[0].upper() + title[1:]


def _has_child_size(size_name: str) -> bool:
    return any(token in CHILD_SIZE_TOKENS for token in _SIZE_TOKEN_SPLIT.split(size_name))


def _gendered(
    text: str, girls: re.Pattern[str], boys: re.Pattern[str], girls_label: str, boys_label: str
) -> str | None:
    has_girls = girls.search(text) is not None
    has_boys = boys.search(text) is not None
    if has_girls and not has_boys:
        return girls_label
    if has_boys and not has_girls:
        return boys_label
    return None


def infer_department(
    data: Mapping[str, Any], defaults: DepartmentDefaults | None = None
) -> str | None:
    """Infer the marketplace department from clothing type, size, title and description.

    Checked in priority order: unisex words, baby words, kids words or child
    sizes, explicit gender words, gender-associated clothing types. Ties within
    the baby and kids groups fall back to the configured defaults, and a record
    with a clothing type but no other signal falls back to the adult default.

    Returns:
        Department code such as ``womens`` or ``baby-boys``, or None
    """
    defaults = defaults or DepartmentDefaults()
    clothing_type = _field_text(data, "clothing_type").lower()
    size_name = _field_text(data, "size_name").lower()
    text = " ".join(
        [
            clothing_type,
            size_name,
            _field_text(data, "item_name").lower(),
            _field_text(data, "product_description").lower(),
        ]
    )

    kids_signal = KIDS_WORDS.search(text) is not None or _has_child_size(size_name)

    if UNISEX_WORDS.search(text):
        return "unisex-child" if kids_signal else "unisex-adult"

    if BABY_WORDS.search(text):
        return _gendered(text, BABY_GIRL_HINTS, BABY_BOY_HINTS, "baby-girls", "baby-boys") or defaults.baby

    if kids_signal:
        return _gendered(text, KIDS_GIRL_HINTS, KIDS_BOY_HINTS, "girls", "boys") or defaults.kids

    explicit = _gendered(text, WOMENS_WORDS, MENS_WORDS, "womens", "mens")
    if explicit:
        return explicit

    by_clothing = _gendered(clothing_type, WOMENS_CLOTHING, MENS_CLOTHING, "womens", "mens")
    if by_clothing:
        return by_clothing

    if clothing_type:
        return defaults.adult
    return None


def infer_item_types(data: Mapping[str, Any]) -> list[str] | None:
    """Marketplace item_type keywords matched in the clothing type, title and description.

    Returns:
        De-duplicated keywords in table order, or None when nothing matched or
        the record has neither a clothing type nor a title
    """
    clothing_type = _field_text(data, "clothing_type").lower()
    item_name = _field_text(data, "item_name").lower()
    if not clothing_type and not item_name:
        return None

    text = f"{clothing_type} {item_name} {_field_text(data, 'product_description').lower()}"
    keywords: list[str] = []
    for keyword, item_types in ITEM_TYPE_KEYWORDS.items():
        if keyword in text:
            keywords.extend(item_types)

    unique = list(dict.fromkeys(keywords))
    return unique or None


def optional_field_suggestions(
    data: Mapping[str, Any], fields: Iterable[str] | None = None
) -> list[EnrichmentSuggestion]:
    """One low-confidence, empty-valued nudge per missing recommended field."""
    fields = DEFAULT_RECOMMENDED_FIELDS if fields is None else fields
    return [
        EnrichmentSuggestion(
            field=field,
            suggested_value="",
            confidence=Confidence.LOW,
            reason=(
                f'Recommended optional field "{field}" is missing. '
                "Adding this field can improve listing quality."
            ),
        )
        for field in fields
        if is_missing(data.get(field))
    ]
