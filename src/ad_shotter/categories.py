"""Ad-spec categories used to organize screenshot presets."""

from __future__ import annotations

PRESET_CATEGORIES: dict[str, str] = {
    "HOMEPAGE": "HOMEPAGE ADVERTISING SPECS",
    "DIRECTORY": "DIRECTORY LANDING PAGE ADVERTISING SPECS",
    "SEARCH": "SEARCH RESULTS PAGE ADVERTISING SPECS",
    "PREMIUM": "PREMIUM LISTING FEATURES",
    "ARTICLE": "ARTICLE DIRECTORY ADVERTISING",
    "TRAVEL": "TRAVEL RESOURCE ADVERTISING",
}

PRESET_SUBCATEGORIES: dict[str, list[str]] = {
    PRESET_CATEGORIES["HOMEPAGE"]: [
        "Ad A: Homepage Premier Feature",
        "Ad B: Homepage Feature",
        "Ad C: Homepage Organizational Feature",
        "Ad E: Homepage Video",
    ],
    PRESET_CATEGORIES["DIRECTORY"]: [
        "Ad F: Directory Headline Photo",
        "Ad G: Premier Sponsorship",
        "Ad H: Directory Premier Feature",
        "Ad I: Directory Featured Program",
        "Ad J: Directory Organizational Feature",
        "Ad L: Directory Video",
    ],
    PRESET_CATEGORIES["SEARCH"]: [
        "Ad M: Results Headline Photo",
        "Ad N: Results Feature",
        "Ad O: Listing Photo",
        "Ad Q: Hot Jobs Listing",
        "Ad R: Results Page Flyer Ad",
    ],
    PRESET_CATEGORIES["PREMIUM"]: [
        "Ad K: Customized Provider Page Cover Photo",
        "Ad T: Listing Cover Photo / Ad D: Customized Listing Cover Photo",
    ],
    PRESET_CATEGORIES["ARTICLE"]: [
        "Ad DD: Article Directory Organizational Feature",
        "Ad EE: Article Directory Feature",
    ],
    PRESET_CATEGORIES["TRAVEL"]: [
        "GG. Travel Resource Homepage Headline Photo",
        "HH. Travel Resources Headline Photo",
        "II. Travel Resource Feature",
        "JJ. Example (Desktop)",
        "KK. Travel Insurance Headline Photo",
        "LL. Travel Insurance Listing Feature",
        "MM. Scholarship Homepage Headline Photo",
        "NN. Embassy Directory Feature",
    ],
}


def ad_type_count() -> int:
    return len(PRESET_CATEGORIES)


def is_known_subcategory(category: str, subcategory: str) -> bool:
    return subcategory in PRESET_SUBCATEGORIES.get(category, [])


__all__ = ["PRESET_CATEGORIES", "PRESET_SUBCATEGORIES", "ad_type_count", "is_known_subcategory"]
