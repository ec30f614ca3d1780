"""
Brand Extractor

Detects brands from product names using keyword lists (model names count:
"Samba" means adidas, "Dunk" means Nike) and fixes brand casing.

Order matters: Jordan is checked before Nike, and the first matching brand
in BRAND_MAP wins.

Example:
    "Air Jordan 1 Retro High OG" -> "Jordan"
    "Samba OG Cloud White" -> "adidas"
    "STONE ISLAND" -> "Stone Island"
"""

import re
from typing import List, Optional, Tuple


BRAND_MAP: List[Tuple[str, List[str]]] = [
    ("Jordan", ["air jordan", "jordan "]),
    ("Nike", ["nike", "air max", "air force", "dunk", "blazer", "vapormax", "air tn"]),
    ("adidas", ["adidas", "yeezy", "ultraboost", "nmd", "stan smith", "superstar", "samba", "gazelle"]),
    ("New Balance", ["new balance", "nb ", "990", "991", "992", "993", "550", "2002r", "1906r", "9060", "1906"]),
    ("ASICS", ["asics", "gel-", "gel lyte"]),
    ("Puma", ["puma", "suede", "rs-x"]),
    ("Converse", ["converse", "chuck taylor", "all star"]),
    ("Vans", ["vans", "old skool", "sk8"]),
    ("Reebok", ["reebok", "club c", "classic leather"]),
    ("Salomon", ["salomon", "xt-6", "xt-4", "speedcross"]),
    ("On", ["on running", "on cloud", "cloudmonster"]),
    ("HOKA", ["hoka", "bondi", "clifton", "speedgoat"]),
    ("Timberland", ["timberland"]),
    ("Dr. Martens", ["dr. martens", "dr martens"]),
    ("UGG", ["ugg"]),
    ("The North Face", ["north face", "tnf"]),
    ("Carhartt WIP", ["carhartt"]),
    ("Stüssy", ["stussy", "stüssy"]),
    ("Ralph Lauren", ["ralph lauren", "polo ralph"]),
    ("Tommy Hilfiger", ["tommy hilfiger"]),
    ("Calvin Klein", ["calvin klein"]),
    ("Hugo Boss", ["hugo boss", "boss "]),
    ("Lacoste", ["lacoste"]),
    ("Moncler", ["moncler"]),
    ("Stone Island", ["stone island"]),
    ("C.P. Company", ["c.p. company", "cp company"]),
    ("Maison Margiela", ["maison margiela", "margiela"]),
    ("Balenciaga", ["balenciaga"]),
    ("Gucci", ["gucci"]),
    ("Prada", ["prada"]),
    ("Versace", ["versace"]),
    ("Alexander McQueen", ["alexander mcqueen", "mcqueen"]),
    ("Rick Owens", ["rick owens"]),
    ("Fear of God", ["fear of god", "essentials"]),
    ("Off-White", ["off-white", "off white"]),
    ("Palm Angels", ["palm angels"]),
    ("Acne Studios", ["acne studios"]),
    ("Our Legacy", ["our legacy"]),
    ("Arc'teryx", ["arc'teryx", "arcteryx"]),
    ("Patagonia", ["patagonia"]),
]

# Brands whose official casing is not title case
BRAND_CASING = {
    "adidas": "adidas",
    "asics": "ASICS",
    "hoka": "HOKA",
    "ugg": "UGG",
    "new balance": "New Balance",
    "stüssy": "Stüssy",
    "stussy": "Stüssy",
}


def extract_brand(name: Optional[str]) -> str:
    """
    Detect brand from a product name.

    Returns:
        Brand name, or "" when no keyword matches
    """
    if not name:
        return ""
    lower = f" {name.lower()} "

    for brand, keywords in BRAND_MAP:
        for keyword in keywords:
            if keyword in lower:
                return brand
    return ""


def normalize_brand(brand: Optional[str]) -> str:
    """
    Fix brand casing: known brands get their official casing, ALL-CAPS
    names longer than 3 characters become title case.
    """
    if not brand:
        return ""
    brand = re.sub(r"\s+", " ", brand).strip()
    known = BRAND_CASING.get(brand.lower())
    if known:
        return known
    if len(brand) > 3 and brand.isupper():
        return brand.title()
    return brand
