from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

SALES_DEPARTMENT = "Sales"

SALES_TEAMS: List[str] = ["Achievers", "Passionate", "Concord", "Dynamic"]

PRODUCT_CATALOG: Dict[str, List[str]] = {
    "Achievers": [
        "Asvon Tab 10/100mg 30s",
        "Atoxan 30mg Tab.",
        "D-ABS injection (IM)",
        "D-ABS injection (IM) 5s",
        "Pentallin Syp. IVY",
        "Oplex 50mg/5ml Syrup 120ml",
        "Roplex 50mg/5ml Syrup 120ml",
        "Swicef 100mg/5ml Susp.",
        "Swicef DS 200mg/5ml Susp.",
        "Vitaglobin Plus Syp",
        "Vitaglobin Syp.",
        "VITAGLOBIN Syrup 120ml",
        "Vonz Tab 10mg 30s",
        "Vonz Tab 20mg 30s",
    ],
    "Passionate": [
        "Cyestra Tablet",
        "Ferriboxy Injection 500mg / 10ml",
        "LER 2.5mg Tablet",
        "Neet",
        "Nomo-D 10/10mg Tablet",
        "Oplex F 100mg/0.35mg 30s Tab",
        "Roplex F 100mg/0.35mg 30s Tab",
        "Swicef 400mg Cap.",
        "Vitaglobin Tablets",
    ],
    "Concord": ["Gaviscon Liquid", "Panadol 500mg", "Brufen 400mg", "Augmentin 625mg"],
    "Dynamic": ["Solu-Cortef 100mg", "Voren Inj", "Dicloran Gel", "Xylocaine 2%"],
}

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_product_name(text: object) -> str:
    """Matching key for a product label: lowercase ASCII letters and digits only."""
    if text is None:
        return ""
    return _NON_ALNUM.sub("", str(text).lower()).strip()


def match_product(text: object) -> Optional[Tuple[str, str]]:
    """Return (team, canonical product) for a free-text label, first match in catalog order."""
    key = normalize_product_name(text)
    if not key:
        return None
    for team in SALES_TEAMS:
        for product in PRODUCT_CATALOG[team]:
            if normalize_product_name(product) == key:
                return team, product
    return None
