from pulse.catalog import PRODUCT_CATALOG, SALES_TEAMS, match_product, normalize_product_name


def test_normalize_ignores_case_punctuation_and_spacing():
    assert normalize_product_name("Panadol, 500mg") == normalize_product_name("panadol 500mg")
    assert normalize_product_name("  D-ABS injection (IM) ") == "dabsinjectionim"
    assert normalize_product_name(None) == ""


def test_match_product_returns_team_and_canonical_name():
    assert match_product("PANADOL-500MG") == ("Concord", "Panadol 500mg")
    assert match_product("vonz tab 10mg 30s") == ("Achievers", "Vonz Tab 10mg 30s")
    assert match_product("Xylocaine 2 %") == ("Dynamic", "Xylocaine 2%")


def test_match_product_unknown_or_blank():
    assert match_product("Aspirin 75mg") is None
    assert match_product("  ") is None


def test_catalog_covers_every_team():
    assert set(PRODUCT_CATALOG) == set(SALES_TEAMS)
    assert all(PRODUCT_CATALOG[t] for t in SALES_TEAMS)
