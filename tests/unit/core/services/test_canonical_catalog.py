"""CanonicalCatalog 테스트."""

import pytest

from core.domain.models.line_item import StatementType
from core.services.canonical_catalog import CanonicalCatalog, CanonicalDefinition, load_catalog


TOML_CATALOG = """
[[definitions]]
key = "BS_CASH"
statement_type = "BS"
label = "현금및현금성자산"
ids = ["ifrs-full_CashAndCashEquivalents"]
names = ["현금및현금성자산", "현금 및 현금성자산"]

[[definitions]]
key = "PL_REVENUE"
statement_type = "CIS"
ids = ["ifrs-full_Revenue"]
names = ["매출액"]
excludes = ["원가"]
"""


@pytest.fixture
def catalog():
    return CanonicalCatalog.default()


def test_default_catalog_size(catalog):
    """내장 카탈로그: BS 17개, CIS 28개."""
    assert len(catalog.definitions_for(StatementType.BS)) == 17
    assert len(catalog.definitions_for(StatementType.CIS)) == 28
    assert len(catalog) == 45


def test_lookup_and_label(catalog):
    assert "BS_TOTAL_ASSETS" in catalog
    assert "UNKNOWN_KEY" not in catalog
    assert catalog.label("PL_REVENUE") == "매출액"
    assert catalog.label("UNKNOWN_KEY") == "UNKNOWN_KEY"
    assert catalog.get("UNKNOWN_KEY") is None


def test_list_options_keeps_registration_order(catalog):
    """선택 목록은 등록 순서를 유지합니다."""
    options = catalog.list_options(StatementType.BS)
    assert options[0] == {"key": "BS_TOTAL_ASSETS", "label": "자산총계"}
    assert all(o["key"].startswith("BS_") for o in options)
    assert catalog.list_options(StatementType.CIS)[0]["key"] == "PL_REVENUE"


def test_definition_build_normalizes_variants():
    definition = CanonicalDefinition.build(
        key="BS_CASH",
        statement_type="BS",
        label="현금",
        ids=["  IFRS-Full_Cash "],
        names=["현금 및 현금성자산", ""],
        excludes=["Non-Current"],
    )
    assert definition.statement_type is StatementType.BS
    assert definition.ids == frozenset({"ifrs-full_cash"})
    assert definition.names == frozenset({"현금및현금성자산"})
    # 제외어는 ID용/계정명용 정규화 결과를 모두 가진다
    assert {"non-current", "noncurrent"} <= definition.excludes
    assert definition.is_excluded("ifrs-full_noncurrentassets")


def test_duplicate_key_rejected():
    definition = CanonicalDefinition.build("BS_CASH", "BS", "현금", names=["현금"])
    with pytest.raises(ValueError):
        CanonicalCatalog([definition, definition])


def test_variant_containing_own_exclude_rejected():
    """자기 제외어를 포함한 변형은 절대 매칭될 수 없으므로 거부합니다."""
    definition = CanonicalDefinition.build("PL_REVENUE", "CIS", "매출액", names=["매출원가"], excludes=["원가"])
    with pytest.raises(ValueError):
        CanonicalCatalog([definition])


def test_from_toml(tmp_path):
    path = tmp_path / "catalog.toml"
    path.write_text(TOML_CATALOG, encoding="utf-8")

    catalog = CanonicalCatalog.from_toml(path)

    assert len(catalog) == 2
    assert catalog.label("BS_CASH") == "현금및현금성자산"
    # label 생략 시 키를 그대로 사용
    assert catalog.label("PL_REVENUE") == "PL_REVENUE"
    assert catalog.get("BS_CASH").names == frozenset({"현금및현금성자산"})


def test_from_toml_without_definitions(tmp_path):
    path = tmp_path / "empty.toml"
    path.write_text("title = 'empty'\n", encoding="utf-8")
    with pytest.raises(ValueError):
        CanonicalCatalog.from_toml(path)


def test_from_toml_missing_required_field(tmp_path):
    path = tmp_path / "broken.toml"
    path.write_text('[[definitions]]\nkey = "BS_CASH"\nnames = ["현금"]\n', encoding="utf-8")
    with pytest.raises(ValueError):
        CanonicalCatalog.from_toml(path)


def test_load_catalog_from_env(tmp_path, monkeypatch):
    path = tmp_path / "catalog.toml"
    path.write_text(TOML_CATALOG, encoding="utf-8")
    monkeypatch.setenv("CANON_CATALOG_PATH", str(path))

    assert len(load_catalog()) == 2


def test_load_catalog_default(monkeypatch):
    monkeypatch.delenv("CANON_CATALOG_PATH", raising=False)
    assert len(load_catalog()) == 45
