"""LocalLineItemAdapter 테스트."""

from decimal import Decimal
from pathlib import Path

import pytest

from core.domain.errors import DataSourceError
from core.domain.models.line_item import (
    NO_MATCH_KEY,
    FsDiv,
    NormalizedCache,
    RawLineItem,
    ReportScope,
    ReportType,
    StatementType,
)
from core.services.backfill_service import BackfillService
from core.services.canonical_catalog import CanonicalCatalog
from core.services.classification_service import AccountClassifier
from infra.adapters.local_line_item_adapter import LocalLineItemAdapter


def create_line(corp_code: str, sj_div: StatementType, account_id, account_nm, amount: str,
                year: int = 2023) -> RawLineItem:
    return RawLineItem(
        corp_code=corp_code,
        bsns_year=year,
        reprt_code=ReportType.ANNUAL,
        fs_div=FsDiv.SEPARATE,
        sj_div=sj_div,
        account_id=account_id,
        account_nm=account_nm,
        thstrm_amount=Decimal(amount),
        frmtrm_amount=None,
        ord=1,
        currency="KRW",
        corp_name=f"{corp_code}사",
    )


@pytest.fixture
def adapter(tmp_path: Path) -> LocalLineItemAdapter:
    return LocalLineItemAdapter(root_dir=tmp_path / "fnltt")


@pytest.fixture
def scope() -> ReportScope:
    return ReportScope(2023, ReportType.ANNUAL, FsDiv.SEPARATE, StatementType.BS)


@pytest.fixture
def stored(adapter):
    lines = [
        create_line("A", StatementType.BS, "ifrs-full_Assets", "자산총계", "1000"),
        create_line("A", StatementType.CIS, "ifrs-full_Revenue", "매출액", "500"),
        create_line("B", StatementType.BS, None, "총자산", "2000"),
        create_line("B", StatementType.BS, None, "기타계정", "1"),
        create_line("B", StatementType.BS, None, "총자산", "1800", year=2022),
    ]
    assert adapter.save_lines(lines) == 5
    return lines


def test_read_lines_filters_scope(adapter, scope, stored):
    items = adapter.read_lines(scope)

    assert [(i.corp_code, i.account_nm) for i in items] == [("A", "자산총계"), ("B", "총자산"), ("B", "기타계정")]
    assert items[0].thstrm_amount == Decimal("1000")
    assert items[0].frmtrm_amount is None
    assert items[0].corp_name == "A사"
    assert items[0].row_id == "A:2023:11011:OFS:0"
    assert not items[0].cache.is_complete


def test_read_lines_by_corp_codes(adapter, scope, stored):
    items = adapter.read_lines(scope, ["B", "Z"])
    assert {i.corp_code for i in items} == {"B"}


def test_save_lines_replaces_filing(adapter, scope, stored):
    adapter.save_lines([create_line("A", StatementType.BS, "ifrs-full_Assets", "자산총계", "1100")])

    items = adapter.read_lines(scope, ["A"])
    assert len(items) == 1
    assert items[0].thstrm_amount == Decimal("1100")


def test_find_uncached_respects_limit(adapter, stored):
    assert len(adapter.find_uncached(2)) == 2
    assert len(adapter.find_uncached(100)) == 5


def test_write_cache(adapter, scope, stored):
    row_id = adapter.read_lines(scope, ["A"])[0].row_id
    cache = NormalizedCache("자산총계", "ifrs-full_assets", "BS_TOTAL_ASSETS", 100)

    adapter.write_cache(row_id, cache)

    assert adapter.read_lines(scope, ["A"])[0].cache == cache
    assert row_id not in {i.row_id for i in adapter.find_uncached(100)}


@pytest.mark.parametrize("row_id", ["broken", "A:2023:99999:OFS:0", "A:2023:11011:OFS:x"])
def test_write_cache_invalid_row_id(adapter, stored, row_id):
    with pytest.raises(DataSourceError):
        adapter.write_cache(row_id, NormalizedCache("a", "", NO_MATCH_KEY, None))


def test_write_cache_unknown_row(adapter, stored):
    with pytest.raises(DataSourceError):
        adapter.write_cache("A:2023:11011:OFS:99", NormalizedCache("a", "", NO_MATCH_KEY, None))


def test_corrupted_file_raises(adapter, scope, tmp_path):
    path = tmp_path / "fnltt" / "A" / "2023_11011_OFS.json"
    path.parent.mkdir(parents=True)
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(DataSourceError):
        adapter.read_lines(scope)


@pytest.mark.parametrize("content", ["[]", "[1, 2]", '{"rows": {"a": 1}}', '{"rows": [1]}', "null"])
def test_unexpected_json_shape_raises(adapter, scope, stored, tmp_path, content):
    """JSON 은 올바르지만 형식이 다르면 DataSourceError (AttributeError 가 새지 않음)."""
    path = tmp_path / "fnltt" / "A" / "2023_11011_OFS.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(DataSourceError):
        adapter.read_lines(scope)
    with pytest.raises(DataSourceError):
        adapter.write_cache("A:2023:11011:OFS:0", NormalizedCache("a", "", NO_MATCH_KEY, None))


def test_backfill_is_idempotent(adapter, scope, stored):
    """전체 백필 후 다시 돌리면 갱신 0건."""
    service = BackfillService(adapter, AccountClassifier(CanonicalCatalog.default()))

    assert service.backfill(3).updated == 3
    assert service.backfill(100).updated == 2
    assert service.backfill(100).updated == 0

    caches = {i.account_nm: i.cache for i in adapter.read_lines(scope)}
    assert caches["총자산"].canon_key == "BS_TOTAL_ASSETS"
    assert caches["총자산"].canon_score == 70
    assert caches["기타계정"].canon_key == NO_MATCH_KEY
    assert caches["기타계정"].canon_score is None


def test_backfill_limit_per_call(adapter):
    adapter.save_lines([
        create_line("C", StatementType.BS, None, f"계정{i}", str(i)) for i in range(12)
    ])
    service = BackfillService(adapter, AccountClassifier(CanonicalCatalog.default()))

    assert service.backfill(10).updated == 10
    assert service.backfill(10).updated == 2
    assert service.backfill(10).updated == 0
