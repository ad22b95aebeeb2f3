"""ComparisonService 테스트."""

from decimal import Decimal
from typing import Optional
from unittest.mock import MagicMock

import pytest

from core.domain.errors import DataSourceError, ValidationError
from core.domain.models.line_item import (
    NO_MATCH_KEY,
    FsDiv,
    NormalizedCache,
    RawLineItem,
    ReportScope,
    ReportType,
    StatementType,
)
from core.domain.models.reconciliation import (
    AccountSelector,
    CanonSelector,
    ComparisonMode,
    ComparisonRow,
)
from core.ports.line_item_port import LineItemPort
from core.services.canonical_catalog import CanonicalCatalog
from core.services.classification_service import AccountClassifier
from core.services.comparison_service import (
    CanonCandidate,
    ComparisonService,
    is_better_candidate,
    selector_from_params,
)


@pytest.fixture
def scope():
    return ReportScope(2023, ReportType.ANNUAL, FsDiv.SEPARATE, StatementType.BS)


@pytest.fixture
def service():
    return ComparisonService(AccountClassifier(CanonicalCatalog.default()))


def create_line(corp_code: str, account_id: Optional[str], account_nm: Optional[str],
                thstrm: Optional[str], frmtrm: Optional[str] = None,
                cache: Optional[NormalizedCache] = None, year: int = 2023) -> RawLineItem:
    """테스트용 계정 라인 생성 헬퍼."""
    return RawLineItem(
        corp_code=corp_code,
        bsns_year=year,
        reprt_code=ReportType.ANNUAL,
        fs_div=FsDiv.SEPARATE,
        sj_div=StatementType.BS,
        account_id=account_id,
        account_nm=account_nm,
        thstrm_amount=Decimal(thstrm) if thstrm is not None else None,
        frmtrm_amount=Decimal(frmtrm) if frmtrm is not None else None,
        corp_name=f"{corp_code}사",
        cache=cache,
    )


# ----------------------------------------------------------------------
# 선택자
# ----------------------------------------------------------------------
def test_selector_from_params_canonical():
    mode, selector = selector_from_params("BS_TOTAL_ASSETS", "자산총계", None)
    assert mode == ComparisonMode.CANONICAL
    assert selector == CanonSelector("BS_TOTAL_ASSETS")


def test_selector_from_params_raw():
    mode, selector = selector_from_params(None, " 자산총계 ", "")
    assert mode == ComparisonMode.RAW
    assert selector == AccountSelector(account_id=None, account_nm="자산총계")


def test_selector_from_params_requires_one():
    with pytest.raises(ValidationError):
        selector_from_params("", "  ", None)


# ----------------------------------------------------------------------
# 원본 모드
# ----------------------------------------------------------------------
def test_raw_mode_sums_per_company(service, scope):
    items = [
        create_line("A", None, "현금", "100", "10"),
        create_line("A", None, "현금", "50", "5"),
        create_line("B", None, "현금", "300", "30"),
        create_line("B", None, "예금", "999"),
    ]

    rows = service.compare(scope, items, ComparisonMode.RAW, AccountSelector(account_nm="현금"))

    assert rows == [
        ComparisonRow("B", "B사", Decimal("300"), Decimal("30")),
        ComparisonRow("A", "A사", Decimal("150"), Decimal("15")),
    ]


def test_raw_mode_prefers_account_id(service, scope):
    items = [
        create_line("A", "ifrs-full_Cash", "현금", "100"),
        create_line("A", None, "현금", "7"),
    ]

    rows = service.compare(
        scope, items, ComparisonMode.RAW, AccountSelector(account_id="ifrs-full_Cash", account_nm="현금")
    )

    assert rows[0].thstrm_amount == Decimal("100")


def test_raw_mode_fills_requested_companies_with_zero(service, scope):
    items = [
        create_line("A", None, "현금", "100"),
        create_line("B", None, "예금", "50"),
    ]

    rows = service.compare(
        scope, items, ComparisonMode.RAW, AccountSelector(account_nm="현금"), corp_codes=["A", "B", "C"]
    )

    assert rows == [
        ComparisonRow("A", "A사", Decimal("100"), Decimal("0")),
        ComparisonRow("B", "B사", Decimal("0"), Decimal("0")),
        ComparisonRow("C", "C", Decimal("0"), Decimal("0")),
    ]


def test_raw_mode_missing_amount_counts_as_zero(service, scope):
    rows = service.compare(
        scope, [create_line("A", None, "현금", None)], ComparisonMode.RAW, AccountSelector(account_nm="현금")
    )
    assert rows == [ComparisonRow("A", "A사", Decimal("0"), Decimal("0"))]


def test_out_of_scope_lines_ignored(service, scope):
    items = [create_line("A", None, "현금", "100", year=2022)]
    assert service.compare(scope, items, ComparisonMode.RAW, AccountSelector(account_nm="현금")) == []


# ----------------------------------------------------------------------
# 표준 계정 모드
# ----------------------------------------------------------------------
def test_canonical_mode_picks_highest_score(service, scope):
    items = [
        create_line("A", None, "자산총계", "2000", "1900"),
        create_line("A", "ifrs-full_Assets", "자산총계", "1000", "900"),
        create_line("B", None, "총자산", "500", "400"),
        create_line("C", None, "유동부채", "700"),
    ]

    rows = service.compare(scope, items, ComparisonMode.CANONICAL, CanonSelector("BS_TOTAL_ASSETS"))

    # C 는 매칭 라인이 없으므로 제외
    assert rows == [
        ComparisonRow("A", "A사", Decimal("1000"), Decimal("900")),
        ComparisonRow("B", "B사", Decimal("500"), Decimal("400")),
    ]


def test_canonical_mode_tie_prefers_larger_magnitude(service, scope):
    items = [
        create_line("A", None, "자산총계", "100"),
        create_line("A", None, "자산총계", "-300"),
        create_line("A", None, "자산총계", "300"),
    ]

    rows = service.compare(scope, items, ComparisonMode.CANONICAL, CanonSelector("BS_TOTAL_ASSETS"))

    # 절댓값이 같으면 먼저 들어온 라인 유지
    assert rows[0].thstrm_amount == Decimal("-300")


def test_canonical_mode_unknown_key(service, scope):
    with pytest.raises(ValidationError):
        service.compare(scope, [], ComparisonMode.CANONICAL, CanonSelector("NOT_A_KEY"))


def test_mode_selector_mismatch(service, scope):
    with pytest.raises(ValidationError):
        service.compare(scope, [], ComparisonMode.CANONICAL, AccountSelector(account_nm="현금"))
    with pytest.raises(ValidationError):
        service.compare(scope, [], ComparisonMode.RAW, CanonSelector("BS_TOTAL_ASSETS"))


def test_trusted_cache_is_reused(scope):
    classifier = MagicMock(spec=AccountClassifier)
    classifier.catalog = CanonicalCatalog.default()
    service = ComparisonService(classifier, trust_cache=True)
    items = [
        create_line("A", None, "기타", "10",
                    cache=NormalizedCache("기타", "", "BS_TOTAL_ASSETS", 70)),
        create_line("B", None, "자산총계", "20",
                    cache=NormalizedCache("자산총계", "", NO_MATCH_KEY, None)),
    ]

    rows = service.compare(scope, items, ComparisonMode.CANONICAL, CanonSelector("BS_TOTAL_ASSETS"))

    assert [r.corp_code for r in rows] == ["A"]
    classifier.classify.assert_not_called()


def test_equal_amounts_sorted_by_corp_code(service, scope):
    items = [
        create_line("B", None, "현금", "100"),
        create_line("A", None, "현금", "100"),
    ]
    rows = service.compare(scope, items, ComparisonMode.RAW, AccountSelector(account_nm="현금"))
    assert [r.corp_code for r in rows] == ["A", "B"]


def test_is_better_candidate():
    low = CanonCandidate(create_line("A", None, "자산총계", "5000"), 50)
    high = CanonCandidate(create_line("A", None, "자산총계", "10"), 70)
    bigger = CanonCandidate(create_line("A", None, "자산총계", "-20"), 70)

    assert is_better_candidate(low, None)
    assert is_better_candidate(high, low)
    assert not is_better_candidate(low, high)
    assert is_better_candidate(bigger, high)
    assert not is_better_candidate(high, high)


# ----------------------------------------------------------------------
# 저장소 연동
# ----------------------------------------------------------------------
def test_compare_from_port_reads_once(service, scope):
    port = MagicMock(spec=LineItemPort)
    port.read_lines.return_value = [create_line("A", None, "현금", "100")]

    rows = service.compare_from_port(port, scope, ComparisonMode.RAW, AccountSelector(account_nm="현금"), ["A"])

    port.read_lines.assert_called_once_with(scope, ["A"])
    assert rows[0].thstrm_amount == Decimal("100")


def test_compare_from_port_propagates_errors(service, scope):
    port = MagicMock(spec=LineItemPort)
    port.read_lines.side_effect = DataSourceError("저장소 오류")

    with pytest.raises(DataSourceError):
        service.compare_from_port(port, scope, ComparisonMode.RAW, AccountSelector(account_nm="현금"))


def test_canonical_mode_partial_id_loses_to_exact_id(service, scope):
    """같은 기업에서 80점과 100점 라인이 있으면 100점 라인만 남습니다."""
    items = [
        create_line("A", "dart_TotalAssets", None, "9999"),
        create_line("A", "ifrs-full_Assets", None, "1000"),
    ]

    rows = service.compare(scope, items, ComparisonMode.CANONICAL, CanonSelector("BS_TOTAL_ASSETS"))

    assert rows == [ComparisonRow("A", "A사", Decimal("1000"), Decimal("0"))]
