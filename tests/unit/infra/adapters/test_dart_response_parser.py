"""DartResponseParser 테스트."""

from decimal import Decimal

import pytest

from core.domain.errors import DataSourceError
from core.domain.models.line_item import FsDiv, ReportType, StatementType
from infra.adapters.dart_response_parser import DartResponseParser


@pytest.fixture
def api_response():
    """fnlttSinglAcntAll 응답 Mock 데이터."""
    return {
        "status": "000",
        "message": "정상",
        "list": [
            {
                "rcept_no": "20240312000736",
                "bsns_year": "2023",
                "corp_code": "00126380",
                "corp_name": "삼성전자",
                "sj_div": "BS",
                "account_id": "ifrs-full_Assets",
                "account_nm": "자산총계",
                "thstrm_amount": "455,905,980,000,000",
                "frmtrm_amount": "448,424,507,000,000",
                "ord": "36",
                "currency": "KRW",
            },
            {
                "bsns_year": "2023",
                "corp_code": "00126380",
                "sj_div": "CIS",
                "account_id": "-표준계정코드 미사용-",
                "account_nm": "법인세비용(수익)",
                "thstrm_amount": "(4,480,835,000,000)",
                "frmtrm_amount": "",
            },
            {
                "bsns_year": "2023",
                "corp_code": "00126380",
                "sj_div": "CF",
                "account_id": "ifrs-full_CashFlowsFromUsedInOperatingActivities",
                "account_nm": "영업활동현금흐름",
                "thstrm_amount": "44,137,427,000,000",
            },
        ],
    }


def test_parse_line_items(api_response):
    items = DartResponseParser.parse_line_items(
        api_response, "00126380", 2023, ReportType.ANNUAL, FsDiv.SEPARATE
    )

    # 현금흐름표(CF) 라인은 버린다
    assert [item.sj_div for item in items] == [StatementType.BS, StatementType.CIS]

    assets = items[0]
    assert assets.corp_code == "00126380"
    assert assets.corp_name == "삼성전자"
    assert assets.bsns_year == 2023
    assert assets.reprt_code == ReportType.ANNUAL
    assert assets.fs_div == FsDiv.SEPARATE
    assert assets.thstrm_amount == Decimal("455905980000000")
    assert assets.ord == 36
    assert assets.currency == "KRW"
    assert assets.cache is None

    tax = items[1]
    assert tax.thstrm_amount == Decimal("-4480835000000")
    assert tax.frmtrm_amount is None
    assert tax.corp_name is None


def test_no_data_status_returns_empty():
    data = {"status": "013", "message": "조회된 데이타가 없습니다."}
    assert DartResponseParser.parse_line_items(data, "00126380", 2023, ReportType.Q1, FsDiv.CONSOLIDATED) == []


@pytest.mark.parametrize("status", ["010", "020", "100", None])
def test_error_status_raises(status):
    data = {"status": status, "message": "오류"}
    with pytest.raises(DataSourceError):
        DartResponseParser.parse_line_items(data, "00126380", 2023, ReportType.ANNUAL, FsDiv.SEPARATE)


@pytest.mark.parametrize("value, expected", [
    ("1,234", Decimal("1234")),
    ("(1,000)", Decimal("-1000")),
    ("-500", Decimal("-500")),
    (" 12 345 ", Decimal("12345")),
    (1500, Decimal("1500")),
    ("-", None),
    ("", None),
    ("nan", None),
    ("N/A", None),
    (None, None),
])
def test_to_amount(value, expected):
    assert DartResponseParser.to_amount(value) == expected


def test_to_int_and_text():
    assert DartResponseParser.to_int("36") == 36
    assert DartResponseParser.to_int("") is None
    assert DartResponseParser.to_int("abc") is None
    assert DartResponseParser.to_text("  자산총계 ") == "자산총계"
    assert DartResponseParser.to_text("   ") is None
