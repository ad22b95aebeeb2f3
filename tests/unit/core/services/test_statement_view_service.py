"""재무제표 라인 조회 테스트."""

from decimal import Decimal
from typing import Optional
from unittest.mock import MagicMock

from core.domain.models.line_item import FsDiv, RawLineItem, ReportScope, ReportType, StatementType
from core.ports.line_item_port import LineItemPort
from core.services.statement_view_service import view_statement_lines


def create_line(corp_code: str, sj_div: StatementType, account_nm: str, ord: Optional[int]) -> RawLineItem:
    return RawLineItem(
        corp_code=corp_code,
        bsns_year=2023,
        reprt_code=ReportType.ANNUAL,
        fs_div=FsDiv.SEPARATE,
        sj_div=sj_div,
        account_nm=account_nm,
        thstrm_amount=Decimal("1"),
        ord=ord,
    )


def test_view_orders_by_corp_statement_and_ord():
    port = MagicMock(spec=LineItemPort)
    port.read_lines.side_effect = [
        [
            create_line("B", StatementType.BS, "자산총계", 2),
            create_line("A", StatementType.BS, "부채총계", 5),
            create_line("A", StatementType.BS, "유동자산", 1),
            create_line("A", StatementType.BS, "주석", None),
        ],
        [create_line("A", StatementType.CIS, "매출액", 1)],
    ]

    items = view_statement_lines(port, 2023, corp_codes=["A", "B"])

    assert [(i.corp_code, i.account_nm) for i in items] == [
        ("A", "주석"),
        ("A", "유동자산"),
        ("A", "부채총계"),
        ("A", "매출액"),
        ("B", "자산총계"),
    ]
    port.read_lines.assert_any_call(
        ReportScope(2023, ReportType.ANNUAL, FsDiv.SEPARATE, StatementType.CIS), ["A", "B"]
    )
    assert port.read_lines.call_count == 2
