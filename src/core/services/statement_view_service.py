"""저장된 재무제표 라인 조회 서비스."""

from typing import List, Optional, Sequence

from core.domain.models.line_item import FsDiv, RawLineItem, ReportScope, ReportType, StatementType
from core.ports.line_item_port import LineItemPort


def view_statement_lines(
    line_item_port: LineItemPort,
    year: int,
    report_type: ReportType = ReportType.ANNUAL,
    fs_div: FsDiv = FsDiv.SEPARATE,
    corp_codes: Optional[Sequence[str]] = None
) -> List[RawLineItem]:
    """재무상태표와 포괄손익계산서 라인을 공시 순서대로 반환합니다.

    기업코드, 재무제표 종류(BS → CIS), 표시 순서(ord, 없으면 맨 앞) 순으로 정렬합니다.

    Args:
        line_item_port: 계정 라인 저장소
        year: 사업연도
        report_type: 보고서 타입
        fs_div: 연결/개별 구분
        corp_codes: 대상 기업코드 (None 이면 전체)

    Returns:
        정렬된 라인 목록
    """
    statement_order = list(StatementType)
    items: List[RawLineItem] = []
    for sj_div in statement_order:
        scope = ReportScope(year, report_type, fs_div, sj_div)
        items.extend(line_item_port.read_lines(scope, corp_codes))

    return sorted(
        items,
        key=lambda i: (
            i.corp_code,
            statement_order.index(i.sj_div),
            i.ord is not None,
            i.ord or 0,
        ),
    )
