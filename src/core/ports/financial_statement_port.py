"""재무제표 조회 포트 인터페이스."""

from abc import ABC, abstractmethod
from typing import List

from core.domain.models.line_item import FsDiv, RawLineItem, ReportType


class FinancialStatementPort(ABC):
    """공시 원천(DART)에서 계정 라인을 내려받는 포트."""

    @abstractmethod
    def fetch_line_items(
        self,
        corp_code: str,
        year: int,
        report_type: ReportType,
        fs_div: FsDiv = FsDiv.SEPARATE
    ) -> List[RawLineItem]:
        """단일 공시의 전체 계정 라인 조회.
        
        Args:
            corp_code: 기업코드
            year: 사업연도
            report_type: 보고서 타입
            fs_div: 연결/개별 구분
        
        Returns:
            BS/CIS 계정 라인 목록 (데이터가 없으면 빈 리스트)

        Raises:
            DataSourceError: 요청 실패 또는 오류 응답
        """
        raise NotImplementedError
