"""DART API 응답 파싱 유틸리티."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from core.domain.errors import DataSourceError
from core.domain.models.line_item import FsDiv, RawLineItem, ReportType, StatementType

logger = logging.getLogger(__name__)

# 정상 응답 / 조회된 데이터 없음
STATUS_OK = "000"
STATUS_NO_DATA = "013"


class DartResponseParser:
    """DART ``fnlttSinglAcntAll`` 응답을 ``RawLineItem`` 목록으로 변환하는 파서.
    
    느슨한 문자열 응답을 이 경계에서 검증해 엄격한 도메인 모델로 바꾼다.
    BS/CIS 이외(현금흐름표, 자본변동표)의 라인은 버린다.
    """
    
    @staticmethod
    def parse_line_items(
        response_data: Dict[str, Any],
        corp_code: str,
        year: int,
        report_type: ReportType,
        fs_div: FsDiv
    ) -> List[RawLineItem]:
        """API 응답을 계정 라인 목록으로 변환.
        
        Args:
            response_data: DART API 응답 데이터
            corp_code: 기업 코드
            year: 사업 연도
            report_type: 보고서 종류
            fs_div: 연결/개별 구분
        
        Returns:
            계정 라인 목록 (데이터 없음 응답이면 빈 리스트)

        Raises:
            DataSourceError: 오류 상태 코드
        """
        status = response_data.get("status")
        if status == STATUS_NO_DATA:
            logger.info(f"No data - corp_code={corp_code}, year={year}, report={report_type.value}, fs={fs_div.value}")
            return []
        if status != STATUS_OK:
            raise DataSourceError(f"DART {status}: {response_data.get('message', 'N/A')}")

        items = []
        for row in response_data.get("list") or []:
            item = DartResponseParser._parse_row(row, corp_code, year, report_type, fs_div)
            if item is not None:
                items.append(item)
        return items

    @staticmethod
    def _parse_row(
        row: Dict[str, Any],
        corp_code: str,
        year: int,
        report_type: ReportType,
        fs_div: FsDiv
    ) -> Optional[RawLineItem]:
        """응답 한 줄 파싱. BS/CIS 가 아니면 None."""
        try:
            sj_div = StatementType(row.get("sj_div"))
        except ValueError:
            return None

        return RawLineItem(
            corp_code=row.get("corp_code") or corp_code,
            bsns_year=DartResponseParser.to_int(row.get("bsns_year")) or year,
            reprt_code=report_type,
            fs_div=fs_div,
            sj_div=sj_div,
            account_id=DartResponseParser.to_text(row.get("account_id")),
            account_nm=DartResponseParser.to_text(row.get("account_nm")),
            thstrm_amount=DartResponseParser.to_amount(row.get("thstrm_amount")),
            frmtrm_amount=DartResponseParser.to_amount(row.get("frmtrm_amount")),
            ord=DartResponseParser.to_int(row.get("ord")),
            currency=DartResponseParser.to_text(row.get("currency")),
            corp_name=DartResponseParser.to_text(row.get("corp_name")),
        )

    @staticmethod
    def to_amount(value: Any) -> Optional[Decimal]:
        """문자열 금액을 Decimal로 변환.

        "1,234" → 1234, "(1,000)" → -1000, "", "-", "nan" → None
        """
        if value is None:
            return None
        clean_str = str(value).replace(",", "").replace(" ", "").strip()
        if clean_str in ("", "-") or clean_str.lower() == "nan":
            return None
        if clean_str.startswith("(") and clean_str.endswith(")"):
            clean_str = "-" + clean_str[1:-1]
        try:
            amount = Decimal(clean_str)
        except InvalidOperation:
            return None
        return amount if amount.is_finite() else None

    @staticmethod
    def to_int(value: Any) -> Optional[int]:
        if value is None or str(value).strip() == "":
            return None
        try:
            return int(str(value).strip())
        except ValueError:
            return None

    @staticmethod
    def to_text(value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None
