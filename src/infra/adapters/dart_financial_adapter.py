"""DART API 재무제표 어댑터."""

import os
from typing import Dict, List, Optional
import requests

from core.domain.errors import DataSourceError
from core.domain.models.line_item import FsDiv, RawLineItem, ReportType
from core.ports.financial_statement_port import FinancialStatementPort
from infra.adapters.dart_response_parser import DartResponseParser


class DartFinancialAdapter(FinancialStatementPort):
    """DART ``fnlttSinglAcntAll`` API를 통한 계정 라인 조회 어댑터.
    
    - 요청 한 번에 공시 한 건의 전체 계정을 받아 온다
    - 실패는 재시도하지 않고 ``DataSourceError`` 로 올린다
    """

    _API_URL = "https://opendart.fss.or.kr/api/fnlttSinglAcntAll.json"

    def __init__(self, api_key: Optional[str] = None, timeout: float = 30):
        """초기화.
        
        Args:
            api_key: DART API 키 (None이면 환경변수에서 읽음)
            timeout: 요청 타임아웃 (초)
        """
        self._api_key = api_key or os.getenv("DART_API_KEY")
        if not self._api_key:
            raise EnvironmentError("DART_API_KEY가 설정되지 않았습니다.")
        self._timeout = timeout

    def fetch_line_items(
        self,
        corp_code: str,
        year: int,
        report_type: ReportType,
        fs_div: FsDiv = FsDiv.SEPARATE
    ) -> List[RawLineItem]:
        """DART API 호출 및 파싱.
        
        파싱은 DartResponseParser에 위임합니다.
        """
        params = self._build_api_params(corp_code, year, report_type, fs_div)

        try:
            response = requests.get(self._API_URL, params=params, timeout=self._timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise DataSourceError(f"DART 요청 실패 ({corp_code}, {year}): {e}") from e
        except ValueError as e:
            raise DataSourceError(f"DART 응답 JSON 파싱 실패 ({corp_code}, {year}): {e}") from e

        return DartResponseParser.parse_line_items(data, corp_code, year, report_type, fs_div)

    def _build_api_params(
        self,
        corp_code: str,
        year: int,
        report_type: ReportType,
        fs_div: FsDiv
    ) -> Dict[str, str]:
        """API 요청 파라미터 생성."""
        return {
            "crtfc_key": self._api_key,
            "corp_code": corp_code,
            "bsns_year": str(year),
            "reprt_code": report_type.value,
            "fs_div": fs_div.value,
        }
