"""DART 계정 라인 동기화 서비스."""

import time
import logging
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from core.domain.errors import DataSourceError
from core.domain.models.line_item import FsDiv, RawLineItem, ReportType
from core.domain.models.reconciliation import SyncReport
from core.ports.corp_code_port import CorpCodePort
from core.ports.financial_statement_port import FinancialStatementPort
from core.ports.line_item_port import LineItemPort

logger = logging.getLogger(__name__)


class StatementSyncService:
    """기업 × 연도별 공시 라인을 내려받아 저장소에 적재하는 서비스.

    - 기업별, 연도별로 순회하며 DART 단일회사 전체 재무제표 조회
    - 응답에 기업명이 없으면 기업코드 포트로 채움
    - 공시 한 건 단위로 저장 (기존 라인 교체)
    - 한 건이 실패해도 기록만 남기고 다음 건을 계속 처리 (재시도 없음)
    """

    def __init__(
        self,
        financial_port: FinancialStatementPort,
        line_item_port: LineItemPort,
        corp_code_port: Optional[CorpCodePort] = None,
        request_interval: float = 0.1
    ):
        self._financial_port = financial_port
        self._line_item_port = line_item_port
        self._corp_code_port = corp_code_port
        self._request_interval = request_interval
        self._names: Dict[str, Optional[str]] = {}

    def sync(
        self,
        corp_codes: Sequence[str],
        years: Sequence[int],
        report_type: ReportType = ReportType.ANNUAL,
        fs_div: FsDiv = FsDiv.SEPARATE
    ) -> SyncReport:
        """기업 목록과 연도 목록에 대해 라인을 동기화합니다.

        Args:
            corp_codes: 대상 기업코드 목록
            years: 대상 사업연도 목록
            report_type: 보고서 타입
            fs_div: 연결/개별 구분

        Returns:
            저장 건수와 실패 목록
        """
        report = SyncReport()
        total = len(corp_codes)

        for idx, corp_code in enumerate(corp_codes, 1):
            logger.info(f"[{idx}/{total}] {corp_code} 동기화 시작...")
            for year in years:
                try:
                    time.sleep(self._request_interval)
                    items = self._financial_port.fetch_line_items(corp_code, year, report_type, fs_div)
                    if not items:
                        logger.info(f"  {corp_code} {year}년 데이터 없음")
                        continue
                    report.stored += self._line_item_port.save_lines(self._fill_corp_name(items))
                except DataSourceError as e:
                    logger.error(f"  {corp_code} {year}년 동기화 실패: {e}")
                    report.failed.append((corp_code, year, str(e)))
                    continue

        logger.info(f"동기화 완료: {report.stored}개 라인 저장, 실패 {len(report.failed)}건")
        return report

    def _fill_corp_name(self, items: List[RawLineItem]) -> List[RawLineItem]:
        """기업명이 비어 있는 라인에 기업코드 매핑의 기업명을 채움."""
        if self._corp_code_port is None:
            return items
        return [
            replace(item, corp_name=self._lookup_name(item.corp_code)) if not item.corp_name else item
            for item in items
        ]

    def _lookup_name(self, corp_code: str) -> Optional[str]:
        if corp_code not in self._names:
            name = self._corp_code_port.get_name(corp_code)
            if name is None:
                logger.warning(f"  {corp_code} 기업명을 찾을 수 없음")
            self._names[corp_code] = name
        return self._names[corp_code]

    @staticmethod
    def parse_years(text: str) -> List[int]:
        """"2022,2023" 또는 "2019-2023" 형식의 연도 목록 파싱."""
        years: List[int] = []
        for part in (p.strip() for p in text.split(",")):
            if not part:
                continue
            if "-" in part:
                start, end = (int(v) for v in part.split("-", 1))
                years.extend(range(start, end + 1))
            else:
                years.append(int(part))
        return sorted(set(years))
