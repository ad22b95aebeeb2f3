"""로컬 파일 시스템 엑셀 내보내기 어댑터."""

import logging
import unicodedata
from pathlib import Path
from typing import Dict, Sequence
import pandas as pd

from core.domain.models.line_item import RawLineItem
from core.domain.models.reconciliation import AccountGroup, ComparisonRow
from core.ports.report_export_port import ReportExportPort

logger = logging.getLogger(__name__)


class LocalStorageAdapter(ReportExportPort):
    """계정 목록, 비교표, 라인 조회 결과를 엑셀 파일로 저장하는 어댑터.

    - pandas + openpyxl을 사용한 엑셀 파일 생성
    - 단일 파일에 다중 시트 저장, 한글 폭을 고려한 열 너비 자동 조정
    """

    ACCOUNTS_SHEET = "계정목록"
    COMPARISON_SHEET = "비교"
    LINES_SHEET = "재무제표"

    def __init__(self, ensure_dir: bool = True):
        """초기화.

        Args:
            ensure_dir: True이면 저장 전 디렉터리 자동 생성
        """
        self._ensure_dir = ensure_dir

    def export_accounts(self, groups: Sequence[AccountGroup], file_path: str) -> None:
        self.save_excel_with_sheets({self.ACCOUNTS_SHEET: self.accounts_frame(groups)}, file_path)

    def export_comparison(self, rows: Sequence[ComparisonRow], file_path: str) -> None:
        self.save_excel_with_sheets({self.COMPARISON_SHEET: self.comparison_frame(rows)}, file_path)

    def export_lines(self, items: Sequence[RawLineItem], file_path: str) -> None:
        self.save_excel_with_sheets({self.LINES_SHEET: self.lines_frame(items)}, file_path)

    def save_excel_with_sheets(
        self,
        dataframes: Dict[str, pd.DataFrame],
        file_path: str
    ) -> None:
        """여러 DataFrame을 엑셀 파일 하나에 시트별로 저장.

        Args:
            dataframes: {시트명: DataFrame} 딕셔너리 (인덱스는 저장하지 않음)
            file_path: 저장할 엑셀 파일 경로
        """
        if self._ensure_dir:
            Path(file_path).parent.mkdir(parents=True, exist_ok=True)

        with pd.ExcelWriter(file_path, engine="openpyxl") as writer:
            for sheet_name, df in dataframes.items():
                # 엑셀 시트명은 31자 제한
                df.to_excel(writer, sheet_name=sheet_name[:31], index=False)

            for worksheet in writer.sheets.values():
                for column_cells in worksheet.iter_cols():
                    max_width = max(_display_width(cell.value) for cell in column_cells)
                    column_letter = column_cells[0].column_letter
                    worksheet.column_dimensions[column_letter].width = max_width + 2

        logger.info(f"엑셀 저장 완료: {file_path} ({', '.join(dataframes)})")

    @staticmethod
    def accounts_frame(groups: Sequence[AccountGroup]) -> pd.DataFrame:
        """계정 목록을 DataFrame으로 변환."""
        return pd.DataFrame(
            [{"계정ID": g.account_id, "계정명": g.account_nm, "키": g.key} for g in groups],
            columns=["계정ID", "계정명", "키"],
        )

    @staticmethod
    def comparison_frame(rows: Sequence[ComparisonRow]) -> pd.DataFrame:
        """비교 결과를 DataFrame으로 변환 (금액은 원 단위 정수)."""
        return pd.DataFrame(
            [
                {
                    "기업코드": r.corp_code,
                    "기업명": r.corp_name,
                    "당기금액": int(r.thstrm_amount),
                    "전기금액": int(r.frmtrm_amount),
                }
                for r in rows
            ],
            columns=["기업코드", "기업명", "당기금액", "전기금액"],
        )

    @staticmethod
    def lines_frame(items: Sequence[RawLineItem]) -> pd.DataFrame:
        """라인 목록을 DataFrame으로 변환 (금액이 없으면 빈 칸)."""
        columns = ["기업코드", "기업명", "사업연도", "재무제표", "계정명", "당기금액", "전기금액"]
        return pd.DataFrame(
            [
                {
                    "기업코드": i.corp_code,
                    "기업명": i.display_corp_name,
                    "사업연도": i.bsns_year,
                    "재무제표": i.sj_div.value,
                    "계정명": i.account_nm,
                    "당기금액": int(i.thstrm_amount) if i.thstrm_amount is not None else None,
                    "전기금액": int(i.frmtrm_amount) if i.frmtrm_amount is not None else None,
                }
                for i in items
            ],
            columns=columns,
        )


def _display_width(value) -> int:
    """셀 표시 폭 (전각 문자는 2칸)."""
    if value is None:
        return 0
    return sum(2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1 for ch in str(value))
