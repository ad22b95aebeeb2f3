"""비교/조회 결과 내보내기 포트 인터페이스."""

from abc import ABC, abstractmethod
from typing import Sequence

from core.domain.models.line_item import RawLineItem
from core.domain.models.reconciliation import AccountGroup, ComparisonRow


class ReportExportPort(ABC):
    """계정 목록, 비교표, 라인 조회 결과를 파일로 내보내는 포트."""

    @abstractmethod
    def export_accounts(self, groups: Sequence[AccountGroup], file_path: str) -> None:
        """계정 목록(대표 계정명)을 저장한다.

        Args:
            groups: 계정 그룹 목록 (입력 순서 유지)
            file_path: 저장 경로
        """
        raise NotImplementedError

    @abstractmethod
    def export_comparison(self, rows: Sequence[ComparisonRow], file_path: str) -> None:
        """기업 간 비교표를 저장한다.

        Args:
            rows: 비교 행 목록 (정렬된 순서 그대로 저장)
            file_path: 저장 경로
        """
        raise NotImplementedError

    @abstractmethod
    def export_lines(self, items: Sequence[RawLineItem], file_path: str) -> None:
        """저장된 재무제표 라인을 원본 그대로 저장한다."""
        raise NotImplementedError
