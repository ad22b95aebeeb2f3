"""계정 라인 저장소 포트 인터페이스."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from core.domain.models.line_item import NormalizedCache, RawLineItem, ReportScope


class LineItemPort(ABC):
    """계정 라인 저장소 포트.

    엔진은 이 인터페이스로만 저장소에 접근한다. 읽기/쓰기 실패는
    ``DataSourceError`` 로 올려 보내며, 엔진은 재시도하지 않는다.
    """

    @abstractmethod
    def save_lines(self, items: Sequence[RawLineItem]) -> int:
        """공시 한 건 분량의 라인을 저장한다 (같은 공시의 기존 라인은 교체).

        Args:
            items: 같은 (기업, 연도, 보고서, 연결/개별) 의 라인 목록

        Returns:
            저장된 라인 수
        """
        raise NotImplementedError

    @abstractmethod
    def read_lines(
        self,
        scope: ReportScope,
        corp_codes: Optional[Sequence[str]] = None
    ) -> List[RawLineItem]:
        """범위에 해당하는 라인을 한 번에 읽는다.

        Args:
            scope: 조회 범위
            corp_codes: 대상 기업코드 (None 또는 빈 값이면 전체)

        Returns:
            ``row_id`` 와 ``cache`` 가 채워진 라인 목록
        """
        raise NotImplementedError

    @abstractmethod
    def find_uncached(self, limit: int) -> List[RawLineItem]:
        """캐시가 완성되지 않은 라인을 최대 ``limit`` 개 반환한다."""
        raise NotImplementedError

    @abstractmethod
    def write_cache(self, row_id: str, cache: NormalizedCache) -> None:
        """라인 하나의 캐시 필드를 기록한다."""
        raise NotImplementedError
