"""재무제표 계정 라인 도메인 모델."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class ReportType(Enum):
    """보고서 타입."""
    ANNUAL = "11011"
    SEMI_ANNUAL = "11012"
    Q1 = "11013"
    Q3 = "11014"


class FsDiv(Enum):
    """재무제표 구분."""
    CONSOLIDATED = "CFS"  # 연결
    SEPARATE = "OFS"      # 개별


class StatementType(Enum):
    """재무제표 종류."""
    BS = "BS"    # 재무상태표
    CIS = "CIS"  # 포괄손익계산서


# 분류를 마쳤지만 매칭되는 표준 계정이 없는 라인의 canon_key 값
NO_MATCH_KEY = ""


@dataclass(frozen=True)
class NormalizedCache:
    """라인별 정규화/분류 캐시.

    Attributes:
        account_nm_norm: 정규화된 계정명
        account_id_norm: 정규화된 계정 ID
        canon_key: 표준 계정 키 (매칭 없음은 ``NO_MATCH_KEY``, 미분류는 None)
        canon_score: 분류 점수 (매칭 없음이면 None)
    """
    account_nm_norm: Optional[str] = None
    account_id_norm: Optional[str] = None
    canon_key: Optional[str] = None
    canon_score: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return (
            self.account_nm_norm is not None
            and self.account_id_norm is not None
            and self.canon_key is not None
        )


@dataclass(frozen=True)
class RawLineItem:
    """공시에서 수집한 계정 라인 (원본 그대로, 엔진은 수정하지 않음)."""
    corp_code: str
    bsns_year: int
    reprt_code: ReportType
    fs_div: FsDiv
    sj_div: StatementType
    account_id: Optional[str] = None
    account_nm: Optional[str] = None
    thstrm_amount: Optional[Decimal] = None   # 당기금액
    frmtrm_amount: Optional[Decimal] = None   # 전기금액
    ord: Optional[int] = None
    currency: Optional[str] = None
    corp_name: Optional[str] = None
    row_id: Optional[str] = None              # 저장소 기본키
    cache: Optional[NormalizedCache] = None

    @property
    def display_corp_name(self) -> str:
        return self.corp_name or self.corp_code


@dataclass(frozen=True)
class ReportScope:
    """조회 범위 (연도, 보고서, 연결/개별, 재무제표 종류)."""
    bsns_year: int
    reprt_code: ReportType
    fs_div: FsDiv
    sj_div: StatementType

    def contains(self, item: RawLineItem) -> bool:
        """라인이 이 범위에 속하는지 여부."""
        return (
            item.bsns_year == self.bsns_year
            and item.reprt_code == self.reprt_code
            and item.fs_div == self.fs_div
            and item.sj_div == self.sj_div
        )
