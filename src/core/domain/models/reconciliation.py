"""분류, 그룹핑, 비교 결과 모델."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class ClassificationResult:
    """표준 계정 분류 결과.

    Attributes:
        key: 표준 계정 키 (예: ``BS_TOTAL_ASSETS``)
        score: 신뢰도 점수 (100, 80, 70, 50 중 하나)
    """
    key: str
    score: int


@dataclass(frozen=True)
class AccountGroup:
    """계정 선택 목록의 한 항목."""
    account_id: Optional[str]
    account_nm: str   # 대표 계정명
    key: str          # "{id}|{name}" 또는 "NA|{name}"


@dataclass(frozen=True)
class ComparisonRow:
    """기업별 비교 결과 한 줄."""
    corp_code: str
    corp_name: str
    thstrm_amount: Decimal
    frmtrm_amount: Decimal


class ComparisonMode(Enum):
    """비교 방식."""
    RAW = "raw"              # 원본 계정 ID/계정명 정확 매칭 (합산)
    CANONICAL = "canonical"  # 표준 계정 분류 매칭 (최적 후보 선택)


@dataclass(frozen=True)
class AccountSelector:
    """원본 계정 선택자. ``account_id`` 가 있으면 ID로, 없으면 계정명으로 매칭."""
    account_id: Optional[str] = None
    account_nm: Optional[str] = None


@dataclass(frozen=True)
class CanonSelector:
    """표준 계정 선택자."""
    canon_key: str


@dataclass(frozen=True)
class BackfillResult:
    updated: int


@dataclass
class SyncReport:
    """DART 동기화 결과.

    Attributes:
        stored: 저장된 라인 수
        failed: (기업코드, 연도, 오류 메시지) 목록
    """
    stored: int = 0
    failed: List[Tuple[str, int, str]] = field(default_factory=list)
