"""기업 간 계정 비교 서비스."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from core.domain.errors import ValidationError
from core.domain.models.line_item import NO_MATCH_KEY, RawLineItem, ReportScope
from core.domain.models.reconciliation import (
    AccountSelector,
    CanonSelector,
    ClassificationResult,
    ComparisonMode,
    ComparisonRow,
)
from core.ports.line_item_port import LineItemPort
from core.services.classification_service import AccountClassifier

logger = logging.getLogger(__name__)

Selector = Union[AccountSelector, CanonSelector]

_ZERO = Decimal(0)


@dataclass(frozen=True)
class CanonCandidate:
    """표준 계정 모드에서 기업별 최적 라인 후보."""
    item: RawLineItem
    score: int

    @property
    def magnitude(self) -> Decimal:
        return abs(self.item.thstrm_amount or _ZERO)


def is_better_candidate(candidate: CanonCandidate, incumbent: Optional[CanonCandidate]) -> bool:
    """후보가 현재 최적 후보보다 나은지 판단한다.

    1. 점수가 엄격히 높으면 교체
    2. 점수가 같으면 당기금액 절댓값이 엄격히 클 때만 교체
    3. 그 외에는 기존 후보 유지 (먼저 들어온 라인 우선)
    """
    if incumbent is None:
        return True
    if candidate.score != incumbent.score:
        return candidate.score > incumbent.score
    return candidate.magnitude > incumbent.magnitude


def selector_from_params(
    canon_key: Optional[str] = None,
    account_nm: Optional[str] = None,
    account_id: Optional[str] = None,
) -> Tuple[ComparisonMode, Selector]:
    """요청 파라미터에서 비교 방식과 선택자를 만든다.

    ``canon_key`` 가 있으면 표준 계정 모드, 없으면 원본 계정 모드.
    빈 문자열은 값이 없는 것으로 본다.

    Raises:
        ValidationError: 선택자가 하나도 없을 경우
    """
    canon_key = (canon_key or "").strip()
    account_nm = (account_nm or "").strip()
    account_id = (account_id or "").strip()

    if canon_key:
        return ComparisonMode.CANONICAL, CanonSelector(canon_key=canon_key)
    if account_nm or account_id:
        return ComparisonMode.RAW, AccountSelector(account_id=account_id or None, account_nm=account_nm or None)
    raise ValidationError("canon_key 또는 account_nm/account_id 중 하나는 필요합니다.")


class ComparisonService:
    """한 기간의 여러 기업 라인을 기업별 금액 하나로 정합한다.

    - 원본 모드: 계정 ID(우선) 또는 계정명 정확 매칭 후 기업별 합산
    - 표준 계정 모드: 라인별 분류 후 기업별 최적 후보 하나 선택
    """

    def __init__(self, classifier: AccountClassifier, trust_cache: bool = False):
        """초기화.

        Args:
            classifier: 표준 계정 분류기
            trust_cache: True면 캐시가 완성된 라인은 저장된 분류 결과를 재사용
        """
        self._classifier = classifier
        self._trust_cache = trust_cache

    def compare(
        self,
        scope: ReportScope,
        items: Iterable[RawLineItem],
        mode: ComparisonMode,
        selector: Selector,
        corp_codes: Optional[Sequence[str]] = None,
    ) -> List[ComparisonRow]:
        """기업별 비교 행을 만든다.

        Args:
            scope: 조회 범위 (범위 밖 라인은 무시)
            items: 저장소에서 읽은 라인 목록
            mode: 비교 방식
            selector: 모드에 맞는 선택자
            corp_codes: 요청된 기업코드 (원본 모드에서 매칭 없는 기업을 0으로 채움)

        Returns:
            당기금액 내림차순 비교 행 목록
        """
        in_scope = [item for item in items if scope.contains(item)]

        if mode == ComparisonMode.RAW:
            if not isinstance(selector, AccountSelector):
                raise ValidationError("원본 계정 비교에는 account_nm/account_id 선택자가 필요합니다.")
            rows = self._compare_raw(in_scope, selector, corp_codes or [])
        elif mode == ComparisonMode.CANONICAL:
            if not isinstance(selector, CanonSelector):
                raise ValidationError("표준 계정 비교에는 canon_key 선택자가 필요합니다.")
            rows = self._compare_canonical(in_scope, selector)
        else:
            raise ValidationError(f"지원하지 않는 비교 방식입니다: {mode}")

        rows.sort(key=lambda r: (-r.thstrm_amount, r.corp_code))
        return rows

    def compare_from_port(
        self,
        port: LineItemPort,
        scope: ReportScope,
        mode: ComparisonMode,
        selector: Selector,
        corp_codes: Optional[Sequence[str]] = None,
    ) -> List[ComparisonRow]:
        """저장소에서 한 번에 읽어 비교한다. 저장소 오류는 그대로 전파된다."""
        items = port.read_lines(scope, corp_codes)
        logger.info(f"비교 대상 라인 {len(items)}개 로드 ({scope.bsns_year}, {scope.sj_div.value})")
        return self.compare(scope, items, mode, selector, corp_codes)

    # ------------------------------------------------------------------
    # 원본 모드
    # ------------------------------------------------------------------
    def _compare_raw(
        self,
        items: List[RawLineItem],
        selector: AccountSelector,
        corp_codes: Sequence[str],
    ) -> List[ComparisonRow]:
        if selector.account_id:
            matched = [item for item in items if item.account_id == selector.account_id]
        elif selector.account_nm:
            matched = [item for item in items if item.account_nm == selector.account_nm]
        else:
            raise ValidationError("account_nm 또는 account_id 중 하나는 필요합니다.")

        totals: Dict[str, List] = {}
        for item in matched:
            entry = totals.setdefault(item.corp_code, [item.display_corp_name, _ZERO, _ZERO])
            entry[1] += item.thstrm_amount or _ZERO
            entry[2] += item.frmtrm_amount or _ZERO

        # 요청한 기업은 매칭이 없어도 0으로 채운다
        names = {item.corp_code: item.display_corp_name for item in items}
        for corp_code in corp_codes:
            if corp_code not in totals:
                totals[corp_code] = [names.get(corp_code, corp_code), _ZERO, _ZERO]

        return [
            ComparisonRow(corp_code=code, corp_name=name, thstrm_amount=th, frmtrm_amount=fr)
            for code, (name, th, fr) in totals.items()
        ]

    # ------------------------------------------------------------------
    # 표준 계정 모드
    # ------------------------------------------------------------------
    def _compare_canonical(self, items: List[RawLineItem], selector: CanonSelector) -> List[ComparisonRow]:
        if selector.canon_key not in self._classifier.catalog:
            raise ValidationError(f"알 수 없는 표준 계정 키입니다: {selector.canon_key}")

        best: Dict[str, CanonCandidate] = {}
        for item in items:
            result = self._classify(item)
            if result is None or result.key != selector.canon_key:
                continue
            candidate = CanonCandidate(item=item, score=result.score)
            if is_better_candidate(candidate, best.get(item.corp_code)):
                best[item.corp_code] = candidate

        # 매칭 라인이 없는 기업은 0으로 채우지 않고 제외한다
        return [
            ComparisonRow(
                corp_code=corp_code,
                corp_name=c.item.display_corp_name,
                thstrm_amount=c.item.thstrm_amount or _ZERO,
                frmtrm_amount=c.item.frmtrm_amount or _ZERO,
            )
            for corp_code, c in best.items()
        ]

    def _classify(self, item: RawLineItem) -> Optional[ClassificationResult]:
        cache = item.cache
        if self._trust_cache and cache is not None and cache.is_complete:
            if cache.canon_key == NO_MATCH_KEY or cache.canon_score is None:
                return None
            return ClassificationResult(key=cache.canon_key, score=cache.canon_score)
        return self._classifier.classify(item.sj_div, item.account_id, item.account_nm)
