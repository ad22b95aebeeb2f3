"""정규화/분류 캐시 백필 서비스."""

import logging

from core.domain.errors import ValidationError
from core.domain.models.line_item import NO_MATCH_KEY, NormalizedCache, RawLineItem
from core.domain.models.reconciliation import BackfillResult
from core.ports.line_item_port import LineItemPort
from core.services.account_normalizer import normalize_id, normalize_name
from core.services.classification_service import AccountClassifier

logger = logging.getLogger(__name__)


class BackfillService:
    """기존 라인에 정규화/분류 캐시를 채우는 유지보수 작업.

    - 캐시가 비어 있는 라인만 골라 처리하므로 반복 실행해도 안전하고 중단 후 이어서 돌릴 수 있다.
    - 저장은 라인당 한 번, 순차로 수행한다.
    - 한 라인이라도 저장에 실패하면 남은 배치를 중단하고 오류를 그대로 올린다.
    """

    def __init__(self, line_item_port: LineItemPort, classifier: AccountClassifier):
        self._line_item_port = line_item_port
        self._classifier = classifier

    def backfill(self, limit: int) -> BackfillResult:
        """최대 ``limit`` 개 라인의 캐시를 채운다.

        Raises:
            ValidationError: limit 이 양의 정수가 아닐 경우
            DataSourceError: 저장소 읽기/쓰기 실패
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValidationError(f"limit 은 양의 정수여야 합니다: {limit!r}")

        rows = self._line_item_port.find_uncached(limit)
        if not rows:
            logger.info("캐시를 채울 라인이 없습니다.")
            return BackfillResult(updated=0)

        logger.info(f"캐시 백필 시작: {len(rows)}개 라인")
        updated = 0
        for row in rows:
            self._line_item_port.write_cache(row.row_id, self.build_cache(row))
            updated += 1

        logger.info(f"캐시 백필 완료: {updated}개 라인")
        return BackfillResult(updated=updated)

    def build_cache(self, row: RawLineItem) -> NormalizedCache:
        """라인 하나의 캐시 값을 계산한다."""
        result = self._classifier.classify(row.sj_div, row.account_id, row.account_nm)
        return NormalizedCache(
            account_nm_norm=normalize_name(row.account_nm),
            account_id_norm=normalize_id(row.account_id),
            canon_key=result.key if result else NO_MATCH_KEY,
            canon_score=result.score if result else None,
        )
