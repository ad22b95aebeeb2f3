"""표준 계정 분류 서비스."""

from typing import Optional, Union

from core.domain.models.line_item import StatementType
from core.domain.models.reconciliation import ClassificationResult
from core.services.account_normalizer import normalize_id, normalize_name
from core.services.canonical_catalog import CanonicalCatalog, CanonicalDefinition

# 매칭 채널별 점수 (exact-id > partial-id > exact-name > partial-name)
SCORE_ID_EXACT = 100
SCORE_ID_PARTIAL = 80
SCORE_NAME_EXACT = 70
SCORE_NAME_PARTIAL = 50


def score_definition(definition: CanonicalDefinition, account_id: str, account_nm: str) -> int:
    """정규화된 ID/계정명이 한 정의와 얼마나 맞는지 점수화한다.

    Args:
        definition: 표준 계정 정의
        account_id: 정규화된 계정 ID
        account_nm: 정규화된 계정명

    Returns:
        100, 80, 70, 50 중 최댓값. 아무것도 맞지 않으면 0.
    """
    if account_id and not definition.is_excluded(account_id):
        if account_id in definition.ids:
            return SCORE_ID_EXACT
        if any(candidate in account_id for candidate in definition.ids):
            return SCORE_ID_PARTIAL

    if account_nm and not definition.is_excluded(account_nm):
        if account_nm in definition.names:
            return SCORE_NAME_EXACT
        if any(candidate in account_nm for candidate in definition.names):
            return SCORE_NAME_PARTIAL

    return 0


class AccountClassifier:
    """원본 (계정 ID, 계정명)을 표준 계정으로 분류한다.

    - 같은 재무제표 종류의 정의만 후보로 삼는다 (BS 키는 CIS 라인에 매칭되지 않음).
    - 점수가 가장 높은 정의를 선택하고, 동점이면 카탈로그에 먼저 등록된 정의를 택한다.
    - 매칭 없음은 오류가 아니라 ``None`` 으로 표현한다.
    """

    def __init__(self, catalog: CanonicalCatalog):
        self._catalog = catalog

    @property
    def catalog(self) -> CanonicalCatalog:
        return self._catalog

    def classify(
        self,
        statement_type: Union[StatementType, str],
        account_id: Optional[str],
        account_nm: Optional[str],
    ) -> Optional[ClassificationResult]:
        """라인 하나를 분류한다. 예외를 던지지 않는다."""
        try:
            statement_type = StatementType(statement_type)
        except ValueError:
            return None

        id_norm = normalize_id(account_id)
        nm_norm = normalize_name(account_nm)
        if not id_norm and not nm_norm:
            return None

        best: Optional[ClassificationResult] = None
        for definition in self._catalog.definitions_for(statement_type):
            score = score_definition(definition, id_norm, nm_norm)
            # 엄격히 더 높을 때만 교체 → 동점이면 먼저 등록된 정의 유지
            if score > 0 and (best is None or score > best.score):
                best = ClassificationResult(key=definition.key, score=score)
                if score == SCORE_ID_EXACT:
                    break
        return best
