"""표준 계정 카탈로그.

기업마다 표현이 다른 계정(예: "자산총계", "총자산")을 하나의 표준 키로 묶기 위한
정의 목록. 프로세스 시작 시 한 번 만들고 분류기에 참조로 넘긴다.
등록 순서가 곧 동점 처리 우선순위이므로 순서를 바꾸면 분류 결과가 달라진다.
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from core.domain.models.line_item import StatementType
from core.services.account_normalizer import normalize_id, normalize_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CanonicalDefinition:
    """표준 계정 정의.

    Attributes:
        key: 표준 계정 키
        statement_type: 적용 대상 재무제표 (BS 또는 CIS)
        label: 화면 표시용 이름
        ids: 정규화된 계정 ID 변형
        names: 정규화된 계정명 변형
        excludes: 포함되면 해당 채널(ID/계정명) 매칭을 무효로 하는 정규화 문자열
    """
    key: str
    statement_type: StatementType
    label: str
    ids: frozenset
    names: frozenset
    excludes: frozenset = frozenset()

    @classmethod
    def build(
        cls,
        key: str,
        statement_type: Union[StatementType, str],
        label: str,
        ids: Iterable[str] = (),
        names: Iterable[str] = (),
        excludes: Iterable[str] = (),
    ) -> "CanonicalDefinition":
        """원문 변형을 정규화해 정의를 만든다."""
        normalized_excludes = {normalize_id(e) for e in excludes} | {normalize_name(e) for e in excludes}
        return cls(
            key=key,
            statement_type=StatementType(statement_type),
            label=label,
            ids=frozenset(filter(None, (normalize_id(i) for i in ids))),
            names=frozenset(filter(None, (normalize_name(n) for n in names))),
            excludes=frozenset(filter(None, normalized_excludes)),
        )

    def is_excluded(self, value: str) -> bool:
        return any(term in value for term in self.excludes)


class CanonicalCatalog:
    """불변 표준 계정 카탈로그."""

    def __init__(self, definitions: Sequence[CanonicalDefinition]):
        seen = set()
        for definition in definitions:
            if not definition.key:
                raise ValueError("표준 계정 키가 비어 있습니다.")
            if definition.key in seen:
                raise ValueError(f"표준 계정 키가 중복되었습니다: {definition.key}")
            seen.add(definition.key)
            for variant in definition.ids | definition.names:
                if definition.is_excluded(variant):
                    raise ValueError(
                        f"{definition.key}: 변형 '{variant}'이(가) 자신의 제외어를 포함합니다."
                    )

        self._definitions: Tuple[CanonicalDefinition, ...] = tuple(definitions)
        self._by_key: Dict[str, CanonicalDefinition] = {d.key: d for d in self._definitions}
        self._by_statement: Dict[StatementType, Tuple[CanonicalDefinition, ...]] = {
            st: tuple(d for d in self._definitions if d.statement_type == st)
            for st in StatementType
        }

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __len__(self) -> int:
        return len(self._definitions)

    @property
    def definitions(self) -> Tuple[CanonicalDefinition, ...]:
        return self._definitions

    def definitions_for(self, statement_type: StatementType) -> Tuple[CanonicalDefinition, ...]:
        """재무제표 종류별 정의 (등록 순서 유지)."""
        return self._by_statement.get(statement_type, ())

    def get(self, key: str) -> Optional[CanonicalDefinition]:
        return self._by_key.get(key)

    def label(self, key: str) -> str:
        """표준 계정 표시명. 모르는 키면 키를 그대로 반환."""
        definition = self._by_key.get(key)
        return definition.label if definition else key

    def list_options(self, statement_type: StatementType) -> List[Dict[str, str]]:
        """계정 선택 목록용 ``[{key, label}]``."""
        return [{"key": d.key, "label": d.label} for d in self.definitions_for(statement_type)]

    # ------------------------------------------------------------------
    # 생성
    # ------------------------------------------------------------------
    @classmethod
    def default(cls) -> "CanonicalCatalog":
        """내장 카탈로그."""
        return cls([CanonicalDefinition.build(**entry) for entry in DEFAULT_DEFINITIONS])

    @classmethod
    def from_toml(cls, path: Union[str, Path]) -> "CanonicalCatalog":
        """TOML 파일에서 카탈로그를 읽는다.

        ``[[definitions]]`` 테이블마다 ``key``, ``statement_type``, ``label``,
        ``ids``, ``names``, ``excludes`` 를 가진다.

        Raises:
            FileNotFoundError: 파일이 없을 경우
            ValueError: 정의가 잘못되었을 경우
        """
        path = Path(path)
        with open(path, "rb") as f:
            config = tomllib.load(f)

        entries = config.get("definitions", [])
        if not entries:
            raise ValueError(f"카탈로그 파일에 definitions 항목이 없습니다: {path}")

        definitions = []
        for entry in entries:
            try:
                definitions.append(CanonicalDefinition.build(
                    key=entry["key"],
                    statement_type=entry["statement_type"],
                    label=entry.get("label", entry["key"]),
                    ids=entry.get("ids", []),
                    names=entry.get("names", []),
                    excludes=entry.get("excludes", []),
                ))
            except KeyError as e:
                raise ValueError(f"카탈로그 정의에 필수 항목이 없습니다: {e}") from e
        logger.info(f"표준 계정 카탈로그 로드: {path} ({len(definitions)}개)")
        return cls(definitions)


def load_catalog(path: Optional[Union[str, Path]] = None) -> CanonicalCatalog:
    """설정된 TOML 카탈로그를 읽고, 없으면 내장 카탈로그를 반환한다.

    Args:
        path: 카탈로그 파일 경로. None이면 ``CANON_CATALOG_PATH`` 환경변수 사용.
    """
    path = path or os.getenv("CANON_CATALOG_PATH")
    if path:
        return CanonicalCatalog.from_toml(path)
    return CanonicalCatalog.default()


# ----------------------------------------------------------------------
# 내장 정의 (등록 순서 = 동점 우선순위)
# ----------------------------------------------------------------------
_NON_CURRENT = ["noncurrent", "non-current", "비유동"]
_TOTAL_OF_BOTH = ["부채와자본", "자본과부채", "equityandliabilities", "liabilitiesandequity"]

DEFAULT_DEFINITIONS: Tuple[Mapping, ...] = (
    # ── 재무상태표
    dict(key="BS_TOTAL_ASSETS", statement_type="BS", label="자산총계",
         ids=["ifrs-full_Assets", "ifrs_Assets", "TotalAssets",
              "ifrs-full_EquityAndLiabilities", "EquityAndLiabilities", "LiabilitiesAndEquity"],
         names=["자산총계", "총자산", "부채와자본총계", "자본과부채총계"]),
    dict(key="BS_TOTAL_LIABILITIES", statement_type="BS", label="부채총계",
         ids=["ifrs-full_Liabilities", "ifrs_Liabilities", "TotalLiabilities"],
         names=["부채총계", "총부채"],
         excludes=_TOTAL_OF_BOTH),
    dict(key="BS_TOTAL_EQUITY", statement_type="BS", label="자본총계",
         ids=["ifrs-full_Equity", "ifrs_Equity", "TotalEquity"],
         names=["자본총계", "총자본"],
         excludes=_TOTAL_OF_BOTH),
    dict(key="BS_CURRENT_ASSETS", statement_type="BS", label="유동자산",
         ids=["ifrs-full_CurrentAssets", "CurrentAssets"],
         names=["유동자산"],
         excludes=_NON_CURRENT),
    dict(key="BS_NONCURRENT_ASSETS", statement_type="BS", label="비유동자산",
         ids=["ifrs-full_NoncurrentAssets", "NoncurrentAssets"],
         names=["비유동자산", "장기자산"]),
    dict(key="BS_CURRENT_LIABILITIES", statement_type="BS", label="유동부채",
         ids=["ifrs-full_CurrentLiabilities", "CurrentLiabilities"],
         names=["유동부채"],
         excludes=_NON_CURRENT),
    dict(key="BS_NONCURRENT_LIABILITIES", statement_type="BS", label="비유동부채",
         ids=["ifrs-full_NoncurrentLiabilities", "NoncurrentLiabilities", "LongTermLiabilities"],
         names=["비유동부채", "장기부채"]),
    dict(key="BS_RETAINED_EARNINGS", statement_type="BS", label="이익잉여금",
         ids=["ifrs-full_RetainedEarnings", "RetainedEarnings"],
         names=["이익잉여금", "이익준비금"]),
    dict(key="BS_CAPITAL_STOCK", statement_type="BS", label="자본금",
         ids=["ifrs-full_IssuedCapital", "IssuedCapital", "ShareCapital", "CapitalStock"],
         names=["자본금", "발행자본"]),
    dict(key="BS_CAPITAL_SURPLUS", statement_type="BS", label="자본잉여금",
         ids=["ifrs-full_SharePremium", "SharePremium", "CapitalReserves", "CapitalSurplus"],
         names=["자본잉여금", "주식발행초과금", "주식발행프리미엄"]),
    dict(key="BS_TREASURY_STOCK", statement_type="BS", label="자기주식",
         ids=["ifrs-full_TreasuryShares", "TreasuryShares", "TreasuryStock"],
         names=["자기주식"]),
    dict(key="BS_DEPOSITS_FROM_CUSTOMERS", statement_type="BS", label="예수부채",
         ids=["ifrs-full_DepositsFromCustomers", "DepositsFromCustomers"],
         names=["예수부채", "예수금"]),
    dict(key="BS_DERIVATIVE_ASSETS", statement_type="BS", label="파생상품자산",
         ids=["ifrs-full_DerivativeFinancialAssets", "DerivativeAssets", "DerivativeFinancialAssets"],
         names=["파생상품자산", "파생금융자산"]),
    dict(key="BS_DERIVATIVE_LIABILITIES", statement_type="BS", label="파생상품부채",
         ids=["ifrs-full_DerivativeFinancialLiabilities", "DerivativeLiabilities",
              "DerivativeFinancialLiabilities"],
         names=["파생상품부채", "파생금융부채"]),
    dict(key="BS_FVPL_FINANCIAL_ASSETS", statement_type="BS", label="당기손익-공정가치측정 금융자산",
         ids=["ifrs-full_FinancialAssetsAtFairValueThroughProfitOrLoss",
              "FinancialAssetsAtFairValueThroughProfitOrLoss"],
         names=["당기손익-공정가치측정 금융자산", "당기손익-공정가치측정금융자산"]),
    dict(key="BS_FVPL_FINANCIAL_LIABILITIES", statement_type="BS", label="당기손익-공정가치측정 금융부채",
         ids=["ifrs-full_FinancialLiabilitiesAtFairValueThroughProfitOrLoss",
              "FinancialLiabilitiesAtFairValueThroughProfitOrLoss"],
         names=["당기손익-공정가치측정 금융부채"]),
    dict(key="BS_FVOCI_FINANCIAL_ASSETS", statement_type="BS", label="기타포괄손익-공정가치측정 금융자산",
         ids=["ifrs-full_FinancialAssetsAtFairValueThroughOtherComprehensiveIncome",
              "FinancialAssetsAtFairValueThroughOtherComprehensiveIncome"],
         names=["기타포괄손익-공정가치측정 금융자산"]),

    # ── 포괄손익계산서
    dict(key="PL_REVENUE", statement_type="CIS", label="매출액",
         ids=["ifrs-full_Revenue", "ifrs_Revenue", "RevenueFromContractsWithCustomers"],
         names=["매출액", "매출", "수익(매출액)"],
         excludes=["원가", "총이익", "총손익", "채권", "영업수익", "interest", "operating"]),
    dict(key="PL_OPERATING_REVENUE", statement_type="CIS", label="영업수익",
         ids=["OperatingRevenue"],
         names=["영업수익"],
         excludes=["nonoperating", "non-operating"]),
    dict(key="PL_OPERATING_EXPENSES", statement_type="CIS", label="영업비용",
         ids=["OperatingExpense"],
         names=["영업비용"],
         excludes=["nonoperating", "non-operating", "영업외"]),
    dict(key="PL_SGA", statement_type="CIS", label="판매비와관리비",
         ids=["ifrs-full_SellingGeneralAndAdministrativeExpense", "SellingGeneralAndAdministrative",
              "SellingGeneralAdministrative"],
         names=["판매비와관리비", "판매관리비", "판관비"]),
    dict(key="PL_COST_OF_SALES", statement_type="CIS", label="매출원가",
         ids=["ifrs-full_CostOfSales", "CostOfSales"],
         names=["매출원가"]),
    dict(key="PL_GROSS_PROFIT", statement_type="CIS", label="매출총이익",
         ids=["ifrs-full_GrossProfit", "GrossProfit"],
         names=["매출총이익", "매출총손익"]),
    dict(key="PL_OPERATING_PROFIT", statement_type="CIS", label="영업이익",
         ids=["ifrs-full_ProfitLossFromOperatingActivities", "dart_OperatingIncomeLoss",
              "OperatingIncome", "OperatingProfit"],
         names=["영업이익", "영업손익", "영업손실"],
         excludes=["nonoperating", "non-operating"]),
    dict(key="PL_NON_OPERATING_INCOME", statement_type="CIS", label="영업외수익",
         ids=["ifrs-full_OtherIncome", "NonOperatingIncome", "OtherIncome"],
         names=["영업외수익", "기타수익", "영업외이익"],
         excludes=["이자수익", "수수료수익"]),
    dict(key="PL_NON_OPERATING_EXPENSES", statement_type="CIS", label="영업외비용",
         ids=["ifrs-full_OtherExpense", "NonOperatingExpense", "OtherExpense"],
         names=["영업외비용", "기타비용", "영업외손실"],
         excludes=["이자비용", "수수료비용"]),
    dict(key="PL_INTEREST_INCOME", statement_type="CIS", label="이자수익",
         ids=["ifrs-full_RevenueFromInterest", "ifrs-full_FinanceIncome", "FinanceIncome", "InterestIncome"],
         names=["이자수익", "금융수익"]),
    dict(key="PL_INTEREST_EXPENSE", statement_type="CIS", label="이자비용",
         ids=["ifrs-full_FinanceCosts", "FinanceCosts", "InterestExpense"],
         names=["이자비용", "금융비용", "금융원가"]),
    dict(key="PL_FEE_REVENUE", statement_type="CIS", label="수수료수익",
         ids=["ifrs-full_FeeAndCommissionIncome", "FeeAndCommissionIncome", "CommissionIncome", "FeeIncome"],
         names=["수수료수익", "수수료이익"]),
    dict(key="PL_FEE_EXPENSE", statement_type="CIS", label="수수료비용",
         ids=["ifrs-full_FeeAndCommissionExpense", "FeeAndCommissionExpense", "CommissionExpense",
              "FeeExpense"],
         names=["수수료비용", "수수료손실"]),
    dict(key="PL_FOREX_GAIN", statement_type="CIS", label="외환거래이익",
         ids=["ForeignExchangeGain", "ForexGain"],
         names=["외환거래이익", "외화환산이익"]),
    dict(key="PL_FOREX_LOSS", statement_type="CIS", label="외환거래손실",
         ids=["ForeignExchangeLoss", "ForexLoss"],
         names=["외환거래손실", "외화환산손실"]),
    dict(key="PL_DERIVATIVES_GAIN", statement_type="CIS", label="파생상품거래 및 평가이익",
         ids=["DerivativeGain", "DerivativesGain"],
         names=["파생상품거래 및 평가이익", "파생상품관련이익"]),
    dict(key="PL_DERIVATIVES_LOSS", statement_type="CIS", label="파생상품거래 및 평가손실",
         ids=["DerivativeLoss", "DerivativesLoss"],
         names=["파생상품거래 및 평가손실", "파생상품관련손실"]),
    dict(key="PL_LOANS_GAIN", statement_type="CIS", label="대출채권 평가 및 처분이익",
         ids=["LoansGain", "LoanAssetsGain"],
         names=["대출채권 평가 및 처분이익"]),
    dict(key="PL_LOANS_LOSS", statement_type="CIS", label="대출채권 평가 및 처분손실",
         ids=["LoansLoss", "LoanAssetsLoss"],
         names=["대출채권 평가 및 처분손실"]),
    dict(key="PL_FVPL_GAIN", statement_type="CIS", label="당기손익공정가치측정금융상품 관련이익",
         ids=["FairValueProfitLossGain", "FvplGain"],
         names=["당기손익공정가치측정금융상품 관련이익", "당기손익공정가치지정금융상품 관련이익"]),
    dict(key="PL_FVPL_LOSS", statement_type="CIS", label="당기손익공정가치측정금융상품 관련손실",
         ids=["FairValueProfitLossLoss", "FvplLoss"],
         names=["당기손익공정가치측정금융상품 관련손실", "당기손익공정가치지정금융상품 관련손실"]),
    dict(key="PL_FVOCI_GAIN", statement_type="CIS", label="기타포괄손익공정가치측정금융상품 관련이익",
         ids=["FvociGain"],
         names=["기타포괄손익공정가치측정금융상품 관련이익"]),
    dict(key="PL_FVOCI_LOSS", statement_type="CIS", label="기타포괄손익공정가치측정금융상품 관련손실",
         ids=["FvociLoss"],
         names=["기타포괄손익공정가치측정금융상품 관련손실"]),
    dict(key="PL_PROFIT_BEFORE_TAX", statement_type="CIS", label="법인세차감전이익",
         ids=["ifrs-full_ProfitLossBeforeTax", "ProfitLossBeforeTax", "ProfitBeforeTax", "IncomeBeforeTax"],
         names=["법인세차감전이익", "법인세비용차감전이익", "법인세차감전순이익", "법인세비용차감전순이익",
                "법인세차감전손익", "법인세비용차감전손익"]),
    dict(key="PL_INCOME_TAX_EXPENSE", statement_type="CIS", label="법인세비용",
         ids=["ifrs-full_IncomeTaxExpenseContinuingOperations", "IncomeTaxExpense", "TaxExpense"],
         names=["법인세비용", "법인세수익", "법인세"],
         excludes=["차감전", "beforetax"]),
    dict(key="PL_NET_PROFIT", statement_type="CIS", label="당기순이익",
         ids=["ifrs-full_ProfitLoss", "NetIncome", "NetProfit"],
         names=["당기순이익", "분기순이익", "반기순이익", "당기순손익", "당기순손실"],
         excludes=["영업이익", "차감전", "beforetax", "fromoperatingactivities"]),
    dict(key="PL_OCI", statement_type="CIS", label="기타포괄손익",
         ids=["ifrs-full_OtherComprehensiveIncome", "OtherComprehensiveIncome"],
         names=["기타포괄손익", "기타포괄이익"],
         excludes=["귀속", "공정가치", "attributable"]),
    dict(key="PL_TOTAL_COMPREHENSIVE_INCOME", statement_type="CIS", label="총포괄손익",
         ids=["ifrs-full_ComprehensiveIncome", "TotalComprehensiveIncome"],
         names=["총포괄손익", "총포괄이익"],
         excludes=["귀속", "attributable"]),
)
