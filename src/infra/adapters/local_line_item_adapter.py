"""로컬 JSON 파일 기반 계정 라인 저장소 어댑터."""

import json
import logging
import os
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from core.domain.errors import DataSourceError
from core.domain.models.line_item import (
    FsDiv,
    NormalizedCache,
    RawLineItem,
    ReportScope,
    ReportType,
    StatementType,
)
from core.ports.line_item_port import LineItemPort

logger = logging.getLogger(__name__)

# (기업코드, 연도, 보고서, 연결/개별)
FilingKey = Tuple[str, int, ReportType, FsDiv]


class LocalLineItemAdapter(LineItemPort):
    """공시 한 건을 JSON 파일 하나로 저장하는 어댑터.
    
    - 경로: ``{root}/{corp_code}/{year}_{reprt_code}_{fs_div}.json``
    - 라인 ID: ``{corp_code}:{year}:{reprt_code}:{fs_div}:{index}``
    - 캐시 필드는 각 라인과 같은 레코드에 함께 저장
    """

    def __init__(self, root_dir: Optional[Union[str, Path]] = None):
        """초기화.
        
        Args:
            root_dir: 저장 디렉터리 (None이면 ``OUTPUT_DIRECTORY/fnltt``)
        """
        if root_dir is None:
            root_dir = Path(os.getenv("OUTPUT_DIRECTORY", "./data")).resolve() / "fnltt"
        self._root = Path(root_dir)
        self._root.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # LineItemPort 구현
    # ------------------------------------------------------------------
    def save_lines(self, items: Sequence[RawLineItem]) -> int:
        grouped: Dict[FilingKey, List[RawLineItem]] = {}
        for item in items:
            key = (item.corp_code, item.bsns_year, item.reprt_code, item.fs_div)
            grouped.setdefault(key, []).append(item)

        for key, filing_items in grouped.items():
            records = [self._to_record(item) for item in filing_items]
            self._write_records(self._get_path(*key), records)
            logger.debug(f"저장: {key[0]} {key[1]} {key[2].value} {key[3].value} ({len(records)}개)")
        return sum(len(v) for v in grouped.values())

    def read_lines(
        self,
        scope: ReportScope,
        corp_codes: Optional[Sequence[str]] = None
    ) -> List[RawLineItem]:
        if corp_codes:
            corp_dirs = [self._root / code for code in dict.fromkeys(corp_codes)]
        else:
            corp_dirs = sorted(p for p in self._root.iterdir() if p.is_dir())

        items: List[RawLineItem] = []
        for corp_dir in corp_dirs:
            path = self._get_path(corp_dir.name, scope.bsns_year, scope.reprt_code, scope.fs_div)
            if not path.exists():
                continue
            for item in self._iter_items(path):
                if item.sj_div == scope.sj_div:
                    items.append(item)
        return items

    def find_uncached(self, limit: int) -> List[RawLineItem]:
        found: List[RawLineItem] = []
        for path in sorted(self._root.glob("*/*.json")):
            for item in self._iter_items(path):
                if item.cache is None or not item.cache.is_complete:
                    found.append(item)
                    if len(found) >= limit:
                        return found
        return found

    def write_cache(self, row_id: str, cache: NormalizedCache) -> None:
        path, index = self._locate(row_id)
        records = self._read_records(path)
        if not 0 <= index < len(records):
            raise DataSourceError(f"존재하지 않는 라인입니다: {row_id}")

        records[index].update({
            "account_nm_norm": cache.account_nm_norm,
            "account_id_norm": cache.account_id_norm,
            "canon_key": cache.canon_key,
            "canon_score": cache.canon_score,
        })
        self._write_records(path, records)

    # ------------------------------------------------------------------
    # 파일 입출력
    # ------------------------------------------------------------------
    def _get_path(self, corp_code: str, year: int, report_type: ReportType, fs_div: FsDiv) -> Path:
        return self._root / corp_code / f"{year}_{report_type.value}_{fs_div.value}.json"

    def _locate(self, row_id: str) -> Tuple[Path, int]:
        """라인 ID를 (파일 경로, 인덱스)로 변환."""
        try:
            corp_code, year, reprt_code, fs_div, index = row_id.split(":")
            path = self._get_path(corp_code, int(year), ReportType(reprt_code), FsDiv(fs_div))
            return path, int(index)
        except (AttributeError, ValueError) as e:
            raise DataSourceError(f"잘못된 라인 ID입니다: {row_id!r}") from e

    def _read_records(self, path: Path) -> List[Dict[str, Any]]:
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise DataSourceError(f"라인 파일 읽기 실패: {path}: {e}") from e
        rows = data.get("rows", []) if isinstance(data, dict) else None
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise DataSourceError(f"라인 파일 형식 오류 (rows 목록 없음): {path}")
        return rows

    def _write_records(self, path: Path, records: List[Dict[str, Any]]) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as f:
                json.dump({"rows": records}, f, ensure_ascii=False, indent=2)
        except OSError as e:
            raise DataSourceError(f"라인 파일 저장 실패: {path}: {e}") from e

    def _iter_items(self, path: Path) -> Iterator[RawLineItem]:
        for index, record in enumerate(self._read_records(path)):
            yield self._from_record(record, index)

    # ------------------------------------------------------------------
    # 직렬화
    # ------------------------------------------------------------------
    @staticmethod
    def _to_record(item: RawLineItem) -> Dict[str, Any]:
        return {
            "corp_code": item.corp_code,
            "corp_name": item.corp_name,
            "bsns_year": item.bsns_year,
            "reprt_code": item.reprt_code.value,
            "fs_div": item.fs_div.value,
            "sj_div": item.sj_div.value,
            "account_id": item.account_id,
            "account_nm": item.account_nm,
            "thstrm_amount": str(item.thstrm_amount) if item.thstrm_amount is not None else None,
            "frmtrm_amount": str(item.frmtrm_amount) if item.frmtrm_amount is not None else None,
            "ord": item.ord,
            "currency": item.currency,
            "account_nm_norm": None,
            "account_id_norm": None,
            "canon_key": None,
            "canon_score": None,
        }

    @staticmethod
    def _from_record(record: Dict[str, Any], index: int) -> RawLineItem:
        """저장된 레코드를 라인으로 복원 (저장소 경계 검증)."""
        try:
            reprt_code = ReportType(record["reprt_code"])
            fs_div = FsDiv(record["fs_div"])
            corp_code = str(record["corp_code"])
            bsns_year = int(record["bsns_year"])
            item = RawLineItem(
                corp_code=corp_code,
                bsns_year=bsns_year,
                reprt_code=reprt_code,
                fs_div=fs_div,
                sj_div=StatementType(record["sj_div"]),
                account_id=record.get("account_id"),
                account_nm=record.get("account_nm"),
                thstrm_amount=_to_decimal(record.get("thstrm_amount")),
                frmtrm_amount=_to_decimal(record.get("frmtrm_amount")),
                ord=record.get("ord"),
                currency=record.get("currency"),
                corp_name=record.get("corp_name"),
                row_id=f"{corp_code}:{bsns_year}:{reprt_code.value}:{fs_div.value}:{index}",
                cache=NormalizedCache(
                    account_nm_norm=record.get("account_nm_norm"),
                    account_id_norm=record.get("account_id_norm"),
                    canon_key=record.get("canon_key"),
                    canon_score=record.get("canon_score"),
                ),
            )
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise DataSourceError(f"잘못된 라인 레코드입니다: {record!r}") from e
        return item


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value))
