"""CLI 인터페이스."""

import sys
import logging
from datetime import date
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table
from dotenv import load_dotenv

# src 디렉토리를 모듈 검색 경로에 추가
sys.path.append(str(Path(__file__).parent))

from core.domain.errors import ReconcilerError, ValidationError
from core.domain.models.line_item import FsDiv, ReportScope, ReportType, StatementType
from core.services.account_grouping_service import list_accounts
from core.services.backfill_service import BackfillService
from core.services.canonical_catalog import CanonicalCatalog, load_catalog
from core.services.classification_service import AccountClassifier
from core.services.comparison_service import ComparisonService, selector_from_params
from core.services.statement_sync_service import StatementSyncService
from core.services.statement_view_service import view_statement_lines
from infra.adapters.corp_code_adapter import CorpCodeAdapter
from infra.adapters.dart_financial_adapter import DartFinancialAdapter
from infra.adapters.local_line_item_adapter import LocalLineItemAdapter
from infra.adapters.local_storage_adapter import LocalStorageAdapter

# Typer 앱 생성
app = typer.Typer(
    name="dart-reconciler",
    help="DART 계정 정규화/분류 및 기업 간 비교 도구",
    add_completion=False
)

# Rich console
console = Console()

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

CURRENT_YEAR = date.today().year


def _parse_scope(year: int, reprt: str, fs_div: str, sj_div: str) -> ReportScope:
    """CLI 옵션을 조회 범위로 변환."""
    try:
        return ReportScope(
            bsns_year=year,
            reprt_code=ReportType(reprt),
            fs_div=FsDiv(fs_div.upper()),
            sj_div=StatementType(sj_div.upper()),
        )
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


def _split_csv(text: Optional[str]) -> List[str]:
    return [s.strip() for s in (text or "").split(",") if s.strip()]


def _load_catalog(catalog_path: Optional[str]) -> CanonicalCatalog:
    """카탈로그 파일이 없거나 형식이 잘못되면 오류 메시지 후 종료."""
    try:
        return load_catalog(catalog_path)
    except (OSError, ValueError) as e:
        _fail("표준 계정 카탈로그 로드 실패", e)


def _build_classifier(catalog_path: Optional[str]) -> AccountClassifier:
    return AccountClassifier(_load_catalog(catalog_path))


def _fail(message: str, error: Exception) -> None:
    console.print(f"[red]❌ {message}: {error}[/red]")
    logger.exception(f"{message}: {error}")
    raise typer.Exit(code=1)


@app.command()
def canon(
    sj_div: str = typer.Option("BS", "--sj-div", help="재무제표 종류 (BS, CIS)"),
    catalog: Optional[str] = typer.Option(None, "--catalog", help="표준 계정 카탈로그 TOML 경로"),
):
    """표준 계정 키와 표시명을 출력합니다."""
    load_dotenv()
    try:
        statement_type = StatementType(sj_div.upper())
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    table = Table(title=f"표준 계정 ({statement_type.value})")
    table.add_column("키")
    table.add_column("표시명")
    for option in _load_catalog(catalog).list_options(statement_type):
        table.add_row(option["key"], option["label"])
    console.print(table)


@app.command()
def sync(
    years: str = typer.Option(str(CURRENT_YEAR), "--years", "--year", "-y", help="사업연도 (예: 2023 또는 2021-2023,2025)"),
    reprt: str = typer.Option(ReportType.ANNUAL.value, "--reprt", "-r", help="보고서 코드 (11011, 11012, 11013, 11014)"),
    fs_div: str = typer.Option(FsDiv.SEPARATE.value, "--fs-div", help="OFS(개별) 또는 CFS(연결)"),
    companies: Optional[str] = typer.Option(None, "--companies", "-c", help="기업명 (쉼표로 구분)"),
    corp_codes: Optional[str] = typer.Option(None, "--corp-codes", help="기업코드 (쉼표로 구분)"),
):
    """DART에서 계정 라인을 내려받아 로컬 저장소에 적재합니다.

    Examples:
        $ dart-reconciler sync --years 2022-2023 --companies "삼성전자,SK하이닉스"
    """
    load_dotenv()

    try:
        year_list = StatementSyncService.parse_years(years)
        report_type = ReportType(reprt)
        fs = FsDiv(fs_div.upper())
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    try:
        codes = _split_csv(corp_codes)
        names = _split_csv(companies)
        corp_code_adapter = CorpCodeAdapter()
        if names:
            for name, code in zip(names, corp_code_adapter.get_codes(names)):
                if code:
                    codes.append(code)
                else:
                    console.print(f"[yellow]⚠️  기업 코드를 찾을 수 없음: {name}[/yellow]")
                    logger.warning(f"기업 코드를 찾을 수 없음: {name}")
        if not codes:
            console.print("[red]❌ 동기화할 기업이 없습니다. --companies 또는 --corp-codes 를 지정하세요.[/red]")
            raise typer.Exit(code=1)

        service = StatementSyncService(
            financial_port=DartFinancialAdapter(),
            line_item_port=LocalLineItemAdapter(),
            corp_code_port=corp_code_adapter
        )
        console.print(f"[green]🚀 동기화 시작: {len(codes)}개 기업, {year_list}[/green]")
        report = service.sync(codes, year_list, report_type, fs)
    except (ReconcilerError, EnvironmentError) as e:
        _fail("동기화 중 오류 발생", e)

    console.print(f"[green]✅ 완료! {report.stored}개 라인 저장[/green]")
    for corp_code, year, message in report.failed:
        console.print(f"[yellow]⚠️  {corp_code} {year}: {message}[/yellow]")


@app.command()
def accounts(
    year: int = typer.Option(CURRENT_YEAR, "--year", help="사업연도"),
    reprt: str = typer.Option(ReportType.ANNUAL.value, "--reprt", "-r", help="보고서 코드"),
    fs_div: str = typer.Option(FsDiv.SEPARATE.value, "--fs-div", help="OFS(개별) 또는 CFS(연결)"),
    sj_div: str = typer.Option(StatementType.BS.value, "--sj-div", help="BS 또는 CIS"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="엑셀 저장 경로"),
):
    """범위 내 계정 목록 (중복 제거, 대표 계정명)을 출력합니다."""
    load_dotenv()
    scope = _parse_scope(year, reprt, fs_div, sj_div)

    try:
        groups = list_accounts(scope, LocalLineItemAdapter().read_lines(scope))
    except ReconcilerError as e:
        _fail("계정 목록 조회 실패", e)

    table = Table(title=f"계정 목록 {year} {scope.reprt_code.value} {scope.fs_div.value} {scope.sj_div.value}")
    table.add_column("계정ID")
    table.add_column("계정명")
    for group in groups:
        table.add_row(group.account_id or "-", group.account_nm)
    console.print(table)

    if output:
        LocalStorageAdapter().export_accounts(groups, output)
        console.print(f"[green]✅ 결과 저장: {output}[/green]")


@app.command()
def compare(
    year: int = typer.Option(CURRENT_YEAR, "--year", help="사업연도"),
    reprt: str = typer.Option(ReportType.ANNUAL.value, "--reprt", "-r", help="보고서 코드"),
    fs_div: str = typer.Option(FsDiv.SEPARATE.value, "--fs-div", help="OFS(개별) 또는 CFS(연결)"),
    sj_div: str = typer.Option(StatementType.BS.value, "--sj-div", help="BS 또는 CIS"),
    canon_key: Optional[str] = typer.Option(None, "--canon-key", help="표준 계정 키 (예: BS_TOTAL_ASSETS)"),
    account_nm: Optional[str] = typer.Option(None, "--account-nm", help="원본 계정명"),
    account_id: Optional[str] = typer.Option(None, "--account-id", help="원본 계정 ID"),
    corp_codes: Optional[str] = typer.Option(None, "--corp-codes", help="기업코드 (쉼표로 구분)"),
    use_cache: bool = typer.Option(False, "--use-cache", help="백필된 분류 캐시 재사용"),
    catalog: Optional[str] = typer.Option(None, "--catalog", help="표준 계정 카탈로그 TOML 경로"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="엑셀 저장 경로"),
):
    """기업별 계정 금액을 비교합니다.

    Examples:
        $ dart-reconciler compare --year 2023 --sj-div BS --canon-key BS_TOTAL_ASSETS
        $ dart-reconciler compare --year 2023 --sj-div CIS --account-nm "매출액"
    """
    load_dotenv()
    scope = _parse_scope(year, reprt, fs_div, sj_div)

    try:
        mode, selector = selector_from_params(canon_key, account_nm, account_id)
        service = ComparisonService(_build_classifier(catalog), trust_cache=use_cache)
        rows = service.compare_from_port(
            LocalLineItemAdapter(), scope, mode, selector, _split_csv(corp_codes) or None
        )
    except ValidationError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1)
    except ReconcilerError as e:
        _fail("비교 중 오류 발생", e)

    table = Table(title=f"비교 {year} {scope.sj_div.value} ({mode.value})")
    table.add_column("기업코드")
    table.add_column("기업명")
    table.add_column("당기금액", justify="right")
    table.add_column("전기금액", justify="right")
    for row in rows:
        table.add_row(row.corp_code, row.corp_name, f"{row.thstrm_amount:,}", f"{row.frmtrm_amount:,}")
    console.print(table)

    if output:
        LocalStorageAdapter().export_comparison(rows, output)
        console.print(f"[green]✅ 결과 저장: {output}[/green]")


@app.command()
def view(
    year: int = typer.Option(CURRENT_YEAR, "--year", help="사업연도"),
    reprt: str = typer.Option(ReportType.ANNUAL.value, "--reprt", "-r", help="보고서 코드"),
    fs_div: str = typer.Option(FsDiv.SEPARATE.value, "--fs-div", help="OFS(개별) 또는 CFS(연결)"),
    corp_codes: Optional[str] = typer.Option(None, "--corp-codes", help="기업코드 (쉼표로 구분)"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="엑셀 저장 경로"),
):
    """저장된 재무상태표/포괄손익계산서 라인을 원본 그대로 출력합니다."""
    load_dotenv()
    try:
        report_type = ReportType(reprt)
        fs = FsDiv(fs_div.upper())
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    try:
        items = view_statement_lines(LocalLineItemAdapter(), year, report_type, fs, _split_csv(corp_codes) or None)
    except ReconcilerError as e:
        _fail("라인 조회 실패", e)

    table = Table(title=f"재무제표 {year} {report_type.value} {fs.value}")
    table.add_column("기업명")
    table.add_column("구분")
    table.add_column("계정명")
    table.add_column("당기금액", justify="right")
    table.add_column("전기금액", justify="right")
    for item in items:
        table.add_row(
            item.display_corp_name,
            item.sj_div.value,
            item.account_nm or "-",
            f"{item.thstrm_amount:,}" if item.thstrm_amount is not None else "-",
            f"{item.frmtrm_amount:,}" if item.frmtrm_amount is not None else "-",
        )
    console.print(table)

    if output:
        LocalStorageAdapter().export_lines(items, output)
        console.print(f"[green]✅ 결과 저장: {output}[/green]")


@app.command()
def corps(
    query: Optional[str] = typer.Option(None, "--query", "-q", help="기업명 검색어 (부분 일치)"),
    limit: int = typer.Option(50, "--limit", "-l", help="최대 출력 수"),
):
    """DART 기업코드 목록을 기업명 순으로 출력합니다."""
    load_dotenv()
    try:
        mapping = CorpCodeAdapter().get_all_mapping()
    except (ReconcilerError, EnvironmentError) as e:
        _fail("기업코드 목록 조회 실패", e)

    keyword = (query or "").strip()
    matched = sorted((name, code) for name, code in mapping.items() if keyword in name)

    table = Table(title=f"기업 목록 ({len(matched)}개 중 {min(limit, len(matched))}개)")
    table.add_column("기업코드")
    table.add_column("기업명")
    for name, code in matched[:limit]:
        table.add_row(code, name)
    console.print(table)


@app.command()
def backfill(
    limit: int = typer.Option(1000, "--limit", "-l", help="한 번에 처리할 최대 라인 수"),
    catalog: Optional[str] = typer.Option(None, "--catalog", help="표준 계정 카탈로그 TOML 경로"),
):
    """저장된 라인의 정규화/분류 캐시를 채웁니다."""
    load_dotenv()
    try:
        service = BackfillService(LocalLineItemAdapter(), _build_classifier(catalog))
        result = service.backfill(limit)
    except ValidationError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1)
    except ReconcilerError as e:
        _fail("백필 중 오류 발생", e)

    console.print(f"[green]✅ {result.updated}개 라인 캐시 갱신[/green]")


if __name__ == "__main__":
    app()
