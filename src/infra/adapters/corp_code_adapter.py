import os
import zipfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union
import requests

from core.domain.errors import DataSourceError
from core.ports.corp_code_port import CorpCodePort


class CorpCodeAdapter(CorpCodePort):
    """기업명 ↔ 기업코드 매핑 어댑터.

    - 최초 사용 시 DART에서 제공하는 ``corpCode.zip`` 파일을 다운로드하고
      ``CORPCODE.xml`` 을 파싱한다.
    - 파일이 이미 존재하면 재다운로드하지 않는다. ``force_download``
      플래그를 통해 강제 업데이트 가능.
    - 파싱 결과는 인스턴스에 보관해 기업코드 → 기업명 역조회에도 쓴다.
    """

    _CORP_CODE_URL = "https://opendart.fss.or.kr/api/corpCode.xml"

    def __init__(
        self,
        cache_dir: Optional[Union[str, Path]] = None,
        force_download: bool = False,
        api_key: Optional[str] = None
    ) -> None:
        """생성자.

        Args:
            cache_dir: 캐시 디렉터리 (None이면 ``OUTPUT_DIRECTORY/corp_code``)
            force_download: ``True``이면 최신 XML을 다시 다운로드한다.
            api_key: DART API 키 (None이면 환경변수에서 읽음)
        """
        if cache_dir is None:
            cache_dir = Path(os.getenv("OUTPUT_DIRECTORY", "./data")).resolve() / "corp_code"
        self._cache_dir = Path(cache_dir)
        self._zip_path = self._cache_dir / "corpCode.zip"
        self._xml_path = self._cache_dir / "CORPCODE.xml"
        self._force_download = force_download
        self._api_key = api_key
        self._name_to_code: Optional[Dict[str, str]] = None
        self._code_to_name: Optional[Dict[str, str]] = None

    @property
    def xml_path(self) -> Path:
        return self._xml_path

    # ---------------------------------------------------------------------
    # 내부 헬퍼
    # ---------------------------------------------------------------------
    def _ensure_data(self) -> None:
        """XML 데이터가 없으면 다운로드하고 압축을 푼다."""
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        if self._force_download or not self._xml_path.is_file():
            self._download_and_extract()
            self._force_download = False

    def _download_and_extract(self) -> None:
        """DART API 로부터 ``corpCode.zip`` 을 받아 압축을 푼다."""
        api_key = self._api_key or os.getenv("DART_API_KEY")
        if not api_key:
            raise EnvironmentError("DART_API_KEY 환경 변수가 설정되지 않았습니다.")
        try:
            response = requests.get(self._CORP_CODE_URL, params={"crtfc_key": api_key}, timeout=30)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DataSourceError(f"기업코드 파일 다운로드 실패: {e}") from e

        self._zip_path.write_bytes(response.content)
        try:
            with zipfile.ZipFile(self._zip_path, "r") as z:
                # zip 안에 CORPCODE.xml 이 하나만 존재한다.
                z.extractall(self._cache_dir)
        except zipfile.BadZipFile as e:
            # 키 오류 등은 zip 대신 XML 오류 메시지로 응답된다
            raise DataSourceError(f"기업코드 파일이 zip 형식이 아닙니다: {response.content[:200]!r}") from e
        if not self._xml_path.is_file():
            raise FileNotFoundError("압축 해제 후 CORPCODE.xml 파일을 찾을 수 없습니다.")

    def _load_mapping(self) -> Dict[str, str]:
        """XML 파일을 파싱해 ``{기업명: 기업코드}`` 사전을 만든다 (최초 1회)."""
        if self._name_to_code is None:
            self._ensure_data()
            root = ET.parse(self._xml_path).getroot()
            name_to_code: Dict[str, str] = {}
            code_to_name: Dict[str, str] = {}
            for corp in root.findall("./list"):
                name = (corp.findtext("corp_name") or "").strip()
                code = (corp.findtext("corp_code") or "").strip()
                if name and code:
                    name_to_code[name] = code
                    code_to_name[code] = name
            self._name_to_code = name_to_code
            self._code_to_name = code_to_name
        return self._name_to_code

    # ---------------------------------------------------------------------
    # CorpCodePort 구현
    # ---------------------------------------------------------------------
    def get_all_mapping(self) -> Mapping[str, str]:
        return dict(self._load_mapping())

    def get_codes(self, company_names: Sequence[str]) -> List[Optional[str]]:
        mapping = self._load_mapping()
        return [mapping.get(name.strip()) for name in company_names]

    def get_name(self, corp_code: str) -> Optional[str]:
        self._load_mapping()
        return self._code_to_name.get(corp_code)
