from abc import ABC, abstractmethod
from typing import List, Mapping, Optional, Sequence


class CorpCodePort(ABC):
    """기업명 ↔ DART 기업코드 조회 포트.

    CLI 동기화 명령은 사용자가 입력한 기업명을 이 포트로 기업코드로 바꾸고,
    동기화 서비스는 응답에 기업명이 없는 라인을 이 포트로 채운다.
    """

    @abstractmethod
    def get_all_mapping(self) -> Mapping[str, str]:
        """전체 ``{기업명: 기업코드}`` 매핑을 반환한다."""
        raise NotImplementedError

    @abstractmethod
    def get_codes(self, company_names: Sequence[str]) -> List[Optional[str]]:
        """기업명 리스트에 대한 코드 리스트를 반환한다.

        Args:
            company_names: 기업명 시퀀스.

        Returns:
            기업코드 리스트. 매칭되지 않으면 해당 위치에 ``None``.
        """
        raise NotImplementedError

    @abstractmethod
    def get_name(self, corp_code: str) -> Optional[str]:
        """기업코드로 기업명을 찾는다. 없으면 ``None``."""
        raise NotImplementedError
