"""계정 선택 목록 생성 (중복 계정 그룹핑 + 대표 계정명 선정)."""

import unicodedata
from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

from core.domain.models.line_item import RawLineItem, ReportScope
from core.domain.models.reconciliation import AccountGroup
from core.services.account_normalizer import normalize_name

# 한국어 정렬 시 문자 군 순서: 기호 < 숫자 < 라틴 < 한글 < 기타 문자
_GROUP_SYMBOL = 0
_GROUP_DIGIT = 1
_GROUP_LATIN = 2
_GROUP_HANGUL = 3
_GROUP_OTHER = 4


def _char_group(ch: str) -> int:
    code = ord(ch)
    if 0xAC00 <= code <= 0xD7A3 or 0x1100 <= code <= 0x11FF or 0x3130 <= code <= 0x318F:
        return _GROUP_HANGUL
    if ch.isdigit():
        return _GROUP_DIGIT
    if ch.isascii() and ch.isalpha():
        return _GROUP_LATIN
    if ch.isalpha():
        return _GROUP_OTHER
    return _GROUP_SYMBOL


def korean_sort_key(text: str) -> Tuple:
    """한국어 로케일 오름차순 비교 키 (대소문자 무시).

    한글 음절은 유니코드 순서가 가나다 순과 같으므로 코드포인트로 비교하고,
    문자 군(기호, 숫자, 라틴, 한글) 순서를 앞세운다. 대소문자만 다른 문자열은
    원문 비교로 순서를 고정한다.
    """
    folded = unicodedata.normalize("NFKC", text).casefold()
    return tuple((_char_group(ch), ord(ch)) for ch in folded), text


def representative_sort_key(candidate: Tuple[str, int]) -> Tuple:
    """대표 계정명 선정 순서 키. 작을수록 우선.

    1. 등장 횟수가 많은 이름
    2. 동률이면 더 긴 이름
    3. 그래도 동률이면 한국어 로케일 오름차순
    """
    name, count = candidate
    return -count, -len(name), korean_sort_key(name)


def pick_representative(name_counts: Dict[str, int]) -> str:
    """그룹 안의 계정명 빈도표에서 대표 계정명을 고른다."""
    return min(name_counts.items(), key=representative_sort_key)[0]


def _group_sort_key(group: AccountGroup) -> Tuple:
    return group.account_id is None, korean_sort_key(group.account_nm), group.key


def list_accounts(scope: ReportScope, items: Iterable[RawLineItem]) -> List[AccountGroup]:
    """범위 내 계정 라인을 중복 없이 묶어 선택 목록을 만든다.

    - 계정 ID가 있는 라인: 원본 ID 기준으로 묶는다.
    - 계정 ID가 없는 라인: 정규화된 계정명 기준으로 묶는다 ("자산 총계" = "자산총계").

    Args:
        scope: 조회 범위 (범위 밖 라인은 무시)
        items: 계정 라인 목록

    Returns:
        ID 있는 그룹 먼저, 이후 대표 계정명 오름차순으로 정렬된 그룹 목록
    """
    by_id: Dict[str, Counter] = {}
    by_name: Dict[str, Counter] = {}

    for item in items:
        if not scope.contains(item):
            continue
        name = item.account_nm or ""
        if item.account_id:
            by_id.setdefault(item.account_id, Counter())[name] += 1
        else:
            by_name.setdefault(normalize_name(name), Counter())[name] += 1

    groups: List[AccountGroup] = []
    for account_id, counts in by_id.items():
        representative = pick_representative(counts)
        groups.append(AccountGroup(
            account_id=account_id,
            account_nm=representative,
            key=_build_key(account_id, representative),
        ))
    for counts in by_name.values():
        representative = pick_representative(counts)
        groups.append(AccountGroup(
            account_id=None,
            account_nm=representative,
            key=_build_key(None, representative),
        ))

    groups.sort(key=_group_sort_key)
    return groups


def _build_key(account_id: Optional[str], account_nm: str) -> str:
    return f"{account_id if account_id else 'NA'}|{account_nm}"
