"""계정명/계정 ID 정규화.

결과는 매칭 키로만 쓰이며 사용자에게 표시하지 않는다.
"""

import re
import unicodedata
from typing import Optional

# 괄호, 가운뎃점, 쉼표, 마침표, 하이픈, 밑줄, 슬래시
_PUNCTUATION = re.compile(r"[(){}\[\]·ㆍ・,.\-_/]")
# 단독 토큰으로 쓰인 로마 숫자 I~X (NFKC 후 Ⅰ~Ⅹ 도 ASCII 로 바뀐다)
_ROMAN_NUMERAL = re.compile(r"\b[ivx]+\b", re.IGNORECASE | re.ASCII)
_NON_ALNUM = re.compile(r"[\W_]+")


def normalize_name(raw: Optional[str]) -> str:
    """계정명을 비교용 키로 강하게 정규화한다.

    1️⃣ NFKC 정규화
    2️⃣ 괄호/구두점/섹션 기호 제거
    3️⃣ 로마 숫자 섹션 번호 제거 (예: "Ⅰ.유동자산" → "유동자산")
    4️⃣ 소문자화 후 문자/숫자 이외 모두 제거

    Args:
        raw: 원본 계정명 (None 허용)

    Returns:
        정규화된 계정명. 입력이 비어 있으면 빈 문자열.
    """
    if not raw:
        return ""
    text = unicodedata.normalize("NFKC", str(raw))
    text = _PUNCTUATION.sub("", text)
    text = _ROMAN_NUMERAL.sub("", text)
    return _NON_ALNUM.sub("", text.lower())


def normalize_id(raw: Optional[str]) -> str:
    """IFRS/DART 계정 ID 정규화 (앞뒤 공백 제거 + 소문자화)."""
    if raw is None:
        return ""
    return str(raw).strip().lower()
