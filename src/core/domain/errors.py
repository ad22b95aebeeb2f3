"""계정 정합 엔진 예외."""


class ReconcilerError(Exception):
    """엔진 예외의 기반 클래스."""


class ValidationError(ReconcilerError):
    """호출자가 필수 값을 빠뜨렸거나 잘못된 값을 전달한 경우.

    예: 비교 시 ``canon_key`` 와 ``account_nm``/``account_id`` 가 모두 없음.
    """


class DataSourceError(ReconcilerError):
    """저장소 또는 DART 등 외부 협력자의 읽기/쓰기 실패.

    엔진 내부에서 재시도하지 않고 그대로 전파한다.
    """
