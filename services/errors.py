"""
services/errors.py

- 도메인 계층에서 발생시키는 예외 모음
- 코어(성적 집계/출결 기록)는 예외를 재시도하거나 삼키지 않고 그대로 호출자에 전달한다.
- HTTP 변환은 middlewares/error_handler.py 에서 담당 (code / status_code 사용)
"""


class RecordError(Exception):
    """모든 도메인 예외의 기반 클래스"""

    code = "RECORD_ERROR"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RecordError):
    """형식/범위가 잘못된 입력 (음수 점수, 알 수 없는 상태값 등)"""

    code = "VALIDATION_ERROR"
    status_code = 400


class MissingReferenceError(RecordError):
    """참조 대상(student/course/assessment 등)이 존재하지 않음"""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ConfigError(RecordError):
    """성적 등급 경계 등 설정값이 잘못됨"""

    code = "CONFIG_ERROR"
    status_code = 500


class PermissionDeniedError(RecordError):
    """역할(role) 또는 본인 확인 실패"""

    code = "FORBIDDEN"
    status_code = 403
