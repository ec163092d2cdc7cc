"""도메인 에러 분류

- InvalidOperation: 잘못된 요청 (자기 자신에게 친구 요청 등)
- NotFound: 대상이 없거나, 행위자가 해당 레코드에 대한 역할이 없음.
  존재 여부가 권한 없는 사용자에게 드러나지 않도록 두 경우를 구분하지 않는다.
- Conflict: 같은 쌍에 pending/accepted 관계가 이미 있음
"""


class SnapCircleError(Exception):
    """모든 도메인 에러의 기반 클래스"""

    code: str = "ERROR"
    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidOperation(SnapCircleError):
    code = "INVALID_OPERATION"
    status_code = 400


class NotFound(SnapCircleError):
    code = "NOT_FOUND"
    status_code = 404


class Conflict(SnapCircleError):
    code = "CONFLICT"
    status_code = 409
