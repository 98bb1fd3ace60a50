"""
services/errors.py

서비스 계층 예외. 각 예외는 HTTP 상태 코드와 사용자용 메시지를 가지며,
api/app.py 의 예외 핸들러가 {"detail": message} 형태로 변환한다.
"""


class QuestionBankError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(QuestionBankError):
    status_code = 404


class InvalidState(QuestionBankError):
    pass


class NotCompleted(InvalidState):
    pass


class Expired(QuestionBankError):
    pass


class InsufficientQuestions(QuestionBankError):
    def __init__(self, question_type: str, required: int, available: int):
        super().__init__(
            f"선택한 챕터에 '{question_type}' 유형 문제가 부족합니다 "
            f"(필요 {required}, 보유 {available})."
        )
        self.question_type = question_type
        self.required = required
        self.available = available


class ValidationError(QuestionBankError):
    pass


class Conflict(QuestionBankError):
    status_code = 409


class Unauthorized(QuestionBankError):
    status_code = 401


class Forbidden(QuestionBankError):
    status_code = 403
