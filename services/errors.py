# services/errors.py
from __future__ import annotations

from typing import Dict


class DigitoraError(Exception):
    """所有可預期錯誤的共同基底；都不是致命錯誤，最壞情況只是功能降級。"""


class PersistenceReadError(DigitoraError):
    """本機儲存的值缺失或格式錯誤，呼叫端一律視為「沒有資料」。"""


class NotFoundError(DigitoraError):
    def __init__(self, course_id: str):
        super().__init__(f"course not found: {course_id}")
        self.course_id = course_id


class CourseValidationError(DigitoraError):
    """後台表單驗證失敗；errors 以欄位名稱對應訊息。"""

    def __init__(self, errors: Dict[str, str]):
        super().__init__(", ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = dict(errors)


class CollaboratorUnavailableError(DigitoraError):
    """外部文字生成服務無法使用（缺金鑰、網路或 API 錯誤）。"""

    def __init__(self, message: str, missing_credential: bool = False):
        super().__init__(message)
        self.missing_credential = missing_credential


class AdvisorBusyError(DigitoraError):
    """同一份對話已有請求尚未回來。"""


class PaymentVerificationError(DigitoraError):
    """付款回呼驗證失敗（簽章錯誤、事件不符）。"""
