"""
스키마 모듈

요청/응답 Pydantic 모델을 정의합니다.
"""
from cardloom.schemas.common import (ApiResponse, ErrorResponse, MessageResponse,
                                     PagedResult, Pagination)

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "MessageResponse",
    "PagedResult",
    "Pagination",
]
