from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Pagination(BaseModel):
    total: int = Field(..., description="필터 적용 후 전체 건수")
    limit: int = Field(..., description="페이지 크기")
    offset: int = Field(..., description="건너뛴 건수")
    has_more: bool = Field(..., description="다음 페이지 존재 여부")

    @classmethod
    def build(cls, total: int, limit: int, offset: int) -> "Pagination":
        return cls(total=total, limit=limit, offset=offset, has_more=offset + limit < total)


class ApiResponse(BaseModel, Generic[T]):
    """
    공통 응답 포맷: { success, data, pagination }
    """
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
    pagination: Optional[Pagination] = None


class PagedResult(BaseModel, Generic[T]):
    """서비스 계층에서 라우터로 넘기는 페이지 결과"""
    items: List[T]
    pagination: Pagination


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """
    에러 응답 스키마
    """
    success: bool = False
    error: str = Field(..., description="에러 메시지")
    detail: Optional[object] = Field(None, description="상세 에러 정보")

    model_config = {
        "json_schema_extra": {
            "example": {
                "success": False,
                "error": "Card not found",
                "detail": None,
            }
        }
    }
