"""Response models shared by the routers."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error response model."""

    success: bool = False
    error: str
    message: str
    details: dict = {}


ERROR_RESPONSES = {
    400: {"description": "Invalid request parameters", "model": ErrorResponse},
    404: {"description": "Referenced entity not found", "model": ErrorResponse},
}
