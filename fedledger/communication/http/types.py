from typing import Any, Literal, TypedDict


class BaseResponse(TypedDict):
    """Base response structure."""

    status: Literal["success", "error"]
    message: str
    timestamp: str


class InvokeRequest(TypedDict, total=False):
    """Operation invocation request structure."""

    args: list[Any] | dict[str, Any]


class InvokeResponse(BaseResponse):
    """Response for a successful operation."""

    operation: str
    result: Any


class ErrorResponse(BaseResponse):
    """Response for a failed operation."""

    kind: str
    details: dict[str, Any]


class StatusResponse(BaseResponse):
    """Gateway and ledger status."""

    height: int
    keys: int
