"""
Data models for the recognize.im client
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class OutcomeKind(str, Enum):
    """Enum for terminal call outcomes"""
    SUCCESS = "success"
    ERROR = "error"


class Credentials(BaseModel):
    """Account credentials, available at http://www.recognize.im/user/profile"""
    client_id: str
    api_key: str
    clapi_key: str

    class Config:
        frozen = True


class CallOutcome(BaseModel):
    """Result of a single SOAP-style call, after authentication if any"""
    method: str
    kind: OutcomeKind
    data: Any = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS

    @classmethod
    def success(cls, method: str, data: Any) -> "CallOutcome":
        return cls(method=method, kind=OutcomeKind.SUCCESS, data=data)

    @classmethod
    def error(cls, method: str, message: str) -> "CallOutcome":
        return cls(method=method, kind=OutcomeKind.ERROR, message=message)
