import enum
from dataclasses import dataclass
from typing import Union

class FailureKind(str, enum.Enum):
    TRANSPORT = "transport"
    NON_OK_STATUS = "non_ok_status"
    EMPTY_CONTENT = "empty_content"

@dataclass(frozen=True)
class FetchSuccess:
    url: str
    status_code: int
    body: str
    final_url: str = ""
    truncated: bool = False

@dataclass(frozen=True)
class FetchFailure:
    url: str
    reason: str
    kind: FailureKind = FailureKind.TRANSPORT

FetchOutcome = Union[FetchSuccess, FetchFailure]

class BaseFetcher:
    async def fetch(self, url: str) -> FetchOutcome:
        raise NotImplementedError
