from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Union


@dataclass
class ScanSuccess:
    recurring_id: int
    title: str
    expense_id: int
    amount: float
    due_date: date
    next_due: date
    reused_existing: bool = False   # expense for this cycle already existed
    success: bool = True


@dataclass
class ScanFailure:
    recurring_id: Optional[int]
    title: str
    reason: str
    success: bool = False


ScanEntry = Union[ScanSuccess, ScanFailure]


@dataclass
class BatchResult:
    entries: list[ScanEntry] = field(default_factory=list)

    @property
    def succeeded(self) -> list[ScanSuccess]:
        return [e for e in self.entries if isinstance(e, ScanSuccess)]

    @property
    def failed(self) -> list[ScanFailure]:
        return [e for e in self.entries if isinstance(e, ScanFailure)]

    def add(self, entry: ScanEntry):
        self.entries.append(entry)

    def __len__(self) -> int:
        return len(self.entries)
