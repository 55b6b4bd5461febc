from typing import List, Optional

from hive_api.core.schemas import CamelModel


class StepOut(CamelModel):
    id: str
    title: str
    description: str
    weight: int
    required: bool
    completed: bool


class ProgressOut(CamelModel):
    percentage: int
    steps: List[StepOut]
    next_step: Optional[StepOut] = None
    is_complete: bool
    threshold: int
    dashboard_view: str
