from datetime import datetime
from typing import Dict

from src.app.use_cases.shared import CamelModel


class PurgeResponse(CamelModel):
    deleted: int
    cutoff: datetime
    # per entity type when the purge covered several types
    cutoffs: Dict[str, datetime] = {}
