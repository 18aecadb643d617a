from datetime import datetime
from pydantic import BaseModel
from typing import Optional

class Option(BaseModel):
    id: str
    label: str

class TournamentOut(BaseModel):
    id: str
    total_matches: int
    processed_matches: int
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

class PlayerOut(BaseModel):
    epic_id: str
    display_name: str

# one numeric field per StatKind value
class PlayerStatsRow(BaseModel):
    player: str
    epicId: str
    eliminations: int = 0
    damageDealt: int = 0
    damageReceived: int = 0
