"""
Request and response models for the league API.

Response models mirror the entities' to_dict() output; the serialize_*
helpers add the derived fields the UI needs (countdown, team on the clock).
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from ..draft.draft_engine import DraftEngine


# ========== Teams & Players ==========

class TeamResponse(BaseModel):
    id: str
    name: str
    city: str
    abbreviation: str
    conference: str
    division: str
    wins: int
    losses: int
    ot_losses: int
    points: int


class PlayerResponse(BaseModel):
    id: str
    name: str
    number: Optional[int] = None
    position: str
    team_id: Optional[str] = None
    availability: str
    gamertag: Optional[str] = None
    bio: Optional[str] = None
    stats: Dict = Field(description="Skater or goalie statistics, tagged by 'kind'")


class PlayerSearchResult(BaseModel):
    player: PlayerResponse
    score: int = Field(description="Fuzzy match score 0-100")


class PlayerUpdateRequest(BaseModel):
    """Partial player update; omitted fields are left unchanged."""
    availability: Optional[Literal['available', 'maybe', 'unavailable']] = None
    gamertag: Optional[str] = None
    bio: Optional[str] = None


class GameResultRequest(BaseModel):
    home_team_id: str
    away_team_id: str
    home_score: int = Field(..., ge=0)
    away_score: int = Field(..., ge=0)
    overtime: bool = Field(False, description="Decided in overtime or a shootout")


# ========== Draft ==========

class DraftActionRequest(BaseModel):
    """Administrative draft action."""
    action: Literal['start', 'pause', 'resume', 'reset', 'advance']
    team_order: Optional[List[str]] = Field(
        None, description="Round-one order for 'start' (default: reverse standings)"
    )
    pick_time_limit: Optional[int] = Field(None, ge=1, description="Seconds per pick")
    total_rounds: Optional[int] = Field(None, ge=1)
    order_style: Optional[Literal['straight', 'snake']] = None


class DraftPickRequest(BaseModel):
    team_id: str
    prospect_id: str


class DraftSettingsResponse(BaseModel):
    season: str
    is_active: bool
    phase: str
    current_round: int
    current_pick: int
    pick_time_limit: int
    total_rounds: int
    picks_per_round: int
    order_style: str
    start_time: Optional[str] = None
    updated_at: Optional[str] = None
    time_remaining: int = Field(description="Seconds left for the current pick")
    on_the_clock: Optional[str] = Field(None, description="Team id owning the current slot")


class DraftPickResponse(BaseModel):
    pick_number: int
    round: int
    team_id: str
    player_id: Optional[str] = None
    player_name: Optional[str] = None
    is_selected: bool
    time_remaining: int
    requeued: int
    forfeited: bool
    selected_at: Optional[str] = None


class DraftProspectResponse(BaseModel):
    id: str
    name: str
    position: str
    age: int
    draft_rank: Optional[int] = None
    height: Optional[str] = None
    weight: Optional[str] = None
    country: Optional[str] = None
    league: Optional[str] = None
    ratings: Dict[str, int]
    is_drafted: bool
    drafted_by: Optional[str] = None
    draft_round: Optional[int] = None
    draft_pick: Optional[int] = None


class DraftPickResultResponse(BaseModel):
    pick: DraftPickResponse
    player: PlayerResponse
    settings: DraftSettingsResponse


# ========== Trades ==========

class TradeProposalRequest(BaseModel):
    from_team_id: str
    to_team_id: str
    players_offered: List[str] = Field(default_factory=list)
    players_wanted: List[str] = Field(default_factory=list)


class TradeActionRequest(BaseModel):
    team_id: Optional[str] = Field(None, description="Acting team, checked against the trade")


class TradeCancelRequest(BaseModel):
    team_id: str = Field(..., description="Proposing team")


class TradeResponse(BaseModel):
    id: str
    from_team_id: str
    to_team_id: str
    players_offered: List[str]
    players_wanted: List[str]
    status: str
    created_at: str
    resolved_at: Optional[str] = None


# ========== Waivers ==========

class WaiverRequest(BaseModel):
    """Used for both waiving (team = dropping team) and claiming."""
    player_id: str
    team_id: str


class WaiverClaimResponse(BaseModel):
    id: str
    player_id: str
    dropping_team_id: str
    claiming_team_id: Optional[str] = None
    waiver_priority: Optional[int] = None
    status: str
    claimants: List[str]
    submitted_at: str
    process_date: str
    processed_at: Optional[str] = None


class WaiverPriorityResponse(BaseModel):
    team_id: str
    priority: int


# ========== Transactions ==========

class TransactionEntryResponse(BaseModel):
    id: str
    type: str
    team_ids: List[str]
    player_ids: List[str]
    timestamp: str
    description: str
    reference_id: Optional[str] = None


# ========== Generated content ==========

class DraftCommentaryRequest(BaseModel):
    pick_number: int = Field(..., ge=1)
    prospect: str
    team: str
    position: str


class ScoutingReportRequest(BaseModel):
    player_id: str


class NewsRecapRequest(BaseModel):
    game_results: str
    key_players: str


class HallOfFameRequest(BaseModel):
    player_name: str


class PlayerHeadshotRequest(BaseModel):
    player_id: str


class ContentResponse(BaseModel):
    content: str


class HeadshotResponse(BaseModel):
    image_url: str = Field(description="Image URL or placeholder data URI")


# ========== Helpers ==========

def serialize_draft_settings(engine: DraftEngine) -> DraftSettingsResponse:
    """Current draft settings plus the live countdown."""
    settings = engine.get_settings()
    slot = engine.current_slot()
    return DraftSettingsResponse(
        **settings.to_dict(),
        time_remaining=engine.time_remaining(),
        on_the_clock=slot.team_id if slot else None,
    )
