"""
FastAPI server for the league transaction service.

Exposes teams, players and standings plus the three roster-changing
subsystems: the entry draft, trades and waivers. Every mutation goes through
the engines in the active LeagueContext; the API only translates requests and
maps LeagueError to HTTP status codes.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from .. import config
from ..draft.draft_models import DraftSettings
from ..league.errors import LeagueError
from ..league.league_context import LeagueContext
from ..transactions.transaction_event import ClaimStatus, TradeStatus, TransactionType
from .api_content_endpoints import content_router
from .api_serializers import (
    DraftActionRequest,
    DraftPickRequest,
    DraftPickResponse,
    DraftPickResultResponse,
    DraftProspectResponse,
    DraftSettingsResponse,
    GameResultRequest,
    PlayerResponse,
    PlayerSearchResult,
    PlayerUpdateRequest,
    TeamResponse,
    TradeActionRequest,
    TradeCancelRequest,
    TradeProposalRequest,
    TradeResponse,
    TransactionEntryResponse,
    WaiverClaimResponse,
    WaiverPriorityResponse,
    WaiverRequest,
    serialize_draft_settings,
)

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=config.API_TITLE,
    description="Draft, trade and waiver transactions for a virtual hockey league",
    version=config.API_VERSION
)

# CORS middleware for web UI access
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(content_router, prefix="/ai", tags=["Generated Content"])

# Active season; created lazily with demo data unless set at start-up
_league_context: Optional[LeagueContext] = None


def get_league_context() -> LeagueContext:
    global _league_context
    if _league_context is None:
        logger.info("No league context configured; building demo league")
        _league_context = LeagueContext.demo()
    return _league_context


def set_league_context(context: Optional[LeagueContext]) -> None:
    """Install the season the API serves (None clears it)."""
    global _league_context
    _league_context = context


def _rejected(e: LeagueError, action: str) -> HTTPException:
    logger.warning(f"Cannot {action}: {e.message}")
    return HTTPException(status_code=e.http_status, detail=e.to_dict())


def _invalid(e: ValueError, action: str) -> HTTPException:
    logger.warning(f"Invalid request to {action}: {e}")
    return HTTPException(status_code=400, detail={'code': 'invalid_request', 'message': str(e)})


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _failed(e: Exception, action: str) -> HTTPException:
    logger.error(f"Failed to {action}: {e}", exc_info=True)
    return HTTPException(
        status_code=500,
        detail={'code': 'internal_error', 'message': f"Failed to {action}"}
    )


@app.get("/health")
def health_check():
    """
    Simple health check endpoint.

    Returns:
        Status OK if server is running
    """
    return {
        "status": "ok",
        "service": config.API_TITLE,
        "version": config.API_VERSION
    }


# ===== Teams & Standings =====

@app.get("/teams", response_model=List[TeamResponse])
def list_teams():
    try:
        return [team.to_dict() for team in get_league_context().store.list_teams()]
    except Exception as e:
        raise _failed(e, "list teams")


@app.get("/teams/{team_id}", response_model=TeamResponse)
def get_team(team_id: str):
    try:
        return get_league_context().store.get_team(team_id).to_dict()
    except LeagueError as e:
        raise _rejected(e, "get team")
    except Exception as e:
        raise _failed(e, "get team")


@app.get("/teams/{team_id}/players", response_model=List[PlayerResponse])
def get_team_roster(team_id: str):
    try:
        return [p.to_dict() for p in get_league_context().store.get_roster(team_id)]
    except LeagueError as e:
        raise _rejected(e, "get roster")
    except Exception as e:
        raise _failed(e, "get roster")


@app.get("/standings")
def get_standings(
    group_by: Optional[str] = Query(None, description="'conference' or 'division'")
) -> Dict[str, List[Dict]]:
    """
    League standings, sorted by points then wins.

    Raises:
        400: Unknown grouping
    """
    try:
        return get_league_context().standings(group_by=group_by)
    except ValueError as e:
        raise _invalid(e, "get standings")
    except Exception as e:
        raise _failed(e, "get standings")


@app.post("/games/result", response_model=List[TeamResponse])
def record_game_result(request: GameResultRequest):
    """Apply a final score to both teams' records."""
    try:
        home, away = get_league_context().store.record_game_result(
            request.home_team_id,
            request.away_team_id,
            request.home_score,
            request.away_score,
            overtime=request.overtime
        )
        return [home.to_dict(), away.to_dict()]
    except LeagueError as e:
        raise _rejected(e, "record game result")
    except ValueError as e:
        raise _invalid(e, "record game result")
    except Exception as e:
        raise _failed(e, "record game result")


# ===== Players =====

@app.get("/players", response_model=List[PlayerResponse])
def list_players(
    free_agents_only: bool = Query(False, description="Only players without a team"),
    position: Optional[str] = Query(None, description="Position filter (e.g. 'C', 'G')")
):
    try:
        players = get_league_context().store.list_players(free_agents_only=free_agents_only)
        if position:
            players = [p for p in players if p.position.value == position.upper()]
        return [p.to_dict() for p in players]
    except Exception as e:
        raise _failed(e, "list players")


@app.get("/players/search", response_model=List[PlayerSearchResult])
def search_players(
    q: str = Query(..., min_length=1, description="Player name to match"),
    limit: int = Query(10, ge=1, le=50)
):
    try:
        matches = get_league_context().store.search_players(q, limit=limit)
        return [{'player': player.to_dict(), 'score': score} for player, score in matches]
    except Exception as e:
        raise _failed(e, "search players")


@app.get("/players/{player_id}", response_model=PlayerResponse)
def get_player(player_id: str):
    try:
        return get_league_context().store.get_player(player_id).to_dict()
    except LeagueError as e:
        raise _rejected(e, "get player")
    except Exception as e:
        raise _failed(e, "get player")


@app.patch("/players/{player_id}", response_model=PlayerResponse)
def update_player(player_id: str, request: PlayerUpdateRequest):
    """Update availability and profile fields. Ownership cannot be changed here."""
    try:
        store = get_league_context().store
        player = store.update_profile(player_id, gamertag=request.gamertag, bio=request.bio)
        if request.availability is not None:
            player = store.set_availability(player_id, request.availability)
        return player.to_dict()
    except LeagueError as e:
        raise _rejected(e, "update player")
    except Exception as e:
        raise _failed(e, "update player")


# ===== Draft =====

@app.get("/draft/settings", response_model=DraftSettingsResponse)
def get_draft_settings():
    try:
        return serialize_draft_settings(get_league_context().draft)
    except Exception as e:
        raise _failed(e, "get draft settings")


@app.get("/draft/picks", response_model=List[DraftPickResponse])
def list_draft_picks():
    try:
        return [pick.to_dict() for pick in get_league_context().draft.list_picks()]
    except Exception as e:
        raise _failed(e, "list draft picks")


@app.get("/draft/prospects", response_model=List[DraftProspectResponse])
def list_prospects():
    try:
        return [p.to_dict() for p in get_league_context().draft.list_prospects()]
    except Exception as e:
        raise _failed(e, "list prospects")


@app.get("/draft/prospects/available", response_model=List[DraftProspectResponse])
def list_available_prospects():
    """Undrafted prospects by draft rank, unranked last."""
    try:
        return [p.to_dict() for p in get_league_context().draft.available_prospects()]
    except Exception as e:
        raise _failed(e, "list available prospects")


@app.post("/draft/action", response_model=DraftSettingsResponse)
def draft_action(request: DraftActionRequest):
    """
    Run an administrative draft action: start, pause, resume, reset or advance.

    Starting without a team_order uses reverse standings (worst record first).

    Raises:
        409 Conflict: Action not allowed in the current draft phase
        404 Not Found: team_order names an unknown team
    """
    try:
        context = get_league_context()
        draft = context.draft
        logger.info(f"Draft action: {request.action}")

        if request.action == 'start':
            settings = None
            if request.pick_time_limit or request.total_rounds or request.order_style:
                current = draft.get_settings()
                settings = DraftSettings(
                    season=current.season,
                    pick_time_limit=request.pick_time_limit or current.pick_time_limit,
                    total_rounds=request.total_rounds or current.total_rounds,
                    order_style=request.order_style or current.order_style,
                )
            draft.start(
                settings=settings,
                team_order=request.team_order or context.default_draft_order()
            )
        elif request.action == 'pause':
            draft.pause()
        elif request.action == 'resume':
            draft.resume()
        elif request.action == 'reset':
            draft.reset()
        else:
            draft.advance()

        return serialize_draft_settings(draft)
    except LeagueError as e:
        raise _rejected(e, f"{request.action} draft")
    except ValueError as e:
        raise _invalid(e, f"{request.action} draft")
    except Exception as e:
        raise _failed(e, f"{request.action} draft")


@app.post("/draft/pick", response_model=DraftPickResultResponse)
def make_draft_pick(request: DraftPickRequest):
    """
    Draft a prospect for the team on the clock.

    Raises:
        409 Conflict: Draft inactive, not this team's turn, or prospect taken
        404 Not Found: Unknown team or prospect
    """
    try:
        draft = get_league_context().draft
        slot, player = draft.pick(request.team_id, request.prospect_id)
        return DraftPickResultResponse(
            pick=slot.to_dict(),
            player=player.to_dict(),
            settings=serialize_draft_settings(draft),
        )
    except LeagueError as e:
        raise _rejected(e, "make draft pick")
    except Exception as e:
        raise _failed(e, "make draft pick")


# ===== Trades =====

@app.get("/trades", response_model=List[TradeResponse])
def list_trades(
    team_id: Optional[str] = Query(None),
    status: Optional[TradeStatus] = Query(None)
):
    try:
        trades = get_league_context().trades.list_trades(team_id=team_id, status=status)
        return [t.to_dict() for t in trades]
    except Exception as e:
        raise _failed(e, "list trades")


@app.post("/trades", response_model=TradeResponse)
def propose_trade(request: TradeProposalRequest):
    """
    Propose a trade.

    Raises:
        422: A player is not on the roster it is listed under
        400: Same team on both sides or empty/overlapping player lists
    """
    try:
        trade = get_league_context().trades.propose(
            request.from_team_id,
            request.to_team_id,
            request.players_offered,
            request.players_wanted
        )
        return trade.to_dict()
    except LeagueError as e:
        raise _rejected(e, "propose trade")
    except ValueError as e:
        raise _invalid(e, "propose trade")
    except Exception as e:
        raise _failed(e, "propose trade")


@app.post("/trades/{trade_id}/accept", response_model=TradeResponse)
def accept_trade(trade_id: str, request: Optional[TradeActionRequest] = None):
    """
    Accept a pending trade; all players swap or none do.

    Raises:
        409 Conflict: Trade not pending, or rosters changed since the proposal
    """
    try:
        team_id = request.team_id if request else None
        return get_league_context().trades.accept(trade_id, acting_team_id=team_id).to_dict()
    except LeagueError as e:
        raise _rejected(e, "accept trade")
    except Exception as e:
        raise _failed(e, "accept trade")


@app.post("/trades/{trade_id}/reject", response_model=TradeResponse)
def reject_trade(trade_id: str, request: Optional[TradeActionRequest] = None):
    try:
        team_id = request.team_id if request else None
        return get_league_context().trades.reject(trade_id, acting_team_id=team_id).to_dict()
    except LeagueError as e:
        raise _rejected(e, "reject trade")
    except Exception as e:
        raise _failed(e, "reject trade")


@app.post("/trades/{trade_id}/cancel", response_model=TradeResponse)
def cancel_trade(trade_id: str, request: TradeCancelRequest):
    try:
        return get_league_context().trades.cancel(trade_id, request.team_id).to_dict()
    except LeagueError as e:
        raise _rejected(e, "cancel trade")
    except Exception as e:
        raise _failed(e, "cancel trade")


# ===== Waivers =====

@app.get("/waivers", response_model=List[WaiverClaimResponse])
def list_waiver_claims(
    team_id: Optional[str] = Query(None),
    status: Optional[ClaimStatus] = Query(None)
):
    try:
        claims = get_league_context().waivers.list_claims(team_id=team_id, status=status)
        return [c.to_dict() for c in claims]
    except Exception as e:
        raise _failed(e, "list waiver claims")


@app.get("/waivers/priority", response_model=List[WaiverPriorityResponse])
def get_waiver_priority():
    """Waiver order, first claim first."""
    try:
        waivers = get_league_context().waivers
        order = waivers.priority_order() or waivers.initialize_priorities()
        return [{'team_id': team_id, 'priority': priority} for team_id, priority in order]
    except Exception as e:
        raise _failed(e, "get waiver priority")


@app.post("/waivers/waive", response_model=WaiverClaimResponse)
def waive_player(request: WaiverRequest):
    """Place a player on waivers; team_id is the dropping team."""
    try:
        return get_league_context().waivers.waive(request.player_id, request.team_id).to_dict()
    except LeagueError as e:
        raise _rejected(e, "waive player")
    except Exception as e:
        raise _failed(e, "waive player")


@app.post("/waivers/claim", response_model=WaiverClaimResponse)
def claim_player(request: WaiverRequest):
    """
    Claim a waived player.

    Raises:
        409 Conflict: The player is not currently on waivers
        403 Forbidden: The dropping team cannot claim its own player
    """
    try:
        return get_league_context().waivers.claim(request.player_id, request.team_id).to_dict()
    except LeagueError as e:
        raise _rejected(e, "claim player")
    except Exception as e:
        raise _failed(e, "claim player")


@app.post("/waivers/{player_id}/process", response_model=WaiverClaimResponse)
def process_waivers(player_id: str):
    """Resolve a player's waiver window now; repeated calls return the same outcome."""
    try:
        return get_league_context().waivers.process(player_id).to_dict()
    except LeagueError as e:
        raise _rejected(e, "process waivers")
    except Exception as e:
        raise _failed(e, "process waivers")


@app.delete("/waivers/{claim_id}", response_model=WaiverClaimResponse)
def cancel_waiver_claim(
    claim_id: str,
    team_id: str = Query(..., description="Claimant withdrawing, or the dropping team")
):
    try:
        return get_league_context().waivers.cancel(claim_id, team_id).to_dict()
    except LeagueError as e:
        raise _rejected(e, "cancel waiver claim")
    except Exception as e:
        raise _failed(e, "cancel waiver claim")


# ===== Transactions =====

@app.get("/transactions", response_model=List[TransactionEntryResponse])
def list_transactions(
    team_id: Optional[str] = Query(None),
    player_id: Optional[str] = Query(None),
    type: Optional[TransactionType] = Query(None),
    since: Optional[datetime] = Query(None, description="Earliest timestamp (UTC if no offset)"),
    until: Optional[datetime] = Query(None, description="Latest timestamp (UTC if no offset)"),
    limit: Optional[int] = Query(None, ge=1, le=500)
):
    """Transaction history, newest first."""
    try:
        entries = get_league_context().log.query(
            team_id=team_id,
            player_id=player_id,
            type=type,
            since=_as_utc(since),
            until=_as_utc(until),
            limit=limit
        )
        return [e.to_dict() for e in entries]
    except Exception as e:
        raise _failed(e, "list transactions")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Log startup message."""
    logger.info("League API server started")
