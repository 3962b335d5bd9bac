"""
Generated-content endpoints.

Thin wrappers over ContentClient:
- POST /ai/draft-commentary
- POST /ai/scouting-report
- POST /ai/news-recap
- POST /ai/hall-of-fame
- POST /ai/player-headshot

Output is returned as-is and never touches league state.
"""

import logging
import os
from typing import Optional

from fastapi import APIRouter, HTTPException

from .. import config
from ..content.content_client import ContentClient
from ..league.errors import LeagueError
from .api_serializers import (
    ContentResponse,
    DraftCommentaryRequest,
    HallOfFameRequest,
    HeadshotResponse,
    NewsRecapRequest,
    PlayerHeadshotRequest,
    ScoutingReportRequest,
)

logger = logging.getLogger(__name__)

content_router = APIRouter(tags=["Generated Content"])

_content_client: Optional[ContentClient] = None


def get_league_context():
    """Get league context from api_server module."""
    from .api_server import get_league_context
    return get_league_context()


def get_content_client() -> ContentClient:
    global _content_client
    if _content_client is None:
        _content_client = ContentClient(api_key=os.environ.get(config.CONTENT_API_KEY_ENV))
    return _content_client


def set_content_client(client: Optional[ContentClient]) -> None:
    global _content_client
    _content_client = client


def _content_error(e: LeagueError, action: str) -> HTTPException:
    logger.warning(f"Cannot generate {action}: {e.message}")
    return HTTPException(status_code=e.http_status, detail=e.to_dict())


@content_router.post("/draft-commentary", response_model=ContentResponse)
def draft_commentary(request: DraftCommentaryRequest):
    try:
        text = get_content_client().draft_commentary(
            request.pick_number, request.prospect, request.team, request.position
        )
        return ContentResponse(content=text)
    except LeagueError as e:
        raise _content_error(e, "draft commentary")


@content_router.post("/scouting-report", response_model=ContentResponse)
def scouting_report(request: ScoutingReportRequest):
    """Scouting report from a rostered player's season statistics."""
    try:
        player = get_league_context().store.get_player(request.player_id)
        text = get_content_client().scouting_report(
            player.name, player.position.value, player.stats
        )
        return ContentResponse(content=text)
    except LeagueError as e:
        raise _content_error(e, "scouting report")


@content_router.post("/news-recap", response_model=ContentResponse)
def news_recap(request: NewsRecapRequest):
    try:
        text = get_content_client().news_recap(request.game_results, request.key_players)
        return ContentResponse(content=text)
    except LeagueError as e:
        raise _content_error(e, "news recap")


@content_router.post("/hall-of-fame", response_model=ContentResponse)
def hall_of_fame(request: HallOfFameRequest):
    try:
        return ContentResponse(content=get_content_client().hall_of_fame(request.player_name))
    except LeagueError as e:
        raise _content_error(e, "hall of fame retrospective")


@content_router.post("/player-headshot", response_model=HeadshotResponse)
def player_headshot(request: PlayerHeadshotRequest):
    try:
        store = get_league_context().store
        player = store.get_player(request.player_id)
        team_name = store.get_team(player.team_id).name if player.team_id else "free agent pool"
        image_url = get_content_client().player_headshot(
            player.name, player.position.value, team_name
        )
        return HeadshotResponse(image_url=image_url)
    except LeagueError as e:
        raise _content_error(e, "player headshot")
