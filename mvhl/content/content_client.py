"""
Client for the external generative-content service.

Talks to an OpenAI-compatible HTTP API:
- /chat/completions: commentary, scouting reports, recaps, retrospectives
- /images/generations: player headshots

Generated payloads are opaque to the league; nothing here reads or changes
league state.
"""

import logging
import time
from typing import Dict, Optional

import requests

from .. import config
from ..league.errors import LeagueError
from ..league.league_state import PlayerStats
from . import prompts

logger = logging.getLogger(__name__)

# Grey silhouette shown when no headshot could be generated
PLACEHOLDER_HEADSHOT = (
    "data:image/svg+xml;base64,PHN2ZyB3aWR0aD0iMjAwIiBoZWlnaHQ9IjIwMCIgdmlld0JveD0iMCAw"
    "IDIwMCAyMDAiIGZpbGw9Im5vbmUiIHhtbG5zPSJodHRwOi8vd3d3LnczLm9yZy8yMDAwL3N2ZyI+CjxyZWN0"
    "IHdpZHRoPSIyMDAiIGhlaWdodD0iMjAwIiBmaWxsPSIjRjNGNEY2Ii8+Cjwvc3ZnPgo="
)


class ContentGenerationError(LeagueError):
    code = 'content_unavailable'
    default_message = 'The content service is unavailable right now'
    http_status = 502


class ContentClient:
    """Generates league content through an OpenAI-compatible API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = config.CONTENT_API_BASE_URL,
        text_model: str = config.CONTENT_TEXT_MODEL,
        image_model: str = config.CONTENT_IMAGE_MODEL,
        timeout: int = config.CONTENT_REQUEST_TIMEOUT,
        retry_backoff: float = 1.0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the content client.

        Args:
            api_key: Bearer token for the service
            base_url: API root, e.g. https://api.openai.com/v1
            text_model: Chat model for written content
            image_model: Image model for headshots
            timeout: Request timeout in seconds
            retry_backoff: Base delay in seconds; doubled per retry
            session: Pre-configured session (tests pass a fake)
        """
        self.base_url = base_url.rstrip('/')
        self.text_model = text_model
        self.image_model = image_model
        self.timeout = timeout
        self.retry_backoff = retry_backoff

        # Session for connection pooling
        self.session = session or requests.Session()
        if api_key:
            self.session.headers['Authorization'] = f'Bearer {api_key}'

    # ----- Primitives -----

    def generate_text(self, prompt: str, fallback: str) -> str:
        """
        Run a single-turn chat completion.

        Returns:
            The generated text, or fallback when the service returns nothing

        Raises:
            ContentGenerationError: If the service cannot be reached
        """
        payload = {
            'model': self.text_model,
            'messages': [{'role': 'user', 'content': prompt}],
        }
        data = self._post('/chat/completions', payload)

        choices = data.get('choices') or []
        content = (choices[0].get('message') or {}).get('content') if choices else None
        if not content:
            logger.warning("Content service returned an empty completion")
            return fallback
        return content

    def generate_image(self, prompt: str, fallback: str = PLACEHOLDER_HEADSHOT) -> str:
        """
        Generate one image and return its URL.

        Raises:
            ContentGenerationError: If the service cannot be reached
        """
        payload = {
            'model': self.image_model,
            'prompt': prompt,
            'n': 1,
            'size': config.CONTENT_IMAGE_SIZE,
            'quality': 'standard',
        }
        data = self._post('/images/generations', payload)

        images = data.get('data') or []
        url = images[0].get('url') if images else None
        if not url:
            logger.warning("Content service returned no image")
            return fallback
        return url

    # ----- League content -----

    def draft_commentary(self, pick_number: int, prospect: str, team: str, position: str) -> str:
        prompt = prompts.draft_commentary_prompt(pick_number, prospect, team, position)
        return self.generate_text(prompt, "Unable to generate commentary at this time.")

    def scouting_report(
        self,
        player_name: str,
        position: str,
        stats: Optional[PlayerStats] = None
    ) -> str:
        prompt = prompts.scouting_report_prompt(player_name, position, stats)
        return self.generate_text(prompt, "Unable to generate scouting report at this time.")

    def news_recap(self, game_results: str, key_players: str) -> str:
        prompt = prompts.news_recap_prompt(game_results, key_players)
        return self.generate_text(prompt, "Unable to generate news recap at this time.")

    def hall_of_fame(self, player_name: str) -> str:
        prompt = prompts.hall_of_fame_prompt(player_name)
        return self.generate_text(prompt, "Unable to generate retrospective at this time.")

    def player_headshot(self, player_name: str, position: str, team_name: str) -> str:
        prompt = prompts.player_headshot_prompt(player_name, position, team_name)
        return self.generate_image(prompt)

    # ----- Transport -----

    def _post(self, path: str, payload: Dict, max_retries: int = 3) -> Dict:
        """
        POST to the service with retries.

        Raises:
            ContentGenerationError: After all retries are exhausted
        """
        endpoint = f"{self.base_url}{path}"
        for attempt in range(1, max_retries + 1):
            try:
                logger.debug(f"POST {endpoint} (attempt {attempt}/{max_retries})")
                response = self.session.post(endpoint, json=payload, timeout=self.timeout)
                response.raise_for_status()
                return response.json()

            except requests.Timeout as e:
                logger.warning(f"Content request timeout (attempt {attempt}/{max_retries})")
                if attempt == max_retries:
                    raise ContentGenerationError() from e

            except (requests.RequestException, ValueError) as e:
                logger.error(f"Content request failed (attempt {attempt}/{max_retries}): {e}")
                if attempt == max_retries:
                    raise ContentGenerationError() from e

            time.sleep(self.retry_backoff * 2 ** attempt)  # Exponential backoff
