"""
AI Coach — turns a game summary into tactical advice via an LLM.

The generator only ever reads a frozen GameSummary, so a request can run
alongside live scoring and be cancelled by simply discarding its task.
Every failure is returned as a categorized AdviceFailure; an unparseable
answer degrades to plain-text advice.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional
from urllib.parse import urlparse

import openai
from pydantic import ValidationError

from squash.config import Settings, get_logger, settings as default_settings
from squash.models.advice import (
    AdviceFailure,
    AdviceFailureKind,
    AdviceResult,
    GameSummary,
    TacticalAdvice,
)
from squash.models.player import Player
from squash.services.llm_client import LLMClient, OpenAIClient, extract_json

logger = get_logger(__name__)

SYSTEM_PROMPT = """You are an experienced squash coach. Analyse the game statistics you are given and give concrete, actionable advice.

Answer ONLY with a JSON object in exactly this shape (no markdown, no extra text):
{
    "summary": "Short summary of the game in 1-2 sentences",
    "strengths": ["point 1", "point 2", "point 3"],
    "weaknesses": ["point 1", "point 2"],
    "tactical_suggestions": ["advice 1", "advice 2", "advice 3"],
    "next_game_focus": "One concrete focus for the next game"
}"""

ClientFactory = Callable[[str], LLMClient]


def build_prompt(summary: GameSummary) -> str:
    """Render the user prompt for one player's view of a game."""
    zone_lines = [
        f"{z.zone.label}: {z.won} won, {z.lost} lost" for z in summary.zone_breakdown
    ]
    shot_lines = [f"{s.shot_type.value}: {s.won} points" for s in summary.shot_breakdown]
    best_zone = summary.best_zone.label if summary.best_zone else "none"
    best_shot = summary.best_shot.value if summary.best_shot else "none"
    worst_zone = summary.worst_zone.label if summary.worst_zone else "none"

    return f"""SQUASH GAME ANALYSIS

Player: {summary.player_name}
Opponent: {summary.opponent_name}
Final score: {summary.player1_score} - {summary.player2_score}
Winner: {summary.winner_name or "in progress"}

STATISTICS FOR {summary.player_name.upper()}:
- Total points won: {summary.points_won}
- Total points lost: {summary.points_lost}
- Best zone: {best_zone}
- Best shot: {best_shot}
- Zone where the opponent scored: {worst_zone}
- Lets: {summary.total_lets}

POINTS PER ZONE:
{chr(10).join(zone_lines)}

SHOTS:
{chr(10).join(shot_lines)}

Give tactical advice for {summary.player_name} for the next game against {summary.opponent_name}."""


def parse_advice(content: str) -> TacticalAdvice:
    """Structured advice if the content parses, else the raw text as summary."""
    data = extract_json(content)
    if data is not None:
        try:
            return TacticalAdvice.model_validate(data)
        except ValidationError:
            pass
    logger.warning("AI coach answer was not structured JSON, using raw text")
    return TacticalAdvice(summary=content.strip())


def validate_credential(credential: Optional[str]) -> Optional[str]:
    """Return an error message if the API key is unusable, else None."""
    if not credential or not credential.strip():
        return "No API key configured. Add your OpenAI key in the settings."
    if not credential.strip().startswith("sk-"):
        return "Invalid OpenAI API key format: must start with 'sk-'."
    return None


def classify_error(exc: Exception) -> AdviceFailure:
    """Map a client exception onto a user-facing failure category."""
    if isinstance(exc, openai.AuthenticationError):
        return AdviceFailure(
            kind=AdviceFailureKind.INVALID_CREDENTIAL,
            message="The API key was rejected. Check your settings.",
            status_code=401,
        )
    if isinstance(exc, (openai.APIConnectionError, ConnectionError, TimeoutError, OSError)):
        return AdviceFailure(
            kind=AdviceFailureKind.TRANSPORT,
            message=f"Could not reach the AI coach ({type(exc).__name__}). Check your connection.",
        )

    status_code = getattr(exc, "status_code", None)
    if isinstance(status_code, int):
        if status_code == 401:
            return AdviceFailure(
                kind=AdviceFailureKind.INVALID_CREDENTIAL,
                message="The API key was rejected. Check your settings.",
                status_code=status_code,
            )
        return AdviceFailure(
            kind=AdviceFailureKind.HTTP_STATUS,
            message=f"AI coach error (code: {status_code})",
            status_code=status_code,
        )

    lowered = str(exc).lower()
    if any(s in lowered for s in ["unauthorized", "invalid api key", "incorrect api key"]):
        return AdviceFailure(
            kind=AdviceFailureKind.INVALID_CREDENTIAL,
            message="The API key was rejected. Check your settings.",
        )
    return AdviceFailure(
        kind=AdviceFailureKind.TRANSPORT,
        message=f"AI coach unavailable: {type(exc).__name__}: {str(exc)[:200]}",
    )


class AdviceGenerator:
    """
    Async tactical advice from an OpenAI-compatible chat model.

    Usage:
        generator = AdviceGenerator()
        summary = CoachingEngine().build_game_summary(game, Player.PLAYER1)
        result = await generator.generate(summary, Player.PLAYER1, store.get())
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.settings = settings or default_settings
        self._client_factory = client_factory or self._openai_client

    def _openai_client(self, credential: str) -> LLMClient:
        return OpenAIClient(
            api_key=credential,
            model=self.settings.OPENAI_MODEL,
            base_url=self.settings.OPENAI_BASE_URL,
        )

    def _validate_request(self, summary: GameSummary, player: Player) -> Optional[AdviceFailure]:
        if summary.player != player:
            return AdviceFailure(
                kind=AdviceFailureKind.INVALID_REQUEST,
                message=f"Summary was built for {summary.player.value}, not {player.value}",
            )
        endpoint = urlparse(self.settings.OPENAI_BASE_URL)
        if endpoint.scheme not in ("http", "https") or not endpoint.netloc:
            return AdviceFailure(
                kind=AdviceFailureKind.INVALID_REQUEST,
                message=f"Invalid AI coach endpoint: {self.settings.OPENAI_BASE_URL!r}",
            )
        return None

    async def generate(
        self, summary: GameSummary, player: Player, credential: Optional[str]
    ) -> AdviceResult:
        failure = self._validate_request(summary, player)
        if failure is None:
            credential_error = validate_credential(credential)
            if credential_error:
                failure = AdviceFailure(
                    kind=AdviceFailureKind.INVALID_CREDENTIAL, message=credential_error
                )
        if failure is not None:
            logger.warning("Advice request rejected: %s", failure.message)
            return failure

        client = self._client_factory(credential.strip())
        try:
            content = await client.chat(
                messages=[{"role": "user", "content": build_prompt(summary)}],
                system=SYSTEM_PROMPT,
                temperature=self.settings.ADVICE_TEMPERATURE,
                max_tokens=self.settings.ADVICE_MAX_TOKENS,
            )
        except Exception as exc:
            failure = classify_error(exc)
            logger.warning("Advice request failed (%s): %s", failure.kind.value, failure.message)
            return failure
        finally:
            await client.close()

        if not content or not content.strip():
            logger.warning("Advice request returned no content")
            return AdviceFailure(
                kind=AdviceFailureKind.NO_CONTENT, message="No answer received from the AI coach"
            )
        return parse_advice(content)

    def submit(
        self, summary: GameSummary, player: Player, credential: Optional[str]
    ) -> asyncio.Task:
        """Schedule ``generate`` on the running loop; cancel the task to discard it."""
        return asyncio.create_task(self.generate(summary, player, credential))
