"""LLM API interface using LiteLLM."""

from dataclasses import dataclass
from typing import Optional
import logging
import time

import litellm

from .actions import InvalidAction, PlayerAction
from .game import GameConfig
from .prompts import build_history_text, build_system_prompt, parse_action_response
from .secret_code import CODE_LENGTH, DIGIT_MAX, DIGIT_MIN

logger = logging.getLogger(__name__)


@dataclass
class LLMConfig:
    """Configuration for LLM API calls."""
    model: str
    temperature: float = 0.7
    max_tokens: int = 500
    use_parser_fallback: bool = False
    parser_model: str = "gpt-3.5-turbo"


class LLMPlayer:
    """Player that uses an LLM API to choose its actions."""

    def __init__(self, game_config: GameConfig, llm_config: LLMConfig, games: int = 1):
        """
        Initialize LLM player.

        Args:
            game_config: Game configuration
            llm_config: LLM API configuration
            games: Number of games to play before declining a replay
        """
        self.game_config = game_config
        self.llm_config = llm_config
        self.games_remaining = games
        self.system_prompt = build_system_prompt(game_config)
        self.total_tokens = {"input": 0, "output": 0}

    def has_played_before(self) -> bool:
        # The rules are part of the system prompt
        return True

    def is_ready(self) -> bool:
        return True

    def wants_replay(self) -> bool:
        self.games_remaining -= 1
        return self.games_remaining > 0

    def get_next_action(self, game_history: list[dict], scan_available: bool, last_error: Optional[str] = None) -> PlayerAction:
        """Ask the model for its next action. API failures become an InvalidAction."""
        try:
            messages = self._build_messages(game_history, scan_available, last_error)

            response = self._api_call_with_retry(messages)

            raw_response = response.choices[0].message.content or ""
            self.total_tokens["input"] += response.usage.prompt_tokens
            self.total_tokens["output"] += response.usage.completion_tokens

            action = parse_action_response(raw_response)

            if isinstance(action, InvalidAction) and self.llm_config.use_parser_fallback:
                action = self._fallback_parse(raw_response)

            return action

        except Exception as e:
            logger.warning("LLM call failed: %s", e)
            return InvalidAction(reason=f"LLM error: {e}")

    def _api_call_with_retry(self, messages: list[dict], max_attempts: int = 3):
        """Make API call with exponential backoff for network errors."""
        for attempt in range(max_attempts):
            try:
                return litellm.completion(
                    model=self.llm_config.model,
                    messages=messages,
                    temperature=self.llm_config.temperature,
                    max_tokens=self.llm_config.max_tokens
                )
            except Exception as e:
                if attempt == max_attempts - 1:
                    raise
                wait_time = 2 ** attempt  # 1s, 2s, 4s
                logger.info("API call failed (%s), retrying in %ds", e, wait_time)
                time.sleep(wait_time)

    def _build_messages(self, game_history: list[dict], scan_available: bool, last_error: Optional[str]) -> list[dict]:
        """Build message array for API call."""
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": build_history_text(game_history, scan_available, last_error)},
        ]

    def _fallback_parse(self, response: str) -> PlayerAction:
        """Use parser model to extract an action from a malformed response."""
        try:
            parser_prompt = f"""Extract the Mastermind action from this response.
A guess is a list of {CODE_LENGTH} integers from {DIGIT_MIN} to {DIGIT_MAX}.
A truth scan request names an optional round number.

Response:
{response}

Output ONLY valid JSON in one of these exact formats:
{{"guess": [1, 2, 3, 4]}}
{{"action": "scan", "round": 3}}"""

            result = litellm.completion(
                model=self.llm_config.parser_model,
                messages=[{"role": "user", "content": parser_prompt}],
                temperature=0,
                max_tokens=100
            )

            parser_response = result.choices[0].message.content or ""
            return parse_action_response(parser_response)

        except Exception as e:
            logger.warning("Parser fallback failed: %s", e)
            return InvalidAction(reason="Failed to parse response", raw=response)
