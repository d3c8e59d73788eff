"""CLI entry point for Deceptive Mastermind."""

import argparse
import logging
import random
import sys

from .clipboard_player import ClipboardPlayer
from .console_player import ConsolePlayer
from .game import MAX_ROUNDS, GameConfig
from .llm_player import LLMConfig, LLMPlayer
from .rounds import DECEPTION_PROBABILITY
from .runner import MastermindGame
from .secret_code import Code, InvalidCodeError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Mastermind with deceptive rounds and a one-time Truth Scan",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Play at the console
  deceptive-mastermind

  # Reproducible game
  deceptive-mastermind --seed 42

  # Let a model play three games - PAID
  deceptive-mastermind --mode api --model gpt-4 --games 3

  # Clipboard mode for web UI testing (works with any web LLM)
  deceptive-mastermind --mode clipboard --model "chatgpt-web"
        """
    )

    parser.add_argument('--mode', choices=['console', 'api', 'clipboard'], default='console',
                        help='Who plays: console (you), api (LLM via LiteLLM), clipboard (manual web LLM)')
    parser.add_argument('--model', type=str,
                        help='LiteLLM model string (API mode) or tracking label (clipboard mode, default: web-ui)')

    # Game configuration
    game_group = parser.add_argument_group('game configuration')
    game_group.add_argument('--max-rounds', type=int, default=MAX_ROUNDS,
                            help=f'Maximum rounds per game (default: {MAX_ROUNDS})')
    game_group.add_argument('--deception-probability', type=float, default=DECEPTION_PROBABILITY,
                            help=f'Chance that a round shows altered feedback (default: {DECEPTION_PROBABILITY})')
    game_group.add_argument('--secret', type=str, default=None,
                            help='Predefined secret, e.g. "1234" or "1,2,3,4"')
    game_group.add_argument('--seed', type=int, default=None,
                            help='Random seed for reproducibility')

    # LLM configuration (API mode only)
    llm_group = parser.add_argument_group('llm configuration (api mode only)')
    llm_group.add_argument('--temperature', type=float, default=0.7,
                           help='Temperature (default: 0.7)')
    llm_group.add_argument('--max-tokens', type=int, default=500,
                           help='Max tokens (default: 500)')
    llm_group.add_argument('--parser-fallback', action='store_true',
                           help='Enable parser fallback for malformed responses')
    llm_group.add_argument('--parser-model', type=str, default='gpt-3.5-turbo',
                           help='Model for parsing fallback (default: gpt-3.5-turbo)')

    # Execution
    exec_group = parser.add_argument_group('execution')
    exec_group.add_argument('--games', type=int, default=1,
                            help='Games an automated player plays (default: 1)')
    exec_group.add_argument('--verbose', action='store_true',
                            help='Verbose logging')

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Validation
    if args.mode == 'api' and not args.model:
        parser.error("--model is required for api mode")

    if args.mode == 'clipboard' and not args.model:
        args.model = "web-ui"  # Default label for web-based interfaces

    if args.max_rounds < 1:
        parser.error("--max-rounds must be at least 1")

    if not 0.0 <= args.deception_probability <= 1.0:
        parser.error("--deception-probability must be between 0 and 1")

    if args.games < 1:
        parser.error("--games must be at least 1")

    predefined_secret = None
    if args.secret:
        try:
            predefined_secret = list(Code.parse(args.secret).digits)
        except InvalidCodeError as e:
            parser.error(f"Invalid --secret: {e}")

    game_config = GameConfig(
        max_rounds=args.max_rounds,
        deception_probability=args.deception_probability,
    )

    if args.mode == 'api':
        from dotenv import load_dotenv
        load_dotenv()

        llm_config = LLMConfig(
            model=args.model,
            temperature=args.temperature,
            max_tokens=args.max_tokens,
            use_parser_fallback=args.parser_fallback,
            parser_model=args.parser_model,
        )
        player = LLMPlayer(game_config, llm_config, games=args.games)
    elif args.mode == 'clipboard':
        player = ClipboardPlayer(game_config, args.model, games=args.games)
    else:
        player = ConsolePlayer()

    game = MastermindGame(
        player,
        config=game_config,
        rng=random.Random(args.seed),
        secret=predefined_secret,
    )

    try:
        results = game.play()
    except (KeyboardInterrupt, EOFError):
        print("\nGoodbye.")
        return 130

    if isinstance(player, LLMPlayer):
        print(f"Tokens used: {player.total_tokens['input']} input, {player.total_tokens['output']} output")

    if results:
        wins = sum(1 for r in results if r.outcome == "win")
        logger.debug("Session finished: %d/%d games won", wins, len(results))

    return 0


if __name__ == '__main__':
    sys.exit(main())
