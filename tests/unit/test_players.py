"""Player input parsing and automated player tests"""
from types import SimpleNamespace

import pytest

from deceptive_mastermind import clipboard_player, llm_player
from deceptive_mastermind.actions import GuessAction, InvalidAction, ScanRequestAction
from deceptive_mastermind.clipboard_player import ClipboardPlayer
from deceptive_mastermind.console_player import ConsolePlayer, parse_text_action
from deceptive_mastermind.game import GameConfig
from deceptive_mastermind.llm_player import LLMConfig, LLMPlayer
from deceptive_mastermind.prompts import build_history_text, build_system_prompt, parse_action_response


def fake_response(content, prompt_tokens=10, completion_tokens=5):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
    )


HISTORY = [{
    "round_number": 1,
    "guess": [1, 2, 3, 4],
    "feedback": {"correct_positions": 1, "misplaced": 2, "deceptive": True},
    "is_deceptive": True,
    "revealed": {"correct_positions": 1, "misplaced": 1, "deceptive": False},
}]


class TestParseTextAction:
    """Console grammar"""

    @pytest.mark.parametrize("text", ["1234", "1 2 3 4", "1,2,3,4", "  1234  "])
    def test_guess(self, text):
        assert parse_text_action(text) == GuessAction((1, 2, 3, 4))

    def test_out_of_range_digits_left_to_game(self):
        assert parse_text_action("9999") == GuessAction((9, 9, 9, 9))

    def test_scan(self):
        assert parse_text_action("scan") == ScanRequestAction()
        assert parse_text_action("SCAN") == ScanRequestAction()
        assert parse_text_action("scan 3") == ScanRequestAction(3)

    @pytest.mark.parametrize("text", ["", "hello", "scan x", "12a4"])
    def test_invalid(self, text):
        assert isinstance(parse_text_action(text), InvalidAction)

    @pytest.mark.parametrize("text", [
        "\u00b2", "1 2 3 \u00b2", "scan \u00b2", "\u0661\u0662\u0663\u0664",
        "scan " + "9" * 5000, "1 2 3 " + "9" * 5000,
    ])
    def test_non_ascii_or_oversized_numbers(self, text):
        assert isinstance(parse_text_action(text), InvalidAction)


class TestConsolePlayer:
    """Console player"""

    def test_yes_no_reprompts(self, output):
        answers = iter(["maybe", "", "Y"])
        player = ConsolePlayer(input_func=lambda prompt: next(answers), output=output.append)
        assert player.has_played_before() is True
        assert output == ["Please answer 'yes' or 'no'.", "Please answer 'yes' or 'no'."]

    def test_no(self):
        player = ConsolePlayer(input_func=lambda prompt: "no")
        assert player.is_ready() is False
        assert player.wants_replay() is False

    def test_next_action(self):
        prompts = []

        def fake_input(prompt):
            prompts.append(prompt)
            return "scan 1"

        player = ConsolePlayer(input_func=fake_input)
        assert player.get_next_action([], True) == ScanRequestAction(1)
        assert "scan" in prompts[0]

        player.get_next_action([], False)
        assert "scan" not in prompts[1]

    def test_superscript_digit_is_invalid_action(self):
        player = ConsolePlayer(input_func=lambda prompt: "\u00b2")
        assert isinstance(player.get_next_action([], True), InvalidAction)


class TestPrompts:
    """Prompt text and JSON parsing"""

    def test_system_prompt_mentions_mechanics(self):
        prompt = build_system_prompt(GameConfig(max_rounds=10))
        assert "maximum of 10 guesses" in prompt
        assert "Truth Scan" in prompt
        assert "from 1 to 6" in prompt

    def test_history_first_turn(self):
        assert build_history_text([], True) == "Make your first guess."

    def test_history_with_rounds(self):
        text = build_history_text(HISTORY, False)
        assert "Round 1:" in text
        assert "1 correct positions, 2 misplaced (deceptive)" in text
        assert "Truth Scan: 1 correct positions, 1 misplaced" in text
        assert "already used" in text
        assert text.endswith("Provide your next action.")

    def test_history_with_error(self):
        text = build_history_text(HISTORY, True, last_error="bad digits")
        assert "rejected (bad digits)" in text

    def test_parse_guess(self):
        assert parse_action_response('{"guess": [1, 2, 3, 4]}') == GuessAction((1, 2, 3, 4))

    def test_parse_scan(self):
        assert parse_action_response('{"action": "scan"}') == ScanRequestAction()
        assert parse_action_response('{"action": "scan", "round": 2}') == ScanRequestAction(2)

    def test_parse_code_fence(self):
        response = 'Thinking...\n```json\n{"guess": [6, 6, 1, 1]}\n```'
        assert parse_action_response(response) == GuessAction((6, 6, 1, 1))

    def test_parse_trailing_object(self):
        response = 'I will scan round 1 now. {"action": "scan", "round": 1}'
        assert parse_action_response(response) == ScanRequestAction(1)

    @pytest.mark.parametrize("response", ["", "no idea", '{"guess": "1234"}', '{"action": "scan", "round": "two"}'])
    def test_parse_failure(self, response):
        assert isinstance(parse_action_response(response), InvalidAction)


class TestLLMPlayer:
    """LiteLLM-backed player"""

    def test_guess_and_tokens(self, monkeypatch):
        calls = []

        def fake_completion(**kwargs):
            calls.append(kwargs)
            return fake_response('{"guess": [1, 1, 2, 2]}')

        monkeypatch.setattr(llm_player.litellm, "completion", fake_completion)
        player = LLMPlayer(GameConfig(), LLMConfig(model="test-model"))

        assert player.get_next_action(HISTORY, True) == GuessAction((1, 1, 2, 2))
        assert player.total_tokens == {"input": 10, "output": 5}
        assert calls[0]["model"] == "test-model"
        assert calls[0]["messages"][0]["role"] == "system"
        assert "Round 1:" in calls[0]["messages"][1]["content"]

    def test_api_failure_becomes_invalid_action(self, monkeypatch):
        def failing(**kwargs):
            raise RuntimeError("connection refused")

        monkeypatch.setattr(llm_player.litellm, "completion", failing)
        monkeypatch.setattr(llm_player.time, "sleep", lambda s: None)
        player = LLMPlayer(GameConfig(), LLMConfig(model="test-model"))

        action = player.get_next_action([], True)
        assert isinstance(action, InvalidAction)
        assert "connection refused" in action.reason

    def test_retries_then_succeeds(self, monkeypatch):
        attempts = []

        def flaky(**kwargs):
            attempts.append(1)
            if len(attempts) < 3:
                raise RuntimeError("timeout")
            return fake_response('{"action": "scan"}')

        monkeypatch.setattr(llm_player.litellm, "completion", flaky)
        monkeypatch.setattr(llm_player.time, "sleep", lambda s: None)
        player = LLMPlayer(GameConfig(), LLMConfig(model="test-model"))

        assert player.get_next_action(HISTORY, True) == ScanRequestAction()
        assert len(attempts) == 3

    def test_parser_fallback(self, monkeypatch):
        responses = iter(["my guess is one two three four", '{"guess": [1, 2, 3, 4]}'])
        monkeypatch.setattr(llm_player.litellm, "completion", lambda **kw: fake_response(next(responses)))
        player = LLMPlayer(GameConfig(), LLMConfig(model="m", use_parser_fallback=True))

        assert player.get_next_action([], True) == GuessAction((1, 2, 3, 4))

    def test_replay_countdown(self):
        player = LLMPlayer(GameConfig(), LLMConfig(model="m"), games=2)
        assert player.has_played_before()
        assert player.is_ready()
        assert player.wants_replay() is True
        assert player.wants_replay() is False


class TestClipboardPlayer:
    """Clipboard relay player"""

    def test_typed_json(self, monkeypatch, output):
        copied = []
        monkeypatch.setattr(clipboard_player.pyperclip, "copy", copied.append)
        player = ClipboardPlayer(
            GameConfig(), input_func=lambda prompt: '{"guess": [2, 2, 3, 3]}', output=output.append
        )

        assert player.get_next_action([], True) == GuessAction((2, 2, 3, 3))
        assert "Make your first guess." in copied[0]
        assert "PROMPT COPIED TO CLIPBOARD" in output

    def test_paste_from_clipboard(self, monkeypatch, output):
        monkeypatch.setattr(clipboard_player.pyperclip, "copy", lambda text: None)
        monkeypatch.setattr(clipboard_player.pyperclip, "paste", lambda: '{"action": "scan", "round": 1}')
        player = ClipboardPlayer(GameConfig(), input_func=lambda prompt: "", output=output.append)

        assert player.get_next_action(HISTORY, True) == ScanRequestAction(1)

    def test_plain_text_answer(self, monkeypatch, output):
        monkeypatch.setattr(clipboard_player.pyperclip, "copy", lambda text: None)
        player = ClipboardPlayer(GameConfig(), input_func=lambda prompt: "5566", output=output.append)

        assert player.get_next_action([], True) == GuessAction((5, 5, 6, 6))

    def test_clipboard_unavailable(self, monkeypatch, output):
        def broken(text):
            raise clipboard_player.pyperclip.PyperclipException("no clipboard")

        monkeypatch.setattr(clipboard_player.pyperclip, "copy", broken)
        player = ClipboardPlayer(GameConfig(), input_func=lambda prompt: "1234", output=output.append)

        assert player.get_next_action([], True) == GuessAction((1, 2, 3, 4))
        assert any("CLIPBOARD UNAVAILABLE" in line for line in output)

    def test_quit(self, monkeypatch, output):
        monkeypatch.setattr(clipboard_player.pyperclip, "copy", lambda text: None)
        player = ClipboardPlayer(GameConfig(), input_func=lambda prompt: "quit", output=output.append)

        with pytest.raises(KeyboardInterrupt):
            player.get_next_action([], True)
