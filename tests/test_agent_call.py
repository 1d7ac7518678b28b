"""Tests for the single-call agent wrapper."""

import logging
from unittest.mock import MagicMock

from component_forge.agent.agent_call import DEFAULT_TOP_P, agent_options, call_agent
from component_forge.models import FailureKind, ParseStrategy


class TestAgentOptions:
    def test_code_agent(self):
        opts = agent_options("code_agent")
        assert opts == {"max_tokens": 32000, "temperature": 0.3, "top_p": DEFAULT_TOP_P}

    def test_layout_agent(self):
        opts = agent_options("layout_agent")
        assert opts["max_tokens"] == 4000
        assert opts["temperature"] == 0.3

    def test_creative_agent(self):
        opts = agent_options("content_agent")
        assert opts["max_tokens"] == 4000
        assert opts["temperature"] == 0.7


class TestCallAgent:
    def test_parses_structured_response(self):
        generator = MagicMock(return_value='```json\n{"name": "Landing",}\n```')
        result = call_agent("make a page", generator, agent_name="spec_agent", model="m1")

        generator.assert_called_once_with("make a page")
        assert result.success
        assert result.response == {"name": "Landing"}
        assert result.metadata.parsed
        assert result.metadata.strategy_used == ParseStrategy.repaired_json
        assert result.metadata.agent == "spec_agent"
        assert result.metadata.model == "m1"
        assert result.metadata.prompt_length == len("make a page")
        assert result.metadata.execution_time >= 0

    def test_unparseable_response_returns_raw_text(self):
        generator = MagicMock(return_value="  Sorry, I can't help with that.  ")
        result = call_agent("p", generator)
        assert result.success
        assert result.response == "Sorry, I can't help with that."
        assert not result.metadata.parsed
        assert result.metadata.parse_error

    def test_parse_disabled(self):
        result = call_agent("p", lambda _: '{"a": 1}', parse=False)
        assert result.response == '{"a": 1}'
        assert not result.metadata.parsed

    def test_generator_exception(self):
        generator = MagicMock(side_effect=RuntimeError("rate limited"))
        result = call_agent("p", generator, agent_name="code_agent")
        assert not result.success
        assert result.error == "rate limited"
        assert result.error_kind == FailureKind.upstream
        assert result.response is None
        generator.assert_called_once()

    def test_exception_without_message(self):
        result = call_agent("p", MagicMock(side_effect=TimeoutError()))
        assert result.error == "TimeoutError"

    def test_empty_response(self):
        for text in ("", "   \n", None):
            result = call_agent("p", MagicMock(return_value=text))
            assert not result.success
            assert result.error == "Empty response"
            assert result.error_kind == FailureKind.upstream

    def test_uses_given_logger(self):
        log = MagicMock(spec=logging.Logger)
        call_agent("p", MagicMock(side_effect=ValueError("boom")), logger=log)
        log.error.assert_called_once()
        assert "boom" in log.error.call_args[0][0]
