"""Tests for the relaychat command line."""

from typer.testing import CliRunner

from relaychat.cli import app
from relaychat.credentials import CredentialStore
from relaychat.providers.base import Provider

runner = CliRunner()


class TestKeys:

    def test_set_and_list(self):
        result = runner.invoke(app, ["keys", "set", "openai", "sk-test"])
        assert result.exit_code == 0, result.output
        assert CredentialStore().get(Provider.OPENAI) == "sk-test"

        result = runner.invoke(app, ["keys", "list"])
        assert result.exit_code == 0
        assert "configured" in result.output

    def test_remove(self):
        runner.invoke(app, ["keys", "set", "groq", "gsk"])
        result = runner.invoke(app, ["keys", "remove", "groq"])
        assert result.exit_code == 0
        assert CredentialStore().get(Provider.GROQ) == ""

    def test_unknown_provider(self):
        result = runner.invoke(app, ["keys", "set", "mistral", "x"])
        assert result.exit_code == 1
        assert "Unknown provider" in result.output


class TestRoutingCommands:

    def test_classify(self):
        result = runner.invoke(app, ["classify", "solve this equation"])
        assert result.exit_code == 0
        assert "math" in result.output

    def test_classify_with_scores(self):
        result = runner.invoke(app, ["classify", "hello there", "--scores"])
        assert result.exit_code == 0
        assert "none" in result.output
        assert "educational" in result.output

    def test_route_with_pretend_providers(self):
        result = runner.invoke(
            app, ["route", "```js\ncode\n```", "-p", "openai", "-p", "claude"])
        assert result.exit_code == 0
        assert "openai" in result.output
        assert "Code-focused request" in result.output

    def test_route_without_providers_fails(self):
        result = runner.invoke(app, ["route", "hi"])
        assert result.exit_code == 1
        assert "No API providers available" in result.output

    def test_ask_without_providers_fails(self):
        result = runner.invoke(app, ["ask", "hi"])
        assert result.exit_code == 1
        assert "No API providers available" in result.output

    def test_models(self):
        result = runner.invoke(app, ["models"])
        assert result.exit_code == 0
        assert "llama3" in result.output
