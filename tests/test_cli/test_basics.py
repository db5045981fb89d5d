"""Basic CLI behaviour: help, version and command registration."""

from typer.testing import CliRunner

from bqs.cli.app import __version__, app
from bqs.cli.commands import register_all_commands


class TestBasics:
    def setup_method(self):
        self.runner = CliRunner()
        register_all_commands(app)

    def test_version(self):
        result = self.runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"bqs v{__version__}" in result.stdout

    def test_help_lists_commands(self):
        result = self.runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("show", "browse", "cache"):
            assert command in result.stdout

    def test_cache_help(self):
        result = self.runner.invoke(app, ["cache", "--help"])

        assert result.exit_code == 0
        for command in ("stats", "clear", "cleanup", "invalidate"):
            assert command in result.stdout

    def test_registration_is_idempotent(self):
        register_all_commands(app)
        register_all_commands(app)

        names = [command.name for command in app.registered_commands]
        assert names.count("show") == 1
        assert names.count("browse") == 1
        assert len(app.registered_groups) == 1
