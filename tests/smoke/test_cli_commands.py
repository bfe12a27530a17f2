"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work against a
temporary data directory.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import asyncio
import random

import pytest
from typer.testing import CliRunner

from pathshala.cli.main import app
from pathshala.core.models import Difficulty, Operation
from pathshala.practice.distractors import multiple_choice_options
from pathshala.practice.problem_generator import ProblemGenerator
from pathshala.storage.sql_store import SqlRecordStore

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

runner = CliRunner()


@pytest.fixture(autouse=True)
def data_dir(isolated_settings):
    return isolated_settings.data_dir


class TestCLIHelp:
    def test_main_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "practice" in result.stdout
        assert "progress" in result.stdout


class TestProgressCommands:
    def test_progress_on_empty_store(self):
        result = runner.invoke(app, ["progress"])
        assert result.exit_code == 0, result.stdout
        assert "Learning Progress" in result.stdout
        assert "Learn 10 more letters" in result.stdout

    def test_letter_then_progress(self):
        assert runner.invoke(app, ["letter", "A"]).exit_code == 0
        assert runner.invoke(app, ["letter", "B", "--incomplete"]).exit_code == 0

        result = runner.invoke(app, ["progress"])

        assert result.exit_code == 0
        assert "Learn 9 more letters" in result.stdout

    def test_activity_lists_today(self):
        runner.invoke(app, ["letter", "C"])
        result = runner.invoke(app, ["activity", "--days", "3"])
        assert result.exit_code == 0
        assert "1 letter record(s)" in result.stdout


class TestPractice:
    def test_practice_session_is_recorded(self):
        # Replay the same seeded draws the command makes to know the options
        rng = random.Random(5)
        generator = ProblemGenerator(rng)
        answers = []
        for _ in range(2):
            problem = generator.generate(Operation.ADDITION, Difficulty.EASY)
            multiple_choice_options(problem, 4, rng=rng)
            answers.append(str(problem.answer))

        result = runner.invoke(
            app,
            ["practice", "-o", "addition", "-d", "easy", "-n", "2", "--seed", "5"],
            input="\n".join(answers) + "\n",
        )

        assert result.exit_code == 0, result.stdout
        assert "2 out of 2" in result.stdout

        progress = runner.invoke(app, ["progress"])
        assert "100%" in progress.stdout


class TestStories:
    def test_add_list_delete(self):
        assert runner.invoke(app, ["story", "add", "Moon Cat", "-w", "moon", "-w", "cat"]).exit_code == 0

        listed = runner.invoke(app, ["story", "list"])
        assert "Moon Cat" in listed.stdout

        deleted = runner.invoke(app, ["story", "delete", "0"])
        assert deleted.exit_code == 0
        assert "Deleted 'Moon Cat'" in deleted.stdout

    def test_delete_missing_story(self):
        result = runner.invoke(app, ["story", "delete", "4"])
        assert result.exit_code == 1


class TestMaintenance:
    def test_profile_saved(self):
        result = runner.invoke(app, ["profile", "--name", "Mitu", "--age", "6"])
        assert result.exit_code == 0
        assert "Mitu" in result.stdout

    def test_recover_healthy_collection(self):
        result = runner.invoke(app, ["recover", "math_scores"])
        assert result.exit_code == 0
        assert "empty" in result.stdout

    def test_reset_with_yes(self):
        runner.invoke(app, ["letter", "A"])
        assert runner.invoke(app, ["reset", "--yes"]).exit_code == 0
        result = runner.invoke(app, ["progress"])
        assert "Learn 10 more letters" in result.stdout


def write_raw_value(settings, key, value):
    """Store a raw (possibly damaged) value directly in the database."""

    async def write():
        async with SqlRecordStore(settings.get_database_url()) as store:
            await store._write_raw(key, value)

    asyncio.run(write())


class TestCorruptData:
    def test_corrupt_collection_is_reported_and_recovered(self, isolated_settings):
        write_raw_value(isolated_settings, "math_scores", "[{broken")

        result = runner.invoke(app, ["progress"])
        assert result.exit_code == 2
        assert "pathshala recover math_scores" in result.stdout

        recovered = runner.invoke(app, ["recover", "math_scores"])
        assert recovered.exit_code == 0
        assert "has been reset" in recovered.stdout

        assert runner.invoke(app, ["progress"]).exit_code == 0

    def test_corrupt_singleton_is_reported_and_recovered(self, isolated_settings):
        write_raw_value(isolated_settings, "settings", "{broken")

        result = runner.invoke(app, ["profile"])
        assert result.exit_code == 2
        assert "pathshala recover settings" in result.stdout

        recovered = runner.invoke(app, ["recover", "settings"])
        assert recovered.exit_code == 0
        assert "has been reset" in recovered.stdout

        profile = runner.invoke(app, ["profile"])
        assert profile.exit_code == 0
        assert "Theme" in profile.stdout

    def test_recover_rejects_unknown_key(self):
        result = runner.invoke(app, ["recover", "homework"])
        assert result.exit_code == 2
