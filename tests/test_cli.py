from __future__ import annotations

from typer.testing import CliRunner

from cli.main import app

runner = CliRunner()


def _lists(tmp_path):
    users = tmp_path / "users.txt"
    passwords = tmp_path / "passwords.txt"
    users.write_text("alice\nbob\n", encoding="utf-8")
    passwords.write_text("a\nb\nc\n", encoding="utf-8")
    return str(users), str(passwords)


def test_doctor_plans_a_run(tmp_path):
    users, passwords = _lists(tmp_path)

    result = runner.invoke(
        app,
        ["doctor", "run", "-u", users, "-p", passwords, "-t", "https://app.test/login", "-f", "user:{USER}", "-f", "pw:{PASS}"],
    )

    assert result.exit_code == 0, result.output
    assert "Run plan" in result.output
    assert "user=alice&pw=a" in result.output


def test_doctor_without_inputs_shows_settings():
    result = runner.invoke(app, ["doctor", "run"])

    assert result.exit_code == 0, result.output
    assert "Concurrency" in result.output


def test_spray_rejects_malformed_field(tmp_path):
    users, passwords = _lists(tmp_path)

    result = runner.invoke(
        app,
        ["spray", "--no-banner", "-u", users, "-p", passwords, "-t", "https://app.test/login", "-f", "nodelimiter"],
    )

    assert result.exit_code == 1
    assert "Error" in result.output


def test_spray_rejects_missing_word_list(tmp_path):
    users, _ = _lists(tmp_path)

    result = runner.invoke(
        app,
        [
            "spray",
            "--no-banner",
            "-u",
            users,
            "-p",
            str(tmp_path / "missing.txt"),
            "-t",
            "https://app.test/login",
            "-f",
            "user:{USER}",
        ],
    )

    assert result.exit_code == 1
    assert "Error" in result.output
