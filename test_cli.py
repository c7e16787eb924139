"""Tests for the key provisioning commands."""

from microblog import cli
from microblog.core import database


def test_generate_then_show(tmp_path, capsys):
    database.configure_engine(f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")

    assert cli.main(["show-key"]) == 1
    assert "No key stored for default" in capsys.readouterr().err

    assert cli.main(["generate-keys"]) == 0
    out = capsys.readouterr().out
    assert "Generated key pair for default" in out
    assert "-----BEGIN PUBLIC KEY-----" in out

    assert cli.main(["generate-keys"]) == 1
    assert "Key already exists for default" in capsys.readouterr().err

    assert cli.main(["show-key"]) == 0
    assert capsys.readouterr().out.startswith("-----BEGIN PUBLIC KEY-----")


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 1
    assert "generate-keys" in capsys.readouterr().out
