import json
import os
import tempfile

from apnealog.cli import main
from apnealog.config import Config, save_config


def _setup(tmp):
    cfg = Config(data_dir=os.path.join(tmp, "data"), log_dir=os.path.join(tmp, "logs"))
    path = os.path.join(tmp, "apnealog_config.yml")
    save_config(path, cfg)
    return path


def test_log_then_stats_json(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        config_path = _setup(tmp)
        code = main(
            [
                "log",
                "--config", config_path,
                "--date", "2024-05-01",
                "--type", "open_water",
                "--discipline", "CWT",
                "--dive", "18",
                "--dive", "27",
                "--buddy", "Maya",
            ]
        )
        assert code == 0
        capsys.readouterr()

        assert main(["stats", "--json", "--config", config_path]) == 0
        data = json.loads(capsys.readouterr().out)

    assert data["totalDives"] == 2
    assert data["maxDepth"] == 27
    assert data["favoriteDiveBuddy"] == {"name": "Maya", "count": 1}


def test_show_and_delete(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        config_path = _setup(tmp)
        main(["log", "--config", config_path, "--type", "pool", "--discipline", "STA", "--dive", "200"])
        capsys.readouterr()

        assert main(["show", "1", "--config", config_path]) == 0
        assert "- Best: 3:20" in capsys.readouterr().out

        assert main(["delete", "1", "--config", config_path]) == 0
        assert "1 dive(s)" in capsys.readouterr().out

        assert main(["show", "1", "--config", config_path]) == 1
        assert "Not found" in capsys.readouterr().out


def test_log_rejects_mismatched_discipline(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        config_path = _setup(tmp)
        code = main(
            ["log", "--config", config_path, "--type", "pool", "--discipline", "CWT", "--dive", "10"]
        )

    assert code == 1
    assert "Invalid input" in capsys.readouterr().out


def test_stats_without_data_reports_missing_files(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        config_path = _setup(tmp)
        assert main(["stats", "--config", config_path]) == 1

    assert "File error" in capsys.readouterr().out


def _write_users(tmp):
    data_dir = os.path.join(tmp, "data")
    os.makedirs(data_dir, exist_ok=True)
    users = [
        {"id": 1, "email": "maya@example.com", "firstName": "Maya", "role": "student"},
        {
            "id": 2,
            "email": "coach@example.com",
            "firstName": "Tomas",
            "lastName": "Reyes",
            "role": "instructor",
            "password": "s3cret",
        },
    ]
    with open(os.path.join(data_dir, "users.json"), "w", encoding="utf-8") as handle:
        json.dump(users, handle)


def test_show_names_the_instructor(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        config_path = _setup(tmp)
        _write_users(tmp)
        code = main(
            [
                "log", "--config", config_path,
                "--type", "open_water", "--discipline", "FIM",
                "--instructor", "2", "--dive", "15",
            ]
        )
        assert code == 0
        capsys.readouterr()

        assert main(["show", "1", "--config", config_path]) == 0
        assert "- Instructor: Tomas Reyes (instructor)" in capsys.readouterr().out

        assert main(["users", "--instructors", "--config", config_path]) == 0
        out = capsys.readouterr().out
        assert "| 2 | Tomas Reyes | coach@example.com | instructor | yes | 0 |" in out
        assert "maya@example.com" not in out
        assert "s3cret" not in out


def test_log_rejects_student_as_instructor(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        config_path = _setup(tmp)
        _write_users(tmp)
        code = main(
            [
                "log", "--config", config_path,
                "--type", "pool", "--discipline", "STA",
                "--instructor", "1", "--dive", "120",
            ]
        )

    assert code == 1
    assert "not an instructor" in capsys.readouterr().out


def test_config_with_unknown_key_exits_cleanly(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "apnealog_config.yml")
        with open(path, "w", encoding="utf-8") as handle:
            handle.write("store:\n  session_file: s.json\n")
        code = main(["stats", "--config", path])

    assert code == 1
    assert "Invalid input" in capsys.readouterr().out
