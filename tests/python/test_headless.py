import csv
import json

from murmuration.headless import run_headless


def _read_csv(path):
    with path.open(newline="") as handle:
        return list(csv.reader(handle))


def _write_config(path):
    path.write_text(
        "agent_count: 12\n"
        "time_step: 0.1\n"
        "neighbor_search: brute_force\n"
        "params:\n"
        "  domain_half_extents: [20, 20, 20]\n"
        "  nearby_distance: 10.0\n"
        "  separation_distance: 3.0\n"
        "  max_speed: 4.0\n"
    )
    return path


def test_headless_log_header_and_rows(tmp_path):
    log_path = tmp_path / "run.csv"
    config_path = _write_config(tmp_path / "flock.yaml")

    run_headless(steps=3, seed=1, log_path=log_path, deterministic_log=True, config_path=config_path)

    rows = _read_csv(log_path)
    assert len(rows) == 4
    assert rows[0] == [
        "tick",
        "agents",
        "neighbor_links",
        "avg_neighbors",
        "avg_speed",
        "max_speed",
        "outside_domain",
        "tick_ms",
    ]
    assert [row[0] for row in rows[1:]] == ["0", "1", "2"]
    assert all(row[1] == "12" for row in rows[1:])
    assert all(row[-1] == "0.000" for row in rows[1:])
    assert all(float(row[5]) <= 4.0 + 1e-4 for row in rows[1:])


def test_deterministic_logs_match_for_same_seed(tmp_path):
    config_path = _write_config(tmp_path / "flock.yaml")
    first = tmp_path / "a.csv"
    second = tmp_path / "b.csv"

    run_headless(steps=5, seed=4, log_path=first, deterministic_log=True, config_path=config_path)
    run_headless(steps=5, seed=4, log_path=second, deterministic_log=True, config_path=config_path)

    assert first.read_text() == second.read_text()


def test_headless_summary_output(tmp_path):
    summary_path = tmp_path / "summary.json"
    config_path = _write_config(tmp_path / "flock.yaml")

    flock = run_headless(
        steps=4,
        seed=3,
        log_path=None,
        deterministic_log=True,
        config_path=config_path,
        summary_path=summary_path,
    )

    payload = json.loads(summary_path.read_text())
    assert payload["steps"] == 4
    assert payload["seed"] == 3
    assert payload["agents"] == 12
    assert payload["tick_ms"]["max"] == 0.0
    assert "avg_speed" in payload
    assert flock.metrics.tick == 3
