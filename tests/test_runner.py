"""
Tests for the resample runner and CLI.
"""

import pytest

from ashare_bars.config import AppConfig
from ashare_bars.data.errors import DataIntegrityError
from ashare_bars.run import run_resample
from ashare_bars.run.cli import main


DAY_ROWS = [
    ("2023-07-03", 10.0, 10.5, 9.8, 10.2, 100),
    ("2023-07-04", 10.2, 10.6, 10.1, 10.4, 100),
    ("2023-07-05", 10.4, 11.0, 10.3, 10.9, 100),
    ("2023-07-06", 10.9, 11.2, 10.7, 11.0, 100),
    ("2023-07-07", 11.0, 11.1, 10.5, 10.6, 100),
    ("2023-07-10", 10.6, 10.8, 10.2, 10.3, 100),
    ("2023-07-11", 10.3, 10.5, 10.0, 10.4, 100),
]


def write_csv(path, rows):
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = ["date,open,high,low,close,volume"]
    lines += [",".join(str(v) for v in row) for row in rows]
    path.write_text("\n".join(lines) + "\n")


def minute_rows(day, times):
    return [(f"{day} {t}:00", 10.0, 10.2, 9.9, 10.1, 10) for t in times]


@pytest.fixture
def data_dir(tmp_path):
    write_csv(tmp_path / "stocks" / "60" / "04" / "600444.csv", DAY_ROWS)
    write_csv(tmp_path / "minutes" / "600444" / "2023-07-06.csv", minute_rows("2023-07-06", ["14:50", "14:55", "15:00"]))
    write_csv(tmp_path / "minutes" / "600444" / "2023-07-07.csv", minute_rows("2023-07-07", ["09:35", "09:40", "09:45"]))
    return tmp_path


def make_config(data_dir, **resample):
    return AppConfig(data={"data_dir": str(data_dir)}, resample={"symbol": "600444", **resample})


def test_day_to_week(data_dir):
    """Weekly bars up to the given end session"""
    result = run_resample(make_config(data_dir, end="2023-07-10"))
    assert result.symbol == "600444"
    assert result.end == "2023-07-10"
    assert result.chart.dates() == ["2023-07-03", "2023-07-10"]

    week = result.chart[0]
    assert (week.open, week.high, week.low, week.close, week.volume) == (10.0, 11.2, 9.8, 10.6, 500)
    assert result.chart[1].close == 10.3
    assert list(result.frame.index) == ["2023-07-03", "2023-07-10"]


def test_day_bars_with_limit(data_dir):
    result = run_resample(make_config(data_dir, target="day", end="2023-07-11", limit=3))
    assert result.chart.dates() == ["2023-07-07", "2023-07-10", "2023-07-11"]


def test_end_on_closed_date_uses_previous_session(data_dir):
    result = run_resample(make_config(data_dir, target="day", end="2023-07-09"))
    assert result.end == "2023-07-07"
    assert result.chart.last().date == "2023-07-07"


def test_minute_sessions(data_dir):
    """Two sessions of 5-minute bars resampled to 15 minutes"""
    result = run_resample(make_config(data_dir, source="5min", target="15min", end="2023-07-07", sessions=2))
    assert result.chart.dates() == ["2023-07-06 15:00:00", "2023-07-07 09:45:00"]
    assert result.chart[0].volume == 30


def test_minute_sessions_with_middle_gap(data_dir):
    write_csv(data_dir / "minutes" / "600444" / "2023-07-10.csv", minute_rows("2023-07-10", ["09:35"]))
    (data_dir / "minutes" / "600444" / "2023-07-07.csv").unlink()
    config = make_config(data_dir, source="5min", target="5min", end="2023-07-10", sessions=3)
    with pytest.raises(DataIntegrityError):
        run_resample(config)


def test_symbol_required(data_dir):
    config = AppConfig(data={"data_dir": str(data_dir)})
    with pytest.raises(ValueError):
        run_resample(config)


def test_cli_calendar_commands(capsys):
    assert main(["between", "2023-09-28", "2023-10-09"]) == 0
    assert capsys.readouterr().out.strip() == "1"

    assert main(["shift", "2023-07-06 14:55", "2", "--period", "5min"]) == 0
    assert capsys.readouterr().out.strip() == "2023-07-07 09:35:00"

    assert main(["shift", "2023-07-06", "-1"]) == 0
    assert capsys.readouterr().out.strip() == "2023-07-05"

    assert main(["day", "2023-10-03"]) == 0
    out = capsys.readouterr().out
    assert "holiday:       True" in out
    assert "session:       2023-09-28" in out


def test_cli_sessions(capsys):
    assert main(["sessions", "2023-06-21", "2023-06-26"]) == 0
    out = capsys.readouterr().out
    assert "2 session(s)" in out
    assert "2023-06-26  09:30 - 15:00" in out


def test_cli_resample(data_dir, tmp_path, capsys):
    output = tmp_path / "weekly.csv"
    code = main([
        "resample",
        "--symbol", "sh600444",
        "--set", f"data.data_dir={data_dir}",
        "--set", "resample.end=2023-07-11",
        "--output", str(output),
    ])
    assert code == 0
    out = capsys.readouterr().out
    assert "RESAMPLE SUMMARY" in out
    assert "Symbol: 600444" in out
    assert output.read_text().startswith("date,open,high,low,close,volume,yesterday_close")


def test_cli_reports_errors(capsys):
    assert main(["day", "not-a-date"]) == 1
    assert "ERROR" in capsys.readouterr().err


def test_minute_sessions_with_timed_end(data_dir):
    """A time of day in `end` still counts whole sessions and cuts later bars"""
    write_csv(data_dir / "minutes" / "600444" / "2023-07-05.csv", minute_rows("2023-07-05", ["15:00"]))
    config = make_config(data_dir, source="5min", target="5min", end="2023-07-07 09:40", sessions=3)
    result = run_resample(config)
    assert result.chart.dates() == [
        "2023-07-05 15:00:00",
        "2023-07-06 14:50:00",
        "2023-07-06 14:55:00",
        "2023-07-06 15:00:00",
        "2023-07-07 09:35:00",
        "2023-07-07 09:40:00",
    ]


def test_cli_stocks(data_dir, capsys):
    (data_dir / "stocks.csv").write_text("code\tname\n600444\t国机通用\n000001\t平安银行\n", encoding="utf-8")
    assert main(["stocks", "6004", "--set", f"data.data_dir={data_dir}"]) == 0
    out = capsys.readouterr().out
    assert "[600444] 国机通用" in out
    assert "1 stock(s)" in out
