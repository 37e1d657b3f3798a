import builtins

import pytest

import cli
import main


def _answers(monkeypatch, answers):
    it = iter(answers)
    monkeypatch.setattr(builtins, "input", lambda _prompt="": next(it))


def test_defaults_produce_reference_results(monkeypatch, capsys):
    _answers(monkeypatch, [""] * 8)
    cli.run_cli(pdf_path=None)
    out = capsys.readouterr().out
    assert "RESULTS" in out
    assert "$34,100" in out
    assert "1.5 months" in out
    assert "2,355.2%" in out
    assert "WHAT IF INVOICE VOLUME CHANGES?" in out


def test_reprompts_on_invalid_volume(monkeypatch, capsys):
    _answers(monkeypatch, ["abc", "0", "1,000"] + [""] * 7)
    inputs = cli.collect_inputs()
    out = capsys.readouterr().out
    assert "Invalid number" in out
    assert "Must be greater than 0" in out
    assert inputs.monthly_invoice_volume == 1000


def test_error_rate_upper_bound(monkeypatch, capsys):
    _answers(monkeypatch, ["", "", "", "", "150", "2%", "", "", ""])
    inputs = cli.collect_inputs()
    assert "Must be at most 100" in capsys.readouterr().out
    assert inputs.error_rate_manual == 2


def test_writes_pdf_when_email_given(monkeypatch, tmp_path):
    path = tmp_path / "report.pdf"
    _answers(monkeypatch, [""] * 8 + ["ap@example.com"])
    cli.run_cli(pdf_path=str(path))
    assert path.read_bytes().startswith(b"%PDF")


def test_skips_pdf_without_email(monkeypatch, tmp_path):
    path = tmp_path / "report.pdf"
    _answers(monkeypatch, [""] * 9)
    cli.run_cli(pdf_path=str(path))
    assert not path.exists()


@pytest.mark.parametrize("val,expected", [(34100, "$34,100"), (None, "n/a")])
def test_fmt(val, expected):
    assert cli.fmt(val) == expected


def test_main_dispatches_to_cli(monkeypatch):
    called = []
    monkeypatch.setattr(cli, "run_cli", lambda: called.append("cli"))
    monkeypatch.setattr("sys.argv", ["main.py", "--cli"])
    main.main()
    assert called == ["cli"]
