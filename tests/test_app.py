import json

import app
from conftest import FakeClient, completion_body
from core import insights


def test_parser_commands() -> None:
    parser = app.build_parser()

    args = parser.parse_args(["insight", "Status?", "--type", "ANALYSIS", "--context", "drought"])
    assert (args.command, args.query, args.analysis_type, args.context) == ("insight", "Status?", "ANALYSIS", "drought")

    args = parser.parse_args(["predict", "3", "--days", "14"])
    assert (args.reservoir_id, args.days) == (3, 14)

    assert parser.parse_args(["critical"]).command == "critical"


def test_main_prints_result_json(tmp_path, monkeypatch, capsys) -> None:
    register = tmp_path / "reservoirs.csv"
    register.write_text("name,county,level %\nThika Dam,Murang'a,31.25\n", encoding="utf-8")
    monkeypatch.setenv("RESERVOIRS_FILE", str(register))

    client = FakeClient(body=completion_body("We recommend:\n- Ration supply"))
    monkeypatch.setattr(insights, "get_completion_client", lambda settings: client)

    exit_code = app.main(["critical"])

    output = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert output["success"] is True
    assert output["confidence"] == "HIGH"
    assert output["recommendations"] == ["- Ration supply"]
    assert "Thika Dam (Murang'a): 31.2%" in client.calls[0][1]


def test_main_rejects_blank_query(tmp_path, monkeypatch) -> None:
    register = tmp_path / "reservoirs.csv"
    register.write_text("name,county,level %\nThika Dam,Murang'a,31.25\n", encoding="utf-8")
    monkeypatch.setenv("RESERVOIRS_FILE", str(register))

    assert app.main(["insight", "   "]) == 2
