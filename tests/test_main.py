import json
import pytest
from unittest.mock import patch
from typer.testing import CliRunner
from ticket_scheduler.errors import UnschedulableTicketError
from ticket_scheduler.main import app

runner = CliRunner()


@pytest.fixture
def config_dir(tmp_path):
    """Fixture para um diretório de configuração completo"""
    config = tmp_path / "config"
    config.mkdir()
    (config / "tickets.csv").write_text(
        "id,title,blockedBy,businessValue,storyPoints,potentialTeam\n"
        "A,First,,100,10,T\n"
        "B,Second,A,10,5,T\n",
        encoding="utf-8"
    )
    (config / "teams.json").write_text(
        json.dumps([{"id": "T", "name": "Team", "velocity": 5}]),
        encoding="utf-8"
    )
    (config / "setup.json").write_text(json.dumps({
        "tickets_file": "tickets.csv",
        "teams_file": "teams.json",
        "output_dir": str(tmp_path / "output"),
        "log_dir": str(tmp_path / "logs"),
        "reports": {"pdf": False}
    }), encoding="utf-8")
    return config


def test_executar_success(config_dir, tmp_path):
    """Testa o fluxo principal com sucesso"""
    result = runner.invoke(app, ["executar", "--config-dir", str(config_dir)])

    assert result.exit_code == 0
    output = tmp_path / "output"
    assert (output / "sorted-tickets.csv").read_text(encoding="utf-8").splitlines() == [
        "Ticket ID,Ticket Title",
        "A,First",
        "B,Second",
    ]
    assert (output / "gantt.csv").read_text(encoding="utf-8").splitlines() == [
        "Team name,Ticket ID,Title,Sprint 1,Sprint 2,Sprint 3",
        "Team,A,First,X,X,",
        "Team,B,Second,,,X",
    ]
    assert (output / "relatorio_agendamento.md").exists()
    assert (output / "relatorio_agendamento.xlsx").exists()
    assert not (output / "relatorio_agendamento.pdf").exists()
    assert list((tmp_path / "logs").glob("agendador_*.log"))


def test_executar_unschedulable(config_dir, tmp_path):
    """Testa a falha com ticket sem time existente"""
    (config_dir / "tickets.csv").write_text(
        "id,title,blockedBy,businessValue,storyPoints,potentialTeam\n"
        "A,First,,100,10,GHOST\n",
        encoding="utf-8"
    )

    result = runner.invoke(app, ["executar", "--config-dir", str(config_dir)])

    assert result.exit_code == 1
    assert not (tmp_path / "output" / "gantt.csv").exists()


def test_executar_cycle(config_dir, tmp_path):
    """Testa a falha com dependência cíclica"""
    (config_dir / "tickets.csv").write_text(
        "id,title,blockedBy,businessValue,storyPoints,potentialTeam\n"
        "A,First,B,100,10,T\n"
        "B,Second,A,10,5,T\n",
        encoding="utf-8"
    )

    result = runner.invoke(app, ["executar", "--config-dir", str(config_dir)])

    assert result.exit_code == 1
    assert not (tmp_path / "output" / "sorted-tickets.csv").exists()


def test_executar_scheduler_error(config_dir):
    """Testa que erros do agendador encerram a execução"""
    with patch("ticket_scheduler.main.SprintScheduler") as scheduler_class:
        scheduler_class.return_value.schedule.side_effect = UnschedulableTicketError(["A"])

        result = runner.invoke(app, ["executar", "--config-dir", str(config_dir)])

    assert result.exit_code == 1
    scheduler_class.return_value.schedule.assert_called_once()


def test_executar_missing_setup(tmp_path):
    """Testa a falha sem setup.json"""
    result = runner.invoke(app, ["executar", "--config-dir", str(tmp_path)])

    assert result.exit_code == 1


def test_executar_invalid_setup(config_dir):
    """Testa a falha com configuração inválida"""
    (config_dir / "setup.json").write_text(json.dumps({"tickets_file": "tickets.csv"}), encoding="utf-8")

    result = runner.invoke(app, ["executar", "--config-dir", str(config_dir)])

    assert result.exit_code == 1


def test_executar_missing_tickets_file(config_dir):
    """Testa a falha quando o arquivo de tickets não existe"""
    (config_dir / "tickets.csv").unlink()

    result = runner.invoke(app, ["executar", "--config-dir", str(config_dir)])

    assert result.exit_code == 1


def test_priorizar(config_dir, tmp_path):
    """Testa a geração apenas da ordem de prioridade"""
    result = runner.invoke(app, ["priorizar", "--config-dir", str(config_dir)])

    assert result.exit_code == 0
    assert "Ordem de prioridade" in result.output
    assert (tmp_path / "output" / "sorted-tickets.csv").exists()
    assert not (tmp_path / "output" / "gantt.csv").exists()


def test_executar_invalid_team_item(config_dir, tmp_path):
    """Testa a falha com um time que não é um objeto JSON"""
    (config_dir / "teams.json").write_text(json.dumps(["T"]), encoding="utf-8")

    result = runner.invoke(app, ["executar", "--config-dir", str(config_dir)])

    assert result.exit_code == 1
    assert not (tmp_path / "output" / "gantt.csv").exists()
