import json
from pathlib import Path
import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ticket_scheduler.errors import SchedulingError
from ticket_scheduler.models.config import SetupConfig
from ticket_scheduler.models.entities import ScheduleResult, ScheduleState
from ticket_scheduler.services.prioritizer import TicketPrioritizer
from ticket_scheduler.services.report import ReportGenerator
from ticket_scheduler.services.scheduler import SprintScheduler
from ticket_scheduler.sources.files import load_teams_json, load_tickets_csv

app = typer.Typer(help="Agendador de Tickets por Sprint")
console = Console()


def configurar_logger(output_dir: Path = Path("logs"), level: str = "INFO"):
    """Configura o sistema de logs"""
    output_dir.mkdir(parents=True, exist_ok=True)

    logger.remove()  # Remove handlers padrão
    logger.add(
        output_dir / "agendador_{time}.log",
        rotation="1 day",
        retention="7 days",
        level=level,
        encoding='utf-8'
    )
    logger.add(lambda msg: console.print(msg, style="blue", end="", markup=False), level=level)


def load_json_file(path: Path) -> dict:
    """
    Carrega um arquivo JSON

    Args:
        path: Caminho do arquivo

    Returns:
        dict: Conteúdo do arquivo
    """
    try:
        return json.loads(path.read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        logger.error(f"Erro ao carregar arquivo {path}: {str(e)}")
        raise typer.Exit(1)


def load_setup(config_dir: Path) -> SetupConfig:
    """Carrega o setup.json do diretório de configuração"""
    setup_data = load_json_file(config_dir / "setup.json")
    try:
        return SetupConfig(**setup_data).resolve_paths(config_dir)
    except ValidationError as e:
        logger.error(f"Configuração inválida em {config_dir / 'setup.json'}: {str(e)}")
        raise typer.Exit(1)


def imprimir_resumo(result: ScheduleResult) -> None:
    """Mostra a alocação de cada time no console"""
    table = Table(title=f"Agendamento em {result.sprint_count} sprints")
    table.add_column("Time")
    table.add_column("Velocity", justify="right")
    table.add_column("Sprints ocupadas", justify="right")
    table.add_column("Tickets")
    for team in result.teams:
        tickets = result.get_tickets_by_team(team.id)
        table.add_row(
            team.name,
            f"{team.velocity:g}",
            str(team.filled_sprints),
            ", ".join(t.id for t in tickets) or "-",
        )
    console.print(table)


@app.command()
def executar(
    config_dir: Path = typer.Option(
        "config",
        help="Diretório com os arquivos de configuração",
        exists=True,
        dir_okay=True,
        file_okay=False
    )
):
    """Prioriza os tickets, distribui entre os times e gera os relatórios"""
    setup = load_setup(config_dir)
    configurar_logger(Path(setup.log_dir), setup.log_level)

    logger.info("Iniciando execução do agendador")
    logger.info(f"Usando diretório de configuração: {config_dir}")

    try:
        tickets = load_tickets_csv(Path(setup.tickets_file))
        teams = load_teams_json(Path(setup.teams_file))

        scheduler = SprintScheduler(tickets, teams, stall_limit=setup.stall_limit)
        result = scheduler.schedule()

        logger.info("Gerando relatórios...")
        report_generator = ReportGenerator(result, setup.output_dir, setup.marker, setup.reports)
        report_generator.generate()
    except (OSError, ValueError, ValidationError, SchedulingError) as e:
        logger.error(f"Erro durante execução: {str(e)}")
        raise typer.Exit(1)

    imprimir_resumo(result)
    logger.info("Processo concluído com sucesso!")


@app.command()
def priorizar(
    config_dir: Path = typer.Option(
        "config",
        help="Diretório com os arquivos de configuração",
        exists=True,
        dir_okay=True,
        file_okay=False
    )
):
    """Gera apenas a ordem de prioridade dos tickets"""
    setup = load_setup(config_dir)
    configurar_logger(Path(setup.log_dir), setup.log_level)

    try:
        tickets = load_tickets_csv(Path(setup.tickets_file))
        prioritizer = TicketPrioritizer(tickets)
        ordered = prioritizer.sort_tickets()
        ratios = prioritizer.ratios()

        result = ScheduleResult(ordered_tickets=ordered, teams=[], state=ScheduleState())
        ReportGenerator(result, setup.output_dir, setup.marker).write_sorted_tickets()
    except (OSError, ValueError, ValidationError, SchedulingError) as e:
        logger.error(f"Erro durante priorização: {str(e)}")
        raise typer.Exit(1)

    table = Table(title="Ordem de prioridade")
    table.add_column("#", justify="right")
    table.add_column("Ticket")
    table.add_column("Título")
    table.add_column("Valor/Esforço", justify="right")
    for position, ticket in enumerate(ordered, start=1):
        ratio = ratios[ticket.id]
        table.add_row(str(position), ticket.id, ticket.title, "∞" if ratio == float("inf") else f"{ratio:.2f}")
    console.print(table)


if __name__ == "__main__":
    app()
