import csv
import json
from pathlib import Path
from typing import List
from loguru import logger
from pydantic import ValidationError

from ..models.entities import Team, Ticket

TICKET_COLUMNS = ["id", "title", "blocked_by", "business_value", "story_points", "potential_team"]


def load_tickets_csv(path: Path) -> List[Ticket]:
    """
    Carrega os tickets de um arquivo CSV

    A primeira linha é o cabeçalho e é ignorada. As colunas são posicionais:
    id,title,blockedBy,businessValue,storyPoints,potentialTeam. As listas de ids
    são separadas por hífen.

    Args:
        path: Caminho do arquivo

    Returns:
        List[Ticket]: Tickets na ordem do arquivo
    """
    path = Path(path)
    tickets = []
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        next(reader, None)
        for line_number, row in enumerate(reader, start=2):
            if not any(cell.strip() for cell in row):
                continue
            if len(row) != len(TICKET_COLUMNS):
                raise ValueError(
                    f"{path}:{line_number}: esperadas {len(TICKET_COLUMNS)} colunas, encontradas {len(row)}"
                )
            try:
                tickets.append(Ticket(**dict(zip(TICKET_COLUMNS, row))))
            except ValidationError as e:
                raise ValueError(f"{path}:{line_number}: ticket inválido: {e}") from e

    logger.info(f"{len(tickets)} tickets carregados de {path}")
    return tickets


def load_teams_json(path: Path) -> List[Team]:
    """
    Carrega os times de um arquivo JSON

    Args:
        path: Caminho do arquivo com uma lista de {id, name, velocity}

    Returns:
        List[Team]: Times com a linha do tempo vazia
    """
    path = Path(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path}: esperada uma lista de times")

    teams = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"{path}: time na posição {index} não é um objeto")
        team = Team(**item)
        team.reset_timeline()
        teams.append(team)

    logger.info(f"{len(teams)} times carregados de {path}")
    return teams
