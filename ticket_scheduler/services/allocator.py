from typing import Dict, List
from ..models.entities import Team


def pick_next_team(teams: List[Team], next_available_sprint: Dict[str, int]) -> Team:
    """
    Escolhe o time que deve tentar a próxima atribuição

    Vence o time com a menor próxima sprint livre; em caso de empate, o time com menos
    sprints ocupadas. Persistindo o empate, vale a ordem da lista.

    Args:
        teams: Times candidatos
        next_available_sprint: Próxima sprint livre por id de time

    Returns:
        Team: Time escolhido
    """
    if not teams:
        raise ValueError("Nenhum time candidato para a próxima atribuição")
    return min(teams, key=lambda team: (next_available_sprint.get(team.id, 0), team.filled_sprints))
