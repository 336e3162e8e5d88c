from typing import Dict, List
from loguru import logger
from ..models.entities import MissingReference, ReferenceKind, Team, Ticket


def find_missing_references(tickets: List[Ticket], teams: List[Team]) -> List[MissingReference]:
    """
    Encontra referências para tickets ou times inexistentes

    Essas referências não interrompem o agendamento, mas tornam o ticket
    impossível de agendar, por isso cada uma é registrada como aviso.

    Args:
        tickets: Tickets carregados
        teams: Times carregados

    Returns:
        List[MissingReference]: Referências não resolvidas
    """
    ticket_ids = {t.id for t in tickets}
    team_ids = {t.id for t in teams}
    missing = []

    for ticket in tickets:
        for blocker_id in ticket.blocked_by:
            if blocker_id not in ticket_ids:
                missing.append(MissingReference(
                    ticket_id=ticket.id, kind=ReferenceKind.BLOCKED_BY, reference=blocker_id
                ))
        for team_id in ticket.potential_team:
            if team_id not in team_ids:
                missing.append(MissingReference(
                    ticket_id=ticket.id, kind=ReferenceKind.POTENTIAL_TEAM, reference=team_id
                ))
        if not ticket.potential_team:
            logger.warning(f"Ticket {ticket.id} não possui nenhum time elegível")

    for reference in missing:
        logger.warning(reference.describe())

    return missing


def explain_unschedulable(pending: List[Ticket], tickets: Dict[str, Ticket], teams: List[Team]) -> Dict[str, str]:
    """
    Descreve por que cada ticket pendente não pôde ser agendado

    Args:
        pending: Tickets que ficaram sem agendamento
        tickets: Todos os tickets por id
        teams: Times disponíveis

    Returns:
        Dict[str, str]: Motivo por id de ticket
    """
    team_ids = {t.id for t in teams}
    pending_ids = {t.id for t in pending}
    reasons = {}

    for ticket in pending:
        if not any(team_id in team_ids for team_id in ticket.potential_team):
            reasons[ticket.id] = "nenhum time elegível"
            continue
        missing = [b for b in ticket.blocked_by if b not in tickets]
        if missing:
            reasons[ticket.id] = f"dependência inexistente {', '.join(missing)}"
            continue
        blocked = [b for b in ticket.blocked_by if b in pending_ids]
        if blocked:
            reasons[ticket.id] = f"bloqueado por ticket não agendável {', '.join(blocked)}"
        else:
            reasons[ticket.id] = "dependências nunca resolvidas"

    return reasons
