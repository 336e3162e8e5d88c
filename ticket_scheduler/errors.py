from typing import Dict, List, Optional


class SchedulingError(Exception):
    """Erro base do agendamento"""


class CyclicDependencyError(SchedulingError):
    """Ciclo encontrado na relação de bloqueios entre tickets"""

    def __init__(self, cycle: List[str]):
        self.cycle = list(cycle)
        super().__init__(f"Dependência cíclica entre tickets: {' -> '.join(self.cycle)}")


class UnschedulableTicketError(SchedulingError):
    """Tickets que nenhum time consegue executar"""

    def __init__(self, ticket_ids: List[str], reasons: Optional[Dict[str, str]] = None):
        self.ticket_ids = list(ticket_ids)
        self.reasons = dict(reasons or {})
        details = ", ".join(
            f"{ticket_id} ({self.reasons[ticket_id]})" if ticket_id in self.reasons else ticket_id
            for ticket_id in self.ticket_ids
        )
        super().__init__(f"Tickets não agendáveis: {details}")
