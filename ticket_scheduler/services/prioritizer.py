import math
from typing import Dict, List, Optional
from loguru import logger
from ..errors import CyclicDependencyError
from ..models.entities import Ticket
from .dependencies import DependencyAggregator


class TicketPrioritizer:
    """Serviço responsável pela ordenação dos tickets por valor e dependências"""

    def __init__(self, tickets: List[Ticket], aggregator: Optional[DependencyAggregator] = None):
        """
        Inicializa o priorizador

        Args:
            tickets: Tickets a serem ordenados
            aggregator: Agregador de dependências já construído (opcional)
        """
        self.tickets = list(tickets)
        self.aggregator = aggregator or DependencyAggregator(self.tickets)

    def priority_ratio(self, ticket_id: str) -> float:
        """
        Calcula a razão entre valor de negócio e esforço acumulados do ticket

        Tickets sem esforço acumulado têm prioridade infinita.

        Args:
            ticket_id: Id do ticket

        Returns:
            float: Razão valor/esforço
        """
        effort = self.aggregator.aggregate("story_points", ticket_id)
        if effort == 0:
            return math.inf
        return self.aggregator.aggregate("business_value", ticket_id) / effort

    def ratios(self) -> Dict[str, float]:
        """Retorna a razão de prioridade de cada ticket"""
        return {t.id: self.priority_ratio(t.id) for t in self.tickets}

    def sort_tickets(self) -> List[Ticket]:
        """
        Ordena os tickets por razão decrescente e depois os lineariza,
        colocando sempre os bloqueadores antes do ticket bloqueado

        Returns:
            List[Ticket]: Tickets na ordem de execução planejada
        """
        self.aggregator.check_acyclic()

        ratios = self.ratios()
        by_ratio = sorted(self.tickets, key=lambda t: ratios[t.id], reverse=True)

        ordered: Dict[str, Ticket] = {}
        for ticket in by_ratio:
            self._add_with_blockers(ticket.id, ordered)

        logger.info(f"{len(ordered)} tickets ordenados por prioridade")
        return list(ordered.values())

    def _add_with_blockers(self, ticket_id: str, ordered: Dict[str, Ticket]) -> None:
        """Adiciona os bloqueadores do ticket e depois o próprio ticket"""
        ticket = self.aggregator.get(ticket_id)
        if ticket is None or ticket_id in ordered:
            return

        path = [ticket_id]
        on_path = {ticket_id}
        stack = [(ticket, iter(ticket.blocked_by))]

        while stack:
            current, blockers = stack[-1]
            for blocker_id in blockers:
                blocker = self.aggregator.get(blocker_id)
                if blocker is None or blocker_id in ordered:
                    continue
                if blocker_id in on_path:
                    raise CyclicDependencyError(path[path.index(blocker_id):] + [blocker_id])
                path.append(blocker_id)
                on_path.add(blocker_id)
                stack.append((blocker, iter(blocker.blocked_by)))
                break
            else:
                stack.pop()
                on_path.discard(path.pop())
                ordered[current.id] = current


def sort_tickets(tickets: List[Ticket]) -> List[Ticket]:
    """Atalho para ordenar uma lista de tickets"""
    return TicketPrioritizer(tickets).sort_tickets()
