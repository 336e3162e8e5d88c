from typing import Dict, Iterable, List, Optional, Tuple
from loguru import logger
from ..errors import CyclicDependencyError
from ..models.entities import Ticket

AGGREGATABLE_ATTRIBUTES = ("business_value", "story_points")


class DependencyAggregator:
    """Soma atributos de um ticket com todos os tickets que o bloqueiam"""

    def __init__(self, tickets: Iterable[Ticket]):
        """
        Inicializa o agregador

        Args:
            tickets: Tickets conhecidos; ids repetidos mantêm a última definição
        """
        self.tickets: Dict[str, Ticket] = {}
        for ticket in tickets:
            if ticket.id in self.tickets:
                logger.warning(f"Ticket {ticket.id} duplicado, mantendo a última definição")
            self.tickets[ticket.id] = ticket
        self._cache: Dict[Tuple[str, str], float] = {}

    def get(self, ticket_id: str) -> Optional[Ticket]:
        return self.tickets.get(ticket_id)

    def aggregate(self, attribute: str, ticket_id: str) -> float:
        """
        Soma de um atributo sobre o fecho de dependências do ticket

        Um ancestral alcançável por mais de um caminho é somado uma vez por caminho.
        Ids desconhecidos contribuem com zero.

        Args:
            attribute: "business_value" ou "story_points"
            ticket_id: Id do ticket

        Returns:
            float: Valor do ticket somado ao de todos os seus bloqueadores
        """
        if attribute not in AGGREGATABLE_ATTRIBUTES:
            raise ValueError(f"Atributo inválido para agregação: {attribute}")
        if ticket_id not in self.tickets:
            return 0
        key = (attribute, ticket_id)
        if key not in self._cache:
            self._aggregate(attribute, ticket_id)
        return self._cache[key]

    def _aggregate(self, attribute: str, root_id: str) -> None:
        # Pilha explícita: cadeias longas não estouram o limite de recursão
        path = [root_id]
        on_path = {root_id}
        stack = [(root_id, iter(self.tickets[root_id].blocked_by))]

        while stack:
            ticket_id, blockers = stack[-1]
            for blocker_id in blockers:
                if blocker_id not in self.tickets or (attribute, blocker_id) in self._cache:
                    continue
                if blocker_id in on_path:
                    raise CyclicDependencyError(path[path.index(blocker_id):] + [blocker_id])
                path.append(blocker_id)
                on_path.add(blocker_id)
                stack.append((blocker_id, iter(self.tickets[blocker_id].blocked_by)))
                break
            else:
                stack.pop()
                path.pop()
                on_path.discard(ticket_id)
                ticket = self.tickets[ticket_id]
                total = getattr(ticket, attribute)
                for blocker_id in ticket.blocked_by:
                    total += self._cache.get((attribute, blocker_id), 0)
                self._cache[(attribute, ticket_id)] = total

    def find_cycle(self) -> Optional[List[str]]:
        """
        Procura um ciclo na relação de bloqueios

        Returns:
            Optional[List[str]]: Caminho do ciclo (primeiro e último id iguais) ou None
        """
        finished = set()

        for root_id in self.tickets:
            if root_id in finished:
                continue
            path = [root_id]
            on_path = {root_id}
            stack = [(root_id, iter(self.tickets[root_id].blocked_by))]

            while stack:
                ticket_id, blockers = stack[-1]
                for blocker_id in blockers:
                    if blocker_id in on_path:
                        return path[path.index(blocker_id):] + [blocker_id]
                    if blocker_id not in self.tickets or blocker_id in finished:
                        continue
                    path.append(blocker_id)
                    on_path.add(blocker_id)
                    stack.append((blocker_id, iter(self.tickets[blocker_id].blocked_by)))
                    break
                else:
                    stack.pop()
                    path.pop()
                    on_path.discard(ticket_id)
                    finished.add(ticket_id)
        return None

    def check_acyclic(self) -> None:
        """Falha com CyclicDependencyError se houver ciclo"""
        cycle = self.find_cycle()
        if cycle:
            logger.error(f"Dependência cíclica encontrada: {' -> '.join(cycle)}")
            raise CyclicDependencyError(cycle)
