import math
from typing import List, Optional
from loguru import logger
from ..errors import UnschedulableTicketError
from ..models.entities import ScheduleResult, ScheduleState, Team, Ticket
from .allocator import pick_next_team
from .prioritizer import TicketPrioritizer
from .validation import explain_unschedulable, find_missing_references


class SprintScheduler:
    """Serviço responsável pela distribuição dos tickets entre os times, sprint a sprint"""

    def __init__(self, tickets: List[Ticket], teams: List[Team], stall_limit: Optional[int] = None):
        """
        Inicializa o agendador

        Args:
            tickets: Tickets a serem agendados
            teams: Times disponíveis; a linha do tempo de cada um é reiniciada no agendamento
            stall_limit: Máximo de adiamentos consecutivos sem nenhuma atribuição.
                Se omitido, é calculado a partir das sprints já comprometidas.
        """
        self.tickets = list(tickets)
        self.teams = list(teams)
        self.stall_limit = stall_limit
        self.prioritizer = TicketPrioritizer(self.tickets)

    def schedule(self) -> ScheduleResult:
        """
        Agenda todos os tickets

        Returns:
            ScheduleResult: Ordem de prioridade, times com suas sprints e estado final

        Raises:
            CyclicDependencyError: Se houver ciclo nos bloqueios
            UnschedulableTicketError: Se algum ticket nunca puder ser executado
        """
        logger.info(f"Iniciando agendamento de {len(self.tickets)} tickets em {len(self.teams)} times")

        for team in self.teams:
            team.reset_timeline()

        warnings = find_missing_references(self.tickets, self.teams)
        ordered = self.prioritizer.sort_tickets()
        state = ScheduleState()

        if ordered and not self.teams:
            raise self._unschedulable(ordered, state)

        team = self.teams[0] if self.teams else None
        consecutive_stalls = 0

        while len(state.completion_sprint) < len(ordered):
            state.iterations += 1
            start = state.next_sprint_for(team.id)
            ticket = self._find_eligible_ticket(ordered, team, start, state)

            if ticket is None:
                # Nenhum ticket disponível: o time espera uma sprint e outro time tenta
                state.record_stall(team.id)
                consecutive_stalls += 1
                logger.debug(f"Time {team.name} sem ticket disponível na sprint {start + 1}, adiando")
                if consecutive_stalls > self._max_consecutive_stalls(state):
                    raise self._unschedulable(ordered, state)
                others = [t for t in self.teams if t.id != team.id] or [team]
                team = pick_next_team(others, state.next_available_sprint)
                continue

            consecutive_stalls = 0
            sprints_needed = math.ceil(ticket.story_points / team.velocity)
            team.occupy(ticket, start, sprints_needed)
            state.record_assignment(ticket.id, team.id, start, sprints_needed)
            logger.debug(
                f"Ticket {ticket.id} atribuído ao time {team.name} "
                f"nas sprints {start + 1} a {start + sprints_needed}"
            )

            team = pick_next_team(self.teams, state.next_available_sprint)

        result = ScheduleResult(ordered_tickets=ordered, teams=self.teams, state=state, warnings=warnings)
        logger.info(
            f"Agendamento concluído em {result.sprint_count} sprints "
            f"({state.iterations} iterações, {state.stalls} adiamentos)"
        )
        return result

    def _find_eligible_ticket(
        self, ordered: List[Ticket], team: Team, start: int, state: ScheduleState
    ) -> Optional[Ticket]:
        """
        Busca o ticket de maior prioridade que o time pode iniciar na sprint informada

        Args:
            ordered: Tickets na ordem de prioridade
            team: Time que fará a tentativa
            start: Sprint candidata de início
            state: Estado atual do agendamento

        Returns:
            Optional[Ticket]: Primeiro ticket elegível ou None
        """
        for ticket in ordered:
            if state.is_done(ticket.id) or not ticket.can_be_done_by(team.id):
                continue
            if all(
                state.is_done(blocker_id) and state.completion_sprint[blocker_id] < start
                for blocker_id in ticket.blocked_by
            ):
                return ticket
        return None

    def _max_consecutive_stalls(self, state: ScheduleState) -> int:
        """
        Limite de adiamentos seguidos antes de considerar o agendamento travado

        Sem limite configurado, basta que o cursor de cada time ultrapasse a última
        sprint concluída para que qualquer ticket agendável fique disponível.
        """
        if self.stall_limit is not None:
            return self.stall_limit
        last_completion = max(state.completion_sprint.values(), default=-1)
        return len(self.teams) * (last_completion + 3)

    def _unschedulable(self, ordered: List[Ticket], state: ScheduleState) -> UnschedulableTicketError:
        pending = [t for t in ordered if not state.is_done(t.id)]
        reasons = explain_unschedulable(pending, self.prioritizer.aggregator.tickets, self.teams)
        for ticket in pending:
            logger.error(f"Ticket {ticket.id} não pode ser agendado: {reasons[ticket.id]}")
        return UnschedulableTicketError([t.id for t in pending], reasons)
