from typing import Dict, List, Optional
from enum import Enum
from pydantic import BaseModel, Field, field_validator


class ReferenceKind(str, Enum):
    """Tipos de referência feitas por um ticket"""
    BLOCKED_BY = "blocked_by"
    POTENTIAL_TEAM = "potential_team"


class Ticket(BaseModel):
    """Modelo de um ticket"""
    id: str
    title: str
    blocked_by: List[str] = Field(default_factory=list)
    business_value: float = Field(default=0, ge=0)
    story_points: float = Field(default=0, ge=0)
    potential_team: List[str] = Field(default_factory=list)

    @field_validator("blocked_by", "potential_team", mode="before")
    @classmethod
    def split_ids(cls, v):
        """Converte listas no formato "A-B-C" em lista de ids"""
        if v is None:
            return []
        if isinstance(v, str):
            return [item.strip() for item in v.split("-") if item.strip()] if v.strip() else []
        return v

    @field_validator("business_value", "story_points", mode="before")
    @classmethod
    def empty_as_zero(cls, v):
        """Campos numéricos vazios valem zero"""
        if isinstance(v, str) and not v.strip():
            return 0
        return v

    def can_be_done_by(self, team_id: str) -> bool:
        """Verifica se o time pode executar o ticket"""
        return team_id in self.potential_team


class Team(BaseModel):
    """Modelo de um time"""
    id: str
    name: str
    velocity: float = Field(..., gt=0)
    sprints: List[Optional[Ticket]] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def id_as_str(cls, v):
        """Ids numéricos no JSON são tratados como texto"""
        return str(v) if isinstance(v, int) else v

    @property
    def filled_sprints(self) -> int:
        """Quantidade de sprints já ocupadas por algum ticket"""
        return sum(1 for ticket in self.sprints if ticket is not None)

    def reset_timeline(self) -> None:
        """Limpa a linha do tempo do time"""
        self.sprints = []

    def occupy(self, ticket: Ticket, start: int, count: int) -> None:
        """
        Ocupa sprints consecutivas com um ticket

        Args:
            ticket: Ticket que ocupará as sprints
            start: Índice da primeira sprint
            count: Quantidade de sprints
        """
        if count <= 0:
            return
        end = start + count
        if len(self.sprints) < end:
            self.sprints.extend([None] * (end - len(self.sprints)))
        for index in range(start, end):
            self.sprints[index] = ticket


class MissingReference(BaseModel):
    """Referência de um ticket para um ticket ou time inexistente"""
    ticket_id: str
    kind: ReferenceKind
    reference: str

    def describe(self) -> str:
        if self.kind == ReferenceKind.BLOCKED_BY:
            return f"Ticket {self.ticket_id} bloqueado por ticket inexistente {self.reference}"
        return f"Ticket {self.ticket_id} referencia time inexistente {self.reference}"


class ScheduleState(BaseModel):
    """Estado da simulação de agendamento"""
    next_available_sprint: Dict[str, int] = {}  # Próxima sprint livre por time
    completion_sprint: Dict[str, int] = {}  # Sprint de término por ticket
    start_sprint: Dict[str, int] = {}  # Sprint de início por ticket
    assigned_team: Dict[str, str] = {}  # Time responsável por ticket
    iterations: int = 0
    stalls: int = 0

    def is_done(self, ticket_id: str) -> bool:
        """Verifica se o ticket já foi agendado"""
        return ticket_id in self.completion_sprint

    def next_sprint_for(self, team_id: str) -> int:
        """Retorna a próxima sprint livre de um time"""
        return self.next_available_sprint.get(team_id, 0)

    def record_assignment(self, ticket_id: str, team_id: str, start: int, sprints_needed: int) -> None:
        """Registra a atribuição de um ticket a um time"""
        self.next_available_sprint[team_id] = start + sprints_needed
        self.completion_sprint[ticket_id] = start + sprints_needed - 1
        self.start_sprint[ticket_id] = start
        self.assigned_team[ticket_id] = team_id

    def record_stall(self, team_id: str) -> None:
        """Adia em uma sprint a disponibilidade de um time"""
        self.next_available_sprint[team_id] = self.next_sprint_for(team_id) + 1
        self.stalls += 1


class ScheduleResult(BaseModel):
    """Resultado completo de um agendamento"""
    ordered_tickets: List[Ticket]
    teams: List[Team]
    state: ScheduleState
    warnings: List[MissingReference] = Field(default_factory=list)

    @property
    def sprint_count(self) -> int:
        """Número de sprints necessárias para concluir todos os tickets"""
        return max((len(team.sprints) for team in self.teams), default=0)

    def get_tickets_by_team(self, team_id: str) -> List[Ticket]:
        """Retorna os tickets atribuídos a um time na ordem de início"""
        tickets = [t for t in self.ordered_tickets if self.state.assigned_team.get(t.id) == team_id]
        return sorted(tickets, key=lambda t: self.state.start_sprint[t.id])
