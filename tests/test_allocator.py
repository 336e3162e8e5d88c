import pytest
from ticket_scheduler.models.entities import Team, Ticket
from ticket_scheduler.services.allocator import pick_next_team


@pytest.fixture
def ticket():
    """Fixture para um ticket qualquer"""
    return Ticket(id="T1", title="Ticket", story_points=5, potential_team=["A", "B", "C"])


@pytest.fixture
def teams():
    """Fixture para três times sem trabalho"""
    return [
        Team(id="A", name="Alpha", velocity=5),
        Team(id="B", name="Beta", velocity=5),
        Team(id="C", name="Gamma", velocity=5),
    ]


def test_pick_single_team(teams):
    """Testa a escolha com um único candidato"""
    assert pick_next_team(teams[:1], {"A": 10}) is teams[0]


def test_pick_smallest_next_sprint(teams):
    """Testa a escolha do time com a menor próxima sprint"""
    chosen = pick_next_team(teams, {"A": 3, "B": 1, "C": 2})

    assert chosen is teams[1]


def test_pick_defaults_to_zero(teams):
    """Testa que times sem registro começam na sprint zero"""
    chosen = pick_next_team(teams, {"A": 1, "B": 1})

    assert chosen is teams[2]


def test_pick_tie_fewer_filled_sprints(teams, ticket):
    """Testa o desempate pelo time menos ocupado"""
    teams[0].occupy(ticket, 0, 2)
    teams[1].occupy(ticket, 1, 1)
    teams[2].occupy(ticket, 0, 2)

    chosen = pick_next_team(teams, {"A": 2, "B": 2, "C": 2})

    assert chosen is teams[1]


def test_pick_full_tie_keeps_order(teams):
    """Testa que o empate completo respeita a ordem da lista"""
    assert pick_next_team(teams, {}) is teams[0]
    assert pick_next_team(list(reversed(teams)), {}) is teams[2]


def test_pick_is_deterministic(teams):
    """Testa que entradas iguais produzem a mesma escolha"""
    sprints = {"A": 4, "B": 2, "C": 2}

    choices = {pick_next_team(teams, sprints).id for _ in range(5)}

    assert choices == {"B"}


def test_pick_empty_candidates():
    """Testa a falha sem candidatos"""
    with pytest.raises(ValueError, match="Nenhum time candidato"):
        pick_next_team([], {})
