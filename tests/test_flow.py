import random

import pytest
from structlog.testing import capture_logs

from debtor.models import Balance, Transfer
from debtor.services.flow import Vertex, build_flow_graph, decode_flow, iter_flow_paths, plan_approximate
from debtor.services.settlement import FlowCapacityError, SettlementError
from debtor.services.verify import apply_transfers


def test_graph_shape():
    balances = [Balance("alice", 30), Balance("bob", -10), Balance("carol", -20)]
    graph = build_flow_graph(balances, edge_capacity=1000)

    assert graph.number_of_nodes() == 5
    assert graph["alice"]["bob"] == {"capacity": 1000, "weight": 1}
    assert graph["bob"]["alice"] == {"capacity": 1000, "weight": 1}
    assert graph[Vertex.SOURCE]["alice"] == {"capacity": 30, "weight": 0}
    assert graph["carol"][Vertex.SINK] == {"capacity": 20, "weight": 0}
    assert not graph.has_edge(Vertex.SOURCE, "bob")


def test_plan_approximate_settles():
    balances = [Balance("alice", 30), Balance("bob", -10), Balance("carol", -20)]

    transfers = plan_approximate(balances)

    assert sorted(transfers, key=lambda t: t.amount) == [
        Transfer(from_user="alice", to_user="bob", amount=10),
        Transfer(from_user="alice", to_user="carol", amount=20),
    ]


def test_plan_approximate_empty():
    assert plan_approximate([]) == []


@pytest.mark.parametrize("seed", range(8))
def test_plan_approximate_properties(seed):
    rng = random.Random(seed)
    amounts = [rng.randint(-50, 50) or 3 for _ in range(9)]
    amounts.append(-sum(amounts))
    balances = [Balance(f"p{idx}", amount) for idx, amount in enumerate(amounts) if amount != 0]

    transfers = plan_approximate(balances)

    assert all(t.amount > 0 for t in transfers)
    assert all(t.from_user not in (Vertex.SOURCE, Vertex.SINK) for t in transfers)
    assert all(t.to_user not in (Vertex.SOURCE, Vertex.SINK) for t in transfers)
    assert all(value == 0 for value in apply_transfers(balances, transfers).values())
    assert sum(t.amount for t in transfers) == sum(b.amount for b in balances if b.amount > 0)
    for balance in balances:
        sent = sum(t.amount for t in transfers if t.from_user == balance.participant)
        received = sum(t.amount for t in transfers if t.to_user == balance.participant)
        assert sent <= max(balance.amount, 0)
        assert received <= max(-balance.amount, 0)


def test_iter_flow_paths_splits_by_bottleneck():
    flow = {
        Vertex.SOURCE: {"a": 7},
        "a": {"b": 3, "c": 4},
        "b": {Vertex.SINK: 3},
        "c": {Vertex.SINK: 4},
        Vertex.SINK: {},
    }
    paths = list(iter_flow_paths(flow))
    assert paths == [
        ([Vertex.SOURCE, "a", "b", Vertex.SINK], 3),
        ([Vertex.SOURCE, "a", "c", Vertex.SINK], 4),
    ]


def test_long_path_is_split_and_warned():
    flow = {
        Vertex.SOURCE: {"a": 5},
        "a": {"b": 5},
        "b": {"c": 5},
        "c": {Vertex.SINK: 5},
        Vertex.SINK: {},
    }
    with capture_logs() as logs:
        transfers = decode_flow(flow)

    assert transfers == [
        Transfer(from_user="a", to_user="b", amount=5),
        Transfer(from_user="b", to_user="c", amount=5),
    ]
    assert [entry["event"] for entry in logs] == ["flow.path_too_long"]
    assert logs[0]["log_level"] == "warning"


def test_small_edge_capacity_routes_through_intermediaries():
    balances = [Balance("a", 10), Balance("b", -10), Balance("d", 1), Balance("e", -1)]

    with capture_logs() as logs:
        transfers = plan_approximate(balances, edge_capacity=6)

    assert all(t.amount <= 6 for t in transfers)
    assert all(value == 0 for value in apply_transfers(balances, transfers).values())
    assert any(entry["event"] == "flow.path_too_long" for entry in logs)


def test_edge_capacity_too_small_is_rejected():
    balances = [Balance("a", 100), Balance("b", -100)]
    with pytest.raises(FlowCapacityError) as excinfo:
        plan_approximate(balances, edge_capacity=6)
    assert isinstance(excinfo.value, SettlementError)
    assert "6 of 100" in str(excinfo.value)
