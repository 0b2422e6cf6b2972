from __future__ import annotations

from enum import Enum
from typing import Hashable, Iterator, Sequence

import networkx as nx

from debtor.logging import get_logger
from debtor.models import Balance, Transfer
from debtor.services.balances import total_outstanding
from debtor.services.settlement import FlowCapacityError, SettlementInvariantError

DEFAULT_EDGE_CAPACITY = 1_000_000_000


class Vertex(Enum):
    SOURCE = "source"
    SINK = "sink"


FlowDict = dict[Hashable, dict[Hashable, int]]


def build_flow_graph(balances: Sequence[Balance], edge_capacity: int = DEFAULT_EDGE_CAPACITY) -> nx.DiGraph:
    """Complete graph over the participants, fed by the source and drained by the sink.

    Money leaves positive balances and arrives at negative ones. Each direct hop between
    two participants costs 1, so the cheapest flow prefers paying someone directly.
    """
    log = get_logger(__name__)
    participants = [balance for balance in balances if balance.amount != 0]
    if len(participants) != len(balances):
        log.error("flow.zero_balance", skipped=len(balances) - len(participants))

    graph = nx.DiGraph()
    graph.add_node(Vertex.SOURCE)
    graph.add_node(Vertex.SINK)
    for payer in participants:
        for payee in participants:
            if payer.participant != payee.participant:
                graph.add_edge(payer.participant, payee.participant, capacity=edge_capacity, weight=1)

    for balance in participants:
        if balance.amount > 0:
            graph.add_edge(Vertex.SOURCE, balance.participant, capacity=balance.amount, weight=0)
        else:
            graph.add_edge(balance.participant, Vertex.SINK, capacity=-balance.amount, weight=0)
    return graph


def iter_flow_paths(flow: FlowDict) -> Iterator[tuple[list[Hashable], int]]:
    """Split a source-to-sink flow into paths, each with the amount it carries."""
    residual = {node: {target: amount for target, amount in edges.items() if amount > 0} for node, edges in flow.items()}

    while residual.get(Vertex.SOURCE):
        path = [Vertex.SOURCE]
        seen = {Vertex.SOURCE}
        while path[-1] != Vertex.SINK:
            node = path[-1]
            nxt = next((target for target in residual[node] if target not in seen), None)
            if nxt is None:
                raise SettlementInvariantError(f"flow stalls at {node!r}")
            path.append(nxt)
            seen.add(nxt)

        amount = min(residual[a][b] for a, b in zip(path, path[1:]))
        for a, b in zip(path, path[1:]):
            residual[a][b] -= amount
            if residual[a][b] == 0:
                del residual[a][b]
        yield path, amount


def decode_flow(flow: FlowDict) -> list[Transfer]:
    log = get_logger(__name__)
    transfers: list[Transfer] = []
    for path, amount in iter_flow_paths(flow):
        hops = path[1:-1]
        if len(hops) != 2:
            log.warning("flow.path_too_long", transfers=len(hops) - 1, amount=amount)
        for payer, payee in zip(hops, hops[1:]):
            transfers.append(Transfer(from_user=payer, to_user=payee, amount=amount))
    return transfers


def plan_approximate(balances: Sequence[Balance], edge_capacity: int = DEFAULT_EDGE_CAPACITY) -> list[Transfer]:
    log = get_logger(__name__)
    graph = build_flow_graph(balances, edge_capacity=edge_capacity)
    if graph.number_of_edges() == 0:
        return []

    flow = nx.max_flow_min_cost(graph, Vertex.SOURCE, Vertex.SINK)
    cost = nx.cost_of_flow(graph, flow)
    moved = sum(flow[Vertex.SOURCE].values())
    log.info("flow.solved", cost=cost, moved=moved, nodes=graph.number_of_nodes())

    outstanding = total_outstanding(balances)
    if moved != outstanding:
        raise FlowCapacityError(
            f"edge capacity {edge_capacity} only lets {moved} of {outstanding} through; raise DEBTOR_FLOW_EDGE_CAPACITY"
        )
    return decode_flow(flow)
