from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Deque, Dict, Optional, Set, Tuple

from scamcheck.core.cancellation import CancellationToken, check
from scamcheck.core.dto import TransactionRecord
from scamcheck.core.enums import GraphDirection
from scamcheck.core.models import GraphEdge, GraphNode, GraphResult, WalletGraphQuery
from scamcheck.ports.analysis_port import WalletGraphPort
from scamcheck.ports.chain_data_port import ChainDataPort


logger = logging.getLogger(__name__)

_PLACES = Decimal("0.000001")


@dataclass(frozen=True)
class _HopItem:
    address: str
    depth: int


@dataclass
class _NodeAcc:
    address: str
    is_seed: bool = False
    is_contract: bool = False
    inbound: int = 0
    outbound: int = 0
    total_in: Decimal = Decimal("0")
    total_out: Decimal = Decimal("0")


@dataclass
class _EdgeAcc:
    from_address: str
    to_address: str
    first_seen: int
    last_seen: int
    count: int = 0
    total: Decimal = Decimal("0")
    # insertion order doubles as first-seen order for tie-breaks
    tokens: Dict[str, int] = field(default_factory=dict)


def short_label(address: str) -> str:
    return f"{address[:6]}...{address[-4:]}" if len(address) > 10 else address


def dominant_token(tokens: Dict[str, int]) -> str:
    best, best_count = "ETH", 0
    for symbol, count in tokens.items():
        if count > best_count:
            best, best_count = symbol, count
    return best


class WalletGraphService(WalletGraphPort):
    """
    Builds a wallet-to-wallet flow graph around a seed address.

    - Traversal: breadth-first, bounded by depth, node and edge caps
    - Data: native transfers as returned by the chain port, aggregated per (from, to)
    - Ignores: anything outside the lookback window or below the value floor
    """

    def __init__(self, chain: ChainDataPort) -> None:
        self.chain = chain

    def build_graph(self, query: WalletGraphQuery, cancel: Optional[CancellationToken] = None) -> GraphResult:
        q = query.bounded()
        root = q.root
        min_ts = q.window_start()

        nodes: Dict[str, _NodeAcc] = {root: _NodeAcc(root, is_seed=True)}
        edges: Dict[Tuple[str, str], _EdgeAcc] = {}
        best_depth: Dict[str, int] = {root: 0}
        seen_txs: Set[Tuple] = set()
        frontier: Deque[_HopItem] = deque([_HopItem(root, 0)])

        while frontier:
            check(cancel)
            item = frontier.popleft()
            if item.depth >= q.depth:
                continue

            for tx in self.chain.stream_transactions(item.address, cancel):
                check(cancel)
                admitted = self._admit(tx, item.address, q, min_ts, nodes, edges, seen_txs)
                if admitted is None:
                    continue

                for candidate in admitted:
                    self._enqueue(candidate, item, q.depth, best_depth, frontier)

        logger.debug("Graph for %s: %d nodes, %d edges", root, len(nodes), len(edges))
        return self._freeze(q, nodes, edges)

    # -------------------------
    # Helpers
    # -------------------------

    @staticmethod
    def _admit(
        tx: TransactionRecord,
        current: str,
        q: WalletGraphQuery,
        min_ts: int,
        nodes: Dict[str, _NodeAcc],
        edges: Dict[Tuple[str, str], _EdgeAcc],
        seen_txs: Set[Tuple],
    ) -> Optional[Tuple[str, str]]:
        if tx.timestamp < min_ts or tx.value_eth < q.min_value_eth:
            return None

        src = (tx.from_address or "").strip().lower()
        dst = (tx.to_address or "").strip().lower()
        if not src or not dst:
            return None

        outgoing = src == current
        incoming = dst == current
        if q.direction == GraphDirection.OUTGOING and not outgoing:
            return None
        if q.direction == GraphDirection.INCOMING and not incoming:
            return None
        if q.direction == GraphDirection.BOTH and not (outgoing or incoming):
            return None

        # caps stop new keys only; known nodes/edges keep accumulating
        new_nodes = {a for a in (src, dst) if a not in nodes}
        if len(nodes) + len(new_nodes) > q.max_nodes:
            return None
        key = (src, dst)
        if key not in edges and len(edges) >= q.max_edges:
            return None

        # the same transaction shows up again when its other endpoint is expanded
        tx_key = (tx.tx_hash.lower(),) if tx.tx_hash else (src, dst, tx.timestamp, tx.value_eth)
        if tx_key in seen_txs:
            return None
        seen_txs.add(tx_key)

        for a in new_nodes:
            nodes[a] = _NodeAcc(a)
        n_from, n_to = nodes[src], nodes[dst]
        n_from.outbound += 1
        n_from.total_out += tx.value_eth
        n_to.inbound += 1
        n_to.total_in += tx.value_eth
        if tx.is_contract_interaction:
            n_to.is_contract = True

        edge = edges.get(key)
        if edge is None:
            edge = edges[key] = _EdgeAcc(src, dst, tx.timestamp, tx.timestamp)
        edge.count += 1
        edge.total += tx.value_eth
        edge.first_seen = min(edge.first_seen, tx.timestamp)
        edge.last_seen = max(edge.last_seen, tx.timestamp)
        if tx.token_symbol and tx.token_symbol.strip():
            sym = tx.token_symbol.strip()
            edge.tokens[sym] = edge.tokens.get(sym, 0) + 1

        return src, dst

    @staticmethod
    def _enqueue(
        candidate: str,
        item: _HopItem,
        max_depth: int,
        best_depth: Dict[str, int],
        frontier: Deque[_HopItem],
    ) -> None:
        if candidate == item.address:
            return
        nxt = item.depth + 1
        if nxt > max_depth:
            return
        if best_depth.get(candidate, nxt + 1) <= nxt:
            return
        best_depth[candidate] = nxt
        frontier.append(_HopItem(candidate, nxt))

    @staticmethod
    def _freeze(
        q: WalletGraphQuery,
        nodes: Dict[str, _NodeAcc],
        edges: Dict[Tuple[str, str], _EdgeAcc],
    ) -> GraphResult:
        ordered_nodes = sorted(
            nodes.values(),
            key=lambda n: (not n.is_seed, -(n.inbound + n.outbound)),
        )
        ordered_edges = sorted(edges.values(), key=lambda e: e.total, reverse=True)

        return GraphResult(
            root=q.root,
            depth=q.depth,
            direction=q.direction,
            nodes=tuple(
                GraphNode(
                    address=n.address,
                    label=short_label(n.address),
                    is_seed=n.is_seed,
                    is_contract=n.is_contract,
                    inbound_count=n.inbound,
                    outbound_count=n.outbound,
                    total_in_eth=n.total_in.quantize(_PLACES),
                    total_out_eth=n.total_out.quantize(_PLACES),
                )
                for n in ordered_nodes
            ),
            edges=tuple(
                GraphEdge(
                    id=f"{e.from_address}->{e.to_address}",
                    from_address=e.from_address,
                    to_address=e.to_address,
                    total_value_eth=e.total.quantize(_PLACES),
                    transaction_count=e.count,
                    first_seen=e.first_seen,
                    last_seen=e.last_seen,
                    dominant_token=dominant_token(e.tokens),
                )
                for e in ordered_edges
            ),
        )
