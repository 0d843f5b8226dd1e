from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from scamcheck.config import settings
from scamcheck.core.cancellation import CancellationToken
from scamcheck.core.enums import AnalysisStage, GraphDirection
from scamcheck.core.errors import DataSourceError, InvalidInputError, OperationCancelled
from scamcheck.core.models import (
    AnalysisRequest,
    AnalysisResult,
    CounterpartyRisk,
    ProgressEvent,
    WalletGraphQuery,
    is_wallet_address,
)
from scamcheck.io.output_writer import (
    write_analysis_json,
    write_analysis_summary_md,
    write_graph_json,
)
from scamcheck.io.schemas import graph_to_dict, progress_event_to_dict
from scamcheck.ports.chain_data_port import ChainDataPort
from scamcheck.services.scam_analyzer import ScamAnalyzer
from scamcheck.services.wallet_graph_service import WalletGraphService

from scamcheck.adapters.chain.jsonrpc_chain_adapter import JsonRpcChainAdapter
from scamcheck.adapters.chain.synthetic_chain_adapter import SyntheticChainAdapter


logger = logging.getLogger("scamcheck")


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="scamcheck", description="Ethereum scam analyzer and wallet graph builder")
    p.add_argument("--adapter", choices=["synthetic", "rpc"], default=None,
                   help="Chain data source (default: rpc if SCAMCHECK_RPC_URL is set, else synthetic)")
    p.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level")
    sub = p.add_subparsers(dest="command", required=True)

    a = sub.add_parser("analyze", help="Stream a staged scam analysis as JSON lines")
    a.add_argument("input", help="Wallet address (0x + 40 hex) or transaction hash (0x + 64 hex)")
    a.add_argument("--no-deep", action="store_true", help="Skip counterparty deep analysis")
    a.add_argument("--out", default=None, help="Also write analysis.json and summary.md to this folder")

    g = sub.add_parser("graph", help="Build a wallet flow graph")
    g.add_argument("wallet", help="Root wallet address")
    g.add_argument("--depth", type=int, default=settings.GRAPH_DEFAULT_DEPTH, help="Traversal depth (1-10)")
    g.add_argument("--direction", default="both", help="outgoing | incoming | both")
    g.add_argument("--min-value-eth", type=str, default="0", help="Skip transfers below this ETH value")
    g.add_argument("--max-nodes", type=int, default=settings.GRAPH_DEFAULT_MAX_NODES, help="Node cap (10-5000)")
    g.add_argument("--max-edges", type=int, default=settings.GRAPH_DEFAULT_MAX_EDGES, help="Edge cap (10-10000)")
    g.add_argument("--lookback-days", type=int, default=settings.GRAPH_DEFAULT_LOOKBACK_DAYS,
                   help="Lookback window in days (1-3650)")
    g.add_argument("--out", default=None, help="Write graph.json to this folder instead of stdout")
    return p


def make_chain(adapter: Optional[str]) -> ChainDataPort:
    choice = adapter or ("rpc" if settings.RPC_URL else "synthetic")
    if choice == "rpc":
        return JsonRpcChainAdapter()
    return SyntheticChainAdapter()


def _install_sigint(cancel: CancellationToken) -> None:
    def _handler(signum, frame):
        cancel.cancel()

    signal.signal(signal.SIGINT, _handler)


def run_analyze(args, chain: ChainDataPort, cancel: CancellationToken) -> int:
    analyzer = ScamAnalyzer(chain, deep_analysis=not args.no_deep)
    events: List[ProgressEvent] = []
    result: Optional[AnalysisResult] = None
    counterparties: List[CounterpartyRisk] = []
    combined: Optional[int] = None

    for evt in analyzer.analyze(AnalysisRequest(args.input), cancel):
        sys.stdout.write(json.dumps(progress_event_to_dict(evt)) + "\n")
        sys.stdout.flush()
        events.append(evt)
        if evt.result is not None:
            result = evt.result
        if evt.counterparty is not None:
            counterparties.append(evt.counterparty)
        if evt.combined_score is not None:
            combined = evt.combined_score

    if events and events[-1].stage == AnalysisStage.FAILED:
        logger.error(events[-1].message)
        return 1

    if args.out and result is not None:
        json_path = write_analysis_json(result, events, args.out)
        md_path = write_analysis_summary_md(result, args.out, counterparties, combined)
        logger.info("Wrote: %s", json_path)
        logger.info("Wrote: %s", md_path)
    return 0


def run_graph(args, chain: ChainDataPort, cancel: CancellationToken) -> int:
    wallet = args.wallet.strip()
    if not is_wallet_address(wallet):
        raise InvalidInputError("Invalid wallet address format.")
    try:
        min_value = Decimal(args.min_value_eth)
    except InvalidOperation:
        raise InvalidInputError(f"Invalid --min-value-eth: {args.min_value_eth}")

    query = WalletGraphQuery(
        root=wallet,
        depth=args.depth,
        direction=GraphDirection.parse(args.direction),
        min_value_eth=min_value,
        max_nodes=args.max_nodes,
        max_edges=args.max_edges,
        lookback_days=args.lookback_days,
    )
    graph = WalletGraphService(chain).build_graph(query, cancel)
    logger.info("Graph: %d nodes, %d edges", graph.node_count, graph.edge_count)

    if args.out:
        logger.info("Wrote: %s", write_graph_json(graph, args.out))
    else:
        json.dump(graph_to_dict(graph), sys.stdout, indent=2)
        sys.stdout.write("\n")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    cancel = CancellationToken()
    _install_sigint(cancel)

    try:
        chain = make_chain(args.adapter)
        if args.command == "analyze":
            return run_analyze(args, chain, cancel)
        return run_graph(args, chain, cancel)
    except OperationCancelled:
        logger.warning("Cancelled.")
        return 130
    except InvalidInputError as exc:
        print(exc, file=sys.stderr)
        return 2
    except DataSourceError as exc:
        logger.error("%s: %s", exc.__class__.__name__, exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
