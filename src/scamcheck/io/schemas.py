from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from scamcheck.core.dto import TransactionRecord
from scamcheck.core.models import (
    AnalysisResult,
    CounterpartyRisk,
    GraphResult,
    ProgressEvent,
    ScamIndicator,
)


def _dec_to_str(x: Decimal) -> str:
    # keep as string for JSON precision safety
    return format(x, "f")


def _iso(ts: int) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def transaction_to_dict(t: TransactionRecord) -> Dict[str, Any]:
    return {
        "hash": t.tx_hash,
        "from": t.from_address,
        "to": t.to_address,
        "valueEth": _dec_to_str(t.value_eth),
        "tokenSymbol": t.token_symbol,
        "tokenAmount": _dec_to_str(t.token_amount),
        "isContractInteraction": t.is_contract_interaction,
        "contractName": t.contract_name,
        "timestamp": _iso(t.timestamp),
        "status": t.status.value,
        "inputData": t.input_data,
    }


def indicator_to_dict(i: ScamIndicator) -> Dict[str, Any]:
    return {
        "type": i.kind.value,
        "description": i.description,
        "severity": i.severity.value,
        "confidence": i.confidence.value,
        "evidence": list(i.evidence),
    }


def result_to_dict(r: AnalysisResult) -> Dict[str, Any]:
    return {
        "analysisId": r.analysis_id,
        "input": r.input,
        "inputType": r.input_type.value,
        "verdict": r.verdict.value,
        "riskScore": r.risk_score,
        "summary": r.summary,
        "transactions": [transaction_to_dict(t) for t in r.transactions],
        "indicators": [indicator_to_dict(i) for i in r.indicators],
        "analyzedAt": _iso(r.analyzed_at),
    }


def counterparty_to_dict(c: Optional[CounterpartyRisk]) -> Optional[Dict[str, Any]]:
    if c is None:
        return None
    return {
        "analysisId": c.analysis_id,
        "address": c.address,
        "riskScore": c.risk_score,
        "verdict": c.verdict.value,
        "transactionCount": c.transaction_count,
        "combinedScore": c.combined_score,
    }


def progress_event_to_dict(e: ProgressEvent) -> Dict[str, Any]:
    return {
        "analysisId": e.analysis_id,
        "stage": e.stage.value,
        "message": e.message,
        "progressPercent": e.percent,
        "result": result_to_dict(e.result) if e.result is not None else None,
        "counterpartyRisk": counterparty_to_dict(e.counterparty),
        "combinedScore": e.combined_score,
    }


def graph_to_dict(g: GraphResult) -> Dict[str, Any]:
    return {
        "root": g.root,
        "depth": g.depth,
        "direction": g.direction.value,
        "nodeCount": g.node_count,
        "edgeCount": g.edge_count,
        "nodes": [
            {
                "address": n.address,
                "label": n.label,
                "isSeed": n.is_seed,
                "isContract": n.is_contract,
                "inboundCount": n.inbound_count,
                "outboundCount": n.outbound_count,
                "totalInEth": _dec_to_str(n.total_in_eth),
                "totalOutEth": _dec_to_str(n.total_out_eth),
            }
            for n in g.nodes
        ],
        "edges": [
            {
                "id": e.id,
                "from": e.from_address,
                "to": e.to_address,
                "totalValueEth": _dec_to_str(e.total_value_eth),
                "transactionCount": e.transaction_count,
                "firstSeen": _iso(e.first_seen),
                "lastSeen": _iso(e.last_seen),
                "dominantToken": e.dominant_token,
            }
            for e in g.edges
        ],
    }
