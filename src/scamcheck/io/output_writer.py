from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional, Sequence

from scamcheck.core.enums import Severity
from scamcheck.core.models import AnalysisResult, CounterpartyRisk, GraphResult, ProgressEvent
from scamcheck.io.schemas import graph_to_dict, progress_event_to_dict, result_to_dict


_SEVERITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.WARNING: 2,
    Severity.INFO: 3,
}


def _out_path(out_dir: str, filename: str) -> Path:
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)
    return p / filename


def write_graph_json(graph: GraphResult, out_dir: str, filename: str = "graph.json") -> str:
    out_path = _out_path(out_dir, filename)
    with out_path.open("w", encoding="utf-8") as f:
        json.dump(graph_to_dict(graph), f, indent=2)

    return str(out_path)


def write_analysis_json(
    result: AnalysisResult,
    events: Sequence[ProgressEvent],
    out_dir: str,
    filename: str = "analysis.json",
) -> str:
    out_path = _out_path(out_dir, filename)
    doc = {
        "result": result_to_dict(result),
        # the full result already sits above; events carry only their own payload
        "events": [
            {**progress_event_to_dict(e), "result": None}
            for e in events
        ],
    }
    with out_path.open("w", encoding="utf-8") as f:
        json.dump(doc, f, indent=2)

    return str(out_path)


def write_analysis_summary_md(
    result: AnalysisResult,
    out_dir: str,
    counterparties: Optional[List[CounterpartyRisk]] = None,
    combined_score: Optional[int] = None,
    filename: str = "summary.md",
) -> str:
    """
    Minimal, investigator-friendly summary of one analysis run.
    """
    out_path = _out_path(out_dir, filename)

    lines = []
    lines.append("# Scam Analysis Summary\n")
    lines.append(f"- Input: **{result.input}** ({result.input_type.value})\n")
    lines.append(f"- Verdict: **{result.verdict.value}**\n")
    lines.append(f"- Risk score: **{result.risk_score}/100**\n")
    if combined_score is not None:
        lines.append(f"- Combined score (with counterparties): **{combined_score}/100**\n")
    lines.append(f"- Transactions examined: **{len(result.transactions)}**\n")
    lines.append("\n")
    lines.append(f"{result.summary}\n\n")

    lines.append("## Indicators\n\n")
    if not result.indicators:
        lines.append("_No indicators raised._\n\n")
    else:
        ranked = sorted(result.indicators, key=lambda i: _SEVERITY_RANK.get(i.severity, 9))
        for i in ranked[:25]:
            lines.append(
                f"- **{i.severity.value.upper()}** ({i.confidence.value}) "
                f"{i.kind.value}: {i.description}\n"
            )
        if len(ranked) > 25:
            lines.append(f"- _...and {len(ranked) - 25} more_\n")
        lines.append("\n")

    if counterparties:
        lines.append("## Riskiest Counterparties\n\n")
        top = sorted(counterparties, key=lambda c: c.risk_score, reverse=True)[:10]
        for c in top:
            lines.append(
                f"- **{c.risk_score}** {c.verdict.value} | {c.address} "
                f"| {c.transaction_count} tx(s)\n"
            )
        lines.append("\n")

    with out_path.open("w", encoding="utf-8") as f:
        f.writelines(lines)

    return str(out_path)
