#!/usr/bin/env python3
"""Follow an eDNA analysis job and print its pipeline progress.

Usage:
    python run_monitor.py JOB_ID                          # follow a live job
    python run_monitor.py --replay data/run.jsonl         # replay a recorded stream
    python run_monitor.py JOB_ID --record data/run.jsonl  # follow and record
    python run_monitor.py JOB_ID --output state.json      # also write final state

Exits with status 1 when the job ends in error.
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from settings import Settings
from models.pipeline_state import PipelineState
from pipeline.session import AnalysisSession
from pipeline.transport import WebSocketTransport
from utils.event_log import read_events, write_events

logger = logging.getLogger("run_monitor")

_STATUS_MARKS = {"pending": " ", "active": ">", "complete": "x", "error": "!"}


def replay_file(session: AnalysisSession, path: Path) -> PipelineState:
    """Feed a recorded stream through the session as if it arrived live."""
    generation = session.start_job(path.stem)
    for line in read_events(path):
        session.receive(line, generation)
    session.close()
    return session.state


def format_state(state: PipelineState) -> str:
    lines = []
    for step in state.steps:
        lines.append(f"  [{_STATUS_MARKS[step.status]}] {step.label}")
        if step.result_data is not None and hasattr(step.result_data, "total_clusters"):
            summary = step.result_data
            lines.append(
                f"        {summary.total_reads} reads, {summary.total_clusters} clusters, "
                f"{summary.noise_percentage}% noise"
            )
    snapshot = state.verification_snapshot
    if snapshot is not None:
        lines.append(
            f"  verification: cluster {snapshot.cluster_id} {snapshot.status} "
            f"({snapshot.match_percentage}% match)"
        )
    if state.error_message:
        lines.append(f"  error: {state.error_message}")
    return "\n".join(lines)


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("job_id", nargs="?", help="Analysis job id returned by the upload step")
    parser.add_argument("--replay", type=Path, help="Replay a recorded JSON-lines event stream")
    parser.add_argument("--record", type=Path, help="Write the accepted events to this JSON-lines file")
    parser.add_argument("--output", type=Path, help="Write the final pipeline state as JSON")
    args = parser.parse_args()

    if bool(args.job_id) == bool(args.replay):
        parser.error("give exactly one of JOB_ID or --replay")

    settings = Settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )

    session = AnalysisSession()
    if args.replay:
        logger.info("=== Replaying %s ===", args.replay)
        state = replay_file(session, args.replay)
    else:
        logger.info("=== Following job %s ===", args.job_id)
        state = asyncio.run(WebSocketTransport(settings).follow(session, args.job_id))

    print(format_state(state))

    if args.record:
        count = write_events(args.record, session.events)
        logger.info("Recorded %d events → %s", count, args.record)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(state.model_dump_json(indent=2), encoding="utf-8")
        logger.info("Final state → %s", args.output)

    logger.info("=== Done: %s ===", "failed" if state.failed else "complete" if state.terminal else "incomplete")
    return 1 if state.failed else 0


if __name__ == "__main__":
    sys.exit(main())
