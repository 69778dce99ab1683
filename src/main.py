#!/usr/bin/env python3
"""
main.py
- Main entrypoint for the network-check container.
- Launches:
    - Health and metrics API on a daemon thread
    - Network check loop: probe every overlay network, print the DNS/GET matrices, repeat
"""

from threading import Thread

import sentry_sdk
import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from loguru import logger

from core.config import API_ENABLED, API_PORT, SENTRY_DSN, configure_logging
from lib.netcheck import orchestrator
from runner import network_check

# --- FastAPI Server ---
api = FastAPI()


@api.get("/healthz")
async def health():
    return {"status": "ok"}


@api.get("/metrics")
async def metrics():
    return PlainTextResponse(
        f"""# HELP probe_cycles_total Total completed diagnostic cycles
# TYPE probe_cycles_total counter
probe_cycles_total {orchestrator.probe_cycles_total}
# HELP probe_stuck_total Task groups that hit the poll deadline
# TYPE probe_stuck_total counter
probe_stuck_total {orchestrator.probe_stuck_total}
# HELP probe_cleanup_failures_total Task group deletions that failed
# TYPE probe_cleanup_failures_total counter
probe_cleanup_failures_total {orchestrator.probe_cleanup_failures_total}
# HELP probe_results_total Total parsed probe results
# TYPE probe_results_total counter
probe_results_total {orchestrator.probe_results_total}
# HELP probe_failed_checks_last_cycle Failed DNS/GET checks in the last cycle
# TYPE probe_failed_checks_last_cycle gauge
probe_failed_checks_last_cycle {orchestrator.probe_failed_checks_last_cycle}
# HELP probe_last_cycle_duration_seconds Duration of the last cycle in seconds
# TYPE probe_last_cycle_duration_seconds gauge
probe_last_cycle_duration_seconds {orchestrator.probe_last_cycle_duration_seconds}
""",
        media_type="text/plain"
    )


def start_api():
    uvicorn.run(api, host="0.0.0.0", port=API_PORT, log_level="warning")


def main():
    configure_logging()

    # OPTIONAL: Only if you have a Sentry DSN
    if SENTRY_DSN:
        sentry_sdk.init(dsn=SENTRY_DSN, traces_sample_rate=1.0)

    if API_ENABLED:
        Thread(target=start_api, daemon=True).start()
        logger.info(f"[network_check] Health and metrics API listening on :{API_PORT}")

    try:
        network_check.run()
    except KeyboardInterrupt:
        logger.info("🛑 KeyboardInterrupt received. Exiting.")


if __name__ == "__main__":
    main()
