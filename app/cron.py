# app/cron.py
# One sweep and exit, for an external cron: */1 * * * * python -m app.cron
import logging

from app.core.logging import setup_logging
from app.db.session import SessionLocal, engine
from app.services.lifecycle import LifecycleScheduler

logger = logging.getLogger(__name__)


def main() -> int:
    setup_logging()
    lifecycle = LifecycleScheduler(SessionLocal)
    try:
        summary = lifecycle.run_transitions()
    finally:
        engine.dispose()
    logger.info("*** transitions: %s", summary.model_dump())
    return 1 if summary.failed_event_ids else 0


if __name__ == "__main__":
    raise SystemExit(main())
