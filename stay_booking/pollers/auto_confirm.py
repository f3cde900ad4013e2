import structlog

from stay_booking.db.engine import engine
from stay_booking.logging_config import setup_logging
from stay_booking.services.auto_confirm import run_auto_confirm_sweep

# Setup logging
setup_logging()
logger = structlog.get_logger(__name__)


def main() -> None:
    # Run a single auto-confirmation pass (for cron or one-off runs)
    result = run_auto_confirm_sweep(engine)
    if result.failed:
        logger.warning("auto_confirm_partial_failure", failed=result.failed)


if __name__ == "__main__":
    main()
