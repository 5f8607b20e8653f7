# update_operator/run_reconciler.py
"""Run the update reconciler."""

import logging
import sys

from pydantic import ValidationError

from update_operator.config import OperatorSettings
from update_operator.container import build_container

logger = logging.getLogger(__name__)


def main():
    """Main entry point."""
    try:
        settings = OperatorSettings()
    except ValidationError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    logger.info(f"Starting reconciler (max cluster active: {settings.max_cluster_active})")

    try:
        container = build_container(settings)
        container.reconciler.start()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
