import logging
import sys

import sentry_sdk

from config import ENVIRONMENT, IS_PRODUCTION, SENTRY_DSN, SENTRY_DEV_ENABLED

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging() -> logging.Logger:
    """Configure the root logger once and return the app logger."""
    root = logging.getLogger()
    if not any(getattr(h, "_health_heatmap", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._health_heatmap = True
        root.addHandler(handler)
    root.setLevel(logging.INFO)

    # Third-party clients are chatty at INFO
    for name in ("httpx", "openai", "botocore", "boto3", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger("health_heatmap")


def _before_send(event, hint):
    if ENVIRONMENT == "development" and not SENTRY_DEV_ENABLED:
        return None
    return event


def init_sentry() -> bool:
    logger = logging.getLogger("health_heatmap")
    if not SENTRY_DSN:
        logger.warning("Sentry DSN not configured. Error tracking disabled.")
        return False

    sentry_sdk.init(
        dsn=SENTRY_DSN,
        environment=ENVIRONMENT,
        traces_sample_rate=0.1 if IS_PRODUCTION else 1.0,
        before_send=_before_send,
    )
    return True
