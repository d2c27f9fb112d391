import logging

NOISY_LOGGERS = ("urllib3", "requests", "httpx", "google", "grpc")


def configure_logging(level_name: str = "INFO"):
    level = getattr(logging, str(level_name or "INFO").upper(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    logging.getLogger("journal").setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
