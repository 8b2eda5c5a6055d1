import os
from pathlib import Path


class Settings:
    SLACK_URL_SEED_CHANNEL = os.environ.get("SLACK_URL_SEED_CHANNEL", "")
    SEED_NODES_FILE = os.environ.get("SEED_NODES_FILE", "")
    METRICS_FILE = os.environ.get("METRICS_FILE", "")
    REPORT_DIR = Path(os.environ.get("REPORT_DIR", "./reports"))
    STATUS_PAGE_URL = os.environ.get("STATUS_PAGE_URL", "http://seedmonitor.0-2-1.net:8080/")
    REPORT_TIMEZONE = os.environ.get("REPORT_TIMEZONE", "CET")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


settings = Settings()
