import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./reports.db")
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Dashboard report cache
    REPORT_CACHE_TTL_SECONDS = data.get("REPORT_CACHE_TTL_SECONDS", 300)
    REPORT_CACHE_MAXSIZE = data.get("REPORT_CACHE_MAXSIZE", 4096)

    # Report consistency audit
    CONSISTENCY_AUDIT_ENABLED = bool(data.get("CONSISTENCY_AUDIT_ENABLED", True))
    CONSISTENCY_AUDIT_INTERVAL_SECONDS = data.get("CONSISTENCY_AUDIT_INTERVAL_SECONDS", 3600)
