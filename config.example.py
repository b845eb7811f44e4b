# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Local, non-secret overrides can also go into config_local.py (gitignored).

This file exists to make the repo self-documenting.
"""

ENV_VARS = {
    # App / logging
    "AGENDA_APP_NAME": "App display name (default: agenda).",
    "AGENDA_LOG_LEVEL": "Console logging level (default: INFO).",
    # Backend
    "AGENDA_API_BASE_URL": "Task/planning service base URL (default: http://localhost:8081/api).",
    "AGENDA_USER_ID": "User id sent with created tasks and plan requests (default: 1).",
    "AGENDA_REQUEST_TIMEOUT_SECONDS": "Per-request timeout in seconds (default: 10).",
    "AGENDA_CONNECT_TIMEOUT_SECONDS": "Connect timeout in seconds (default: 5).",
    # Paths (gitignored)
    "AGENDA_DATA_DIR": "Local data directory for logs and exports (default: .local/agenda).",
}
