# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Environment variables (AGENDA_*) are the primary way to configure the client.
Only the values below are read from this file, and they win over the environment.
"""

# Example: point at a backend on another host
# API_BASE_URL = "http://192.168.1.20:8081/api"

# Example: act as a different user
# USER_ID = 2
