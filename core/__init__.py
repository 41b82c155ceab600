"""Core (UI-agnostic) dashboard logic.

This package contains:
- spreadsheet access (capability interface, in-memory fake, Google Sheets)
- table auto-detection on the dashboard sheet and API formula wiring
- the relay action dispatcher and refresh trigger
- relay client, KPI/table rendering and chart helpers
"""
