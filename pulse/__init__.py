"""Core (UI-agnostic) sales pulse logic.

This package contains:
- workbook reading (XLSX -> cell text grid)
- upload classification and reconciliation into the canonical record set
- holiday calendar and weighted daily-target allocation
- shortfall / trend compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
