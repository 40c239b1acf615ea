"""Sheet-backed CRM data layer.

Spreadsheet-style storage (positional rows, header heuristics, CSV import)
persisted as one JSON envelope, typed entity mapping, and the CRM facade
consumed by UI code and the assistant tool bridge.
"""

__version__ = "0.1.0"
