"""
Domain engine configurations.

Modules
-------
trading    : trade, trade-detail, and settlement engines + wrappers.
compliance : calendar-item, covenant, and obligation engines + wrappers.
esg        : ESG KPI, ESG report, and at-risk facility engines + wrappers.
registry   : ItemKind -> (model, engine factory) lookup used by the CLI.
"""
