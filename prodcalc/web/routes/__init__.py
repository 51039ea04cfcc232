"""ProdCalc web route modules.

Each module exports a `router` (APIRouter instance) included by
prodcalc.web.app.
"""

from prodcalc.web.routes import analytics, exports, health

__all__ = ["analytics", "exports", "health"]
