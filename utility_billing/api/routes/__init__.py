from utility_billing.api.routes.billing import router as billing_router
from utility_billing.api.routes.payments import router as payments_router
from utility_billing.api.routes.reports import router as reports_router
from utility_billing.api.routes.readings import router as readings_router

__all__ = [
    "billing_router",
    "payments_router",
    "reports_router",
    "readings_router",
]
