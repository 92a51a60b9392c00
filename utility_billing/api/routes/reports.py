"""
Report Route
"""
from fastapi import APIRouter, Depends

from utility_billing.api.deps import get_store
from utility_billing.schemas.report import GenerateReportRequest
from utility_billing.services.report_service import generate_report
from utility_billing.services.store import BillingStore

router = APIRouter(tags=["reports"])


@router.post("/generate-reports")
def generate_report_endpoint(
    payload: GenerateReportRequest,
    store: BillingStore = Depends(get_store),
):
    """Assemble a consumption, billing or transactions report"""
    report, report_id = generate_report(store, payload)
    return {
        "success": True,
        "message": f"{payload.report_type} report generated successfully",
        "report": report,
        "report_id": report_id,
    }
