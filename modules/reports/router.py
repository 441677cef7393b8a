from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from core.identity import get_store
from core.settings import get_settings
from core.store import Store
from modules.costing import service as costing_service
from modules.reports.excel import build_cost_report_excel

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/products/{product_id}/excel")
def download_cost_report(product_id: str, store: Store = Depends(get_store)):
    settings = get_settings()
    summary = costing_service.product_cost(store, product_id)
    stream = build_cost_report_excel(summary, currency=settings.currency, generated_at=datetime.now().isoformat())
    filename = f"cost_{product_id}.xlsx"
    return StreamingResponse(
        stream,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
