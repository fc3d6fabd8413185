"""
Invoice Module - Routes
========================
  GET /api/orders/{order_id}/invoice   - Invoice data (JSON)
  GET /orders/{order_id}/invoice       - Printable invoice (HTML)

Both are scoped to the calling reseller (X-Reseller-Id).
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from config.database import get_db
from common.helpers import to_jsonable
from common.templating import templates
from modules.invoice.service import invoice_service
from modules.reseller.deps import get_current_reseller
from modules.reseller.models import Reseller


router = APIRouter(tags=["invoice"])


@router.get("/api/orders/{order_id}/invoice")
async def invoice_json(
    order_id: int,
    reseller: Reseller = Depends(get_current_reseller),
    db: Session = Depends(get_db),
):
    invoice = invoice_service.build_invoice(db, order_id, reseller_id=reseller.id)
    return {"success": True, "invoice": to_jsonable(invoice.to_dict())}


@router.get("/orders/{order_id}/invoice", response_class=HTMLResponse)
async def invoice_page(
    request: Request,
    order_id: int,
    reseller: Reseller = Depends(get_current_reseller),
    db: Session = Depends(get_db),
):
    invoice = invoice_service.build_invoice(db, order_id, reseller_id=reseller.id)
    return templates.TemplateResponse(request, "invoice.html", {"invoice": invoice})
