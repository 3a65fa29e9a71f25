import copy
from decimal import Decimal
import httpx
from loguru import logger
from .ar_types import SupplierRecord
from ..core.config import settings

# Overdue-balance reminder: post an Adaptive Card to a Teams Incoming Webhook.

REMINDER_CARD_TEMPLATE = {
    "type": "message",
    "attachments": [{
        "contentType": "application/vnd.microsoft.card.adaptive",
        "content": {
            "$schema": "http://adaptivecards.io/schemas/adaptive-card.json",
            "type": "AdaptiveCard",
            "version": "1.4",
            "body": [
                {"type": "TextBlock", "weight": "Bolder", "size": "Medium", "text": "Outstanding Balance Reminder"},
                {"type": "FactSet", "facts": []}
            ],
            "actions": []
        }
    }]
}


def build_reminder_card(supplier: SupplierRecord, balance: Decimal, aging: dict[str, Decimal]) -> dict:
    card = copy.deepcopy(REMINDER_CARD_TEMPLATE)
    content = card["attachments"][0]["content"]

    facts = content["body"][1]["facts"]
    facts.append({"title": "Supplier", "value": supplier.name})
    if supplier.contact_person:
        facts.append({"title": "Contact", "value": supplier.contact_person})
    facts.append({"title": "Outstanding", "value": f"${balance:,.2f}"})
    for label, amount in aging.items():
        if amount:
            facts.append({"title": label, "value": f"${amount:,.2f}"})

    content["actions"] = [
        {
            "type": "Action.OpenUrl",
            "title": "View Statement",
            "url": f"{settings.api_base_url}/suppliers/{supplier.id}/statement.pdf"
        }
    ]
    return card


async def post_overdue_reminder(supplier: SupplierRecord, balance: Decimal, aging: dict[str, Decimal]) -> dict:
    if not settings.teams_webhook_url:
        return {"status": "skipped", "reason": "TEAMS_WEBHOOK_URL not set"}

    card = build_reminder_card(supplier, balance, aging)

    async with httpx.AsyncClient(timeout=10) as client:
        r = await client.post(settings.teams_webhook_url, json=card)

    logger.info("Posted overdue reminder", supplier_id=supplier.id, http_status=r.status_code)
    return {"status": "sent", "http_status": r.status_code}
