"""
Plain-text bodies for transactional email.

Each renderer takes the `context` dict stored on the EmailLog row and
returns the message body. Subjects are chosen by the caller.
"""

from __future__ import annotations

from typing import Callable, Dict, List

SIGN_OFF = "Showmen Docs"

RIDE_TYPE_LABELS = {
    "ride": "Fairground Ride",
    "stall": "Food/Game Stall",
    "generator": "Generator/Equipment",
}


def ride_type_label(value: str) -> str:
    return RIDE_TYPE_LABELS.get((value or "").strip().lower(), "Generator/Equipment")


def _lines(*parts: str) -> str:
    return "\n".join(part for part in parts if part is not None).strip() + "\n"


def _field(label: str, value) -> str | None:
    if value in (None, ""):
        return None
    return f"{label}: {value}"


def _welcome(ctx: dict) -> str:
    return _lines(
        f"Thank you for signing up, {ctx.get('email', '')}! We're excited to have you on board.",
        "",
        "Showmen Docs keeps your ride documents, safety certificates and technical",
        "bulletins organised in one place.",
        "",
        "Next steps:",
        "  1. Complete your company profile",
        "  2. Add your rides",
        "  3. Upload certificates and insurance documents",
        "",
        SIGN_OFF,
    )


def _document_line(doc: dict) -> List[str]:
    out = [f"  - {doc.get('document_name')}"]
    out.append(f"    Type: {doc.get('document_type')}")
    if doc.get("ride_name"):
        out.append(f"    Ride: {doc['ride_name']}")
    if doc.get("expires_at"):
        out.append(f"    Expires: {doc['expires_at']}")
    return out


def _document_expiry_reminder(ctx: dict) -> str:
    company = ctx.get("company_name")
    lines = [f"Hello{' ' + company if company else ''},", "", "This is a reminder that you have documents expiring soon:"]
    for window in ctx.get("windows") or []:
        lines += ["", f"Expiring in {window['days']} days:"]
        for doc in window.get("documents") or []:
            lines += _document_line(doc)
    lines += [
        "",
        "Please take action to renew these documents before they expire.",
        "",
        "This is an automated reminder from your document management system.",
    ]
    return _lines(*lines)


def _inspection_reminder(ctx: dict) -> str:
    days = ctx.get("days_until_due", 0)
    return _lines(
        f"Hello {ctx.get('company_name') or 'Your Company'},",
        "",
        "This is a reminder that the following inspection is due soon:",
        "",
        f"Ride: {ctx.get('ride_name') or 'Unknown Ride'}",
        f"Inspection Type: {ctx.get('inspection_type')}",
        f"Inspection Name: {ctx.get('inspection_name')}",
        f"Due Date: {ctx.get('due_date')}",
        f"Days Until Due: {days} day{'' if days == 1 else 's'}",
        _field("Notes", ctx.get("notes")),
        "",
        "Please ensure this inspection is completed on time to maintain compliance.",
        "",
        SIGN_OFF,
    )


def _send_documents(ctx: dict) -> str:
    lines = [
        "Ride Documentation Package",
        f"From: {ctx.get('sender_name') or 'Ride Operator'}",
        f"To: {ctx.get('recipient_name') or 'Council/Authority'}",
        "",
        "Ride Information",
        f"Ride Name: {ctx.get('ride_name')}",
        _field("Manufacturer", ctx.get("manufacturer")),
        _field("Serial Number", ctx.get("serial_number")),
        _field("Year Manufactured", ctx.get("year_manufactured")),
    ]
    if ctx.get("message"):
        lines += ["", "Message", ctx["message"]]
    lines += ["", "Attached Documents"]
    for doc in ctx.get("documents") or []:
        lines += _document_line(doc)
    lines += [
        f"Total: {len(ctx.get('attachments') or [])} documents attached",
        "",
        "If you have any questions about these documents, please reply to this email.",
        _field("Company", ctx.get("company_name")),
        _field("Controller", ctx.get("controller_name")),
    ]
    return _lines(*lines)


def _check_report(ctx: dict) -> str:
    frequency = (ctx.get("check_frequency") or "daily").capitalize()
    checked, total = ctx.get("checked", 0), ctx.get("total", 0)
    lines = [
        f"Hello {ctx['recipient_name']}," if ctx.get("recipient_name") else None,
        f"{frequency} Safety Check Report",
        "",
        "Inspection Summary",
        f"Ride Name: {ctx.get('ride_name')}",
        _field("Category", ctx.get("category")),
        _field("Manufacturer", ctx.get("manufacturer")),
        _field("Serial Number", ctx.get("serial_number")),
        _field("Checklist", ctx.get("template_name")),
        f"Inspection Date: {ctx.get('check_date')}",
        f"Inspector: {ctx.get('inspector_name')}",
        _field("Compliance Officer", ctx.get("compliance_officer")),
        _field("Weather", ctx.get("weather_conditions")),
        f"Status: {(ctx.get('status') or 'completed').upper()}",
        f"Completion Rate: {ctx.get('pass_rate', 0)}% ({checked}/{total})",
        "",
        "Inspection Items",
    ]
    for item in ctx.get("items") or []:
        mark = "[x]" if item.get("is_checked") else "[ ]"
        required = " *" if item.get("is_required") else ""
        lines.append(f"  {mark} {item.get('text')}{required}")
        if item.get("category"):
            lines.append(f"      Category: {item['category']}")
        if item.get("notes"):
            lines.append(f"      Note: {item['notes']}")
    if ctx.get("notes"):
        lines += ["", "Inspector Notes", ctx["notes"]]
    lines += ["", _field("Company", ctx.get("company_name")), SIGN_OFF]
    return _lines(*lines)


def _support_notification(ctx: dict) -> str:
    return _lines(
        "New Support Message Received",
        "",
        f"Subject: {ctx.get('subject')}",
        f"Priority: {ctx.get('priority')}",
        _field("From", ctx.get("user_email")),
        "",
        "Message:",
        ctx.get("message") or "",
        "",
        _field("Submitted", ctx.get("created_at")),
    )


def _ride_type_request(ctx: dict) -> str:
    label = ride_type_label(ctx.get("type"))
    return _lines(
        f"New {label} Type Request",
        "",
        f"Name: {ctx.get('name')}",
        f"Type: {label}",
        f"Description: {ctx.get('description')}",
        _field("Manufacturer", ctx.get("manufacturer")),
        _field("Additional Info", ctx.get("additional_info")),
        "",
        f"Requested by: {ctx.get('user_name')} <{ctx.get('user_email')}>",
        "",
        f'Review this request and if appropriate, add "{ctx.get("name")}" as a ride category.',
    )


def _ride_type_request_confirmation(ctx: dict) -> str:
    label = ride_type_label(ctx.get("type"))
    return _lines(
        f"Hi {ctx.get('user_name')},",
        "",
        f'Thank you for submitting a request to add "{ctx.get("name")}" as a new {label.lower()} type.',
        "",
        "What happens next:",
        "  - Our team will review your request within 2-3 business days",
        "  - If approved, we'll add it to our database",
        "  - You'll be able to select it when adding new rides or stalls",
        "",
        SIGN_OFF,
    )


def _document_type_request(ctx: dict) -> str:
    return _lines(
        "New Document Type Request",
        "",
        f"Document Type: {ctx.get('document_type_name')}",
        _field("Description", ctx.get("description")),
        _field("Justification", ctx.get("justification")),
        _field("Requested by", ctx.get("user_email")),
        "",
        "Next steps:",
        "  1. Review the requested document type",
        "  2. If approved, add it to the document types list",
        "  3. Reach out to the user if clarification is needed",
    )


def _feature_request(ctx: dict) -> str:
    return _lines(
        "New Feature Request",
        "",
        f"Title: {ctx.get('feature_title')}",
        "",
        ctx.get("feature_description") or "",
        "",
        _field("Use case", ctx.get("use_case")),
        _field("Requested by", ctx.get("user_email")),
    )


RENDERERS: Dict[str, Callable[[dict], str]] = {
    "welcome": _welcome,
    "document_expiry_reminder": _document_expiry_reminder,
    "inspection_reminder": _inspection_reminder,
    "send_documents": _send_documents,
    "check_report": _check_report,
    "support_notification": _support_notification,
    "ride_type_request": _ride_type_request,
    "ride_type_request_confirmation": _ride_type_request_confirmation,
    "document_type_request": _document_type_request,
    "feature_request": _feature_request,
}


def render(template_key: str, context: dict) -> str:
    try:
        renderer = RENDERERS[template_key]
    except KeyError:
        raise ValueError(f"Unknown email template: {template_key}")
    return renderer(context or {})
