import logging
from typing import Any, Dict, Optional

from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from booking.exceptions import BookingError, InvalidState, InvalidTransition, NotFound, Unauthorized
from booking.models import ZERO
from booking.services import create_booking
from customers.models import Customer
from permissions import can_act_as_owner_or_elevated

from .models import Lead

logger = logging.getLogger(__name__)

# Set by the engine, never from caller input.
PROTECTED_FIELDS = frozenset({
    "id", "pk", "reference", "agent", "agent_id", "converted_to_booking", "converted_to_customer",
    "converted_at", "lost_at", "created_at", "updated_at",
})
# Booking fields a conversion may take from the caller on top of what the lead already says.
BOOKING_FIELDS = frozenset({
    "booking_type", "title", "description", "trip_type", "origin", "destination", "start_date", "end_date",
    "adults", "children", "infants", "base_price", "taxes", "service_charge", "discount", "discount_reason",
    "currency", "priority", "special_requests", "internal_notes", "status",
})


def _check_owner(lead: Lead, actor, can_view_all: bool) -> None:
    if not can_act_as_owner_or_elevated(getattr(actor, "pk", None), can_view_all, lead.agent_id):
        raise Unauthorized("Not authorized to act on this lead", reference=lead.reference)


def _load_for_update(lead_id) -> Lead:
    lead = Lead.objects.select_for_update().filter(pk=lead_id).first()
    if lead is None:
        raise NotFound("Lead not found", lead_id=lead_id)
    return lead


def create_lead(data: Dict[str, Any], agent) -> Lead:
    fields = {k: v for k, v in data.items() if k not in PROTECTED_FIELDS}
    fields["email"] = fields.get("email", "").lower()
    if fields.get("status", Lead.Status.NEW) not in Lead.EDITABLE_STATUSES - {Lead.Status.LOST}:
        raise InvalidState(f"Leads cannot be created as '{fields['status']}'", status=fields["status"])
    lead = Lead.objects.create(agent=agent, **fields)
    logger.info("Lead %s created by %s (%s)", lead.reference, agent, lead.source)
    return lead


def leads_for(user, can_view_all: bool, agent_id=None):
    qs = Lead.objects.select_related("agent", "converted_to_booking", "converted_to_customer")
    if not can_view_all:
        return qs.filter(agent=user)
    if agent_id:
        return qs.filter(agent_id=agent_id)
    return qs


def get_lead(lead_id, actor, can_view_all: bool = False) -> Lead:
    lead = leads_for(actor, True).filter(pk=lead_id).first()
    if lead is None:
        raise NotFound("Lead not found", lead_id=lead_id)
    _check_owner(lead, actor, can_view_all)
    return lead


@transaction.atomic
def update_lead(lead_id, patch: Dict[str, Any], actor, can_view_all: bool = False) -> Lead:
    """Edit an open lead. Moving it to ``lost`` stamps ``lost_at``; ``converted`` is only reached by conversion."""
    lead = _load_for_update(lead_id)
    _check_owner(lead, actor, can_view_all)
    if lead.is_closed:
        raise InvalidState(f"Lead is already {lead.status}", status=lead.status)

    fields = {k: v for k, v in patch.items() if k not in PROTECTED_FIELDS}
    new_status = fields.get("status", lead.status)
    if new_status not in Lead.EDITABLE_STATUSES:
        raise InvalidTransition(lead.status, new_status)
    if "email" in fields:
        fields["email"] = fields["email"].lower()
    if new_status == Lead.Status.LOST:
        fields["lost_at"] = timezone.now()

    for field, value in fields.items():
        setattr(lead, field, value)
    lead.save()
    logger.info("Lead %s updated by %s (%s)", lead.reference, actor, lead.status)
    return lead


def _customer_for(lead: Lead) -> Customer:
    customer = Customer.objects.select_for_update().filter(agent_id=lead.agent_id, email__iexact=lead.email).first()
    if customer is None:
        return Customer.objects.create(
            agent_id=lead.agent_id,
            first_name=lead.first_name,
            last_name=lead.last_name,
            email=lead.email.lower(),
            phone=lead.phone,
            city=lead.city,
            country=lead.country,
        )
    if not customer.is_active:
        customer.is_active = True
        customer.save(update_fields=["is_active", "updated_at"])
    return customer


def convert_lead_to_booking(
    lead_id,
    booking_data: Optional[Dict[str, Any]],
    actor,
    can_view_all: bool = False,
) -> Lead:
    """
    Turn an open lead into a booking for the lead's agent.

    The customer is matched on email among that agent's customers, or
    created from the lead's contact details. The booking itself goes
    through ``create_booking``, so the ownership and conflict guards apply
    and a failed guard leaves the lead open.
    """
    overrides = {k: v for k, v in (booking_data or {}).items() if k in BOOKING_FIELDS}

    with transaction.atomic():
        lead = _load_for_update(lead_id)
        _check_owner(lead, actor, can_view_all)
        if lead.status == Lead.Status.CONVERTED:
            raise InvalidState("Already converted", booking_id=lead.converted_to_booking_id)
        if lead.status == Lead.Status.LOST:
            raise InvalidState("Cannot convert lost lead", status=lead.status)

        data = {
            "title": f"Trip to {lead.destination or 'TBD'}",
            "trip_type": lead.trip_type,
            "destination": lead.destination,
            "start_date": lead.start_date,
            "end_date": lead.end_date,
            "adults": lead.adults,
            "children": lead.children,
            "infants": lead.infants,
            "priority": lead.priority,
            "special_requests": lead.special_requirements,
            "base_price": ZERO,
            **overrides,
        }
        if not data["destination"] or not data["start_date"] or not data["end_date"]:
            raise BookingError("Destination and travel dates are required to convert a lead")

        customer = _customer_for(lead)
        booking = create_booking(
            {**data, "customer": customer},
            lead.agent,
            history_notes=f"Converted from lead {lead.reference}",
        )

        lead.status = Lead.Status.CONVERTED
        lead.converted_to_booking = booking
        lead.converted_to_customer = customer
        lead.converted_at = timezone.now()
        lead.save(update_fields=[
            "status", "converted_to_booking", "converted_to_customer", "converted_at", "updated_at",
        ])

    logger.info("Lead %s converted to booking %s by %s", lead.reference, booking.reference, actor)
    return lead


def lead_stats(user, can_view_all: bool) -> Dict[str, Any]:
    qs = leads_for(user, can_view_all).order_by()
    converted = Count("id", filter=Q(status=Lead.Status.CONVERTED))
    totals = qs.aggregate(total=Count("id"), converted=converted)
    rate = round(totals["converted"] * 100 / totals["total"], 2) if totals["total"] else 0
    return {
        "status_breakdown": list(qs.values("status").annotate(count=Count("id")).order_by("status")),
        "source_breakdown": list(
            qs.values("source").annotate(count=Count("id"), converted=converted).order_by("source")
        ),
        "conversion_rate": {**totals, "rate": rate},
    }
