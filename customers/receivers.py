from django.dispatch import receiver

from booking.signals import booking_completed

from .services import on_booking_completed


@receiver(booking_completed, dispatch_uid="customers.update_aggregates")
def update_customer_aggregates(sender, booking, **kwargs):
    on_booking_completed(booking.customer_id, booking.total_amount)
