"""Delivery webhook client."""

from msgdispatch.delivery.client import (
    DeliveryClient,
    DeliveryError,
    DeliveryResponse,
    DeliveryResult,
)

__all__ = ["DeliveryClient", "DeliveryError", "DeliveryResponse", "DeliveryResult"]
