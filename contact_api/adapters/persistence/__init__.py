"""Persistence gateways - where accepted contact submissions go."""

from contact_api.adapters.persistence.base import AbstractContactGateway
from contact_api.adapters.persistence.factory import create_contact_gateway
from contact_api.adapters.persistence.null_gateway import NullContactGateway
from contact_api.adapters.persistence.supabase_gateway import SupabaseContactGateway

__all__ = [
    "AbstractContactGateway",
    "NullContactGateway",
    "SupabaseContactGateway",
    "create_contact_gateway",
]
