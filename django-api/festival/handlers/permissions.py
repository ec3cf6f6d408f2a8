"""Shared-secret access gates.

A view declares ``gates``: HTTP method -> setting names whose value is
accepted as the ``X-Gate-Key`` header. Methods without gates are open.
"""

from rest_framework.permissions import BasePermission

from festival.services.setting_service import SettingService
from festival.stores import get_store

ADMIN = ("admin",)
DESK = ("admin", "registration")


class SharedSecretGate(BasePermission):
    def has_permission(self, request, view) -> bool:
        gates = getattr(view, "gates", {}).get(request.method, ())
        if not gates:
            return True
        # raises GateRejectedError, rendered as 403
        SettingService(get_store()).verify_gate(gates, request.headers.get("X-Gate-Key"))
        return True
