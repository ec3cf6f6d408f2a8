from django.contrib import admin

from festival.models import Event, Registration, ServiceRecord, Setting


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["name", "committee", "fee", "room", "type"]
    list_filter = ["type"]
    search_fields = ["name", "committee"]
    readonly_fields = ["link", "registration_refs"]


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ["participant_name", "college_name", "amount_paid", "payment_mode", "created_at"]
    list_filter = ["payment_mode"]
    search_fields = ["participant_name", "email", "phone"]
    # reference lists are maintained by RelationshipMaintainer only
    readonly_fields = ["event_refs", "amount_paid", "created_at"]


@admin.register(ServiceRecord)
class ServiceRecordAdmin(admin.ModelAdmin):
    list_display = ["client_name", "total", "payment_mode", "created_at"]
    list_filter = ["payment_mode"]


@admin.register(Setting)
class SettingAdmin(admin.ModelAdmin):
    list_display = ["name"]
