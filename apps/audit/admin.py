from django.contrib import admin
from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['action', 'target_type', 'target_label', 'org_id', 'performed_by_id', 'performed_at']
    list_filter = ['action', 'target_type']
    search_fields = ['target_label']
    readonly_fields = [f.name for f in AuditLog._meta.fields]
