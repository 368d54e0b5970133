from django.contrib import admin
from .models import Organization, Membership


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner_id', 'created_at']
    search_fields = ['name']
    readonly_fields = ['owner_id', 'created_at', 'updated_at']


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = ['user_id', 'org_id', 'created_at']
    search_fields = ['user_id', 'org_id']
