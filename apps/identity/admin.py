from django.contrib import admin
from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ['email', 'name', 'role', 'org_id', 'is_active']
    list_filter = ['role', 'is_active']
    search_fields = ['email', 'name']
    exclude = ['password', 'groups', 'user_permissions']
    readonly_fields = ['org_id', 'role', 'last_login', 'date_joined']
