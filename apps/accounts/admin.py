# ==========================================
# apps/accounts/admin.py
# ==========================================

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from .models import User, UserType


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin interface for bookkeeping users.

    Provides:
    - User listing with type and status badges
    - Filtering by type and managing admin
    - Search by name, email and company
    - Bulk activation/deactivation
    """

    list_display = [
        'email',
        'get_full_name',
        'company_name',
        'user_type_badge',
        'is_active_badge',
        'admin',
        'created_at',
    ]

    list_filter = [
        'user_type',
        'is_active',
        'is_staff',
        'created_at',
    ]

    search_fields = [
        'email',
        'username',
        'first_name',
        'last_name',
        'company_name',
        'vat_number',
    ]

    ordering = ['last_name', 'first_name']
    date_hierarchy = 'created_at'
    raw_id_fields = ['admin']

    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'username', 'first_name', 'last_name', 'password')
        }),
        ('Company', {
            'fields': ('company_name', 'vat_number', 'user_type', 'admin'),
        }),
        ('Addresses', {
            'fields': ('address', 'postcode', 'shipping_address', 'shipping_postcode'),
            'classes': ('collapse',),
        }),
        ('Phones', {
            'fields': ('phone_office', 'phone_home', 'mobile', 'fax'),
            'classes': ('collapse',),
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'first_name', 'last_name', 'user_type', 'password1', 'password2'),
        }),
    )

    readonly_fields = [
        'created_at',
        'updated_at',
        'last_login',
    ]

    filter_horizontal = ['groups', 'user_permissions']

    def user_type_badge(self, obj):
        """Display user type as colored badge."""
        colors = {
            UserType.ADMIN: ('#A47449', 'white'),
            UserType.SUPPLIER: ('#E5C49A', '#2C1810'),
            UserType.CLIENT: ('#6B8E5E', 'white'),
        }
        bg, fg = colors.get(obj.user_type, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_user_type_display()
        )
    user_type_badge.short_description = 'Type'
    user_type_badge.admin_order_field = 'user_type'

    def is_active_badge(self, obj):
        """Display active status as colored badge."""
        if obj.is_active:
            return format_html(
                '<span style="background: #6B8E5E; color: white; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">Active</span>'
            )
        return format_html(
            '<span style="background: #B85C5C; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">Inactive</span>'
        )
    is_active_badge.short_description = 'Status'
    is_active_badge.admin_order_field = 'is_active'

    actions = ['activate_users', 'deactivate_users']

    @admin.action(description='Activate selected users')
    def activate_users(self, request, queryset):
        count = queryset.update(is_active=True)
        self.message_user(request, f'Activated {count} user(s).')

    @admin.action(description='Deactivate selected users')
    def deactivate_users(self, request, queryset):
        """Deactivate selected users (superusers are skipped)."""
        safe_queryset = queryset.filter(is_superuser=False)
        count = safe_queryset.update(is_active=False)
        skipped = queryset.count() - count
        msg = f'Deactivated {count} user(s).'
        if skipped:
            msg += f' Skipped {skipped} superuser(s).'
        self.message_user(request, msg)

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('admin')
