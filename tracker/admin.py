from django.contrib import admin, messages
from django.utils.html import format_html
from import_export.admin import ImportExportModelAdmin

from .models import Actor, Casting, Media, Musical, Performance, Production, Profile, Role, Theater
from .resources import (
    ActorResource, CastingResource, MusicalResource, PerformanceResource, ProductionResource, ProfileResource,
    RoleResource, TheaterResource,
)

# ============================================================================
# MODERATION ACTIONS
# ============================================================================

@admin.action(description='Approve selected rows')
def approve_selected(modeladmin, request, queryset):
    updated = queryset.update(approved=True)
    messages.success(request, f'{updated} row(s) approved.')


@admin.action(description='Verify selected rows')
def verify_selected(modeladmin, request, queryset):
    updated = queryset.update(verified=True)
    messages.success(request, f'{updated} row(s) verified.')


@admin.action(description='Grant admin role')
def make_admin(modeladmin, request, queryset):
    updated = queryset.update(role='admin')
    messages.success(request, f'{updated} profile(s) promoted to admin.')

# ============================================================================
# ACCOUNTS AND MEDIA
# ============================================================================

@admin.register(Profile)
class ProfileAdmin(ImportExportModelAdmin):
    resource_class = ProfileResource
    list_display = ['user', 'user_email', 'role', 'created_at']
    list_filter = ['role']
    search_fields = ['user__username', 'user__email', 'user__first_name', 'user__last_name']
    actions = [make_admin]

    def user_email(self, obj):
        return obj.user.email
    user_email.short_description = 'E-mail'


@admin.register(Media)
class MediaAdmin(admin.ModelAdmin):
    list_display = ['id', 'image_type', 'original_name', 'content_type', 'dimensions', 'size', 'uploaded_by',
                    'created_at', 'preview']
    list_filter = ['image_type', 'content_type']
    search_fields = ['original_name']
    readonly_fields = ['content_type', 'size', 'width', 'height', 'created_at']

    def dimensions(self, obj):
        if obj.width and obj.height:
            return f'{obj.width}x{obj.height}'
        return '-'
    dimensions.short_description = 'Dimensions'

    def preview(self, obj):
        if not obj.file:
            return '-'
        return format_html('<img src="{}" style="max-height: 48px;" />', obj.url)
    preview.short_description = 'Preview'

# ============================================================================
# CATALOGUE
# ============================================================================

@admin.register(Musical)
class MusicalAdmin(ImportExportModelAdmin):
    resource_class = MusicalResource
    list_display = ['name', 'composer', 'lyricist', 'approved', 'role_count', 'created_at']
    list_filter = ['approved']
    search_fields = ['name', 'composer', 'lyricist']
    actions = [approve_selected]

    def role_count(self, obj):
        return obj.roles.count()
    role_count.short_description = 'Roles'


@admin.register(Actor)
class ActorAdmin(ImportExportModelAdmin):
    resource_class = ActorResource
    list_display = ['name', 'email', 'verified', 'approved', 'created_at']
    list_filter = ['verified', 'approved']
    search_fields = ['name', 'email']
    actions = [approve_selected, verify_selected]


@admin.register(Theater)
class TheaterAdmin(ImportExportModelAdmin):
    resource_class = TheaterResource
    list_display = ['name', 'city', 'state', 'capacity', 'verified']
    list_filter = ['verified', 'state']
    search_fields = ['name', 'city']
    actions = [verify_selected]


@admin.register(Role)
class RoleAdmin(ImportExportModelAdmin):
    resource_class = RoleResource
    list_display = ['name', 'musical', 'created_at']
    list_filter = ['musical']
    search_fields = ['name', 'musical__name']

# ============================================================================
# PERFORMANCES
# ============================================================================

class CastingInline(admin.TabularInline):
    model = Casting
    extra = 0
    autocomplete_fields = ['actor', 'role']


@admin.register(Performance)
class PerformanceAdmin(ImportExportModelAdmin):
    resource_class = PerformanceResource
    list_display = ['musical', 'theater', 'date', 'time', 'created_by', 'casting_count']
    list_filter = ['date', 'theater']
    search_fields = ['musical__name', 'theater__name', 'notes']
    date_hierarchy = 'date'
    inlines = [CastingInline]

    def casting_count(self, obj):
        return obj.castings.count()
    casting_count.short_description = 'Castings'


@admin.register(Casting)
class CastingAdmin(ImportExportModelAdmin):
    resource_class = CastingResource
    list_display = ['actor', 'role', 'performance', 'created_at']
    list_filter = ['performance__musical']
    search_fields = ['actor__name', 'role__name']
    autocomplete_fields = ['actor', 'role']


@admin.register(Production)
class ProductionAdmin(ImportExportModelAdmin):
    resource_class = ProductionResource
    list_display = ['musical', 'theater', 'start_date', 'end_date']
    list_filter = ['theater']
    search_fields = ['musical__name', 'theater__name']
    date_hierarchy = 'start_date'
