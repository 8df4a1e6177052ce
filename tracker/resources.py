"""
Django Import-Export Resources for the tracker models.
Used by the admin site to bulk load and export the catalogue.
"""

from import_export import fields, resources
from import_export.widgets import BooleanWidget, DateWidget, ForeignKeyWidget, TimeWidget
from django.contrib.auth.models import User

from .models import Actor, Casting, Musical, Performance, Production, Profile, Role, Theater


# ============================================================================
# ACCOUNTS
# ============================================================================

class ProfileResource(resources.ModelResource):
    """Export of accounts with their role; import updates roles of existing users"""

    username = fields.Field(
        column_name='username',
        attribute='user',
        widget=ForeignKeyWidget(User, 'username')
    )
    email = fields.Field(
        column_name='email',
        attribute='user__email',
        readonly=True
    )

    class Meta:
        model = Profile
        import_id_fields = ('username',)
        fields = ('username', 'email', 'role', 'created_at')
        export_order = ('username', 'email', 'role', 'created_at')
        skip_unchanged = True


# ============================================================================
# CATALOGUE
# ============================================================================

class MusicalResource(resources.ModelResource):
    approved = fields.Field(column_name='approved', attribute='approved', widget=BooleanWidget())

    class Meta:
        model = Musical
        fields = ('id', 'name', 'composer', 'lyricist', 'approved', 'synopsis')
        export_order = ('id', 'name', 'composer', 'lyricist', 'approved', 'synopsis')
        skip_unchanged = True


class ActorResource(resources.ModelResource):
    class Meta:
        model = Actor
        fields = ('id', 'name', 'email', 'bio', 'verified', 'approved')
        export_order = ('id', 'name', 'email', 'bio', 'verified', 'approved')
        skip_unchanged = True


class TheaterResource(resources.ModelResource):
    class Meta:
        model = Theater
        fields = ('id', 'name', 'address', 'city', 'state', 'zip_code', 'capacity', 'verified')
        export_order = ('id', 'name', 'address', 'city', 'state', 'zip_code', 'capacity', 'verified')
        skip_unchanged = True


class RoleResource(resources.ModelResource):
    """Roles reference their musical by name"""

    musical_name = fields.Field(
        column_name='musical_name',
        attribute='musical',
        widget=ForeignKeyWidget(Musical, 'name')
    )

    class Meta:
        model = Role
        fields = ('id', 'name', 'description', 'musical_name')
        export_order = ('id', 'name', 'musical_name', 'description')


# ============================================================================
# PERFORMANCES
# ============================================================================

class PerformanceResource(resources.ModelResource):
    date = fields.Field(column_name='date', attribute='date', widget=DateWidget(format='%Y-%m-%d'))
    time = fields.Field(column_name='time', attribute='time', widget=TimeWidget(format='%H:%M'))
    musical_name = fields.Field(
        column_name='musical_name',
        attribute='musical',
        widget=ForeignKeyWidget(Musical, 'name')
    )
    theater_name = fields.Field(
        column_name='theater_name',
        attribute='theater',
        widget=ForeignKeyWidget(Theater, 'name')
    )
    created_by = fields.Field(
        column_name='created_by',
        attribute='created_by',
        widget=ForeignKeyWidget(User, 'username')
    )

    class Meta:
        model = Performance
        fields = ('id', 'date', 'time', 'musical_name', 'theater_name', 'notes', 'created_by')
        export_order = ('id', 'date', 'time', 'musical_name', 'theater_name', 'notes', 'created_by')


class CastingResource(resources.ModelResource):
    """Castings by id; names are exported for readability only"""

    actor_name = fields.Field(column_name='actor_name', attribute='actor__name', readonly=True)
    role_name = fields.Field(column_name='role_name', attribute='role__name', readonly=True)

    class Meta:
        model = Casting
        fields = ('id', 'actor', 'role', 'performance', 'actor_name', 'role_name')
        export_order = ('id', 'actor', 'actor_name', 'role', 'role_name', 'performance')

    def before_save_instance(self, instance, row, **kwargs):
        if not instance.role_matches_performance():
            raise ValueError(
                f"Role '{instance.role.name}' does not belong to the musical of performance {instance.performance_id}"
            )


class ProductionResource(resources.ModelResource):
    musical_name = fields.Field(
        column_name='musical_name',
        attribute='musical',
        widget=ForeignKeyWidget(Musical, 'name')
    )
    theater_name = fields.Field(
        column_name='theater_name',
        attribute='theater',
        widget=ForeignKeyWidget(Theater, 'name')
    )
    start_date = fields.Field(column_name='start_date', attribute='start_date', widget=DateWidget(format='%Y-%m-%d'))
    end_date = fields.Field(column_name='end_date', attribute='end_date', widget=DateWidget(format='%Y-%m-%d'))

    class Meta:
        model = Production
        fields = ('id', 'musical_name', 'theater_name', 'start_date', 'end_date', 'poster_url')
        export_order = ('id', 'musical_name', 'theater_name', 'start_date', 'end_date', 'poster_url')

    def before_save_instance(self, instance, row, **kwargs):
        if instance.end_date < instance.start_date:
            raise ValueError("end_date must not be before start_date")
