from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import models
from django.contrib.auth.models import User
from django.db.models.signals import post_save
from django.dispatch import receiver

# ============================================================================
# USER PROFILE
# ============================================================================

class Profile(models.Model):
    ROLES = [
        ('user', 'User'),
        ('admin', 'Administrator'),
    ]

    user = models.OneToOneField('auth.User', on_delete=models.CASCADE, related_name='profile',
                                verbose_name='User', help_text='The account this profile belongs to')
    role = models.CharField(max_length=10, choices=ROLES, default='user', verbose_name='Role',
                            help_text='Plain users submit content, admins moderate it')
    created_at = models.DateTimeField(auto_now_add=True, verbose_name='Created')

    class Meta:
        verbose_name = 'Profile'
        verbose_name_plural = 'Profiles'

    def __str__(self):
        return f'{self.user.get_full_name() or self.user.email} ({self.role})'

    @property
    def is_admin(self):
        """Check if the user may moderate and manage every resource"""
        return self.role == 'admin'


@receiver(post_save, sender=User)
def create_profile_for_new_user(sender, instance, created, **kwargs):
    """Every account gets a plain user profile when it is first saved."""
    if created:
        Profile.objects.get_or_create(user=instance)

# ============================================================================
# MEDIA
# ============================================================================

def media_upload_path(instance, filename):
    return f'{instance.image_type}/{filename}'


class Media(models.Model):
    IMAGE_TYPES = [
        ('poster', 'Poster'),
        ('profile', 'Profile image'),
        ('thumbnail', 'Thumbnail'),
    ]

    image_type = models.CharField(max_length=20, choices=IMAGE_TYPES, verbose_name='Image type',
                                  help_text='What the image is used for')
    file = models.FileField(upload_to=media_upload_path, max_length=500, verbose_name='File')
    original_name = models.CharField(max_length=255, blank=True, default='', verbose_name='Original file name')
    content_type = models.CharField(max_length=100, verbose_name='Content type')
    size = models.PositiveIntegerField(default=0, verbose_name='Size (bytes)')
    width = models.PositiveIntegerField(null=True, blank=True, verbose_name='Width (px)')
    height = models.PositiveIntegerField(null=True, blank=True, verbose_name='Height (px)')
    uploaded_by = models.ForeignKey('auth.User', related_name='uploads', on_delete=models.SET_NULL,
                                    null=True, blank=True, verbose_name='Uploaded by')
    created_at = models.DateTimeField(auto_now_add=True, verbose_name='Created')

    class Meta:
        verbose_name = 'Media'
        verbose_name_plural = 'Media'
        ordering = ['id']

    def __str__(self):
        return f'{self.get_image_type_display()}: {self.original_name or self.file.name}'

    @property
    def url(self):
        return self.file.url if self.file else None

# ============================================================================
# CATALOGUE
# ============================================================================

class Musical(models.Model):
    name = models.CharField(max_length=255, verbose_name='Name', help_text='Title of the musical')
    composer = models.CharField(max_length=255, verbose_name='Composer')
    lyricist = models.CharField(max_length=255, verbose_name='Lyricist')
    approved = models.BooleanField(default=False, verbose_name='Approved',
                                   help_text='Only approved musicals are visible to non-admin users')
    synopsis = models.TextField(blank=True, null=True, verbose_name='Synopsis')
    poster = models.ForeignKey('Media', related_name='musicals', on_delete=models.SET_NULL,
                               null=True, blank=True, verbose_name='Poster')
    created_at = models.DateTimeField(auto_now_add=True, verbose_name='Created')

    class Meta:
        verbose_name = 'Musical'
        verbose_name_plural = 'Musicals'
        ordering = ['id']

    def __str__(self):
        return self.name


class Actor(models.Model):
    name = models.CharField(max_length=255, verbose_name='Name')
    email = models.EmailField(max_length=254, verbose_name='E-mail')
    bio = models.TextField(blank=True, null=True, verbose_name='Biography')
    profile_image = models.ForeignKey('Media', related_name='actors', on_delete=models.SET_NULL,
                                      null=True, blank=True, verbose_name='Profile image')
    verified = models.BooleanField(default=False, verbose_name='Verified',
                                   help_text='Identity of the actor has been confirmed by an admin')
    approved = models.BooleanField(default=False, verbose_name='Approved',
                                   help_text='Only approved actors are visible to non-admin users')
    created_at = models.DateTimeField(auto_now_add=True, verbose_name='Created')

    class Meta:
        verbose_name = 'Actor'
        verbose_name_plural = 'Actors'
        ordering = ['id']

    def __str__(self):
        return self.name


class Theater(models.Model):
    name = models.CharField(max_length=255, verbose_name='Name')
    address = models.CharField(max_length=500, blank=True, default='', verbose_name='Address')
    city = models.CharField(max_length=100, verbose_name='City')
    state = models.CharField(max_length=100, blank=True, default='', verbose_name='State')
    zip_code = models.CharField(max_length=20, blank=True, default='', verbose_name='ZIP code')
    capacity = models.PositiveIntegerField(null=True, blank=True, verbose_name='Capacity',
                                           help_text='Number of seats (optional)')
    verified = models.BooleanField(default=False, verbose_name='Verified',
                                   help_text='Only verified theaters are visible to non-admin users')
    created_at = models.DateTimeField(auto_now_add=True, verbose_name='Created')

    class Meta:
        verbose_name = 'Theater'
        verbose_name_plural = 'Theaters'
        ordering = ['id']

    def __str__(self):
        return f'{self.name} ({self.city})'


class Role(models.Model):
    name = models.CharField(max_length=255, verbose_name='Name')
    description = models.TextField(blank=True, null=True, verbose_name='Description')
    musical = models.ForeignKey('Musical', related_name='roles', on_delete=models.PROTECT,
                                verbose_name='Musical', help_text='The musical this role belongs to')
    created_at = models.DateTimeField(auto_now_add=True, verbose_name='Created')

    class Meta:
        verbose_name = 'Role'
        verbose_name_plural = 'Roles'
        ordering = ['id']

    def __str__(self):
        return f'{self.name} ({self.musical.name})'

# ============================================================================
# PERFORMANCES AND CASTINGS
# ============================================================================

class Performance(models.Model):
    date = models.DateField(verbose_name='Date')
    time = models.TimeField(null=True, blank=True, verbose_name='Curtain time')
    musical = models.ForeignKey('Musical', related_name='performances', on_delete=models.PROTECT,
                                verbose_name='Musical')
    theater = models.ForeignKey('Theater', related_name='performances', on_delete=models.PROTECT,
                                verbose_name='Theater')
    notes = models.TextField(blank=True, null=True, verbose_name='Notes')
    poster = models.ForeignKey('Media', related_name='performances', on_delete=models.SET_NULL,
                               null=True, blank=True, verbose_name='Poster')
    created_by = models.ForeignKey('auth.User', related_name='performances', on_delete=models.SET_NULL,
                                   null=True, blank=True, verbose_name='Logged by',
                                   help_text='The user who recorded this performance')
    created_at = models.DateTimeField(auto_now_add=True, verbose_name='Created')

    class Meta:
        verbose_name = 'Performance'
        verbose_name_plural = 'Performances'
        ordering = ['id']

    def __str__(self):
        return f'{self.musical.name} @ {self.theater.name} ({self.date})'


class Casting(models.Model):
    actor = models.ForeignKey('Actor', related_name='castings', on_delete=models.PROTECT, verbose_name='Actor')
    role = models.ForeignKey('Role', related_name='castings', on_delete=models.PROTECT, verbose_name='Role')
    performance = models.ForeignKey('Performance', related_name='castings', on_delete=models.PROTECT,
                                    verbose_name='Performance')
    created_at = models.DateTimeField(auto_now_add=True, verbose_name='Created')

    class Meta:
        verbose_name = 'Casting'
        verbose_name_plural = 'Castings'
        ordering = ['id']
        unique_together = [('actor', 'role', 'performance')]

    def __str__(self):
        return f'{self.actor.name} as {self.role.name} ({self.performance.date})'

    def role_matches_performance(self):
        """The role must come from the musical that is being performed."""
        return self.role.musical_id == self.performance.musical_id

    def clean(self):
        try:
            matches = self.role_matches_performance()
        except ObjectDoesNotExist:
            # Missing references are reported by the field validation
            return
        if not matches:
            raise ValidationError({'role': 'The role must belong to the musical of the performance.'})


class Production(models.Model):
    musical = models.ForeignKey('Musical', related_name='productions', on_delete=models.PROTECT,
                                verbose_name='Musical')
    theater = models.ForeignKey('Theater', related_name='productions', on_delete=models.PROTECT,
                                null=True, blank=True, verbose_name='Theater')
    start_date = models.DateField(verbose_name='Opening date')
    end_date = models.DateField(verbose_name='Closing date')
    poster_url = models.URLField(max_length=1000, blank=True, null=True, verbose_name='Poster URL')
    created_at = models.DateTimeField(auto_now_add=True, verbose_name='Created')

    class Meta:
        verbose_name = 'Production'
        verbose_name_plural = 'Productions'
        ordering = ['id']

    def __str__(self):
        return f'{self.musical.name} ({self.start_date} - {self.end_date})'

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({'end_date': 'The closing date must not be before the opening date.'})
