from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import tracker.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Media',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('image_type', models.CharField(choices=[('poster', 'Poster'), ('profile', 'Profile image'), ('thumbnail', 'Thumbnail')], help_text='What the image is used for', max_length=20, verbose_name='Image type')),
                ('file', models.FileField(max_length=500, upload_to=tracker.models.media_upload_path, verbose_name='File')),
                ('original_name', models.CharField(blank=True, default='', max_length=255, verbose_name='Original file name')),
                ('content_type', models.CharField(max_length=100, verbose_name='Content type')),
                ('size', models.PositiveIntegerField(default=0, verbose_name='Size (bytes)')),
                ('width', models.PositiveIntegerField(blank=True, null=True, verbose_name='Width (px)')),
                ('height', models.PositiveIntegerField(blank=True, null=True, verbose_name='Height (px)')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created')),
                ('uploaded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='uploads', to=settings.AUTH_USER_MODEL, verbose_name='Uploaded by')),
            ],
            options={
                'verbose_name': 'Media',
                'verbose_name_plural': 'Media',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='Profile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role', models.CharField(choices=[('user', 'User'), ('admin', 'Administrator')], default='user', help_text='Plain users submit content, admins moderate it', max_length=10, verbose_name='Role')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created')),
                ('user', models.OneToOneField(help_text='The account this profile belongs to', on_delete=django.db.models.deletion.CASCADE, related_name='profile', to=settings.AUTH_USER_MODEL, verbose_name='User')),
            ],
            options={
                'verbose_name': 'Profile',
                'verbose_name_plural': 'Profiles',
            },
        ),
        migrations.CreateModel(
            name='Musical',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Title of the musical', max_length=255, verbose_name='Name')),
                ('composer', models.CharField(max_length=255, verbose_name='Composer')),
                ('lyricist', models.CharField(max_length=255, verbose_name='Lyricist')),
                ('approved', models.BooleanField(default=False, help_text='Only approved musicals are visible to non-admin users', verbose_name='Approved')),
                ('synopsis', models.TextField(blank=True, null=True, verbose_name='Synopsis')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created')),
                ('poster', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='musicals', to='tracker.media', verbose_name='Poster')),
            ],
            options={
                'verbose_name': 'Musical',
                'verbose_name_plural': 'Musicals',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='Actor',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255, verbose_name='Name')),
                ('email', models.EmailField(max_length=254, verbose_name='E-mail')),
                ('bio', models.TextField(blank=True, null=True, verbose_name='Biography')),
                ('verified', models.BooleanField(default=False, help_text='Identity of the actor has been confirmed by an admin', verbose_name='Verified')),
                ('approved', models.BooleanField(default=False, help_text='Only approved actors are visible to non-admin users', verbose_name='Approved')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created')),
                ('profile_image', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='actors', to='tracker.media', verbose_name='Profile image')),
            ],
            options={
                'verbose_name': 'Actor',
                'verbose_name_plural': 'Actors',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='Theater',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255, verbose_name='Name')),
                ('address', models.CharField(blank=True, default='', max_length=500, verbose_name='Address')),
                ('city', models.CharField(max_length=100, verbose_name='City')),
                ('state', models.CharField(blank=True, default='', max_length=100, verbose_name='State')),
                ('zip_code', models.CharField(blank=True, default='', max_length=20, verbose_name='ZIP code')),
                ('capacity', models.PositiveIntegerField(blank=True, help_text='Number of seats (optional)', null=True, verbose_name='Capacity')),
                ('verified', models.BooleanField(default=False, help_text='Only verified theaters are visible to non-admin users', verbose_name='Verified')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created')),
            ],
            options={
                'verbose_name': 'Theater',
                'verbose_name_plural': 'Theaters',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='Role',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255, verbose_name='Name')),
                ('description', models.TextField(blank=True, null=True, verbose_name='Description')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created')),
                ('musical', models.ForeignKey(help_text='The musical this role belongs to', on_delete=django.db.models.deletion.PROTECT, related_name='roles', to='tracker.musical', verbose_name='Musical')),
            ],
            options={
                'verbose_name': 'Role',
                'verbose_name_plural': 'Roles',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='Performance',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(verbose_name='Date')),
                ('time', models.TimeField(blank=True, null=True, verbose_name='Curtain time')),
                ('notes', models.TextField(blank=True, null=True, verbose_name='Notes')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created')),
                ('created_by', models.ForeignKey(blank=True, help_text='The user who recorded this performance', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='performances', to=settings.AUTH_USER_MODEL, verbose_name='Logged by')),
                ('musical', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='performances', to='tracker.musical', verbose_name='Musical')),
                ('poster', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='performances', to='tracker.media', verbose_name='Poster')),
                ('theater', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='performances', to='tracker.theater', verbose_name='Theater')),
            ],
            options={
                'verbose_name': 'Performance',
                'verbose_name_plural': 'Performances',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='Casting',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created')),
                ('actor', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='castings', to='tracker.actor', verbose_name='Actor')),
                ('performance', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='castings', to='tracker.performance', verbose_name='Performance')),
                ('role', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='castings', to='tracker.role', verbose_name='Role')),
            ],
            options={
                'verbose_name': 'Casting',
                'verbose_name_plural': 'Castings',
                'ordering': ['id'],
                'unique_together': {('actor', 'role', 'performance')},
            },
        ),
        migrations.CreateModel(
            name='Production',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('start_date', models.DateField(verbose_name='Opening date')),
                ('end_date', models.DateField(verbose_name='Closing date')),
                ('poster_url', models.URLField(blank=True, max_length=1000, null=True, verbose_name='Poster URL')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created')),
                ('musical', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='productions', to='tracker.musical', verbose_name='Musical')),
                ('theater', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='productions', to='tracker.theater', verbose_name='Theater')),
            ],
            options={
                'verbose_name': 'Production',
                'verbose_name_plural': 'Productions',
                'ordering': ['id'],
            },
        ),
    ]
