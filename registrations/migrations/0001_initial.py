# Generated manually for the Bible Quiz registration tables

from django.db import migrations, models
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='QuizRegistration',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('group_leader_name', models.CharField(max_length=200)),
                ('church', models.CharField(max_length=255, unique=True)),
                ('location', models.CharField(max_length=200)),
                ('lang_of_quiz', models.CharField(choices=[('English', 'English'), ('Marathi', 'Marathi'), ('Tamil', 'Tamil')], max_length=20)),
                ('zone', models.CharField(choices=[('Centraline', 'Centraline Zone'), ('North-Centraline', 'North-Centraline Zone'), ('South', 'South Zone'), ('East', 'East Zone'), ('West', 'West Zone'), ('Central', 'Central Zone'), ('North', 'North Zone')], max_length=30)),
                ('contact_no', models.CharField(max_length=20)),
                ('alternate_no', models.CharField(blank=True, max_length=20, null=True)),
                ('mail_id', models.EmailField(max_length=254, unique=True)),
                ('verification_email', models.EmailField(blank=True, default='', max_length=254)),
                ('group_number', models.CharField(max_length=20, unique=True)),
                ('total_participants', models.PositiveSmallIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Quiz Registration',
                'verbose_name_plural': 'Quiz Registrations',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='QuizParticipant',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('gender', models.CharField(choices=[('Male', 'Male'), ('Female', 'Female')], max_length=10)),
                ('dob', models.DateField()),
                ('mobile_no', models.CharField(blank=True, max_length=20, null=True)),
                ('registration', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='participants', to='registrations.quizregistration')),
            ],
            options={
                'verbose_name': 'Quiz Participant',
                'verbose_name_plural': 'Quiz Participants',
                'ordering': ['id'],
            },
        ),
    ]
