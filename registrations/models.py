"""
Database models for the BDYFC Bible Quiz group registrations.
"""
import uuid
from django.db import models


class QuizRegistration(models.Model):
    """
    One group's entry for the Bible Quiz, submitted by its group leader.
    """
    LANGUAGE_CHOICES = [
        ('English', 'English'),
        ('Marathi', 'Marathi'),
        ('Tamil', 'Tamil'),
    ]

    ZONE_CHOICES = [
        ('Centraline', 'Centraline Zone'),
        ('North-Centraline', 'North-Centraline Zone'),
        ('South', 'South Zone'),
        ('East', 'East Zone'),
        ('West', 'West Zone'),
        ('Central', 'Central Zone'),
        ('North', 'North Zone'),
    ]

    # Primary identifier
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Group leader information
    group_leader_name = models.CharField(max_length=200)
    church = models.CharField(max_length=255, unique=True)
    location = models.CharField(max_length=200)
    lang_of_quiz = models.CharField(max_length=20, choices=LANGUAGE_CHOICES)
    zone = models.CharField(max_length=30, choices=ZONE_CHOICES)
    contact_no = models.CharField(max_length=20)
    alternate_no = models.CharField(max_length=20, blank=True, null=True)
    mail_id = models.EmailField(unique=True)
    verification_email = models.EmailField(blank=True, default='')

    # Human-facing group number, allocated as max(existing) + 1
    group_number = models.CharField(max_length=20, unique=True)
    total_participants = models.PositiveSmallIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Quiz Registration'
        verbose_name_plural = 'Quiz Registrations'

    def __str__(self):
        return f"Group {self.group_number} - {self.church}"

    def to_form_data(self):
        """
        Rebuild the cleaned payload shape used by the PDF renderer and emails.
        """
        return {
            'group_leader_name': self.group_leader_name,
            'church': self.church,
            'location': self.location,
            'lang_of_quiz': self.lang_of_quiz,
            'zone': self.zone,
            'contact_no': self.contact_no,
            'alternate_no': self.alternate_no or '',
            'mail_id': self.mail_id,
            'verification_email': self.verification_email,
            'participants': [
                {
                    'name': p.name,
                    'gender': p.gender,
                    'dob': p.dob,
                    'mobile_no': p.mobile_no or '',
                }
                for p in self.participants.order_by('id')
            ],
        }


class QuizParticipant(models.Model):
    """
    A single team member under a QuizRegistration.
    """
    GENDER_CHOICES = [
        ('Male', 'Male'),
        ('Female', 'Female'),
    ]

    id = models.BigAutoField(primary_key=True)
    registration = models.ForeignKey(QuizRegistration, on_delete=models.CASCADE, related_name='participants')
    name = models.CharField(max_length=200)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    dob = models.DateField()
    mobile_no = models.CharField(max_length=20, blank=True, null=True)

    class Meta:
        ordering = ['id']
        verbose_name = 'Quiz Participant'
        verbose_name_plural = 'Quiz Participants'

    def __str__(self):
        return f"{self.name} ({self.registration.group_number})"
