"""
Django admin configuration for registrations app.
"""
from django.contrib import admin
from django.utils.html import format_html
from django.urls import reverse
from .admin_views import registrations_csv_response
from .models import QuizRegistration, QuizParticipant


class QuizParticipantInline(admin.TabularInline):
    model = QuizParticipant
    extra = 0
    fields = ['name', 'gender', 'dob', 'mobile_no']


@admin.register(QuizRegistration)
class QuizRegistrationAdmin(admin.ModelAdmin):
    """
    Admin interface for quiz registrations.
    Includes filtering, search, the form PDF link and CSV export.
    """
    list_display = [
        'group_number', 'church', 'group_leader_name', 'zone', 'lang_of_quiz',
        'mail_id', 'total_participants', 'created_at', 'form_pdf_link'
    ]
    list_filter = ['zone', 'lang_of_quiz', 'created_at']
    search_fields = ['group_number', 'church', 'group_leader_name', 'mail_id', 'contact_no']
    readonly_fields = ['id', 'group_number', 'total_participants', 'created_at']
    inlines = [QuizParticipantInline]
    fieldsets = (
        ('Group Leader', {
            'fields': ('group_leader_name', 'contact_no', 'alternate_no', 'mail_id', 'verification_email')
        }),
        ('Church', {
            'fields': ('church', 'location', 'zone', 'lang_of_quiz')
        }),
        ('Registration', {
            'fields': ('group_number', 'total_participants', 'id', 'created_at'),
        }),
    )

    actions = ['export_as_csv']

    def form_pdf_link(self, obj):
        url = reverse('download_registration_form', args=[obj.id])
        return format_html('<a href="{}">Download</a>', url)
    form_pdf_link.short_description = 'Form PDF'

    def export_as_csv(self, request, queryset):
        """
        Export selected registrations with their participants as CSV.
        """
        return registrations_csv_response(queryset.prefetch_related('participants').order_by('created_at'))

    export_as_csv.short_description = "Export selected registrations as CSV"


@admin.register(QuizParticipant)
class QuizParticipantAdmin(admin.ModelAdmin):
    list_display = ['name', 'gender', 'dob', 'mobile_no', 'registration']
    list_filter = ['gender', 'registration__zone']
    search_fields = ['name', 'registration__church', 'registration__group_number']
    list_select_related = ['registration']
