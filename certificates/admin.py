from django.contrib import admin

from .models import Certificate


@admin.register(Certificate)
class CertificateAdmin(admin.ModelAdmin):
    list_display = ('certificate_number', 'student', 'course', 'program', 'status', 'issued_date')
    list_filter = ('status',)
    search_fields = ('certificate_number',)
