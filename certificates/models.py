# certificates/models.py
import secrets

from django.conf import settings
from django.db import models
from django.utils import timezone

from courses.models import Course, Program
from users.models import Student


def generate_certificate_number():
    """CERT-<year>-<6 digits>, retried until unused."""
    year = timezone.now().year
    while True:
        number = f"CERT-{year}-{secrets.randbelow(1000000):06d}"
        if not Certificate.objects.filter(certificate_number=number).exists():
            return number


class Certificate(models.Model):
    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "Active"
        REVOKED = "REVOKED", "Revoked"

    # Public number printed on the certificate and used for verification
    certificate_number = models.CharField(max_length=50, unique=True, default=generate_certificate_number)
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='certificates')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, null=True, blank=True, related_name='certificates')
    program = models.ForeignKey(Program, on_delete=models.CASCADE, null=True, blank=True, related_name='certificates')

    completion_date = models.DateField(default=timezone.localdate)
    certificate_url = models.URLField()  # Link to the issued PDF
    issued_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='issued_certificates'
    )
    issued_date = models.DateTimeField(auto_now_add=True)

    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE)
    revoked_at = models.DateTimeField(null=True, blank=True)
    revoked_reason = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ['-issued_date']

    def __str__(self):
        return f"Cert {self.certificate_number} for {self.student}"
