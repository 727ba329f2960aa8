from decimal import Decimal

from django.core.cache import cache
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from grades.policy import DEFAULT_POLICY, GradingPolicy


class PlatformSetting(models.Model):
    # --- General & Branding ---
    site_name = models.CharField(max_length=100, default="Campus LMS")
    support_email = models.EmailField(default="support@example.edu")
    maintenance_mode = models.BooleanField(default=False)

    # --- Grading Defaults ---
    exam_weight = models.DecimalField(
        max_digits=3, decimal_places=2, default=DEFAULT_POLICY.exam_weight,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))],
        help_text="Share of the final grade coming from the exam average"
    )
    attendance_weight = models.DecimalField(
        max_digits=3, decimal_places=2, default=DEFAULT_POLICY.attendance_weight,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))],
        help_text="Share of the final grade coming from attendance"
    )
    pass_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, default=DEFAULT_POLICY.pass_percentage,
        help_text="Exam result pass mark percentage"
    )

    # --- Proctoring ---
    default_max_tab_switch = models.PositiveIntegerField(default=3, help_text="Tab switches before an attempt is flagged")

    def save(self, *args, **kwargs):
        self.pk = 1  # Singleton pattern
        super().save(*args, **kwargs)
        cache.set('platform_settings', self)

    def delete(self, *args, **kwargs):
        pass

    @classmethod
    def load(cls):
        obj = cache.get('platform_settings')
        if obj is None:
            obj, created = cls.objects.get_or_create(pk=1)
            cache.set('platform_settings', obj)
        return obj

    def grading_policy(self):
        return GradingPolicy(
            exam_weight=Decimal(self.exam_weight),
            attendance_weight=Decimal(self.attendance_weight),
            pass_percentage=Decimal(self.pass_percentage),
        )

    def __str__(self):
        return "Platform Settings"
