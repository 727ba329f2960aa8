from django.conf import settings
from django.db import models


class AnalyticsEvent(models.Model):
    """An activity record (login, exam start, attendance, ...) used for dashboards."""
    event_type = models.CharField(max_length=50, db_index=True, help_text="e.g., LOGIN, EXAM_SUBMITTED")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='analytics_events'
    )
    metadata = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user} - {self.event_type} - {self.created_at}"
