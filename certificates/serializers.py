from rest_framework import serializers
from .models import Certificate


class CertificateSerializer(serializers.ModelSerializer):
    # Fetch details from related rows to show readable names
    student_name = serializers.CharField(source='student.user.display_name', read_only=True)
    student_email = serializers.CharField(source='student.user.email', read_only=True)
    course_name = serializers.CharField(source='course.name', read_only=True, default=None)
    program_name = serializers.CharField(source='program.name', read_only=True, default=None)
    issued_by_email = serializers.CharField(source='issued_by.email', read_only=True, default=None)

    class Meta:
        model = Certificate
        fields = [
            'id',
            'certificate_number',
            'student',
            'student_name',
            'student_email',
            'course',
            'course_name',
            'program',
            'program_name',
            'completion_date',
            'certificate_url',
            'issued_by_email',
            'issued_date',
            'status',
            'revoked_at',
            'revoked_reason',
        ]
        read_only_fields = ['certificate_number', 'issued_date', 'status', 'revoked_at', 'revoked_reason']

    def validate(self, attrs):
        if bool(attrs.get('course')) == bool(attrs.get('program')):
            raise serializers.ValidationError("Provide either a course or a program.")
        return attrs


class RevokeSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)
