from rest_framework import serializers
from .models import GradeCalculation


class GradeCalculationSerializer(serializers.ModelSerializer):
    studentId = serializers.IntegerField(source='student_id', read_only=True)
    courseId = serializers.IntegerField(source='course_id', read_only=True)
    courseName = serializers.CharField(source='course.name', read_only=True, default=None)
    programId = serializers.IntegerField(source='program_id', read_only=True)
    programName = serializers.CharField(source='program.name', read_only=True, default=None)
    examScore = serializers.DecimalField(source='exam_score', max_digits=5, decimal_places=2, coerce_to_string=False)
    attendanceScore = serializers.DecimalField(source='attendance_score', max_digits=5, decimal_places=2, coerce_to_string=False)
    finalGrade = serializers.DecimalField(source='final_grade', max_digits=5, decimal_places=2, coerce_to_string=False)
    letterGrade = serializers.CharField(source='letter_grade')
    gpa = serializers.DecimalField(max_digits=3, decimal_places=2, coerce_to_string=False)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = GradeCalculation
        fields = [
            'id', 'studentId', 'courseId', 'courseName', 'programId', 'programName',
            'examScore', 'attendanceScore', 'finalGrade', 'letterGrade', 'gpa', 'updatedAt'
        ]
        read_only_fields = fields


class CalculateGradeSerializer(serializers.Serializer):
    studentId = serializers.IntegerField()
