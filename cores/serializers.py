from rest_framework import serializers
from .models import PlatformSetting


class PlatformSettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = PlatformSetting
        fields = '__all__'
        read_only_fields = ['id']

    def validate(self, attrs):
        exam_weight = attrs.get('exam_weight', getattr(self.instance, 'exam_weight', None))
        attendance_weight = attrs.get('attendance_weight', getattr(self.instance, 'attendance_weight', None))
        if exam_weight is not None and attendance_weight is not None and exam_weight + attendance_weight != 1:
            raise serializers.ValidationError("Exam and attendance weights must add up to 1.")
        return attrs
