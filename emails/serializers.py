from rest_framework import serializers


class SendEmailSerializer(serializers.Serializer):
    to = serializers.EmailField()
    subject = serializers.CharField(max_length=255)
    html = serializers.CharField(required=False, allow_blank=True)
    text = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs.get('html') and not attrs.get('text'):
            raise serializers.ValidationError("Either html or text must be provided")
        return attrs


class WelcomeEmailSerializer(serializers.Serializer):
    email = serializers.EmailField()
    name = serializers.CharField(max_length=150)
