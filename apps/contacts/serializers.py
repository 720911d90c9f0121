from rest_framework import serializers

from .models import Contact


class ContactSerializer(serializers.ModelSerializer):
    class Meta:
        model = Contact
        fields = ["id", "name", "email", "phone", "message", "is_resolved", "created_at"]
        read_only_fields = ["id", "created_at"]

    def create(self, validated_data):
        # The public form can never mark its own message resolved.
        validated_data.pop("is_resolved", None)
        return super().create(validated_data)
