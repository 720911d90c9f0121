from rest_framework import serializers

from .models import Product


class ProductSerializer(serializers.ModelSerializer):
    price = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = "__all__"
        read_only_fields = ["id", "created_at", "updated_at"]

    def get_price(self, obj: Product) -> str:
        return f"{obj.base_price_cents / 100:.2f}"

    def validate_images(self, value):
        if not isinstance(value, list) or not all(isinstance(url, str) for url in value):
            raise serializers.ValidationError("images must be a list of URLs")
        return value
