from rest_framework import serializers

from car.models import Car, Category


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ("id", "name")


class CarSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(
        source="category.name", read_only=True, default=None
    )

    class Meta:
        model = Car
        fields = (
            "id",
            "brand",
            "model",
            "year",
            "plate_number",
            "daily_price",
            "is_available",
            "category",
            "category_name",
        )


class CarCalendarSerializer(serializers.Serializer):
    date = serializers.DateField()
    available = serializers.BooleanField()
