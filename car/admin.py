from django.contrib import admin

from car.models import Car, Category


@admin.register(Car)
class CarAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "brand",
        "model",
        "year",
        "plate_number",
        "daily_price",
        "is_available",
        "category",
    )
    search_fields = ("brand", "model", "plate_number")
    list_filter = ("is_available", "category")


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("id", "name")
    search_fields = ("name",)
