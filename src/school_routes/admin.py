from django.contrib import admin

from school_routes.models import Junction, School, StreetAddress


@admin.register(Junction)
class JunctionAdmin(admin.ModelAdmin):
    list_display = ("cnn", "latitude", "longitude", "streets")
    search_fields = ("cnn",)
    ordering = ("cnn",)


@admin.register(StreetAddress)
class StreetAddressAdmin(admin.ModelAdmin):
    list_display = ("number", "street", "latitude", "longitude")
    list_filter = ("street",)
    search_fields = ("number", "street")
    ordering = ("street", "number")


@admin.register(School)
class SchoolAdmin(admin.ModelAdmin):
    list_display = ("name", "types", "address")
    search_fields = ("name", "address")
    ordering = ("name",)
