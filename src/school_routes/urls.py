from django.urls import path

from school_routes import views

urlpatterns = [
    path("api/v1/health", views.health_view, name="health"),
    path("api/v1/route", views.route_view, name="route"),
    path("api/v1/school-distances", views.school_distances_view, name="school-distances"),
]
