from django.urls import path

from . import views

app_name = "zoning"

urlpatterns = [
    path("", views.index, name="index"),
    path("api/layer/", views.grid_layer, name="grid-layer"),
    path("api/zones/", views.zone_list, name="zone-list"),
    path("api/zones/create/", views.zone_create, name="zone-create"),
    path("api/zones/<str:zone_id>/delete/", views.zone_delete, name="zone-delete"),
    path("api/locate/", views.locate_point, name="locate-point"),
    path("grid/", views.update_grid, name="update-grid"),
]
