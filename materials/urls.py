from django.urls import path

from .views import MaterialCategoryListView, MaterialDetailView, MaterialListCreateView

urlpatterns = [
    path("", MaterialListCreateView.as_view(), name="material-list"),
    path("categories/", MaterialCategoryListView.as_view(), name="material-category-list"),
    path("<int:material_id>/", MaterialDetailView.as_view(), name="material-detail"),
]
