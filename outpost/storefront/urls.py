from django.urls import path

from . import views

urlpatterns = [
    path('api/styles/<str:style_code>/', views.product_group_json, name='product_group_json'),
    path('api/rgb-values/', views.rgb_values_json, name='rgb_values_json'),
]
