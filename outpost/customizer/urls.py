from django.urls import path

from .viewsets import CustomizerViewSet

urlpatterns = [
    path('logo/', CustomizerViewSet.as_view({'post': 'logo'}), name='customizer-logo'),
    path('composite/', CustomizerViewSet.as_view({'post': 'composite'}), name='customizer-composite'),
    path('order-preview/', CustomizerViewSet.as_view({'post': 'order_preview'}), name='customizer-order-preview'),
]
