from django.urls import path

from .views import CartCheckoutView, CartClearView, CartItemDetailView, CartItemListCreateView

urlpatterns = [
    path("", CartItemListCreateView.as_view(), name="cart-list"),
    path("clear/", CartClearView.as_view(), name="cart-clear"),
    path("checkout/", CartCheckoutView.as_view(), name="cart-checkout"),
    path("<int:cart_item_id>/", CartItemDetailView.as_view(), name="cart-item-detail"),
]

# EOF
