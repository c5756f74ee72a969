import django_filters

from modules.products.constants import ProductStatus
from modules.products.models import Product


class ProductFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    status = django_filters.ChoiceFilter(choices=ProductStatus.choices)
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    seller = django_filters.NumberFilter(field_name="seller_id")

    class Meta:
        model = Product
        fields = ["name", "status", "min_price", "max_price", "seller"]
