import django_filters

from modules.accounts.constants import Role, Station
from modules.accounts.models import Account


class AccountFilter(django_filters.FilterSet):
    role = django_filters.ChoiceFilter(field_name="role", choices=Role.choices)
    station = django_filters.ChoiceFilter(field_name="station", choices=Station.choices)
    email = django_filters.CharFilter(field_name="email", lookup_expr="icontains")
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")

    class Meta:
        model = Account
        fields = ["role", "station", "email", "name"]
