from django.apps import AppConfig


class OrdersConfig(AppConfig):
    name = "modules.orders"
    label = "orders"
    verbose_name = "Orders"

    def ready(self) -> None:
        # importing the module subscribes its handlers to the global bus
        from modules.orders import handlers  # noqa: F401
