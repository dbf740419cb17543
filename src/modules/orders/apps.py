from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.orders"
    label = "orders"

    def ready(self) -> None:
        from modules.orders.guard import ConcurrencyGuard

        # Built once per worker process; shared by the requests it serves.
        self.transition_guard = ConcurrencyGuard()
