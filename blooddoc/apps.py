from django.apps import AppConfig


class BlooddocConfig(AppConfig):
    name = 'blooddoc'

    def ready(self):
        from .db import init_db
        from .notifications import initialize_firebase
        init_db()
        initialize_firebase()
