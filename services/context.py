from services.booking_store import BookingStore
from services.settings_registry import SettingsRegistry
from utils.clock import local_now


class ConsoleContext:
    """
    Identity, settings and booking data for one signed-in staff member.

    Built once per authenticated request and handed to whatever needs it.
    ``load`` runs in a fixed order: identity first, then settings (with
    defaults), then the booking collection.
    """

    def __init__(self, user_id, session, timezone=None, default_open_time="06:00",
                 default_close_time="23:00", clock=None):
        self.user_id = user_id
        self.timezone = timezone
        self.settings = SettingsRegistry(session, default_open_time, default_close_time)
        self.store = BookingStore(session, user_id=user_id)
        self._clock = clock or (lambda: local_now(timezone))
        self.loaded = False

    def now(self):
        return self._clock()

    def load(self):
        if self.user_id is None:
            return PermissionError("No signed-in user")

        _, error = self.settings.load()
        if error:
            return error
        error = self.settings.ensure_defaults()
        if error:
            return error

        _, error = self.store.fetch_bookings()
        if error:
            return error

        self.loaded = True
        return None

    def close(self):
        self.settings.values = {}
        self.store.bookings = []
        self.store.payments = []
        self.loaded = False
