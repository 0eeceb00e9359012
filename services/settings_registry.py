import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from models.constant import Constant

logger = logging.getLogger(__name__)

HOURLY_RATE = "hourly_rate"
OPEN_TIME = "open_time"
CLOSE_TIME = "close_time"
UPI_ID = "upi_id"
WHATSAPP_NUMBER = "whatsapp_number"

RECOGNIZED_KEYS = (HOURLY_RATE, OPEN_TIME, CLOSE_TIME, UPI_ID, WHATSAPP_NUMBER)

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class SettingsError(ValueError):
    """Raised when a settings value is rejected before it reaches the store."""


def parse_hour(value: str) -> int:
    match = _TIME_RE.match((value or "").strip())
    if not match:
        raise SettingsError("Time must be HH:MM")
    return int(match.group(1))


class SettingsRegistry:
    """Key/value configuration backed by the constants table."""

    def __init__(self, session, default_open_time="06:00", default_close_time="23:00"):
        self.session = session
        self.default_open_time = default_open_time
        self.default_close_time = default_close_time
        self.values = {}

    def load(self):
        try:
            rows = self.session.query(Constant).all()
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error(f"Error fetching constants: {err}")
            return {}, err

        self.values = {row.name: row.value for row in rows}
        return dict(self.values), None

    def ensure_defaults(self):
        """Insert hourly_rate = 0 the first time a console loads its settings."""
        if HOURLY_RATE in self.values:
            return None
        try:
            self.session.add(Constant(name=HOURLY_RATE, value="0"))
            self.session.commit()
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error(f"Error creating default constant: {err}")
            return err

        self.values[HOURLY_RATE] = "0"
        return None

    def update(self, name: str, value):
        """
        Upsert one key. Validation problems raise SettingsError; store
        failures come back as the error half of the (value, error) pair.
        """
        clean = self._validate(name, value)

        try:
            row = self.session.query(Constant).filter_by(name=name).first()
            if row is None:
                row = Constant(name=name, value=clean)
                self.session.add(row)
            else:
                row.value = clean
            self.session.commit()
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error(f"Error updating constant {name}: {err}")
            return None, err

        self.values[name] = row.value
        return row.value, None

    def get(self, name: str, default=None):
        return self.values.get(name, default)

    def as_dict(self) -> dict:
        out = {
            HOURLY_RATE: self.values.get(HOURLY_RATE, "0"),
            OPEN_TIME: self.values.get(OPEN_TIME) or self.default_open_time,
            CLOSE_TIME: self.values.get(CLOSE_TIME) or self.default_close_time,
            UPI_ID: self.values.get(UPI_ID) or None,
            WHATSAPP_NUMBER: self.values.get(WHATSAPP_NUMBER) or None,
        }
        return out

    @property
    def hourly_rate(self) -> Decimal:
        try:
            return Decimal(self.values.get(HOURLY_RATE) or "0")
        except InvalidOperation:
            return Decimal("0")

    @property
    def open_hour(self) -> int:
        return parse_hour(self.values.get(OPEN_TIME) or self.default_open_time)

    @property
    def close_hour(self) -> int:
        return parse_hour(self.values.get(CLOSE_TIME) or self.default_close_time)

    @property
    def upi_id(self) -> Optional[str]:
        return (self.values.get(UPI_ID) or "").strip() or None

    def _validate(self, name: str, value) -> str:
        if name not in RECOGNIZED_KEYS:
            raise SettingsError(f"Unknown setting '{name}'")
        if value is None:
            value = ""
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            raise SettingsError(f"Invalid value for {name}")
        text = str(value).strip()

        if name == HOURLY_RATE:
            try:
                rate = Decimal(text)
            except InvalidOperation:
                raise SettingsError("hourly_rate must be a number")
            if not rate.is_finite() or rate < 0:
                raise SettingsError("hourly_rate must not be negative")
            return text

        if name in (OPEN_TIME, CLOSE_TIME):
            hour = parse_hour(text)
            # Availability works in whole hours
            if not text.endswith(":00"):
                raise SettingsError(f"{name} must be on the hour (HH:00)")
            if name == OPEN_TIME:
                other = parse_hour(self.values.get(CLOSE_TIME) or self.default_close_time)
                if hour >= other:
                    raise SettingsError("open_time must be before close_time")
            else:
                other = parse_hour(self.values.get(OPEN_TIME) or self.default_open_time)
                if other >= hour:
                    raise SettingsError("close_time must be after open_time")
            return text

        if name == WHATSAPP_NUMBER and text and not text.isdigit():
            raise SettingsError("whatsapp_number must contain digits only")

        if len(text) > 255:
            raise SettingsError(f"{name} is too long")
        return text
