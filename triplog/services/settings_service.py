"""
User preference store.

Holds the display/cost settings and the persisted filter state. Both are
loaded from the preferences table when the store is created and written back
whenever they change. The store is handed explicitly to whatever needs it.
"""

import logging
import math
import threading
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from triplog.calculations.financial import convert_cost_parameters
from triplog.calculations.units import normalize_unit_system
from triplog.config import Config
from triplog.exceptions import ConfigurationError, DatabaseError
from triplog.models import Preference
from triplog.services.filter_service import FilterSpec, update_range_from_display

logger = logging.getLogger(__name__)

SETTINGS_KEY = 'settings'
FILTERS_KEY = 'filters'

# Numeric settings must be >= 0; these must also be non-zero
_NUMERIC_SETTINGS = ('gas_price', 'ice_efficiency', 'elec_rate', 'battery_capacity_kwh')
_POSITIVE = ('ice_efficiency', 'battery_capacity_kwh')


@dataclass
class AppSettings:
    """Display unit system and the cost parameters for savings estimates."""

    unit_system: str = 'imperial'
    gas_price: float = 3.00  # $/gal (imperial) or $/L (metric)
    ice_efficiency: float = 30.0  # mpg (imperial) or L/100km (metric)
    elec_rate: float = 0.15  # $/kWh
    battery_capacity_kwh: float = 78.0

    @classmethod
    def from_config(cls) -> 'AppSettings':
        return cls(
            unit_system=normalize_unit_system(Config.DEFAULT_UNIT_SYSTEM),
            gas_price=Config.DEFAULT_GAS_PRICE,
            ice_efficiency=Config.DEFAULT_ICE_EFFICIENCY,
            elec_rate=Config.DEFAULT_ELEC_RATE,
            battery_capacity_kwh=Config.DEFAULT_BATTERY_CAPACITY_KWH,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def validate_setting(key: str, value: Any) -> Any:
    """
    Validate and coerce one setting value.

    Raises:
        ConfigurationError: If the key is unknown or the value unusable
    """
    if key == 'unit_system':
        return normalize_unit_system(value)

    if key not in _NUMERIC_SETTINGS:
        raise ConfigurationError(f"Unknown setting: {key}", config_key=key)

    if isinstance(value, bool):
        raise ConfigurationError(f"{key} must be a number", config_key=key)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be a number", config_key=key)

    if not math.isfinite(number) or number < 0:
        raise ConfigurationError(f"{key} must be a non-negative number", config_key=key)
    if key in _POSITIVE and number == 0:
        raise ConfigurationError(f"{key} must be greater than zero", config_key=key)
    return number


class SettingsStore:
    """Load-on-init, save-on-change store for AppSettings and FilterSpec."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        defaults: Optional[AppSettings] = None
    ):
        self._session_factory = session_factory
        self._defaults = defaults or AppSettings.from_config()
        self._lock = threading.Lock()
        self._settings = replace(self._defaults)
        self._filters = FilterSpec()
        self.load()

    @property
    def settings(self) -> AppSettings:
        return replace(self._settings)

    @property
    def filters(self) -> FilterSpec:
        return replace(self._filters, excluded_tags=list(self._filters.excluded_tags))

    def load(self):
        """Read persisted preferences, keeping defaults for anything missing or corrupt."""
        stored_settings = self._read(SETTINGS_KEY)
        stored_filters = self._read(FILTERS_KEY)

        settings = replace(self._defaults)
        if stored_settings is not None:
            if isinstance(stored_settings, dict):
                known = {f.name for f in fields(AppSettings)}
                for key, value in stored_settings.items():
                    if key not in known:
                        continue
                    try:
                        setattr(settings, key, validate_setting(key, value))
                    except ConfigurationError as e:
                        logger.warning(f"Ignoring persisted setting {key}: {e}")
            else:
                logger.warning(f"Ignoring corrupt persisted settings: {stored_settings!r}")

        filters = FilterSpec()
        if stored_filters is not None:
            if isinstance(stored_filters, dict):
                for key, value in stored_filters.items():
                    try:
                        filters = FilterSpec.from_dict({key: value}, base=filters)
                    except ConfigurationError as e:
                        logger.warning(f"Ignoring persisted filter {key}: {e}")
            else:
                logger.warning(f"Ignoring corrupt persisted filters: {stored_filters!r}")

        with self._lock:
            self._settings = settings
            self._filters = filters

    def update_settings(self, partial: Dict[str, Any]) -> AppSettings:
        """
        Apply a partial settings update and persist it.

        Switching the unit system converts gas price and ICE efficiency into
        the new system so the fuel savings figure does not change. Values
        supplied alongside the switch are taken as already expressed in the
        new system.

        Raises:
            ConfigurationError: For unknown keys or invalid values
        """
        if not isinstance(partial, dict):
            raise ConfigurationError("Settings update must be an object")

        changes = {key: validate_setting(key, value) for key, value in partial.items()}

        with self._lock:
            previous = self._settings
            updated = replace(previous, **changes)

            if updated.unit_system != previous.unit_system:
                gas_price, ice_efficiency = convert_cost_parameters(
                    previous.gas_price,
                    previous.ice_efficiency,
                    previous.unit_system,
                    updated.unit_system,
                )
                if 'gas_price' not in changes:
                    updated.gas_price = gas_price
                if 'ice_efficiency' not in changes:
                    updated.ice_efficiency = ice_efficiency
                logger.info(f"Unit system changed from {previous.unit_system} to {updated.unit_system}")

            self._write(SETTINGS_KEY, updated.to_dict())
            self._settings = updated

        logger.info(f"Settings updated: {', '.join(sorted(changes)) or 'no changes'}")
        return replace(updated)

    def align_unit_system(self, dialect: str) -> AppSettings:
        """Switch the display unit system to match a freshly imported file."""
        dialect = normalize_unit_system(dialect)
        if dialect == self._settings.unit_system:
            return self.settings
        logger.info(f"Aligning display units with imported {dialect} data")
        return self.update_settings({'unit_system': dialect})

    def update_filters(
        self,
        partial: Dict[str, Any],
        display_ranges: Optional[Dict[str, Dict[str, Any]]] = None
    ) -> FilterSpec:
        """
        Merge a partial filter update and persist it.

        Args:
            partial: FilterSpec fields, numeric bounds in canonical units
            display_ranges: Optional {dimension: {'min': x, 'max': y}} in the
                current display unit system

        Raises:
            ConfigurationError: For invalid values
        """
        if partial is not None and not isinstance(partial, dict):
            raise ConfigurationError("Filter update must be an object")

        with self._lock:
            spec = FilterSpec.from_dict(partial, base=self._filters)
            for dimension, bounds in (display_ranges or {}).items():
                if not isinstance(bounds, dict):
                    raise ConfigurationError(f"Range for {dimension} must be an object", config_key=dimension)
                spec = update_range_from_display(
                    spec, dimension, bounds.get('min'), bounds.get('max'), self._settings.unit_system
                )

            self._write(FILTERS_KEY, spec.to_dict())
            self._filters = spec

        return self.filters

    def reset_filters(self) -> FilterSpec:
        """Restore default filters."""
        with self._lock:
            spec = FilterSpec()
            self._write(FILTERS_KEY, spec.to_dict())
            self._filters = spec
        logger.info("Filters reset to defaults")
        return self.filters

    def _read(self, key: str) -> Any:
        session = self._session_factory()
        try:
            row = session.get(Preference, key)
            return row.value if row is not None else None
        except SQLAlchemyError as e:
            error = DatabaseError(f"Failed to load preference: {e}", {'key': key})
            logger.error(str(error), exc_info=True)
            raise error from e
        finally:
            session.close()

    def _write(self, key: str, value: Dict[str, Any]):
        session = self._session_factory()
        try:
            session.merge(Preference(key=key, value=value))
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            error = DatabaseError(f"Failed to save preference: {e}", {'key': key})
            logger.error(str(error), exc_info=True)
            raise error from e
        finally:
            session.close()
