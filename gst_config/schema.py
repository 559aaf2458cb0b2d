"""
Engine Configuration Schema.

Company-level settings that the orchestrator needs at runtime. Defaults
suit a single-state trader; override from YAML via ``gst_config.loader``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from decimal import Decimal

from gst_kernel.domain.jurisdiction import is_known_state
from gst_kernel.exceptions import ConfigurationError

MAX_DISPLAY_DECIMAL_PLACES = 6


@dataclass(frozen=True)
class EngineConfig:
    """
    Configuration schema for the reconciliation engine.

        config = EngineConfig(
            company_jurisdiction="27",
            low_stock_warning=True,
        )
    """

    # Origin code for sales, destination code for purchases
    company_jurisdiction: str = "27"
    force_inter_jurisdiction: bool = False

    # Emit a warning when an applied stock change leaves a product at or
    # below its minimum level
    low_stock_warning: bool = True

    display_decimal_places: int = 2
    default_tax_rate_percent: Decimal = field(default_factory=lambda: Decimal("18"))

    def __post_init__(self) -> None:
        if not isinstance(self.company_jurisdiction, str) or not is_known_state(
            self.company_jurisdiction
        ):
            raise ConfigurationError(
                "company_jurisdiction",
                f"unknown state code {self.company_jurisdiction!r}",
            )
        for name in ("force_inter_jurisdiction", "low_stock_warning"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(name, "must be a boolean")
        if (
            isinstance(self.display_decimal_places, bool)
            or not isinstance(self.display_decimal_places, int)
            or not 0 <= self.display_decimal_places <= MAX_DISPLAY_DECIMAL_PLACES
        ):
            raise ConfigurationError(
                "display_decimal_places",
                f"must be an integer 0-{MAX_DISPLAY_DECIMAL_PLACES}",
            )
        if not isinstance(self.default_tax_rate_percent, Decimal):
            raise ConfigurationError("default_tax_rate_percent", "must be a Decimal")
        if not Decimal(0) <= self.default_tax_rate_percent <= Decimal(100):
            raise ConfigurationError(
                "default_tax_rate_percent",
                f"must be between 0 and 100 (got {self.default_tax_rate_percent})",
            )

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))
