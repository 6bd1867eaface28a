"""
Centralized settings and pricing configuration.

PricingConfig is passed explicitly into every engine call; the calculators
never read the environment themselves.
"""
import os
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Mapping, Optional


# The single tier the checkout actually applies today.
DEFAULT_BULK_DISCOUNT_TIERS = ((200, 15),)

# Tiers advertised in customer copy (50-100 pax 5%, 101-200 10%, 200+ 15%).
# Opt in with BULK_DISCOUNT_TIERS="50:5,101:10,200:15".
ADVERTISED_BULK_DISCOUNT_TIERS = ((50, 5), (101, 10), (200, 15))


def parse_discount_tiers(raw: str) -> tuple:
    """Parse "50:5,101:10,200:15" into ((50, 5), (101, 10), (200, 15))."""
    tiers = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        threshold, sep, pct = chunk.partition(":")
        if not sep:
            raise ValueError(f"Discount tier '{chunk}' must look like <pax>:<percent>")
        tiers.append((int(threshold), int(pct)))
    return tuple(sorted(tiers))


@dataclass(frozen=True)
class PricingConfig:
    """Process-wide pricing defaults; offerings may override some of them."""
    tax_rate: Decimal = Decimal("0.05")
    per_unit_tax_rate: Decimal = Decimal("0")
    advance_pct: int = 30
    free_km: Decimal = Decimal("10")
    per_km_fee: int = 0                       # paise per km
    weekend_surge_pct: int = 0
    bulk_discount_tiers: tuple = DEFAULT_BULK_DISCOUNT_TIERS
    bowls_delivery_fee: int = 9900
    bowls_free_delivery_qty: int = 25
    quote_ttl_minutes: int = 45
    currency: str = "INR"

    def __post_init__(self):
        object.__setattr__(self, "tax_rate", Decimal(str(self.tax_rate)))
        object.__setattr__(self, "per_unit_tax_rate", Decimal(str(self.per_unit_tax_rate)))
        object.__setattr__(self, "free_km", Decimal(str(self.free_km)))
        object.__setattr__(self, "bulk_discount_tiers", tuple(sorted(tuple(t) for t in self.bulk_discount_tiers)))

        if self.tax_rate < 0 or self.per_unit_tax_rate < 0:
            raise ValueError("Tax rates must not be negative")
        if not 1 <= self.advance_pct <= 100:
            raise ValueError(f"advance_pct must be between 1 and 100, got {self.advance_pct}")
        if self.free_km < 0:
            raise ValueError("free_km must not be negative")
        if self.per_km_fee < 0 or self.weekend_surge_pct < 0:
            raise ValueError("Fees and surcharges must not be negative")
        if self.bowls_delivery_fee < 0 or self.bowls_free_delivery_qty < 0:
            raise ValueError("Bowl delivery settings must not be negative")
        if self.quote_ttl_minutes <= 0:
            raise ValueError("quote_ttl_minutes must be positive")
        for threshold, pct in self.bulk_discount_tiers:
            if threshold <= 0 or not 0 <= pct <= 100:
                raise ValueError(f"Invalid discount tier {threshold}:{pct}")

    def replace(self, **changes) -> "PricingConfig":
        """Copy with some fields overridden, e.g. config.replace(advance_pct=50)."""
        return replace(self, **changes)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PricingConfig":
        """Build from GST_RATE, ADVANCE_PERCENT, FREE_KM, PER_KM_FEE and friends."""
        env = os.environ if environ is None else environ
        kwargs = {}

        def read(name: str, key: str, convert):
            raw = env.get(name)
            if raw is None or str(raw).strip() == "":
                return
            try:
                kwargs[key] = convert(str(raw).strip())
            except (ValueError, InvalidOperation) as e:
                raise ValueError(f"Invalid value for {name}: {raw!r}") from e

        read("GST_RATE", "tax_rate", Decimal)
        read("PER_UNIT_TAX_RATE", "per_unit_tax_rate", Decimal)
        read("ADVANCE_PERCENT", "advance_pct", int)
        read("FREE_KM", "free_km", Decimal)
        read("PER_KM_FEE", "per_km_fee", int)
        read("WEEKEND_SURGE_PCT", "weekend_surge_pct", int)
        read("BULK_DISCOUNT_TIERS", "bulk_discount_tiers", parse_discount_tiers)
        read("BOWLS_DELIVERY_FEE", "bowls_delivery_fee", int)
        read("BOWLS_FREE_DELIVERY_QTY", "bowls_free_delivery_qty", int)
        read("QUOTE_TTL_MINUTES", "quote_ttl_minutes", int)
        read("CURRENCY", "currency", str.upper)
        return cls(**kwargs)


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 4 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    project_root: Path
    catalog_dir: Path
    quotes_dir: Optional[Path] = None
    log_level: str = "INFO"
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    pricing: PricingConfig = field(default_factory=PricingConfig)

    @classmethod
    def load(cls, project_root: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        env = os.environ if environ is None else environ
        root = project_root or get_project_root()

        catalog_dir = env.get("CATALOG_DIR")
        quotes_dir = env.get("QUOTES_DIR")
        api_port = env.get("API_PORT") or env.get("PORT") or "8000"
        try:
            port = int(api_port)
        except ValueError as e:
            raise ValueError(f"Invalid value for API_PORT: {api_port!r}") from e

        return cls(
            project_root=root,
            catalog_dir=Path(catalog_dir) if catalog_dir else Path(__file__).resolve().parent.parent / 'data' / 'seed',
            quotes_dir=Path(quotes_dir) if quotes_dir else None,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            api_host=env.get("API_HOST", "127.0.0.1"),
            api_port=port,
            pricing=PricingConfig.from_env(env),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
