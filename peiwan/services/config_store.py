"""
Platform-wide configuration, most importantly the commission rate applied to
gift totals and withdrawal amounts.

The rate is read from the database on every call. Settlement code depends on
the ``CommissionRateProvider`` protocol rather than on this module, so tests
and callers may inject a fixed provider.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from sqlmodel import Session, select

from peiwan.core.exceptions import NotFoundError, ValidationError
from peiwan.core.money import to_money
from peiwan.models import DEFAULT_SCOPE, PlatformConfig

logger = logging.getLogger(__name__)

MIN_COMMISSION_RATE = Decimal("0")
MAX_COMMISSION_RATE = Decimal("100")


class CommissionRateProvider(Protocol):
    def get_commission_rate(self) -> Decimal: ...


@dataclass(frozen=True)
class FixedCommissionRate:
    rate: Decimal

    def get_commission_rate(self) -> Decimal:
        return self.rate


def validate_commission_rate(rate: Decimal | int | float | str) -> Decimal:
    normalized = to_money(rate)
    if not (MIN_COMMISSION_RATE <= normalized <= MAX_COMMISSION_RATE):
        raise ValidationError(
            "commission_rate must be between 0 and 100",
            details={"commission_rate": str(normalized)},
        )
    return normalized


class ConfigStore:
    def __init__(self, session: Session, *, scope: str = DEFAULT_SCOPE):
        self.session = session
        self.scope = scope

    def _latest(self, *, for_update: bool = False) -> PlatformConfig | None:
        statement = (
            select(PlatformConfig)
            .where(PlatformConfig.scope == self.scope)
            .order_by(PlatformConfig.id.desc())
            .limit(1)
        )
        if for_update:
            statement = statement.with_for_update()
        return self.session.exec(statement).first()

    def get_config(self) -> PlatformConfig:
        config = self._latest()
        if config is None:
            raise NotFoundError(
                "Platform config has not been seeded",
                details={"scope": self.scope},
            )
        return config

    def get_commission_rate(self) -> Decimal:
        return to_money(self.get_config().commission_rate)

    def update_commission_rate(
        self,
        rate: Decimal | int | float | str,
        *,
        updated_by: int | None = None,
    ) -> PlatformConfig:
        normalized = validate_commission_rate(rate)
        config = self._latest(for_update=True)
        if config is None:
            raise NotFoundError(
                "Platform config has not been seeded",
                details={"scope": self.scope},
            )

        previous = config.commission_rate
        config.commission_rate = normalized
        config.updated_by = updated_by
        config.updated_at = datetime.utcnow()
        self.session.add(config)
        logger.info(
            "Commission rate for scope=%s changed %s -> %s by user_id=%s",
            self.scope,
            previous,
            normalized,
            updated_by,
        )
        return config

    def ensure_default(self, default_rate: Decimal) -> PlatformConfig:
        config = self._latest()
        if config is not None:
            return config
        config = PlatformConfig(scope=self.scope, commission_rate=validate_commission_rate(default_rate))
        self.session.add(config)
        return config
