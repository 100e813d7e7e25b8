"""Faker providers for synthetic driver identities."""

from __future__ import annotations

from typing import TYPE_CHECKING

from faker import Faker
from faker.providers import BaseProvider

if TYPE_CHECKING:
    from faker.proxy import Faker as FakerType


class DriverProvider(BaseProvider):
    """Custom provider for fleet driver contact data."""

    def driver_name(self) -> str:
        """Generate a plain 'First Last' name, no prefixes or suffixes."""
        return f"{self.generator.first_name()} {self.generator.last_name()}"

    def driver_phone_us(self) -> str:
        """Generate a US mobile number: +1 followed by ten digits, first non-zero."""
        return "+1" + self.numerify("%#########")


def create_faker_instance(seed: int | None = None) -> FakerType:
    """Create a configured Faker instance with US locale and driver provider.

    Args:
        seed: Optional seed for reproducible random data.
    """
    fake: FakerType = Faker("en_US")

    if seed is not None:
        fake.seed_instance(seed)

    fake.add_provider(DriverProvider)

    return fake
