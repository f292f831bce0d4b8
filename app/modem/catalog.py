"""The set of models this exporter knows about."""

from hnap import models as hnap_models
from modem.registry import ModemRegistry
from sb6121 import model as sb6121_model


def default_registry() -> ModemRegistry:
    """Build the registry once at start-up and pass it around; it is read-only afterwards.

    Order matters: first probe to match wins. The HNAP models share an identification page,
    which identify() only fetches once.
    """
    registry = ModemRegistry()
    hnap_models.register(registry)
    sb6121_model.register(registry)
    return registry
