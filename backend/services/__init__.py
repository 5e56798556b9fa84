from importlib import import_module

__all__ = [
    "instability_scorer",
    "InstabilityScorer",
    "country_catalog",
    "region_catalog",
]

_LAZY_EXPORTS = {
    "instability_scorer": ("services.world_intelligence.instability_scorer", "instability_scorer"),
    "InstabilityScorer": ("services.world_intelligence.instability_scorer", "InstabilityScorer"),
    "country_catalog": ("services.world_intelligence.country_catalog", "country_catalog"),
    "region_catalog": ("services.world_intelligence.region_catalog", "region_catalog"),
}


def __getattr__(name):
    if name not in _LAZY_EXPORTS:
        raise AttributeError(f"module 'services' has no attribute {name!r}")

    module_name, attr_name = _LAZY_EXPORTS[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
