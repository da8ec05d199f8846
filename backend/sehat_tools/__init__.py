from .core_tools import SehatToolset, register_tools
from .facility_lookup import FacilityLookup

__all__ = ["FacilityLookup", "SehatToolset", "register_tools"]
