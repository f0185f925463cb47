from .columbia import ColumbiaRuleset
from .cotopaxi import CotopaxiRuleset
from .fox import FoxRuleset
from .outdoor_research import OutdoorResearchRuleset

__all__ = [
    "ColumbiaRuleset",
    "CotopaxiRuleset",
    "FoxRuleset",
    "OutdoorResearchRuleset",
]
