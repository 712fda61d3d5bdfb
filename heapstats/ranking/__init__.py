# ==============================================
# TOPIC 3: RANKING
# ==============================================
#
# Modules:
# --------
# - top_k.py   → TopKSelector + string/type weight functions
#
# ==============================================

from .top_k import TopKSelector, string_weight, top_strings, top_types, type_weight

__all__ = ["TopKSelector", "string_weight", "type_weight", "top_strings", "top_types"]
