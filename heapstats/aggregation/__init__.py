# ==============================================
# TOPIC 2: CLASSIFICATION & AGGREGATION
# ==============================================
#
# This package folds the provider's object stream into buckets,
# one pass, one object at a time.
#
# Two-step process per object:
#   Step 1 (Classification): resolve type → string / instance / skip
#   Step 2 (Aggregation):    update the matching bucket + totals
#
# Modules:
# --------
# - buckets.py            → StringBucket, TypeBucket, AggregationState
# - classifier.py         → ObjectClassifier (dispatch per object)
# - string_aggregator.py  → Tally strings by exact value
# - type_aggregator.py    → Tally instances by type identity
#
# ==============================================

from .buckets import AggregationState, StringBucket, TypeBucket
from .classifier import ObjectClassifier
from .string_aggregator import StringAggregator
from .type_aggregator import TypeAggregator

__all__ = [
    "AggregationState",
    "StringBucket",
    "TypeBucket",
    "ObjectClassifier",
    "StringAggregator",
    "TypeAggregator",
]
