# ==============================================
# Tests for ObjectClassifier
# ==============================================

from heapstats.aggregation.buckets import AggregationState
from heapstats.aggregation.classifier import ObjectClassifier
from heapstats.aggregation.string_aggregator import StringAggregator
from heapstats.aggregation.type_aggregator import TypeAggregator


def _classifier(provider):
    return ObjectClassifier(provider, StringAggregator(provider), TypeAggregator(provider))


def _classify_all(provider):
    classifier = _classifier(provider)
    state = AggregationState()
    outcomes = [classifier.classify(address, state) for address in provider.enumerate_objects()]
    return state, outcomes


class TestObjectClassifier:
    """Tests for per-object dispatch."""

    def test_mixed_stream(self, make_provider, string_type, order_type):
        """3 instances of A (24 bytes) and two "x" strings."""
        provider = make_provider([
            {"address": 0x100, "type": order_type, "size": 24},
            {"address": 0x200, "type": string_type, "value": "x"},
            {"address": 0x300, "type": order_type, "size": 24},
            {"address": 0x400, "type": string_type, "value": "x"},
            {"address": 0x500, "type": order_type, "size": 24},
        ])

        state, outcomes = _classify_all(provider)

        assert outcomes == ["instance", "string", "instance", "string", "instance"]
        assert state.types[order_type].count == 3
        assert state.types[order_type].total_size == 72
        assert state.strings["x"].count == 2
        assert state.strings["x"].total_size == 4
        assert state.skipped_count == 0

    def test_unresolved_type_is_skipped(self, make_provider, order_type):
        provider = make_provider([
            {"address": 0x100, "type": None},
            {"address": 0x200, "type": order_type, "size": 8, "error": "type"},
        ])

        state, outcomes = _classify_all(provider)

        assert outcomes == ["skipped", "skipped"]
        assert state.types == {}
        assert state.strings == {}
        assert state.skip_reasons == {"unresolved_type": 2}

    def test_unreadable_text_flag_is_unresolved(self, make_provider, make_type):
        broken = make_type("broken", "Corrupt")
        provider = make_provider([{"address": 0x100, "type": broken, "size": 8}])

        state, outcomes = _classify_all(provider)

        assert outcomes == ["skipped"]
        assert state.types == {}
        assert state.skip_reasons == {"unresolved_type": 1}
        assert state.objects_seen == state.skipped_count

    def test_string_check_happens_before_any_read(self, make_provider, string_type, order_type):
        """Strings never have their instance size read, and vice versa."""
        provider = make_provider([
            {"address": 0x100, "type": string_type, "value": "s", "error": "size"},
            {"address": 0x200, "type": order_type, "size": 16, "error": "read"},
        ])

        state, outcomes = _classify_all(provider)

        assert outcomes == ["string", "instance"]
        assert state.strings["s"].count == 1
        assert state.types[order_type].count == 1

    def test_every_object_lands_in_exactly_one_place(self, make_provider, string_type, order_type, customer_type):
        objects = []
        for i in range(60):
            address = 0x1000 + i * 0x10
            kind = i % 6
            if kind == 0:
                objects.append({"address": address, "type": string_type, "value": f"v{i % 4}"})
            elif kind == 1:
                objects.append({"address": address, "type": order_type, "size": 24})
            elif kind == 2:
                objects.append({"address": address, "type": customer_type, "size": 40})
            elif kind == 3:
                objects.append({"address": address, "type": None})
            elif kind == 4:
                objects.append({"address": address, "type": string_type, "error": "read"})
            else:
                objects.append({"address": address, "type": order_type, "error": "size"})
        provider = make_provider(objects)

        state, _ = _classify_all(provider)

        type_total = sum(bucket.count for bucket in state.types.values())
        string_total = sum(bucket.count for bucket in state.strings.values())
        assert type_total + string_total + state.skipped_count == len(objects)
        assert state.objects_seen == len(objects)
        assert state.classified_count == type_total + string_total
        assert state.skipped_count == 30

    def test_string_bucket_count_matches_distinct_addresses(self, make_provider, string_type):
        objects = [
            {"address": 0x10 + i, "type": string_type, "value": "abc" if i % 3 else "zz"}
            for i in range(12)
        ]
        provider = make_provider(objects)

        state, _ = _classify_all(provider)

        for value, bucket in state.strings.items():
            addresses = {obj["address"] for obj in objects if obj["value"] == value}
            assert bucket.count == len(addresses)
            assert len(bucket.samples) <= 3
            assert bucket.samples == sorted(addresses)[:3]
