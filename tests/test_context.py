"""Observation Context & KeyValue Tests."""

import pytest

from lookout_core.context import Cardinality, ObservationContext
from lookout_core.exceptions import IllegalStateError
from lookout_core.keyvalue import UNKNOWN, KeyValue, first_value


def test_key_value_equality_and_immutability():
    """Test key values compare by value and cannot be mutated."""
    kv = KeyValue.of("userType", "userType2")

    assert kv == KeyValue(key="userType", value="userType2")
    assert hash(kv) == hash(KeyValue.of("userType", "userType2"))
    assert kv != KeyValue.of("userType", "other")
    with pytest.raises(Exception):
        kv.value = "changed"


def test_key_value_coerces_value_to_string():
    """Test key value values are stored as strings."""
    assert KeyValue.of("status", 200).value == "200"


def test_first_value_default():
    """Test first_value falls back to the default for a missing key."""
    tags = [KeyValue.of("a", "1")]
    assert first_value(tags, "missing") == UNKNOWN
    assert first_value(tags, "missing", default="n/a") == "n/a"


def test_create_starts_with_empty_tags():
    """Test a new context has no tags."""
    context = ObservationContext.create("user.name", "getting-user-name")

    assert context.name == "user.name"
    assert context.contextual_name == "getting-user-name"
    assert context.low_cardinality_tags == ()
    assert context.high_cardinality_tags == ()
    assert context.parent is None
    assert context.duration is None


def test_contextual_name_optional():
    """Test contextual name defaults to empty."""
    assert ObservationContext.create("work").contextual_name == ""


def test_tags_are_appended_in_order_without_dedup():
    """Test same-key tags are both kept and the first wins on lookup."""
    context = ObservationContext.create("work")
    context.add_low_cardinality_tag("userType", "first")
    context.add_low_cardinality_tag("userType", "second")

    assert [kv.value for kv in context.low_cardinality_tags] == ["first", "second"]
    assert context.get_tag_value("userType") == "first"


def test_missing_tag_returns_unknown():
    """Test a missing tag resolves to UNKNOWN."""
    context = ObservationContext.create("work")
    context.add_low_cardinality_tag("other", "x")

    assert context.get_tag_value("userType") == "UNKNOWN"


def test_cardinalities_are_separate():
    """Test low and high cardinality tags are kept apart."""
    context = ObservationContext.create("work")
    context.add_tag(Cardinality.LOW, "region", "eu")
    context.add_tag(Cardinality.HIGH, "user_id", "42")

    assert context.get_tags(Cardinality.LOW) == (KeyValue.of("region", "eu"),)
    assert context.get_tags(Cardinality.HIGH) == (KeyValue.of("user_id", "42"),)
    assert context.get_tag_value("user_id") == UNKNOWN
    assert context.get_tag_value("user_id", Cardinality.HIGH) == "42"
    assert context.all_tags == (KeyValue.of("region", "eu"), KeyValue.of("user_id", "42"))


def test_get_tags_is_a_read_only_view():
    """Test returned tags are a snapshot unaffected by later additions."""
    context = ObservationContext.create("work")
    context.add_low_cardinality_tag("a", "1")
    tags = context.get_tags(Cardinality.LOW)

    context.add_low_cardinality_tag("b", "2")

    assert len(tags) == 1
    assert isinstance(tags, tuple)


def test_sealed_context_rejects_mutation():
    """Test a sealed context rejects tag and name changes."""
    context = ObservationContext.create("work")
    context.seal()

    with pytest.raises(IllegalStateError):
        context.add_low_cardinality_tag("a", "1")
    with pytest.raises(IllegalStateError):
        context.add_high_cardinality_tag("a", "1")
    with pytest.raises(IllegalStateError):
        context.contextual_name = "renamed"


def test_handler_state_survives_sealing():
    """Test handler state stays writable after sealing."""
    context = ObservationContext.create("work")
    context.put("timer", 1)
    context.seal()

    context.put("span", 2)
    assert context.get("timer") == 1
    assert context.remove("span") == 2
    assert context.get("span") is None
