import pytest

from fedledger.core.exceptions import InvalidArgumentError
from fedledger.ledger import (
    CompositeKey,
    InMemoryLedger,
    Namespace,
    client_selected_for_round_key,
    end_round_model_key,
    model_metadata_key,
    original_model_key,
)


def test_encode_layout():
    key = original_model_key("m1", 0, "A")
    assert key.encode() == "\x00originalModelKey\x00m1\x000\x00A\x00"
    assert str(key) == key.encode()


def test_decode_inverts_encode():
    key = end_round_model_key("m1", 3)
    decoded = CompositeKey.decode(key.encode())
    assert decoded == key
    assert decoded.namespace is Namespace.END_ROUND_MODEL
    assert decoded.segments == ("m1", "3")


def test_partial_keys():
    assert original_model_key("m1").is_partial
    assert original_model_key("m1", 0).is_partial
    assert not original_model_key("m1", 0, "A").is_partial
    assert not model_metadata_key("m1").is_partial


def test_child_extends_prefix():
    prefix = original_model_key("m1", 2)
    assert prefix.child("A") == original_model_key("m1", 2, "A")


def test_rejects_null_in_segment():
    with pytest.raises(InvalidArgumentError):
        model_metadata_key("m\x001")


def test_rejects_extra_segments():
    with pytest.raises(InvalidArgumentError):
        CompositeKey(Namespace.MODEL_METADATA, ("m1", "extra"))


def test_client_requires_round():
    with pytest.raises(InvalidArgumentError):
        original_model_key("m1", client_id="A")


@pytest.mark.parametrize(
    "raw",
    ["originalModelKey\x00m1\x00", "\x00unknownKey\x00m1\x00"],
)
def test_decode_rejects_foreign_keys(raw: str):
    with pytest.raises(InvalidArgumentError):
        CompositeKey.decode(raw)


def test_namespaces_do_not_collide():
    assert (
        model_metadata_key("m1").encode()
        != client_selected_for_round_key("m1").encode()
    )
    # Different namespaces share no prefix.
    assert not original_model_key("m1").encode().startswith(
        model_metadata_key("m1").encode()
    )


def test_prefix_scan_returns_exact_subtree():
    ledger = InMemoryLedger(
        initial={
            original_model_key("m1", 1, "A").encode(): "a1",
            original_model_key("m1", 1, "B").encode(): "b1",
            original_model_key("m1", 10, "A").encode(): "a10",
            original_model_key("m10", 1, "A").encode(): "other-model",
            end_round_model_key("m1", 1).encode(): "aggregate",
        }
    )

    with ledger.evaluate() as stub:
        round_one = [
            kv.value
            for kv in stub.get_state_by_prefix(
                original_model_key("m1", 1).encode()
            )
        ]
        whole_model = [
            kv.value
            for kv in stub.get_state_by_prefix(
                original_model_key("m1").encode()
            )
        ]

    assert round_one == ["a1", "b1"]
    assert whole_model == ["a1", "b1", "a10"]
