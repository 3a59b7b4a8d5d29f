import random

import pytest

from devicelink.protocol import (
    LOG_MESSAGES,
    SEVERITIES,
    MessageType,
    ProtocolError,
    compact,
    connection_ack,
    data_ack,
    decode_message,
    device_status,
    encode_message,
    log_entry,
    network_metrics,
)


def test_encode_message_wire_format():
    data = encode_message(connection_ack("Client_1"))
    assert data == b'{\n    "client_id": "Client_1",\n    "type": "connection_ack"\n}\n'


@pytest.mark.parametrize(
    "message",
    [
        connection_ack("Client_7"),
        data_ack("Log"),
        {"type": "Log", "severity": "INFO", "message": "Disk space low"},
        {"type": "DeviceStatus", "uptime": 10, "cpu_usage": 5, "memory_usage": 99},
    ],
)
def test_round_trip(message):
    assert decode_message(encode_message(message)) == message


def test_decode_accepts_str():
    assert decode_message('{"type": "Log"}') == {"type": "Log"}


def test_decode_invalid_json_raises():
    with pytest.raises(ProtocolError) as info:
        decode_message(b"{not json")
    assert info.value.not_object is False


def test_decode_non_object_raises():
    with pytest.raises(ProtocolError) as info:
        decode_message(b"[1, 2, 3]")
    assert info.value.not_object is True
    assert str(info.value) == "Received data is not a JSON object"


def test_compact_is_single_line_sorted():
    text = compact({"type": "Log", "severity": "INFO"})
    assert text == '{"severity":"INFO","type":"Log"}'


def test_data_ack_fields():
    assert data_ack("NetworkMetrics") == {
        "type": "data_ack",
        "data_type": "NetworkMetrics",
        "status": "received",
    }


def test_network_metrics_ranges():
    rng = random.Random(1)
    for _ in range(200):
        m = network_metrics(rng)
        assert m["type"] == MessageType.NETWORK_METRICS
        assert 0 <= m["bandwidth"] <= 99.9
        assert 0 <= m["latency"] <= 9.9
        assert 0 <= m["packet_loss"] <= 0.049


def test_network_metrics_deterministic_with_seed():
    first_rng = random.Random(5)
    second_rng = random.Random(5)
    first = [network_metrics(first_rng) for _ in range(20)]
    second = [network_metrics(second_rng) for _ in range(20)]
    assert first == second
    assert {"type", "bandwidth", "latency", "packet_loss"} == set(first[0])
    assert len({m["bandwidth"] for m in first}) > 1


def test_device_status_ranges():
    rng = random.Random(2)
    for _ in range(200):
        s = device_status(rng)
        assert s["type"] == MessageType.DEVICE_STATUS.value
        assert 0 <= s["uptime"] < 100000
        assert 0 <= s["cpu_usage"] < 100
        assert 0 <= s["memory_usage"] < 100
        assert all(isinstance(s[k], int) for k in ("uptime", "cpu_usage", "memory_usage"))


def test_log_entry_choices():
    rng = random.Random(3)
    seen = {log_entry(rng)["severity"] for _ in range(300)}
    assert seen == set(SEVERITIES)
    entry = log_entry(rng)
    assert entry["type"] == "Log"
    assert entry["message"] in LOG_MESSAGES


def test_generated_messages_survive_encoding():
    rng = random.Random(4)
    for build in (network_metrics, device_status, log_entry):
        message = build(rng)
        assert decode_message(encode_message(message)) == message