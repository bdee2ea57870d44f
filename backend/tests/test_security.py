from fastapi.testclient import TestClient


def test_payload_too_big(client: TestClient, broker, settings):
    large_payload = {"data": "x" * (settings.max_body_bytes + 1)}

    response = client.post(
        "/payments/webhook",
        json=large_payload,
        headers={"Stripe-Signature": "test_sig"},
    )
    assert response.status_code == 413
    assert response.json() == {"detail": "Payload too large"}
    assert broker.messages == []


def test_payload_within_limit_reaches_handler(client: TestClient, processor):
    processor.reject_with = "Invalid signature"

    response = client.post(
        "/payments/webhook",
        json={"data": "small"},
        headers={"Stripe-Signature": "test_sig"},
    )
    assert response.status_code == 400
    assert processor.verify_calls == 1
