import pytest
from django.urls import reverse
from rest_framework import status

from apps.swap_requests.services import NegotiationService
from apps.swap_transactions.models import SwapTransaction


@pytest.fixture
def transaction_id(confirmed_request, owner, actor_for):
    NegotiationService.start(confirmed_request.id, actor_for(owner))
    return SwapTransaction.objects.get(request=confirmed_request).id


@pytest.mark.django_db
def test_retrieve_transaction(api_client, transaction_id, requester):
    api_client.force_authenticate(user=requester)

    response = api_client.get(reverse("swap-transaction-detail", args=[transaction_id]))

    assert response.status_code == status.HTTP_200_OK
    data = response.data["data"]
    assert data["status"] == "in_progress"
    assert data["value_exchange"] == {
        "totalValue": "170.00",
        "valueDifference": "30.00",
        "isBalanced": True,
        "currency": "USD",
    }
    assert {p["role"] for p in data["participants"]} == {"requester", "offer_owner"}
    assert data["dispute"] is None


@pytest.mark.django_db
def test_outsider_cannot_retrieve(api_client, transaction_id, make_user):
    api_client.force_authenticate(user=make_user())

    response = api_client.get(reverse("swap-transaction-detail", args=[transaction_id]))

    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_list_my_transactions(api_client, transaction_id, owner):
    api_client.force_authenticate(user=owner)

    response = api_client.get(reverse("swap-transaction-list"), {"is_balanced": "true"})

    assert [t["id"] for t in response.data["data"]["results"]] == [transaction_id]


@pytest.mark.django_db
def test_feedback_once(api_client, transaction_id, owner, requester):
    api_client.force_authenticate(user=requester)
    url = reverse("swap-transaction-feedback", args=[transaction_id])
    payload = {
        "to_user": owner.id,
        "rating": 5,
        "comment": "Patient and thorough",
        "categories": [{"category": "quality", "rating": 5}],
    }

    first = api_client.post(url, payload, format="json")
    second = api_client.post(url, payload, format="json")

    assert first.status_code == status.HTTP_201_CREATED
    assert first.data["data"]["rating"] == 5
    assert second.status_code == status.HTTP_409_CONFLICT


@pytest.mark.django_db
def test_feedback_rating_validated(api_client, transaction_id, owner, requester):
    api_client.force_authenticate(user=requester)

    response = api_client.post(
        reverse("swap-transaction-feedback", args=[transaction_id]),
        {"to_user": owner.id, "rating": 9},
        format="json",
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
def test_complete_and_revalue(api_client, transaction_id, owner):
    api_client.force_authenticate(user=owner)

    revalued = api_client.post(
        reverse("swap-transaction-revalue", args=[transaction_id]),
        {"role": "offer_owner", "amount": "200.00"},
        format="json",
    )
    assert revalued.status_code == status.HTTP_200_OK
    assert revalued.data["data"]["value_exchange"]["isBalanced"] is False

    completed = api_client.post(
        reverse("swap-transaction-complete", args=[transaction_id]),
        {"notes": "Done", "deliverables": [{"title": "Recording", "kind": "other"}]},
        format="json",
    )
    assert completed.status_code == status.HTTP_200_OK
    assert completed.data["data"]["status"] == "completed"
    assert completed.data["data"]["deliverables"][0]["title"] == "Recording"

    late = api_client.post(
        reverse("swap-transaction-revalue", args=[transaction_id]),
        {"role": "offer_owner", "amount": "100.00"},
        format="json",
    )
    assert late.status_code == status.HTTP_409_CONFLICT


@pytest.mark.django_db
def test_transactions_cannot_be_created_directly(api_client, owner):
    api_client.force_authenticate(user=owner)

    response = api_client.post(reverse("swap-transaction-list"), {}, format="json")

    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
