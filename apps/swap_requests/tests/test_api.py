import pytest
from django.urls import reverse
from rest_framework import status

from apps.swap_requests.models import RequestStatus


@pytest.mark.django_db
def test_create_request(api_client, owner, requester, make_offer):
    offer = make_offer(owner)
    api_client.force_authenticate(user=requester)

    response = api_client.post(
        reverse("swap-request-list"),
        {
            "offer_id": offer.id,
            "message": "Would you swap for Spanish lessons?",
            "return_title": "Spanish lessons",
            "return_description": "Two conversation sessions a week",
            "return_category": "skill",
            "return_value_amount": "90.00",
        },
        format="json",
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.data["data"]
    assert data["status"] == RequestStatus.PENDING
    assert data["offer"]["id"] == offer.id
    assert data["offer_owner"]["id"] == owner.id
    assert data["return_value"]["amount"] == "90.00"
    assert data["transaction_id"] is None


@pytest.mark.django_db
def test_create_request_needs_return_offer(api_client, owner, requester, make_offer):
    offer = make_offer(owner)
    api_client.force_authenticate(user=requester)

    response = api_client.post(
        reverse("swap-request-list"),
        {"offer_id": offer.id, "message": "Interested in this"},
        format="json",
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert {"return_title", "return_description", "return_category"} <= set(response.data["data"])


@pytest.mark.django_db
def test_duplicate_request_is_409(api_client, owner, requester, make_offer, make_request):
    offer = make_offer(owner)
    make_request(requester, offer)
    api_client.force_authenticate(user=requester)

    response = api_client.post(
        reverse("swap-request-list"),
        {
            "offer_id": offer.id,
            "message": "Again",
            "return_title": "Spanish lessons",
            "return_description": "Two conversation sessions a week",
            "return_category": "skill",
        },
        format="json",
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.data["code"] == "conflict"


@pytest.mark.django_db
def test_respond_twice(api_client, owner, requester, make_offer, make_request):
    swap_request = make_request(requester, make_offer(owner))
    api_client.force_authenticate(user=owner)
    url = reverse("swap-request-respond", args=[swap_request.id])

    first = api_client.post(url, {"decision": "accepted"}, format="json")
    second = api_client.post(url, {"decision": "rejected"}, format="json")

    assert first.status_code == status.HTTP_200_OK
    assert first.data["data"]["status"] == "accepted"
    assert second.status_code == status.HTTP_409_CONFLICT


@pytest.mark.django_db
def test_requester_cannot_respond(api_client, owner, requester, make_offer, make_request):
    swap_request = make_request(requester, make_offer(owner))
    api_client.force_authenticate(user=requester)

    response = api_client.post(
        reverse("swap-request-respond", args=[swap_request.id]),
        {"decision": "accepted"},
        format="json",
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_full_negotiation_over_api(api_client, owner, requester, make_offer, make_request):
    swap_request = make_request(requester, make_offer(owner))

    api_client.force_authenticate(user=owner)
    api_client.post(
        reverse("swap-request-respond", args=[swap_request.id]),
        {"decision": "negotiating"},
        format="json",
    )
    proposal = api_client.post(
        reverse("swap-request-negotiations", args=[swap_request.id]),
        {"changes": "Make it four sessions"},
        format="json",
    )
    assert proposal.status_code == status.HTTP_201_CREATED

    api_client.force_authenticate(user=requester)
    response = api_client.post(
        reverse(
            "swap-request-respond-to-negotiation",
            args=[swap_request.id, proposal.data["data"]["id"]],
        ),
        {"decision": "accepted"},
        format="json",
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.data["data"]
    assert data["status"] == "confirmed"
    assert data["negotiations"][0]["status"] == "accepted"
    assert data["transaction_id"] is not None


@pytest.mark.django_db
def test_messages_and_unread(api_client, owner, requester, make_offer, make_request):
    swap_request = make_request(requester, make_offer(owner))

    api_client.force_authenticate(user=requester)
    sent = api_client.post(
        reverse("swap-request-messages", args=[swap_request.id]),
        {"text": "When are you free?"},
        format="json",
    )
    assert sent.status_code == status.HTTP_201_CREATED
    assert sent.data["data"]["sequence"] == 1

    api_client.force_authenticate(user=owner)
    detail = api_client.get(reverse("swap-request-detail", args=[swap_request.id]))
    assert detail.data["data"]["unread_count"] == 1

    read = api_client.post(reverse("swap-request-mark-read", args=[swap_request.id]))
    assert read.data["data"] == {"updated": 1}


@pytest.mark.django_db
def test_list_sent_requests(api_client, owner, requester, make_offer, make_request):
    make_request(requester, make_offer(owner))
    api_client.force_authenticate(user=owner)

    received = api_client.get(reverse("swap-request-list"), {"type": "received"})
    sent = api_client.get(reverse("swap-request-list"), {"type": "sent"})

    assert received.data["data"]["pagination"]["total"] == 1
    assert "messages" not in received.data["data"]["results"][0]
    assert sent.data["data"]["pagination"]["total"] == 0


@pytest.mark.django_db
def test_outsider_cannot_view_request(api_client, owner, requester, make_user, make_offer, make_request):
    swap_request = make_request(requester, make_offer(owner))
    api_client.force_authenticate(user=make_user())

    response = api_client.get(reverse("swap-request-detail", args=[swap_request.id]))

    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_dispute_over_api(api_client, confirmed_request, owner, moderator):
    api_client.force_authenticate(user=owner)
    raised = api_client.post(
        reverse("swap-request-dispute", args=[confirmed_request.id]),
        {"reason": "misrepresentation", "description": "Not what was offered"},
        format="json",
    )
    assert raised.status_code == status.HTTP_200_OK
    assert raised.data["data"]["status"] == "disputed"

    api_client.force_authenticate(user=moderator)
    resolved = api_client.post(
        reverse("swap-request-resolve-dispute", args=[confirmed_request.id]),
        {"status": "closed", "resolution": "Both parties agreed to walk away"},
        format="json",
    )
    assert resolved.status_code == status.HTTP_200_OK
    assert resolved.data["data"]["dispute"]["status"] == "closed"


@pytest.mark.django_db
def test_requests_cannot_be_deleted(api_client, owner, requester, make_offer, make_request):
    swap_request = make_request(requester, make_offer(owner))
    api_client.force_authenticate(user=requester)

    response = api_client.delete(reverse("swap-request-detail", args=[swap_request.id]))

    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
