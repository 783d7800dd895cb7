import uuid

import pytest

from tours.models import Tour

pytestmark = pytest.mark.django_db

TOURS = "/api/v1/tours/"


def _detail(tour_id):
    return f"{TOURS}{tour_id}/"


@pytest.fixture
def staff(make_user):
    return make_user(email="lead@example.com", name="Lead", role="lead-guide")


@pytest.fixture
def catalogue(make_tour):
    return [
        make_tour(name="Tour Alpha Ridge", ratings_average=4.8, price=900, duration=3),
        make_tour(name="Tour Bravo Coast", ratings_average=4.8, price=300, duration=7),
        make_tour(name="Tour Charlie Peak", ratings_average=4.2, price=100, duration=10),
        make_tour(name="Tour Delta Lakes", ratings_average=4.9, price=1500, duration=5),
        make_tour(name="Tour Echo Valley", ratings_average=3.9, price=200, duration=14),
        make_tour(name="Tour Foxtrot Dunes", ratings_average=4.8, price=600, duration=2),
        make_tour(name="Tour Golf Islands", ratings_average=4.0, price=50, duration=8),
    ]


# ---------- listing ----------

def test_list_sort_limit_tie_break(client, catalogue):
    res = client.get(TOURS, {"sort": "-ratingsAverage,price", "limit": "5"})
    assert res.status_code == 200
    body = res.json()
    names = [t["name"] for t in body["data"]["tours"]]
    assert body["results"] == 5
    assert names == [
        "Tour Delta Lakes",
        "Tour Bravo Coast",
        "Tour Foxtrot Dunes",
        "Tour Alpha Ridge",
        "Tour Charlie Peak",
    ]


def test_list_default_sort_is_rating_descending(client, catalogue):
    ratings = [t["ratingsAverage"] for t in client.get(TOURS).json()["data"]["tours"]]
    assert ratings == sorted(ratings, reverse=True)


def test_list_range_filter(client, catalogue):
    res = client.get(TOURS, {"duration[gte]": "7", "price[lt]": "250"})
    names = sorted(t["name"] for t in res.json()["data"]["tours"])
    assert names == ["Tour Charlie Peak", "Tour Echo Valley", "Tour Golf Islands"]


def test_list_equality_filter(client, make_tour):
    make_tour(name="Tour Medium Stuff", difficulty="medium")
    make_tour(name="Tour Easy Stuff", difficulty="easy")
    tours = client.get(TOURS, {"difficulty": "medium"}).json()["data"]["tours"]
    assert [t["name"] for t in tours] == ["Tour Medium Stuff"]


def test_list_reserved_keys_only_matches_everything(client, catalogue):
    res = client.get(TOURS, {"page": "1", "limit": "100", "sort": "price", "fields": "name"})
    assert res.json()["results"] == len(catalogue)


def test_list_default_projection_hides_timestamps(client, catalogue):
    tour = client.get(TOURS).json()["data"]["tours"][0]
    assert "createdAt" not in tour
    assert "updatedAt" not in tour
    assert "durationWeeks" in tour
    assert "name" in tour


def test_list_field_projection(client, catalogue):
    tours = client.get(TOURS, {"fields": "name,price"}).json()["data"]["tours"]
    assert all(set(t) == {"id", "name", "price"} for t in tours)


def test_list_pagination(client, catalogue):
    first = client.get(TOURS, {"sort": "price", "limit": "3", "page": "1"}).json()["data"]["tours"]
    second = client.get(TOURS, {"sort": "price", "limit": "3", "page": "2"}).json()["data"]["tours"]
    assert [t["price"] for t in first] == [50, 100, 200]
    assert [t["price"] for t in second] == [300, 600, 900]


def test_list_non_numeric_page_is_first_page(client, catalogue):
    body = client.get(TOURS, {"sort": "price", "limit": "2", "page": "abc"}).json()
    assert [t["price"] for t in body["data"]["tours"]] == [50, 100]


def test_list_oversized_limit_falls_back_to_default(client, catalogue):
    res = client.get(TOURS, {"limit": "99999999999999999999"})
    assert res.status_code == 200
    assert res.json()["results"] == len(catalogue)


def test_list_oversized_page_falls_back_to_first_page(client, catalogue):
    res = client.get(TOURS, {"sort": "price", "limit": "2", "page": "99999999999999999999"})
    assert res.status_code == 200
    assert [t["price"] for t in res.json()["data"]["tours"]] == [50, 100]


def test_list_page_past_the_last_record_is_empty(client, catalogue):
    res = client.get(TOURS, {"limit": "100", "page": str(10 ** 12)})
    assert res.status_code == 200
    assert res.json()["results"] == 0


def test_list_hides_secret_tours(client, make_tour):
    make_tour(name="Tour Public Trail")
    secret = make_tour(name="Tour Secret Trail", secret_tour=True)
    names = [t["name"] for t in client.get(TOURS).json()["data"]["tours"]]
    assert names == ["Tour Public Trail"]
    assert client.get(_detail(secret.id)).status_code == 404


def test_list_unknown_filter_field_is_client_error(client, catalogue):
    res = client.get(TOURS, {"nonsense": "1"})
    assert res.status_code == 400
    assert res.json()["status"] == "fail"


def test_list_uncastable_filter_value(client, catalogue):
    res = client.get(TOURS, {"price[gte]": "abc"})
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid price: abc."


def test_list_unsupported_operator(client, catalogue):
    res = client.get(TOURS, {"price[ne]": "100"})
    assert res.status_code == 400


@pytest.mark.parametrize("key", ["images[gte]", "startDates[lt]"])
def test_list_range_operator_on_list_field(client, catalogue, key):
    res = client.get(TOURS, {key: "x"})
    assert res.status_code == 400
    assert "is not supported on" in res.json()["message"]


def test_list_limit_cap(client, catalogue, settings):
    settings.API_MAX_PAGE_LIMIT = 2
    assert client.get(TOURS, {"limit": "50"}).json()["results"] == 2


def test_top_five_cheap(client, catalogue):
    tours = client.get(f"{TOURS}top-5-cheap/").json()["data"]["tours"]
    assert len(tours) == 5
    assert tours[0]["name"] == "Tour Delta Lakes"
    assert set(tours[0]) == {"id", "name", "price", "ratingsAverage", "summary", "difficulty"}


# ---------- detail ----------

def test_get_tour(client, make_tour):
    tour = make_tour(duration=14)
    res = client.get(_detail(tour.id))
    assert res.status_code == 200
    data = res.json()["data"]["tour"]
    assert data["id"] == str(tour.id)
    assert data["durationWeeks"] == 2.0
    assert data["slug"] == "the-test-tour-number-1"


def test_get_tour_unknown_id(client, db):
    res = client.get(_detail(uuid.uuid4()))
    assert res.status_code == 404
    assert res.json() == {"status": "fail", "message": "No tour found with that ID"}


def test_get_tour_malformed_id(client, db):
    res = client.get(_detail("not-a-uuid"))
    assert res.status_code == 400
    assert res.json() == {"status": "fail", "message": "Invalid id: not-a-uuid."}


# ---------- create ----------

def test_create_tour_as_staff(client, staff, auth_header, tour_payload):
    res = client.post(TOURS, tour_payload(), content_type="application/json", **auth_header(staff))
    assert res.status_code == 201
    data = res.json()["data"]["tour"]
    assert data["name"] == "The Forest Hiker"
    assert data["slug"] == "the-forest-hiker"
    assert data["ratingsAverage"] == 4.5
    assert Tour.objects.count() == 1


def test_create_tour_requires_login(client, db, tour_payload):
    res = client.post(TOURS, tour_payload(), content_type="application/json")
    assert res.status_code == 401
    assert Tour.objects.count() == 0


def test_create_tour_as_standard_user_is_forbidden(client, user, auth_header, tour_payload):
    res = client.post(TOURS, tour_payload(), content_type="application/json", **auth_header(user))
    assert res.status_code == 403
    assert res.json() == {
        "status": "fail",
        "message": "You do not have permission to perform this action",
    }
    assert Tour.objects.count() == 0


def test_create_tour_validation_messages(client, admin, auth_header, tour_payload):
    res = client.post(
        TOURS,
        tour_payload(name="Short", ratingsAverage=6, priceDiscount=500, difficulty="extreme"),
        content_type="application/json",
        **auth_header(admin),
    )
    assert res.status_code == 400
    message = res.json()["message"]
    assert message.startswith("Invalid input data.")
    assert "more or equal than 10 characters" in message
    assert "Rating must be below 5.0" in message
    assert "Discount price (500) should be below regular price" in message
    assert "Difficulty is either: easy, medium, difficult" in message


def test_create_tour_duplicate_name(client, admin, auth_header, tour_payload, make_tour):
    make_tour(name="The Forest Hiker")
    res = client.post(TOURS, tour_payload(), content_type="application/json", **auth_header(admin))
    assert res.status_code == 400
    body = res.json()
    assert body["status"] == "fail"
    assert "name" in body["message"]
    assert "The Forest Hiker" in body["message"]


def test_create_tour_missing_required_fields(client, admin, auth_header):
    res = client.post(TOURS, {}, content_type="application/json", **auth_header(admin))
    assert res.status_code == 400
    assert "A tour must have a name" in res.json()["message"]


# ---------- update / delete ----------

def test_update_tour(client, staff, auth_header, make_tour):
    tour = make_tour(price=500)
    res = client.patch(
        _detail(tour.id),
        {"price": 450, "name": "The Renamed Tour"},
        content_type="application/json",
        **auth_header(staff),
    )
    assert res.status_code == 200
    data = res.json()["data"]["tour"]
    assert data["price"] == 450
    assert data["slug"] == "the-renamed-tour"
    tour.refresh_from_db()
    assert tour.price == 450


def test_update_tour_runs_validators(client, staff, auth_header, make_tour):
    tour = make_tour(price=500)
    res = client.patch(
        _detail(tour.id),
        {"priceDiscount": 700},
        content_type="application/json",
        **auth_header(staff),
    )
    assert res.status_code == 400
    tour.refresh_from_db()
    assert tour.price_discount is None


def test_update_tour_as_guide_is_forbidden(client, make_user, auth_header, make_tour):
    guide = make_user(email="guide@example.com", role="guide")
    tour = make_tour(price=500)
    res = client.patch(_detail(tour.id), {"price": 1}, content_type="application/json", **auth_header(guide))
    assert res.status_code == 403
    tour.refresh_from_db()
    assert tour.price == 500


def test_delete_tour(client, admin, auth_header, make_tour):
    tour = make_tour()
    res = client.delete(_detail(tour.id), **auth_header(admin))
    assert res.status_code == 204
    assert res.content == b""
    assert not Tour.objects.filter(pk=tour.pk).exists()


def test_delete_tour_as_standard_user(client, user, auth_header, make_tour):
    tour = make_tour()
    res = client.delete(_detail(tour.id), **auth_header(user))
    assert res.status_code == 403
    assert Tour.objects.filter(pk=tour.pk).exists()


def test_tour_detail_wrong_method(client, make_tour):
    tour = make_tour()
    assert client.put(_detail(tour.id), {}, content_type="application/json").status_code == 405
