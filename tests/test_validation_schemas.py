"""
Request schemas: coercion rules, constraints and error messages.

Errors are checked in the same ``{"field", "message"}`` shape the API returns.
"""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from tests.helpers import future_date
from yatra.dto.search import AutocompleteQuery, SearchQuery
from yatra.middleware.validation import format_validation_errors
from yatra.models.booking import Booking, parse_booking_date, start_of_today
from yatra.models.common import MAX_PAGE_SIZE, Coordinates, IdParam, PaginationQuery
from yatra.models.enum import BookingStatus, SearchType
from yatra.models.guide import Guide
from yatra.models.homestay import Homestay
from yatra.models.product import Product


def errors_of(schema, data):
    with pytest.raises(ValidationError) as exc_info:
        schema.model_validate(data)
    return format_validation_errors(exc_info.value.errors())


def messages_for(errors, field):
    return [error["message"] for error in errors if error["field"] == field]


# ── Common ────────────────────────────────────────────────────────────────


class TestPaginationQuery:
    """page/limit coercion never fails, it falls back."""

    def test_defaults(self):
        query = PaginationQuery.model_validate({})
        assert (query.page, query.limit, query.skip) == (1, 10, 0)

    def test_string_values_are_parsed(self):
        query = PaginationQuery.model_validate({"page": "3", "limit": "20"})
        assert (query.page, query.limit, query.skip) == (3, 20, 40)

    @pytest.mark.parametrize("page", ["0", "-2", "abc", ""])
    def test_bad_page_falls_back_to_first(self, page):
        assert PaginationQuery.model_validate({"page": page}).page == 1

    @pytest.mark.parametrize("limit", ["0", "-3", "many", ""])
    def test_bad_limit_falls_back_to_default(self, limit):
        assert PaginationQuery.model_validate({"limit": limit}).limit == 10

    def test_limit_is_capped(self):
        assert PaginationQuery.model_validate({"limit": "500"}).limit == MAX_PAGE_SIZE


class TestIdParam:
    def test_accepts_object_id(self):
        assert IdParam.model_validate({"id": "507f1f77bcf86cd799439011"}).id == "507f1f77bcf86cd799439011"

    @pytest.mark.parametrize("value", ["123", "507f1f77bcf86cd79943901z", "507f1f77bcf86cd7994390111"])
    def test_rejects_malformed_id(self, value):
        assert errors_of(IdParam, {"id": value}) == [{"field": "id", "message": "Invalid ID format"}]


class TestCoordinates:
    def test_bounds(self):
        errors = errors_of(Coordinates, {"lat": 91, "lng": -181})
        assert {error["field"] for error in errors} == {"lat", "lng"}


# ── Listings ──────────────────────────────────────────────────────────────


class TestHomestaySchemas:
    """Homestay create/update/query schemas."""

    def test_create_strips_and_defaults(self, homestay_data):
        homestay = Homestay.Create.model_validate({**homestay_data, "title": "  Hilltop Cottage  "})

        assert homestay.title == "Hilltop Cottage"
        assert homestay.location.state == "Jharkhand"
        assert homestay.images == ["https://example.com/cottage.jpg"]

    def test_base_price_minimum(self, homestay_data):
        data = {**homestay_data, "pricing": {"base_price": 99}}
        errors = errors_of(Homestay.Create, data)
        assert messages_for(errors, "pricing.base_price")

    def test_blank_title_rejected(self, homestay_data):
        errors = errors_of(Homestay.Create, {**homestay_data, "title": "   "})
        assert messages_for(errors, "title")

    def test_invalid_image_url_rejected(self, homestay_data):
        errors = errors_of(Homestay.Create, {**homestay_data, "images": ["not-a-url"]})
        assert messages_for(errors, "images.0")

    def test_invalid_property_type_rejected(self, homestay_data):
        errors = errors_of(Homestay.Create, {**homestay_data, "property_type": "castle"})
        assert messages_for(errors, "property_type")

    def test_update_keeps_only_sent_fields(self):
        update = Homestay.Update.model_validate({"title": "New name"})
        assert update.model_dump(exclude_unset=True) == {"title": "New name"}

    def test_query_prices_parsed(self):
        query = Homestay.Query.model_validate({"district": "Ranchi", "min_price": "500", "max_price": "2500"})
        assert (query.district, query.min_price, query.max_price) == ("Ranchi", 500, 2500)

    def test_query_ignores_unparseable_prices(self):
        query = Homestay.Query.model_validate({"min_price": "cheap", "max_price": ""})
        assert query.min_price is None
        assert query.max_price is None

    def test_query_accepts_camel_case_prices(self):
        query = Homestay.Query.model_validate({"minPrice": "500", "maxPrice": "2000"})
        assert (query.min_price, query.max_price) == (500, 2000)

    @pytest.mark.parametrize("field", ["title", "status", "pricing", "amenities"])
    def test_update_rejects_null(self, field):
        errors = errors_of(Homestay.Update, {field: None})
        assert errors == [{"field": field, "message": "Field cannot be null"}]

    def test_update_allows_clearing_house_rules(self):
        update = Homestay.Update.model_validate({"house_rules": None})
        assert update.model_dump(exclude_unset=True) == {"house_rules": None}


class TestGuideSchemas:
    def test_valid_guide(self, guide_data):
        guide = Guide.Create.model_validate(guide_data)
        assert guide.location.state == "Jharkhand"
        assert guide.availability.value == "available"

    def test_needs_a_specialization(self, guide_data):
        errors = errors_of(Guide.Create, {**guide_data, "specializations": []})
        assert messages_for(errors, "specializations")

    def test_needs_a_language(self, guide_data):
        errors = errors_of(Guide.Create, {**guide_data, "languages": []})
        assert messages_for(errors, "languages")

    def test_query_specialization(self):
        assert Guide.Query.model_validate({"specialization": "trekking"}).specialization == "trekking"

    @pytest.mark.parametrize("field", ["name", "languages", "availability"])
    def test_update_rejects_null(self, field):
        assert messages_for(errors_of(Guide.Update, {field: None}), field) == ["Field cannot be null"]

    def test_update_allows_clearing_certifications(self):
        assert Guide.Update.model_validate({"certifications": None}).certifications is None


class TestProductSchemas:
    def test_valid_product(self, product_data):
        product = Product.Create.model_validate(product_data)
        assert product.price.discount == 20

    def test_discount_over_100_rejected(self, product_data):
        data = {**product_data, "price": {"amount": 1200, "discount": 101}}
        assert messages_for(errors_of(Product.Create, data), "price.discount")

    def test_negative_stock_rejected(self, product_data):
        assert messages_for(errors_of(Product.Create, {**product_data, "stock": -1}), "stock")

    @pytest.mark.parametrize("field", ["title", "price", "stock"])
    def test_update_rejects_null(self, field):
        assert messages_for(errors_of(Product.Update, {field: None}), field) == ["Field cannot be null"]


# ── Bookings ──────────────────────────────────────────────────────────────


class TestParseBookingDate:
    def test_date_only_is_utc_midnight(self):
        assert parse_booking_date("2030-05-01") == datetime(2030, 5, 1, tzinfo=timezone.utc)

    def test_iso_with_z(self):
        assert parse_booking_date("2030-05-01T10:30:00.000Z") == datetime(2030, 5, 1, 10, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["01/05/2030", "2030-5-1", "2030-02-30", "tomorrow"])
    def test_invalid_values(self, value):
        with pytest.raises(ValueError, match="Invalid check-in date format"):
            parse_booking_date(value, "check-in")

    def test_start_of_today_is_midnight_utc(self):
        today = start_of_today()
        assert (today.hour, today.minute, today.second, today.microsecond) == (0, 0, 0, 0)
        assert today.tzinfo == timezone.utc


class TestBookingCreate:
    """Date rules and nested guest details."""

    def test_valid_booking(self, booking_payload):
        booking = Booking.Create.model_validate(booking_payload)

        assert booking.guest_details.name == "Asha Munda"
        assert booking.guest_details.email == "asha@example.com"
        assert booking.guests.children == 1

    def test_check_in_today_is_allowed(self, booking_payload):
        today = datetime.now(timezone.utc).date().isoformat()
        Booking.Create.model_validate({**booking_payload, "check_in": today})

    def test_check_in_in_the_past(self, booking_payload):
        errors = errors_of(Booking.Create, {**booking_payload, "check_in": "2020-01-01"})
        assert messages_for(errors, "check_in") == ["Check-in date must be today or in the future"]

    def test_check_out_before_check_in(self, booking_payload):
        data = {**booking_payload, "check_in": future_date(5), "check_out": future_date(3)}
        assert errors_of(Booking.Create, data) == [{"field": "check_out", "message": "Check-out must be after check-in"}]

    def test_check_out_equal_to_check_in(self, booking_payload):
        data = {**booking_payload, "check_in": future_date(5), "check_out": future_date(5)}
        assert messages_for(errors_of(Booking.Create, data), "check_out") == ["Check-out must be after check-in"]

    def test_bad_check_in_format_only_reports_check_in(self, booking_payload):
        errors = errors_of(Booking.Create, {**booking_payload, "check_in": "next week"})
        assert errors == [{"field": "check_in", "message": "Invalid check-in date format"}]

    def test_bad_listing_id(self, booking_payload):
        errors = errors_of(Booking.Create, {**booking_payload, "listing_id": "abc"})
        assert errors == [{"field": "listing_id", "message": "Invalid ID format"}]

    def test_needs_an_adult(self, booking_payload):
        errors = errors_of(Booking.Create, {**booking_payload, "guests": {"adults": 0}})
        assert messages_for(errors, "guests.adults")

    def test_bad_email(self, booking_payload):
        data = {**booking_payload, "guest_details": {**booking_payload["guest_details"], "email": "not-an-email"}}
        assert messages_for(errors_of(Booking.Create, data), "guest_details.email")

    def test_short_phone(self, booking_payload):
        data = {**booking_payload, "guest_details": {**booking_payload["guest_details"], "phone": "12345"}}
        assert messages_for(errors_of(Booking.Create, data), "guest_details.phone")

    def test_unknown_listing_type(self, booking_payload):
        errors = errors_of(Booking.Create, {**booking_payload, "listing_type": "product"})
        assert messages_for(errors, "listing_type")


class TestBookingCancelAndQuery:
    def test_reason_is_optional(self):
        assert Booking.Cancel.model_validate({}).reason is None

    def test_reason_length(self):
        assert messages_for(errors_of(Booking.Cancel, {"reason": "x" * 501}), "reason")

    def test_query_status(self):
        query = Booking.Query.model_validate({"status": "pending", "page": "2"})
        assert query.status == BookingStatus.PENDING
        assert query.page == 2

    def test_query_rejects_unknown_status(self):
        assert messages_for(errors_of(Booking.Query, {"status": "lost"}), "status")


# ── Search ────────────────────────────────────────────────────────────────


class TestSearchSchemas:
    def test_defaults(self):
        query = SearchQuery.model_validate({"q": "ranchi"})
        assert query.type == SearchType.ALL
        assert query.limit == 10

    def test_query_too_short(self):
        message = ["Search query must be at least 2 characters"]
        assert messages_for(errors_of(SearchQuery, {"q": "r"}), "q") == message
        assert messages_for(errors_of(AutocompleteQuery, {"q": " r  "}), "q") == message

    def test_query_is_stripped(self):
        assert SearchQuery.model_validate({"q": "  falls "}).q == "falls"

    def test_query_required(self):
        assert messages_for(errors_of(SearchQuery, {}), "q")

    def test_unknown_type(self):
        assert messages_for(errors_of(SearchQuery, {"q": "falls", "type": "events"}), "type")
